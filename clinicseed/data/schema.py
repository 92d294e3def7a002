"""Data schema definitions for the clinic seeding engine.

This module defines dataclasses for the five generated collections
(physicians, patients, prescriptions, appointments, billing) plus the
catalog records the generator reads from.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


class Specialization(str, Enum):
    """Physician specialization options."""

    CARDIOLOGY = "Cardiology"
    DERMATOLOGY = "Dermatology"
    PEDIATRICS = "Pediatrics"
    GENERAL_PRACTICE = "General Practice"
    ADMINISTRATION = "Administration"


# Specializations assigned to generated (non-admin) physicians
CLINICAL_SPECIALIZATIONS = [
    Specialization.CARDIOLOGY,
    Specialization.DERMATOLOGY,
    Specialization.PEDIATRICS,
    Specialization.GENERAL_PRACTICE,
]


class Role(str, Enum):
    """Account role for physician logins."""

    PHYSICIAN = "physician"
    ADMIN = "admin"


class PrescriptionStatus(str, Enum):
    """Prescription lifecycle status, fixed at generation time."""

    ACTIVE = "active"
    COMPLETED = "completed"


class BillingStatus(str, Enum):
    """Billing payment status."""

    PAID = "Paid"
    PENDING = "Pending"
    DUE = "Due"


class Collection(str, Enum):
    """Document collections written by the seeder."""

    PHYSICIANS = "physicians"
    PATIENTS = "patients"
    PRESCRIPTIONS = "prescriptions"
    APPOINTMENTS = "appointments"
    BILLINGS = "billings"


@dataclass(frozen=True)
class Diagnosis:
    """Catalog diagnosis (ICD-10 style code)."""

    code: str
    description: str
    chronic: bool


@dataclass(frozen=True)
class Medication:
    """Medication catalog record."""

    name: str
    generic: str
    type: Optional[str]
    mg: str
    company: Optional[str] = None


@dataclass
class ContactInfo:
    """Phone/email/address block shared by patients and physicians."""

    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


def calculate_age(dob: date, today: date) -> int:
    """Whole years between dob and today, one less if the birthday hasn't happened yet."""
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


@dataclass
class Physician:
    """Represents a physician or admin login account."""

    id: str
    name: str
    specialization: Specialization
    username: str
    password_hash: str
    contact_info: ContactInfo
    role: Role = Role.PHYSICIAN
    schedule: list[str] = field(default_factory=list)
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class Patient:
    """Represents a patient (guest login) with demographic attributes.

    ``dob`` is authoritative; ``age`` is a cached value refreshed on every save.
    """

    id: str
    name: str
    dob: date
    age: int
    gender: str
    contact_info: ContactInfo
    password_hash: str
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def refresh_age(self, today: date) -> int:
        """Recompute the cached age from dob."""
        self.age = calculate_age(self.dob, today)
        return self.age


@dataclass
class Prescription:
    """Represents a medication prescribed to a patient."""

    id: str
    patient_id: str  # FK to Patient
    physician_id: str  # FK to Physician
    medication_name: str
    dosage: str
    instructions: str
    frequency: str
    start_date: datetime
    end_date: datetime
    status: PrescriptionStatus
    medication_code: Optional[str] = None
    type: Optional[str] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class DiagnosisEntry:
    """Diagnosis recorded on an appointment."""

    code: str
    description: str
    chronic: bool = False
    recorded_at: Optional[datetime] = None


@dataclass
class Appointment:
    """Represents a patient visit with its clinical note and diagnoses."""

    id: str
    patient_id: str  # FK to Patient
    physician_id: str  # FK to Physician
    date: datetime
    notes: str
    summary: str
    diagnoses: list[DiagnosisEntry] = field(default_factory=list)
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        # recorded_at defaults to the visit date
        for entry in self.diagnoses:
            if entry.recorded_at is None:
                entry.recorded_at = self.date


@dataclass
class Billing:
    """Represents the bill raised for one appointment."""

    id: str
    appointment_id: str  # FK to Appointment
    patient_id: str  # FK to Patient
    amount: int
    status: BillingStatus
    created_at: datetime
    updated_at: datetime
    payment_date: Optional[datetime] = None
    insurance_provider: Optional[str] = None
    policy_number: Optional[str] = None
    coverage_amount: int = 0
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    @property
    def insured(self) -> bool:
        return self.insurance_provider is not None

    @property
    def patient_responsibility(self) -> int:
        return self.amount - self.coverage_amount


@dataclass
class AppointmentRecord:
    """Appointment plus the context the billing phase needs."""

    appointment: Appointment
    physician_id: str
    date: datetime
    patient_name: str
    patient_id: str


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def entity_to_document(entity) -> dict[str, Any]:
    """Convert a dataclass entity to a plain document (enums to their values)."""
    return {key: _plain(value) for key, value in asdict(entity).items()}
