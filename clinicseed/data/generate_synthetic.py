"""Synthetic entity generation for the clinic records demo database.

Generates physicians, patients, prescriptions, appointments with clinical
notes, and billing records that stay consistent with each other:

- appointment dates never precede the patient's date of birth
- each patient keeps one insurer set for every bill
- billing is stamped with the appointment date, not the write time
- each patient favors one primary physician across their visits
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Protocol

from faker import Faker

from clinicseed.data.config import SeedConfig
from clinicseed.data.sampling import Sampler
from clinicseed.data.schema import (
    CLINICAL_SPECIALIZATIONS,
    Appointment,
    AppointmentRecord,
    Billing,
    BillingStatus,
    ContactInfo,
    Diagnosis,
    DiagnosisEntry,
    Medication,
    Patient,
    Physician,
    Prescription,
    PrescriptionStatus,
    Role,
    Specialization,
    calculate_age,
)
from clinicseed.text.compose import PrescriptionText
from clinicseed.text.templates import DIAGNOSES

# =============================================================================
# Configuration Constants
# =============================================================================

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri"]
TIME_RANGES = ["08:00-12:00", "09:00-13:00", "12:30-16:30", "13:00-17:00"]
MIN_AVAILABILITY_SLOTS = 3
MAX_AVAILABILITY_SLOTS = 5

GENDERS = ["Female", "Male"]

ADMIN_NAME = "Demo Admin"
ADMIN_USERNAME = "demo_admin"
ADMIN_EMAIL = "demo_admin@example.com"

MIN_PRESCRIPTION_MONTHS = 1
MAX_PRESCRIPTION_MONTHS = 12

POLICY_NUMBER_DIGITS = 8


class Composer(Protocol):
    """Text source used for notes and prescription instructions."""

    def compose_prescription_with_frequency(self, dosage: str, medication_name: str = "") -> PrescriptionText: ...

    def compose_clinical_note(self, age: int, gender: str, medication_name: str, diagnosis: Diagnosis) -> str: ...


@dataclass
class GenerationContext:
    """Collaborators and run-wide settings shared by every generator."""

    sampler: Sampler
    fake: Faker
    composer: Composer
    medications: list[Medication]
    config: SeedConfig
    hasher: Callable[[str], str]
    new_id: Callable[[], str]
    now: datetime

    @property
    def today(self) -> date:
        return self.now.date()


def make_faker(seed: int | None = None) -> Faker:
    """Faker instance seeded independently of the global Faker state."""
    fake = Faker()
    if seed is not None:
        fake.seed_instance(seed)
    return fake


# =============================================================================
# Date Helpers
# =============================================================================


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping to the last day of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def start_of_day(day: date, tzinfo=None) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tzinfo)


# =============================================================================
# Physicians
# =============================================================================


def build_username(name: str, index: int) -> str:
    """``"John O'Neil"`` with index 3 becomes ``"john.oneil.3"``."""
    base = re.sub(r"\s+", ".", name.lower())
    base = re.sub(r"[^a-z0-9.]", "", base)
    return f"{base}.{index}"


def generate_availability(ctx: GenerationContext) -> list[str]:
    """3-5 weekly slots; the same day/time can repeat."""
    count = ctx.sampler.uniform_int(MIN_AVAILABILITY_SLOTS, MAX_AVAILABILITY_SLOTS)
    slots = []
    for _ in range(count):
        day = ctx.sampler.uniform_choice(WEEKDAYS)
        time_range = ctx.sampler.uniform_choice(TIME_RANGES)
        slots.append(f"{day} {time_range}")
    return slots


def generate_physician(ctx: GenerationContext, index: int) -> Physician:
    """Generate one clinical physician account."""
    name = ctx.fake.name()
    specialization = ctx.sampler.uniform_choice(CLINICAL_SPECIALIZATIONS)
    return Physician(
        id=ctx.new_id(),
        name=name,
        specialization=specialization,
        username=build_username(name, index),
        password_hash=ctx.hasher(ctx.config.demo_password),
        contact_info=ContactInfo(phone=ctx.fake.phone_number(), email=ctx.fake.email()),
        role=Role.PHYSICIAN,
        schedule=generate_availability(ctx),
        created_at=ctx.now,
    )


def generate_physicians(ctx: GenerationContext, count: int) -> list[Physician]:
    return [generate_physician(ctx, index) for index in range(count)]


def generate_admin(ctx: GenerationContext) -> Physician:
    """The fixed admin login that every seeded database gets."""
    return Physician(
        id=ctx.new_id(),
        name=ADMIN_NAME,
        specialization=Specialization.ADMINISTRATION,
        username=ADMIN_USERNAME,
        password_hash=ctx.hasher(ctx.config.demo_password),
        contact_info=ContactInfo(phone=ctx.fake.phone_number(), email=ADMIN_EMAIL),
        role=Role.ADMIN,
        schedule=[],
        created_at=ctx.now,
    )


# =============================================================================
# Patients
# =============================================================================


def generate_patient(ctx: GenerationContext, password_hash: str) -> Patient:
    """Generate a patient with a date of birth in the configured year range."""
    config = ctx.config
    latest_dob = min(date(config.dob_end_year, 12, 31), ctx.today)
    dob = ctx.sampler.uniform_date(date(config.dob_start_year, 1, 1), latest_dob)

    return Patient(
        id=ctx.new_id(),
        name=ctx.fake.name(),
        dob=dob,
        age=calculate_age(dob, ctx.today),
        gender=ctx.sampler.uniform_choice(GENDERS),
        contact_info=ContactInfo(
            phone=ctx.fake.phone_number(),
            email=ctx.fake.email().lower(),
            address=ctx.fake.street_address(),
        ),
        password_hash=password_hash,
    )


def assign_insurers(ctx: GenerationContext) -> list[str]:
    """1-N distinct insurer names, weighted toward fewer."""
    target = ctx.sampler.skewed_count(1, ctx.config.max_insurers_per_patient)
    insurers: list[str] = []
    while len(insurers) < target:
        name = ctx.fake.company()
        if name not in insurers:
            insurers.append(name)
    return insurers


# =============================================================================
# Prescriptions
# =============================================================================


def generate_prescription(ctx: GenerationContext, patient: Patient, physicians: list[Physician]) -> Prescription:
    """Prescription for a random catalog medication, dated within the lookback window."""
    medication = ctx.sampler.uniform_choice(ctx.medications)
    text = ctx.composer.compose_prescription_with_frequency(medication.mg, medication.generic)

    lookback = timedelta(days=365 * ctx.config.prescription_lookback_years)
    start_date = ctx.sampler.uniform_datetime(ctx.now - lookback, ctx.now)
    months = ctx.sampler.uniform_int(MIN_PRESCRIPTION_MONTHS, MAX_PRESCRIPTION_MONTHS)
    end_date = add_months(start_date, months)
    status = PrescriptionStatus.COMPLETED if end_date < ctx.now else PrescriptionStatus.ACTIVE

    return Prescription(
        id=ctx.new_id(),
        patient_id=patient.id,
        physician_id=ctx.sampler.uniform_choice(physicians).id,
        medication_name=medication.generic,
        dosage=medication.mg,
        instructions=text.instructions,
        frequency=text.frequency,
        start_date=start_date,
        end_date=end_date,
        status=status,
        medication_code=medication.generic,
        type=medication.type or "Oral",
    )


def generate_prescriptions(
    ctx: GenerationContext,
    patient: Patient,
    physicians: list[Physician],
) -> list[Prescription]:
    count = ctx.sampler.skewed_count(1, ctx.config.max_prescriptions_per_patient)
    return [generate_prescription(ctx, patient, physicians) for _ in range(count)]


# =============================================================================
# Appointments
# =============================================================================


def pick_appointment_date(ctx: GenerationContext, dob: date) -> datetime:
    """Visit date between the patient's birth and now, recency-biased."""
    config = ctx.config
    return ctx.sampler.recency_biased_date(
        start_of_day(dob, ctx.now.tzinfo),
        ctx.now,
        exponent=config.recency_exponent,
        penalty_year=config.penalty_year,
        penalty_accept_probability=config.penalty_accept_probability,
        max_attempts=config.penalty_max_attempts,
    )


def generate_appointments(
    ctx: GenerationContext,
    patient: Patient,
    physicians: list[Physician],
) -> tuple[list[Appointment], list[AppointmentRecord]]:
    """Generate a patient's visits and the records billing needs later.

    One physician is drawn as the patient's primary for this run. The first
    visit always goes to the primary; later visits do with the configured
    probability, otherwise to any physician.
    """
    primary = ctx.sampler.uniform_choice(physicians)
    count = ctx.sampler.uniform_int(1, ctx.config.max_appointments_per_patient)

    appointments = []
    records = []
    for appt_num in range(count):
        medication = ctx.sampler.uniform_choice(ctx.medications)
        diagnosis = ctx.sampler.uniform_choice(DIAGNOSES)
        notes = ctx.composer.compose_clinical_note(patient.age, patient.gender, medication.name, diagnosis)

        appt_date = pick_appointment_date(ctx, patient.dob)
        use_primary = ctx.sampler.chance(ctx.config.primary_physician_probability) or appt_num == 0
        physician = primary if use_primary else ctx.sampler.uniform_choice(physicians)

        appointment = Appointment(
            id=ctx.new_id(),
            patient_id=patient.id,
            physician_id=physician.id,
            date=appt_date,
            notes=notes,
            summary=f"{diagnosis.description} follow-up",
            diagnoses=[
                DiagnosisEntry(
                    code=diagnosis.code,
                    description=diagnosis.description,
                    chronic=diagnosis.chronic,
                )
            ],
        )
        appointments.append(appointment)
        records.append(
            AppointmentRecord(
                appointment=appointment,
                physician_id=physician.id,
                date=appt_date,
                patient_name=patient.name,
                patient_id=patient.id,
            )
        )

    return appointments, records


# =============================================================================
# Billing
# =============================================================================


def billing_updated_at(
    ctx: GenerationContext,
    created_at: datetime,
    status: BillingStatus,
    payment_date: datetime | None,
) -> datetime:
    """Last-update timestamp for a bill.

    Paid bills update on payment (or stay at creation when paid the same
    day), pending bills get a near-term future date, due bills never moved.
    """
    if status == BillingStatus.PAID:
        if payment_date.date() == created_at.date():
            return created_at
        return payment_date
    if status == BillingStatus.PENDING:
        days = ctx.sampler.biased_future_offset(
            ctx.config.pending_update_max_days,
            ctx.config.pending_update_exponent,
        )
        return ctx.now + timedelta(days=days)
    return created_at


def generate_billing(
    ctx: GenerationContext,
    record: AppointmentRecord,
    physician: Physician | None,
    insurers: list[str],
) -> Billing:
    """Bill for one appointment, priced by the treating physician's specialization."""
    config = ctx.config
    specialization = physician.specialization.value if physician else Specialization.GENERAL_PRACTICE.value
    multiplier = config.multiplier_for(specialization)
    amount = round(config.base_fee * multiplier + ctx.sampler.uniform_int(0, config.variance_ceiling))

    has_insurance = bool(insurers) and ctx.sampler.chance(config.insurance_probability)
    if has_insurance:
        insurance_provider = ctx.sampler.uniform_choice(insurers)
        policy_number = ctx.fake.numerify("#" * POLICY_NUMBER_DIGITS)
        coverage = config.coverage_min + ctx.sampler.rng.random() * (config.coverage_max - config.coverage_min)
        coverage_amount = round(amount * coverage)
    else:
        insurance_provider = None
        policy_number = None
        coverage_amount = 0

    status = BillingStatus(ctx.sampler.weighted_choice(config.status_weights))
    payment_date = None
    if status == BillingStatus.PAID:
        payment_date = ctx.sampler.uniform_datetime(
            ctx.now - timedelta(days=config.payment_lookback_days),
            ctx.now,
        )

    created_at = record.date
    return Billing(
        id=ctx.new_id(),
        appointment_id=record.appointment.id,
        patient_id=record.patient_id,
        amount=amount,
        status=status,
        created_at=created_at,
        updated_at=billing_updated_at(ctx, created_at, status, payment_date),
        payment_date=payment_date,
        insurance_provider=insurance_provider,
        policy_number=policy_number,
        coverage_amount=coverage_amount,
    )


def booked_slot(record: AppointmentRecord) -> str:
    """Schedule entry for a booked visit, e.g. ``"Booked 2024-03-05 14:30 - Jane Doe"``."""
    when = record.date
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return f"Booked {when:%Y-%m-%d %H:%M} - {record.patient_name}"
