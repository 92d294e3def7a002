"""Patient-level views derived from seeded prescriptions and appointments.

Used by the seeding summary and importable by applications that read the
seeded entities back.
"""

from dataclasses import dataclass
from datetime import datetime

from clinicseed.data.schema import Appointment, Prescription, PrescriptionStatus


@dataclass
class HistoryEntry:
    """One diagnosis code across a patient's visits."""

    code: str
    description: str
    first_seen: datetime
    last_seen: datetime
    chronic: bool


def current_medications(prescriptions: list[Prescription], patient_id: str, now: datetime) -> list[Prescription]:
    """Latest current prescription per medication name, newest start first.

    A prescription is current when it is still active or its end date is
    missing or in the future.
    """
    current = [
        p
        for p in prescriptions
        if p.patient_id == patient_id
        and not p.is_deleted
        and (p.status == PrescriptionStatus.ACTIVE or p.end_date is None or p.end_date > now)
    ]
    latest: dict[str, Prescription] = {}
    for prescription in sorted(current, key=lambda p: p.start_date, reverse=True):
        latest.setdefault(prescription.medication_name, prescription)
    return list(latest.values())


def medical_history(appointments: list[Appointment], patient_id: str) -> list[HistoryEntry]:
    """Diagnoses grouped by code, ordered by when each was first recorded."""
    entries: dict[str, HistoryEntry] = {}
    for appointment in appointments:
        if appointment.patient_id != patient_id or appointment.is_deleted:
            continue
        for diagnosis in appointment.diagnoses:
            recorded = diagnosis.recorded_at or appointment.date
            entry = entries.get(diagnosis.code)
            if entry is None:
                entries[diagnosis.code] = HistoryEntry(
                    code=diagnosis.code,
                    description=diagnosis.description,
                    first_seen=recorded,
                    last_seen=recorded,
                    chronic=diagnosis.chronic,
                )
                continue
            entry.first_seen = min(entry.first_seen, recorded)
            entry.last_seen = max(entry.last_seen, recorded)
            entry.chronic = entry.chronic or diagnosis.chronic
    return sorted(entries.values(), key=lambda e: e.first_seen)
