"""Database seeding for the clinic records demo.

Wipes the five seeded collections, then generates and persists entities in
dependency order:

    physicians (+ admin) -> patients -> prescriptions/appointments per patient
    -> billing per appointment -> physician schedule back-fill

Billing only starts once every appointment exists. A failure at any step
aborts the run; documents already written stay written (there is no
transaction), and re-running the seeder is the recovery path.

Usage:
    python -m clinicseed.data.seed_database --patients 25 --output-dir ./data/seeded
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import numpy as np
import pandas as pd
from faker import Faker

from clinicseed.data.accounts import PasswordHasher, bcrypt_hasher, ensure_demo_physician, list_accounts
from clinicseed.data.config import SeedConfig, load_config
from clinicseed.data.generate_synthetic import (
    Composer,
    GenerationContext,
    assign_insurers,
    booked_slot,
    generate_admin,
    generate_appointments,
    generate_billing,
    generate_patient,
    generate_physicians,
    generate_prescriptions,
    make_faker,
)
from clinicseed.data.history import current_medications, medical_history
from clinicseed.data.medications import load_medications
from clinicseed.data.sampling import Sampler
from clinicseed.data.schema import (
    Appointment,
    AppointmentRecord,
    Billing,
    Collection,
    Patient,
    Physician,
    Prescription,
    entity_to_document,
)
from clinicseed.data.store import DocumentStore, InMemoryStore, ParquetStore
from clinicseed.errors import PersistenceError, SeedError
from clinicseed.text.compose import TemplateComposer
from clinicseed.text.llm import OllamaComposer

logger = logging.getLogger(__name__)

# Order matters: later collections reference earlier ones
SEEDED_COLLECTIONS = [
    Collection.PHYSICIANS,
    Collection.PATIENTS,
    Collection.PRESCRIPTIONS,
    Collection.APPOINTMENTS,
    Collection.BILLINGS,
]


@dataclass
class SeedResult:
    """Everything one seeding run produced."""

    physicians: list[Physician] = field(default_factory=list)
    patients: list[Patient] = field(default_factory=list)
    prescriptions: list[Prescription] = field(default_factory=list)
    appointments: list[Appointment] = field(default_factory=list)
    billings: list[Billing] = field(default_factory=list)
    insurers_by_patient: dict[str, list[str]] = field(default_factory=dict)
    generated_at: Optional[datetime] = None

    @property
    def counts(self) -> dict[str, int]:
        return {
            Collection.PHYSICIANS.value: len(self.physicians),
            Collection.PATIENTS.value: len(self.patients),
            Collection.PRESCRIPTIONS.value: len(self.prescriptions),
            Collection.APPOINTMENTS.value: len(self.appointments),
            Collection.BILLINGS.value: len(self.billings),
        }


# =============================================================================
# Store Operations
# =============================================================================


def wipe_collections(store: DocumentStore) -> dict[str, int]:
    """Delete every document from the seeded collections."""
    logger.info("Clearing existing data...")
    removed = {}
    for collection in SEEDED_COLLECTIONS:
        removed[collection.value] = _store_call(collection.value, store.delete_all, collection.value)
        logger.info(f"  Cleared {collection.value} ({removed[collection.value]:,} documents)")
    return removed


def _store_call(collection: str, operation, *args):
    try:
        return operation(*args)
    except PersistenceError:
        raise
    except Exception as e:
        raise PersistenceError(collection, str(e)) from e


def save(store: DocumentStore, collection: Collection, entity) -> None:
    _store_call(collection.value, store.insert, collection.value, entity_to_document(entity))


def stamp(entity, now: datetime) -> None:
    entity.created_at = now
    entity.updated_at = now


# =============================================================================
# Seeding Phases
# =============================================================================


def seed_physicians(ctx: GenerationContext, store: DocumentStore) -> list[Physician]:
    """Generated physician pool plus the fixed admin account."""
    physicians = generate_physicians(ctx, ctx.config.physician_count)
    physicians.append(generate_admin(ctx))
    for physician in physicians:
        save(store, Collection.PHYSICIANS, physician)
        logger.info(f"  Created physician: {physician.username} ({physician.name}, {physician.role.value})")
    return physicians


def seed_patients(
    ctx: GenerationContext,
    store: DocumentStore,
    physicians: list[Physician],
    result: SeedResult,
) -> list[AppointmentRecord]:
    """Patients with their prescriptions and appointments.

    Returns:
        Appointment records for the billing phase
    """
    patient_password_hash = ctx.hasher(ctx.config.demo_password)
    records: list[AppointmentRecord] = []

    for _ in range(ctx.config.patient_count):
        patient = generate_patient(ctx, patient_password_hash)
        patient.refresh_age(ctx.today)
        stamp(patient, ctx.now)
        save(store, Collection.PATIENTS, patient)
        result.patients.append(patient)

        # Kept for the whole run so every bill draws from the same insurers
        insurers = assign_insurers(ctx)
        result.insurers_by_patient[patient.id] = insurers

        for prescription in generate_prescriptions(ctx, patient, physicians):
            stamp(prescription, ctx.now)
            save(store, Collection.PRESCRIPTIONS, prescription)
            result.prescriptions.append(prescription)

        appointments, patient_records = generate_appointments(ctx, patient, physicians)
        for appointment in appointments:
            stamp(appointment, ctx.now)
            save(store, Collection.APPOINTMENTS, appointment)
        result.appointments.extend(appointments)
        records.extend(patient_records)

        logger.info(
            f"Seeded patient {patient.id} ({patient.name}): "
            f"{len(appointments)} appointments, {len(insurers)} insurers"
        )

    return records


def seed_billing(
    ctx: GenerationContext,
    store: DocumentStore,
    physicians: list[Physician],
    records: list[AppointmentRecord],
    result: SeedResult,
) -> dict[str, list[str]]:
    """Bill every appointment and collect booked slots per physician.

    Returns:
        Schedule entries to append, keyed by physician id
    """
    physicians_by_id = {p.id: p for p in physicians}
    bookings: dict[str, list[str]] = {}

    for record in records:
        physician = physicians_by_id.get(record.physician_id)
        insurers = result.insurers_by_patient.get(record.patient_id, [])
        billing = generate_billing(ctx, record, physician, insurers)
        save(store, Collection.BILLINGS, billing)
        result.billings.append(billing)

        if physician is not None:
            bookings.setdefault(physician.id, []).append(booked_slot(record))

    return bookings


def flush_schedules(store: DocumentStore, physicians: list[Physician], bookings: dict[str, list[str]]) -> None:
    """Append booked slots to each physician's schedule, one write per physician."""
    for physician in physicians:
        added = bookings.get(physician.id)
        if not added:
            continue
        physician.schedule.extend(added)
        _store_call(
            Collection.PHYSICIANS.value,
            store.replace,
            Collection.PHYSICIANS.value,
            physician.id,
            entity_to_document(physician),
        )
        logger.info(f"  {physician.username}: {len(added)} booked slots")


# =============================================================================
# Main Entry Point
# =============================================================================


def build_composer(config: SeedConfig, sampler: Sampler) -> Composer:
    templates = TemplateComposer(sampler)
    if config.use_llm:
        return OllamaComposer(fallback=templates, base_url=config.ollama_url, model=config.ollama_model)
    return templates


def seed(
    config: Optional[SeedConfig] = None,
    store: Optional[DocumentStore] = None,
    composer: Optional[Composer] = None,
    hasher: Optional[PasswordHasher] = None,
    sampler: Optional[Sampler] = None,
    fake: Optional[Faker] = None,
    now: Optional[datetime] = None,
) -> SeedResult:
    """Wipe and regenerate the demo dataset.

    Args:
        config: Run configuration (defaults to SeedConfig())
        store: Destination store (defaults to an InMemoryStore)
        composer: Text source (defaults to templates, or Ollama if config.use_llm)
        hasher: Password hasher (defaults to bcrypt)
        sampler: Random source (defaults to one seeded from config.seed)
        fake: Faker instance (defaults to one seeded from config.seed)
        now: Reference time for "now" (defaults to the current UTC time)

    Returns:
        SeedResult with every generated entity

    Raises:
        DatasetLoadError: medication catalog unusable; nothing is wiped
        PersistenceError: a write was rejected; earlier writes are kept
    """
    config = (config or SeedConfig()).validate()
    store = store if store is not None else InMemoryStore()
    now = now or datetime.now(timezone.utc)

    # Load before wiping so a bad catalog leaves the existing data alone
    medications = load_medications(config.medications_path)

    sampler = sampler or Sampler.seeded(config.seed)
    ctx = GenerationContext(
        sampler=sampler,
        fake=fake or make_faker(config.seed),
        composer=composer or build_composer(config, sampler),
        medications=medications,
        config=config,
        hasher=hasher or bcrypt_hasher(config.bcrypt_rounds),
        new_id=sampler.new_id,
        now=now,
    )
    result = SeedResult(generated_at=now)

    try:
        wipe_collections(store)

        logger.info(f"Generating {config.physician_count} physicians (+1 admin)...")
        physicians = seed_physicians(ctx, store)
        result.physicians = physicians

        logger.info(f"Generating {config.patient_count} patients...")
        records = seed_patients(ctx, store, physicians, result)

        logger.info(f"Generating billing for {len(records):,} appointments...")
        bookings = seed_billing(ctx, store, physicians, records, result)
        flush_schedules(store, physicians, bookings)

        _store_call("flush", store.flush)
    except SeedError as e:
        logger.error(f"Seeding aborted: {e}. Documents written so far were kept; re-run to regenerate.")
        raise

    log_summary(result)
    return result


# =============================================================================
# Validation
# =============================================================================


def summarize(result: SeedResult) -> dict:
    """Counts plus billing, appointment and patient-history figures."""
    summary: dict = dict(result.counts)

    if result.billings:
        bills = pd.DataFrame(
            {
                "amount": [b.amount for b in result.billings],
                "status": [b.status.value for b in result.billings],
                "insured": [b.insured for b in result.billings],
            }
        )
        summary["billing_status_share"] = bills["status"].value_counts(normalize=True).round(3).to_dict()
        summary["insured_share"] = float(bills["insured"].mean())
        summary["mean_amount"] = float(np.round(bills["amount"].mean(), 2))

    if result.patients:
        per_patient = pd.Series([a.patient_id for a in result.appointments]).value_counts()
        summary["mean_appointments_per_patient"] = float(np.round(per_patient.mean(), 2))

        now = result.generated_at or datetime.now(timezone.utc)
        current = [len(current_medications(result.prescriptions, p.id, now)) for p in result.patients]
        chronic = [
            any(entry.chronic for entry in medical_history(result.appointments, p.id)) for p in result.patients
        ]
        summary["mean_current_medications"] = float(np.round(np.mean(current), 2))
        summary["chronic_patient_share"] = float(np.mean(chronic))

    return summary


def log_summary(result: SeedResult) -> None:
    summary = summarize(result)
    logger.info("\n=== Seeding Summary ===")
    for collection, count in result.counts.items():
        logger.info(f"{collection.capitalize():<14}{count:,}")
    if "billing_status_share" in summary:
        shares = ", ".join(f"{k} {v:.0%}" for k, v in summary["billing_status_share"].items())
        logger.info(f"Billing status: {shares}")
        logger.info(f"Insured bills:  {summary['insured_share']:.1%}")
        logger.info(f"Mean amount:    {summary['mean_amount']:,.2f}")
    if "mean_current_medications" in summary:
        logger.info(f"Current meds:   {summary['mean_current_medications']:.2f} per patient")
        logger.info(f"Chronic cases:  {summary['chronic_patient_share']:.1%} of patients")


def print_accounts(store: DocumentStore, password: str) -> None:
    accounts = list_accounts(store)
    if not accounts:
        logger.info("No physician accounts found. Run the seeder first.")
        return
    logger.info(f"{'Username':<34}| {'Name':<28}| Active")
    logger.info("-" * 72)
    for account in accounts:
        active = "yes" if account["is_active"] else "no"
        logger.info(f"{account['username']:<34}| {account['name']:<28}| {active}")
    logger.info("-" * 72)
    logger.info(f"Total: {len(accounts)} physician(s). Default password: {password}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed the clinic records demo database with synthetic data")
    parser.add_argument("--config", type=str, default=None, help="YAML file with SeedConfig fields")
    parser.add_argument("--patients", type=int, default=None, help="Number of patients to generate")
    parser.add_argument("--physicians", type=int, default=None, help="Number of physicians to generate")
    parser.add_argument("--max-prescriptions", type=int, default=None, help="Max prescriptions per patient")
    parser.add_argument("--max-appointments", type=int, default=None, help="Max appointments per patient")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--medications", type=str, default=None, help="Medication catalog JSON file")
    parser.add_argument("--output-dir", type=str, default=None, help="Directory for parquet collections")
    parser.add_argument("--dry-run", action="store_true", help="Generate in memory without writing files")
    parser.add_argument("--llm", action="store_true", default=None, help="Use an Ollama model for note text")
    parser.add_argument("--list-accounts", action="store_true", help="List physician accounts and exit")
    parser.add_argument("--ensure-demo-doctor", action="store_true", help="Add the demo_doctor account and exit")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    args = build_parser().parse_args(argv)

    try:
        config = load_config(
            args.config,
            patient_count=args.patients,
            physician_count=args.physicians,
            max_prescriptions_per_patient=args.max_prescriptions,
            max_appointments_per_patient=args.max_appointments,
            seed=args.seed,
            medications_path=args.medications,
            output_dir=args.output_dir,
            use_llm=args.llm,
        )
        store = InMemoryStore() if args.dry_run else ParquetStore(config.output_dir)

        if args.list_accounts:
            print_accounts(store, config.demo_password)
            return 0
        if args.ensure_demo_doctor:
            ensure_demo_physician(store, bcrypt_hasher(config.bcrypt_rounds), config.demo_password)
            store.close()
            return 0

        seed(config, store)
        logger.info("\nSeeding complete.")
        return 0
    except SeedError as e:
        logger.error(f"Seed failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
