"""Tests for the seeding orchestrator.

Validates:
- Collections are wiped and written in dependency order
- Cross-references between seeded collections hold
- Schedule back-fill matches the appointments each physician received
- Dataset and persistence failures abort the run
"""

import re
from collections import Counter
from datetime import datetime, timezone

import pandas as pd
import pytest

from clinicseed.data.config import SeedConfig
from clinicseed.data.generate_synthetic import ADMIN_USERNAME
from clinicseed.data.history import current_medications
from clinicseed.data.schema import Collection
from clinicseed.data.seed_database import SEEDED_COLLECTIONS, main, seed, summarize
from clinicseed.data.store import InMemoryStore, ParquetStore
from clinicseed.errors import DatasetLoadError, PersistenceError

# =============================================================================
# Configuration for Tests
# =============================================================================

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
BOOKED_PATTERN = re.compile(r"^Booked \d{4}-\d{2}-\d{2} \d{2}:\d{2} - .+$")


def fake_hash(password: str) -> str:
    return f"$2b$test${password}"


def run_seed(store=None, **overrides):
    config = SeedConfig(**{"seed": 11, "patient_count": 5, "physician_count": 4, **overrides})
    store = store if store is not None else InMemoryStore()
    return seed(config, store, hasher=fake_hash, now=NOW), store


class FailingStore(InMemoryStore):
    """Rejects inserts into one collection."""

    def __init__(self, collection: str, error: Exception):
        super().__init__()
        self.failing_collection = collection
        self.error = error

    def insert(self, collection, document):
        if collection == self.failing_collection:
            raise self.error
        super().insert(collection, document)


# =============================================================================
# End-to-End Tests
# =============================================================================


class TestMinimalRun:
    """One of everything."""

    @pytest.fixture
    def seeded(self):
        return run_seed(
            patient_count=1,
            physician_count=1,
            max_prescriptions_per_patient=1,
            max_appointments_per_patient=1,
        )

    def test_counts(self, seeded):
        result, store = seeded
        assert result.counts == {
            "physicians": 2,
            "patients": 1,
            "prescriptions": 1,
            "appointments": 1,
            "billings": 1,
        }
        for collection, count in result.counts.items():
            assert store.count(collection) == count

    def test_references(self, seeded):
        result, store = seeded
        patient = store.find("patients")[0]
        appointment = store.find("appointments")[0]
        billing = store.find("billings")[0]
        prescription = store.find("prescriptions")[0]

        assert appointment["patient_id"] == patient["id"]
        assert prescription["patient_id"] == patient["id"]
        assert billing["appointment_id"] == appointment["id"]
        assert billing["patient_id"] == patient["id"]
        assert billing["created_at"] == appointment["date"]

    def test_admin_present(self, seeded):
        _, store = seeded
        admins = [doc for doc in store.find("physicians") if doc["username"] == ADMIN_USERNAME]
        assert len(admins) == 1
        assert admins[0]["role"] == "admin"


class TestSeedRun:
    """Tests for a regular seeding run."""

    @pytest.fixture
    def seeded(self):
        return run_seed()

    def test_physician_count_includes_admin(self, seeded):
        _, store = seeded
        assert store.count("physicians") == 5

    def test_every_appointment_billed_once(self, seeded):
        _, store = seeded
        billed = Counter(b["appointment_id"] for b in store.find("billings"))
        appointment_ids = {a["id"] for a in store.find("appointments")}
        assert set(billed) == appointment_ids
        assert all(n == 1 for n in billed.values())

    def test_references_valid(self, seeded):
        _, store = seeded
        patient_ids = {p["id"] for p in store.find("patients")}
        physician_ids = {p["id"] for p in store.find("physicians")}
        for collection in ("prescriptions", "appointments"):
            for doc in store.find(collection):
                assert doc["patient_id"] in patient_ids
                assert doc["physician_id"] in physician_ids

    def test_bill_insurers_from_patient_set(self, seeded):
        result, _ = seeded
        for bill in result.billings:
            if bill.insured:
                assert bill.insurance_provider in result.insurers_by_patient[bill.patient_id]

    def test_schedule_backfill(self, seeded):
        result, store = seeded
        per_physician = Counter(a.physician_id for a in result.appointments)
        for doc in store.find("physicians"):
            booked = [slot for slot in doc["schedule"] if slot.startswith("Booked")]
            assert len(booked) == per_physician.get(doc["id"], 0)
            assert all(BOOKED_PATTERN.match(slot) for slot in booked)

    def test_documents_are_plain(self, seeded):
        _, store = seeded
        physician = store.find("physicians")[0]
        assert isinstance(physician["specialization"], str)
        assert isinstance(physician["contact_info"], dict)
        billing = store.find("billings")[0]
        assert billing["status"] in {"Paid", "Pending", "Due"}

    def test_write_timestamps(self, seeded):
        _, store = seeded
        for collection in ("patients", "prescriptions", "appointments"):
            for doc in store.find(collection):
                assert doc["created_at"] == NOW
                assert doc["updated_at"] == NOW

    def test_rerun_replaces_data(self, seeded):
        _, store = seeded
        result, _ = run_seed(store=store, patient_count=2, physician_count=1)
        assert store.count("patients") == 2
        assert store.count("physicians") == 2
        assert store.count("billings") == len(result.billings)

    def test_reproducible_with_seed(self):
        first, _ = run_seed()
        second, _ = run_seed()
        assert [p.name for p in first.patients] == [p.name for p in second.patients]
        assert [b.amount for b in first.billings] == [b.amount for b in second.billings]
        assert [a.notes for a in first.appointments] == [a.notes for a in second.appointments]
        assert [p.id for p in first.patients] == [p.id for p in second.patients]
        assert [b.appointment_id for b in first.billings] == [b.appointment_id for b in second.billings]

    def test_summary(self, seeded):
        result, _ = seeded
        summary = summarize(result)
        assert summary["patients"] == 5
        assert 0.0 <= summary["insured_share"] <= 1.0
        assert set(summary["billing_status_share"]) <= {"Paid", "Pending", "Due"}
        assert summary["mean_appointments_per_patient"] >= 1
        assert summary["mean_current_medications"] >= 0
        assert 0.0 <= summary["chronic_patient_share"] <= 1.0

    def test_summary_uses_history_views(self, seeded):
        result, _ = seeded
        summary = summarize(result)
        expected = sum(len(current_medications(result.prescriptions, p.id, NOW)) for p in result.patients) / 5
        assert summary["mean_current_medications"] == pytest.approx(expected, abs=0.01)
        assert result.generated_at == NOW

    def test_zero_patients(self):
        result, store = run_seed(patient_count=0)
        assert result.counts["patients"] == 0
        assert store.count("billings") == 0
        assert store.count("physicians") == 5


# =============================================================================
# Failure Tests
# =============================================================================


class TestSeedFailures:
    """Tests for aborted runs."""

    def test_missing_catalog_leaves_store_untouched(self, tmp_path):
        store = InMemoryStore()
        store.insert("patients", {"id": "existing", "name": "Keep Me"})

        with pytest.raises(DatasetLoadError):
            run_seed(store=store, medications_path=str(tmp_path / "missing.json"))

        assert store.get("patients", "existing") is not None

    def test_persistence_failure_aborts(self):
        store = FailingStore("appointments", PersistenceError("appointments", "disk full"))

        with pytest.raises(PersistenceError):
            run_seed(store=store)

        # Earlier writes are kept; nothing after the failure was written
        assert store.count("physicians") == 5
        assert store.count("patients") == 1
        assert store.count("billings") == 0

    def test_unexpected_store_error_wrapped(self):
        store = FailingStore("billings", RuntimeError("connection reset"))

        with pytest.raises(PersistenceError) as exc_info:
            run_seed(store=store)

        assert exc_info.value.collection == "billings"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_wipe_order(self):
        deleted = []

        class RecordingStore(InMemoryStore):
            def delete_all(self, collection):
                deleted.append(collection)
                return super().delete_all(collection)

        run_seed(store=RecordingStore())
        assert deleted == [c.value for c in SEEDED_COLLECTIONS]
        assert deleted[0] == Collection.PHYSICIANS.value


# =============================================================================
# CLI Tests
# =============================================================================


class TestCli:
    """Tests for the command-line entry point."""

    @pytest.fixture
    def config_file(self, tmp_path):
        path = tmp_path / "seed.yaml"
        path.write_text("bcrypt_rounds: 4\nseed: 5\n")
        return path

    def test_dry_run(self, config_file):
        argv = ["--config", str(config_file), "--dry-run", "--patients", "2", "--physicians", "1"]
        assert main(argv) == 0

    def test_bad_catalog_exit_code(self, config_file, tmp_path):
        argv = ["--config", str(config_file), "--dry-run", "--medications", str(tmp_path / "nope.json")]
        assert main(argv) == 1

    def test_list_accounts_empty(self, config_file):
        assert main(["--config", str(config_file), "--dry-run", "--list-accounts"]) == 0


# =============================================================================
# Parquet Output
# =============================================================================


@pytest.mark.slow
class TestParquetSeeding:
    """Seeding into parquet files (marked slow)."""

    def test_files_written(self, tmp_path):
        output_dir = tmp_path / "seeded"
        result, _ = run_seed(store=ParquetStore(output_dir))

        for collection, count in result.counts.items():
            path = output_dir / f"{collection}.parquet"
            assert path.exists(), f"File not created: {path}"
            assert len(pd.read_parquet(path)) == count

    def test_reopen_and_reseed(self, tmp_path):
        output_dir = tmp_path / "seeded"
        run_seed(store=ParquetStore(output_dir))

        reopened = ParquetStore(output_dir)
        assert reopened.count("physicians") == 5

        result, _ = run_seed(store=reopened, patient_count=2, physician_count=1)
        assert len(pd.read_parquet(output_dir / "patients.parquet")) == 2
        assert len(pd.read_parquet(output_dir / "billings.parquet")) == len(result.billings)

    def test_cli_writes_output(self, tmp_path):
        config_file = tmp_path / "seed.yaml"
        config_file.write_text("bcrypt_rounds: 4\nseed: 5\n")
        output_dir = tmp_path / "out"

        argv = ["--config", str(config_file), "--patients", "2", "--physicians", "1", "--output-dir", str(output_dir)]
        assert main(argv) == 0
        assert (output_dir / "billings.parquet").exists()
