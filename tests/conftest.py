"""Shared fixtures for seeding tests."""

from datetime import datetime, timezone

import pytest

from clinicseed.data.config import SeedConfig
from clinicseed.data.generate_synthetic import GenerationContext, make_faker
from clinicseed.data.medications import load_medications
from clinicseed.data.sampling import Sampler
from clinicseed.data.store import InMemoryStore
from clinicseed.text.compose import TemplateComposer

# Fixed reference time so date-dependent assertions are stable
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def fake_hash(password: str) -> str:
    """Cheap stand-in for bcrypt; keeps the "$2b$" prefix check meaningful."""
    return f"$2b$test${password}"


@pytest.fixture
def medications():
    return load_medications()


@pytest.fixture
def make_ctx(medications):
    """Factory for a GenerationContext with optional SeedConfig overrides."""

    def _make(seed: int = 7, **overrides) -> GenerationContext:
        config = SeedConfig(seed=seed, **overrides).validate()
        sampler = Sampler.seeded(seed)
        store = InMemoryStore()
        return GenerationContext(
            sampler=sampler,
            fake=make_faker(seed),
            composer=TemplateComposer(sampler),
            medications=medications,
            config=config,
            hasher=fake_hash,
            new_id=store.new_id,
            now=NOW,
        )

    return _make
