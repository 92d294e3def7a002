"""Credential hashing and demo account helpers for seeded logins."""

import logging
from datetime import datetime, timezone
from typing import Callable

import bcrypt

from clinicseed.data.schema import (
    Collection,
    ContactInfo,
    Physician,
    Specialization,
    entity_to_document,
)
from clinicseed.data.store import DocumentStore

logger = logging.getLogger(__name__)

PasswordHasher = Callable[[str], str]

DEMO_DOCTOR_USERNAME = "demo_doctor"
DEMO_DOCTOR_SCHEDULE = ["Mon 08:00-12:00", "Wed 09:00-13:00", "Fri 12:30-16:30"]


def bcrypt_hasher(rounds: int = 10) -> PasswordHasher:
    """Return a one-way hasher producing bcrypt ``$2b$`` strings."""

    def hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")

    return hash_password


def is_hashed(value: str | None) -> bool:
    return isinstance(value, str) and value.startswith("$2")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    if not is_hashed(password_hash):
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def ensure_demo_physician(
    store: DocumentStore,
    hasher: PasswordHasher,
    password: str = "password123",
) -> bool:
    """Create the ``demo_doctor`` account unless one already exists.

    Returns:
        True if the account was created
    """
    existing = [
        doc for doc in store.find(Collection.PHYSICIANS.value) if doc.get("username") == DEMO_DOCTOR_USERNAME
    ]
    if existing:
        logger.info("Demo account already exists")
        return False

    physician = Physician(
        id=store.new_id(),
        name="Dr. Demo Smith",
        specialization=Specialization.GENERAL_PRACTICE,
        username=DEMO_DOCTOR_USERNAME,
        password_hash=hasher(password),
        contact_info=ContactInfo(phone="+1 (555) 123-4567", email="demo@hospital.com"),
        schedule=list(DEMO_DOCTOR_SCHEDULE),
        created_at=datetime.now(timezone.utc),
    )
    store.insert(Collection.PHYSICIANS.value, entity_to_document(physician))
    logger.info(f"Demo physician created: {DEMO_DOCTOR_USERNAME}")
    return True


def list_accounts(store: DocumentStore) -> list[dict]:
    """Physician login accounts sorted by username."""
    accounts = [
        {
            "username": doc.get("username") or "N/A",
            "name": doc.get("name") or "Unknown",
            "is_active": bool(doc.get("is_active")),
            "role": doc.get("role"),
        }
        for doc in store.find(Collection.PHYSICIANS.value)
    ]
    return sorted(accounts, key=lambda a: a["username"])
