"""Medication catalog loading.

The catalog is a JSON object keyed arbitrarily (or a plain array) whose
records carry ``Name``, ``Generic Name``, ``Type``, ``MG`` and
``Company Name``. It is read once, before any entity is generated.
"""

import json
import logging
from pathlib import Path

from clinicseed.data.schema import Medication
from clinicseed.errors import DatasetLoadError

logger = logging.getLogger(__name__)

DEFAULT_MEDICATIONS_PATH = Path(__file__).parent / "medicine.json"

REQUIRED_FIELDS = ("Name", "Generic Name", "MG")


def parse_medication(key: str, item) -> Medication:
    """Map one raw catalog record to a Medication."""
    if not isinstance(item, dict):
        raise DatasetLoadError(f"Record {key!r} is not an object")
    missing = [name for name in REQUIRED_FIELDS if not item.get(name)]
    if missing:
        raise DatasetLoadError(f"Record {key!r} missing fields: {', '.join(missing)}")
    return Medication(
        name=str(item["Name"]),
        generic=str(item["Generic Name"]),
        type=item.get("Type") or None,
        mg=str(item["MG"]),
        company=item.get("Company Name") or None,
    )


def load_medications(path: Path | str = DEFAULT_MEDICATIONS_PATH) -> list[Medication]:
    """Load and validate the medication catalog.

    Args:
        path: JSON catalog file

    Returns:
        List of Medication records, in file order

    Raises:
        DatasetLoadError: file missing, unreadable, malformed, or empty
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise DatasetLoadError(f"Medication catalog not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise DatasetLoadError(f"Could not read medication catalog {path}: {e}") from e

    if isinstance(data, dict):
        items = list(data.items())
    elif isinstance(data, list):
        items = [(str(i), item) for i, item in enumerate(data)]
    else:
        raise DatasetLoadError(f"Medication catalog {path} must be an object or array")

    medications = [parse_medication(key, item) for key, item in items]
    if not medications:
        raise DatasetLoadError(f"Medication catalog {path} is empty")

    logger.info(f"Loaded {len(medications):,} medications from {path}")
    return medications
