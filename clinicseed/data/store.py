"""Document stores the seeder persists into.

The seeder only needs create/replace/bulk-delete per collection plus a way to
mint identifiers before cross-references are wired up. Querying is left to
whatever application reads the seeded data.
"""

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from clinicseed.errors import PersistenceError

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentStore(ABC):
    """Abstract base class for seeded-data persistence."""

    def new_id(self) -> str:
        """Mint an identifier for a document that hasn't been saved yet."""
        return uuid.uuid4().hex

    @abstractmethod
    def insert(self, collection: str, document: Document) -> None:
        """Create a document. Raises PersistenceError if the id already exists."""
        pass

    @abstractmethod
    def replace(self, collection: str, doc_id: str, document: Document) -> None:
        """Overwrite an existing document. Raises PersistenceError if missing."""
        pass

    @abstractmethod
    def delete_all(self, collection: str) -> int:
        """Remove every document in a collection, returning how many were removed."""
        pass

    @abstractmethod
    def find(self, collection: str) -> list[Document]:
        """All documents in a collection, in insertion order."""
        pass

    def count(self, collection: str) -> int:
        return len(self.find(collection))

    def flush(self) -> None:
        """Make buffered writes durable."""

    def close(self) -> None:
        self.flush()


class InMemoryStore(DocumentStore):
    """Dict-backed store for tests and dry runs."""

    def __init__(self):
        self.collections: dict[str, dict[str, Document]] = {}

    def _collection(self, collection: str) -> dict[str, Document]:
        return self.collections.setdefault(collection, {})

    def insert(self, collection: str, document: Document) -> None:
        docs = self._collection(collection)
        doc_id = document.get("id")
        if not doc_id:
            raise PersistenceError(collection, "document has no id")
        if doc_id in docs:
            raise PersistenceError(collection, f"duplicate id {doc_id}")
        docs[doc_id] = copy.deepcopy(document)

    def replace(self, collection: str, doc_id: str, document: Document) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise PersistenceError(collection, f"no document with id {doc_id}")
        docs[doc_id] = copy.deepcopy(document)

    def delete_all(self, collection: str) -> int:
        removed = len(self._collection(collection))
        self.collections[collection] = {}
        return removed

    def find(self, collection: str) -> list[Document]:
        return [copy.deepcopy(doc) for doc in self._collection(collection).values()]

    def get(self, collection: str, doc_id: str) -> Document | None:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None


def _from_parquet_value(value: Any) -> Any:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    if isinstance(value, np.ndarray):
        return [_from_parquet_value(v) for v in value.tolist()]
    if isinstance(value, dict):
        return {k: _from_parquet_value(v) for k, v in value.items()}
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


class ParquetStore(InMemoryStore):
    """One parquet file per collection, written on flush.

    Writes are buffered in memory; ``delete_all`` removes the collection's
    file immediately so a wipe is durable even if the run later fails.
    """

    def __init__(self, output_dir: Path | str):
        super().__init__()
        self.output_dir = Path(output_dir)
        self._dirty: set[str] = set()
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(str(self.output_dir), f"cannot create output directory: {e}") from e

    def path_for(self, collection: str) -> Path:
        return self.output_dir / f"{collection}.parquet"

    def _collection(self, collection: str) -> dict[str, Document]:
        if collection not in self.collections:
            self.collections[collection] = self._load(collection)
        return self.collections[collection]

    def _load(self, collection: str) -> dict[str, Document]:
        path = self.path_for(collection)
        if not path.exists():
            return {}
        try:
            df = pd.read_parquet(path)
        except (OSError, ValueError) as e:
            raise PersistenceError(collection, f"cannot read {path}: {e}") from e
        records = [{k: _from_parquet_value(v) for k, v in row.items()} for row in df.to_dict("records")]
        return {record["id"]: record for record in records}

    def insert(self, collection: str, document: Document) -> None:
        super().insert(collection, document)
        self._dirty.add(collection)

    def replace(self, collection: str, doc_id: str, document: Document) -> None:
        super().replace(collection, doc_id, document)
        self._dirty.add(collection)

    def delete_all(self, collection: str) -> int:
        removed = super().delete_all(collection)
        path = self.path_for(collection)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(collection, f"cannot remove {path}: {e}") from e
        self._dirty.discard(collection)
        return removed

    def flush(self) -> None:
        for collection in sorted(self._dirty):
            path = self.path_for(collection)
            records = list(self.collections[collection].values())
            try:
                pd.DataFrame(records).to_parquet(path, index=False)
            except (OSError, ValueError, TypeError, NotImplementedError) as e:
                raise PersistenceError(collection, f"cannot write {path}: {e}") from e
            logger.info(f"  Wrote {len(records):,} {collection} to {path}")
        self._dirty.clear()
