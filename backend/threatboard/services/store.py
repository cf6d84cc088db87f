"""
Resource store adapters.

Two backends share one contract:

- ``JsonFileStore``: one pretty-printed JSON array file per collection,
  rewritten whole on every write, sequential integer ids.
- ``DocumentStore``: JSON documents in a SQLAlchemy table, opaque string ids.

Reads that fail are logged and yield an empty collection. Writes that fail are
logged and surface as ``StorageError``.
"""
import json
import logging
import os
import tempfile
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..db import Document
from ..errors import StorageError

logger = logging.getLogger(__name__)

RecordId = Any


class ResourceStore(ABC):
    """Storage contract for a single named collection."""

    # Whether referenced records can be joined in on single-record reads
    populates_references: bool = False

    def __init__(self, collection: str):
        self.collection = collection

    @abstractmethod
    def parse_id(self, raw: str) -> Optional[RecordId]:
        """Turn a path identifier into a store id, or None when it cannot exist."""

    @abstractmethod
    def list(self) -> list[dict]:
        """Return the whole collection. Never raises."""

    @abstractmethod
    def get(self, record_id: RecordId) -> Optional[dict]:
        """Return one record, or None when absent."""

    @abstractmethod
    def create(self, fields: dict) -> dict:
        """Store a new record and return it with its assigned id."""

    @abstractmethod
    def update(self, record_id: RecordId, fields: dict) -> Optional[dict]:
        """Shallow-merge ``fields`` over a record. None when absent."""

    @abstractmethod
    def delete(self, record_id: RecordId) -> bool:
        """Remove a record. False when absent."""


class JsonFileStore(ResourceStore):
    """Collection kept in ``<data_dir>/<collection>.json``."""

    def __init__(self, collection: str, data_dir: str | Path):
        super().__init__(collection)
        self.path = Path(data_dir) / f"{collection}.json"

    def _read(self) -> list[dict]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{self.path} does not contain a JSON array")
        return data

    def load(self) -> list[dict]:
        """Read the collection, returning [] on any read failure."""
        try:
            return self._read()
        except (OSError, ValueError) as e:
            logger.error(f"Error loading {self.collection} data from {self.path}: {e}")
            return []

    def save(self, records: list[dict]) -> bool:
        """
        Replace the collection file. Returns False on failure.

        Records are written to a temporary file beside the collection and moved
        over it, so a failed write leaves the previous contents in place.
        """
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.collection}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = f.name
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving {self.collection} data to {self.path}: {e}")
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False

    def _read_for_write(self) -> list[dict]:
        # A failed read must not be mistaken for an empty collection and overwritten
        try:
            return self._read()
        except (OSError, ValueError) as e:
            logger.error(f"Error loading {self.collection} data from {self.path}: {e}")
            raise StorageError(f"Failed to read {self.collection}") from e

    def _write(self, records: list[dict]) -> None:
        if not self.save(records):
            raise StorageError(f"Failed to write {self.collection}")

    def parse_id(self, raw: str) -> Optional[int]:
        try:
            return int(str(raw).strip())
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _next_id(records: list[dict]) -> int:
        ids = [r["id"] for r in records if isinstance(r.get("id"), int)]
        return max(ids, default=0) + 1

    @staticmethod
    def _index_of(records: list[dict], record_id: RecordId) -> int:
        for i, record in enumerate(records):
            if record.get("id") == record_id:
                return i
        return -1

    def list(self) -> list[dict]:
        return self.load()

    def get(self, record_id: RecordId) -> Optional[dict]:
        records = self.load()
        index = self._index_of(records, record_id)
        return records[index] if index >= 0 else None

    def create(self, fields: dict) -> dict:
        records = self._read_for_write()
        body = {k: v for k, v in fields.items() if k != "id"}
        record = {"id": self._next_id(records), **body}
        records.append(record)
        self._write(records)
        return record

    def update(self, record_id: RecordId, fields: dict) -> Optional[dict]:
        records = self._read_for_write()
        index = self._index_of(records, record_id)
        if index == -1:
            return None
        existing = records[index]
        records[index] = {**existing, **fields, "id": existing["id"]}
        self._write(records)
        return records[index]

    def delete(self, record_id: RecordId) -> bool:
        records = self._read_for_write()
        index = self._index_of(records, record_id)
        if index == -1:
            return False
        records.pop(index)
        self._write(records)
        return True


class DocumentStore(ResourceStore):
    """Collection kept as rows of the shared ``documents`` table."""

    populates_references = True

    def __init__(self, collection: str, session_factory: sessionmaker):
        super().__init__(collection)
        self._session_factory = session_factory

    @staticmethod
    def _to_record(doc: Document) -> dict:
        return {"id": doc.doc_id, **(doc.body or {})}

    def _find(self, session, record_id: str) -> Optional[Document]:
        stmt = select(Document).where(
            Document.collection == self.collection,
            Document.doc_id == record_id,
        )
        return session.execute(stmt).scalar_one_or_none()

    def parse_id(self, raw: str) -> Optional[str]:
        value = str(raw).strip()
        return value or None

    def list(self) -> list[dict]:
        try:
            with self._session_factory() as session:
                stmt = (
                    select(Document)
                    .where(Document.collection == self.collection)
                    .order_by(Document.seq)
                )
                return [self._to_record(d) for d in session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error loading {self.collection} documents: {e}")
            return []

    def get(self, record_id: RecordId) -> Optional[dict]:
        try:
            with self._session_factory() as session:
                doc = self._find(session, str(record_id))
                return self._to_record(doc) if doc else None
        except SQLAlchemyError as e:
            logger.error(f"Error loading {self.collection} document {record_id}: {e}")
            return None

    def create(self, fields: dict) -> dict:
        body = {k: v for k, v in fields.items() if k != "id"}
        doc = Document(doc_id=uuid.uuid4().hex, collection=self.collection, body=body)
        try:
            with self._session_factory() as session, session.begin():
                session.add(doc)
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.collection} document: {e}")
            raise StorageError(f"Failed to write {self.collection}") from e
        return self._to_record(doc)

    def update(self, record_id: RecordId, fields: dict) -> Optional[dict]:
        try:
            with self._session_factory() as session, session.begin():
                doc = self._find(session, str(record_id))
                if doc is None:
                    return None
                # Reassign so the JSON column is flagged dirty
                doc.body = {**(doc.body or {}), **{k: v for k, v in fields.items() if k != "id"}}
                return self._to_record(doc)
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.collection} document {record_id}: {e}")
            raise StorageError(f"Failed to write {self.collection}") from e

    def delete(self, record_id: RecordId) -> bool:
        try:
            with self._session_factory() as session, session.begin():
                doc = self._find(session, str(record_id))
                if doc is None:
                    return False
                session.delete(doc)
                return True
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.collection} document {record_id}: {e}")
            raise StorageError(f"Failed to write {self.collection}") from e
