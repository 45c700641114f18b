"""
Sprint repository - persistence for sprints and efforts.

Both collections are stored as whole JSON arrays under fixed keys of an
opaque key-value store and are overwritten in full on every save.
Failures never reach the caller: saves are logged and dropped, loads that
cannot be decoded are logged and come back empty.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifegrid.constants import SPRINTS_KEY, EFFORTS_KEY
from lifegrid.models import KeyValueEntry
from lifegrid.schemas import Sprint, Effort

logger = logging.getLogger("lifegrid.persistence")

_sprints_adapter = TypeAdapter(List[Sprint])
_efforts_adapter = TypeAdapter(List[Effort])


class SprintRepository(ABC):
    """Load/save interface the store depends on"""

    @abstractmethod
    def _read_blob(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def _write_blob(self, key: str, value: str) -> None:
        pass

    def _load(self, key: str, adapter: TypeAdapter) -> list:
        try:
            blob = self._read_blob(key)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read '{key}': {e}")
            return []

        if blob is None:
            return []

        try:
            return adapter.validate_json(blob)
        except (ValidationError, ValueError) as e:
            logger.error(f"Failed to decode '{key}', starting empty: {e}")
            return []

    def _save(self, key: str, adapter: TypeAdapter, items: list) -> None:
        try:
            blob = adapter.dump_json(items).decode("utf-8")
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to encode '{key}': {e}")
            return

        try:
            self._write_blob(key, blob)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save '{key}': {e}")

    def load_sprints(self) -> List[Sprint]:
        return self._load(SPRINTS_KEY, _sprints_adapter)

    def save_sprints(self, sprints: List[Sprint]) -> None:
        self._save(SPRINTS_KEY, _sprints_adapter, sprints)

    def load_efforts(self) -> List[Effort]:
        return self._load(EFFORTS_KEY, _efforts_adapter)

    def save_efforts(self, efforts: List[Effort]) -> None:
        self._save(EFFORTS_KEY, _efforts_adapter, efforts)


class KeyValueSprintRepository(SprintRepository):
    """Stores the JSON blobs in the key_value_store table"""

    def __init__(self, db: Session):
        self.db = db

    def _read_blob(self, key: str) -> Optional[str]:
        entry = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
        return entry.value if entry else None

    def _write_blob(self, key: str, value: str) -> None:
        try:
            entry = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if entry is None:
                entry = KeyValueEntry(key=key, value=value)
                self.db.add(entry)
            else:
                entry.value = value
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


class InMemorySprintRepository(SprintRepository):
    """Keeps the JSON blobs in a dict (tests and embedding)"""

    def __init__(self, blobs: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(blobs or {})

    def _read_blob(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def _write_blob(self, key: str, value: str) -> None:
        self.blobs[key] = value
