"""
Storage module for Shortit (in-memory implementation).

Responsibilities:
    - Keep alias records keyed by a storage-assigned id
    - Provide exact-match lookups (by id, destination, alias, custom alias)
    - Enforce alias uniqueness (I1) and custom-alias uniqueness (I2) at write time

Design:
    - This is an in-memory reference implementation that satisfies the BaseStorage contract.
    - Check-and-write runs under a single lock, so the uniqueness guarantee holds
      for concurrent writers the same way a unique index does in a database.
    - Records are immutable snapshots; callers never get a handle on internal state.
    - For production, use the PostgreSQL backend (see db_storage.py).
"""

import threading
import uuid
from typing import Any, Dict, List, Optional

from ..errors import NotFound, UniqueConstraintViolation
from ..models import AliasRecord
from .base import BaseStorage, check_patch


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.records = {record_id: AliasRecord}
        Insertion order of the dict is the storage-native listing order.
        """
        self.records: Dict[str, AliasRecord] = {}
        self._lock = threading.Lock()

    # ---- Lookups ----------------------------------------------------------

    def find_by_destination(self, url: str) -> Optional[AliasRecord]:
        with self._lock:
            for record in self.records.values():
                if record.destination_url == url:
                    return record
        return None

    def find_by_custom_alias(self, token: str, exclude_id: Optional[str] = None) -> Optional[AliasRecord]:
        if not token:
            return None
        with self._lock:
            for record in self.records.values():
                if record.custom_alias == token and record.id != exclude_id:
                    return record
        return None

    def find_by_alias(self, alias: str) -> Optional[AliasRecord]:
        with self._lock:
            for record in self.records.values():
                if record.alias == alias:
                    return record
        return None

    def find_by_id(self, record_id: str) -> Optional[AliasRecord]:
        with self._lock:
            return self.records.get(record_id)

    def list_all(self) -> List[AliasRecord]:
        with self._lock:
            return list(self.records.values())

    # ---- Writes -----------------------------------------------------------

    def insert(self, destination_url: str, alias: str, custom_alias: Optional[str] = None) -> AliasRecord:
        """
        Insert a new record.

        Rules:
            - `alias` must not be used by any record (I1).
            - A non-empty `custom_alias` must not be used by any record (I2).

        Raises:
            UniqueConstraintViolation: with `field` set to the violated domain.
        """
        with self._lock:
            self._assert_unique(alias, custom_alias or None, exclude_id=None)
            record = AliasRecord(
                id=uuid.uuid4().hex,
                destination_url=destination_url,
                alias=alias,
                custom_alias=custom_alias or None,
            )
            self.records[record.id] = record
            return record

    def update(self, record_id: str, patch: Dict[str, Any]) -> AliasRecord:
        check_patch(patch)
        with self._lock:
            current = self.records.get(record_id)
            if current is None:
                raise NotFound(f"No record with id {record_id!r}")
            updated = current.with_changes(**patch)
            self._assert_unique(updated.alias, updated.custom_alias, exclude_id=record_id)
            self.records[record_id] = updated
            return updated

    def delete(self, record_id: str) -> AliasRecord:
        with self._lock:
            record = self.records.pop(record_id, None)
        if record is None:
            raise NotFound(f"No record with id {record_id!r}")
        return record

    # ---- Internal helpers -------------------------------------------------

    def _assert_unique(self, alias: str, custom_alias: Optional[str], exclude_id: Optional[str]) -> None:
        """Caller must hold self._lock."""
        for other in self.records.values():
            if other.id == exclude_id:
                continue
            if other.alias == alias:
                raise UniqueConstraintViolation("alias")
            if custom_alias and other.custom_alias == custom_alias:
                raise UniqueConstraintViolation("custom_alias")
