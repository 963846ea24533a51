"""
In-memory repository adapter - Implements the RecordStore protocol.

Process-local store for development and tests. Unique fields are
checked under a lock so concurrent writers see the same guarantees a
database UNIQUE constraint gives.
"""

import threading
import uuid
from typing import Any

from src.domain.exceptions import DuplicateRecord
from src.domain.ports import SortDirection

UNIQUE_FIELDS = ("email", "invite_code")


def _matches(record: dict[str, Any], where: dict[str, Any] | None) -> bool:
    return all(record.get(k) == v for k, v in (where or {}).items())


class InMemoryRecordStore:
    """
    Implements RecordStore protocol over a dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Records are copied on the way in and out.
    """

    def __init__(self, unique_fields: tuple[str, ...] = UNIQUE_FIELDS) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._unique_fields = unique_fields
        self._lock = threading.Lock()

    def find_one(self, where: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            for record in self._records.values():
                if _matches(record, where):
                    return dict(record)
        return None

    def find_many(
        self,
        where: dict[str, Any] | None = None,
        sort_by: str | None = None,
        direction: SortDirection = SortDirection.ASC,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        with self._lock:
            rows = [dict(r) for r in self._records.values() if _matches(r, where)]
        if sort_by is not None:
            # Nulls last in both directions, as ORDER BY ... NULLS LAST
            present = [r for r in rows if r.get(sort_by) is not None]
            present.sort(key=lambda r: r[sort_by], reverse=direction == SortDirection.DESC)
            rows = present + [r for r in rows if r.get(sort_by) is None]
        end = offset + limit if limit is not None else None
        return rows[offset:end]

    def count(self, where: dict[str, Any] | None = None) -> int:
        with self._lock:
            return sum(1 for r in self._records.values() if _matches(r, where))

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        record = dict(data)
        record.setdefault("id", str(uuid.uuid4()))
        with self._lock:
            self._check_unique(record, exclude_id=None)
            self._records[record["id"]] = record
            return dict(record)

    def update(self, where: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            for record_id, record in self._records.items():
                if _matches(record, where):
                    merged = {**record, **patch, "id": record_id}
                    self._check_unique(merged, exclude_id=record_id)
                    self._records[record_id] = merged
                    return dict(merged)
        return None

    def _check_unique(self, record: dict[str, Any], exclude_id: str | None) -> None:
        for field in self._unique_fields:
            value = record.get(field)
            if value is None:
                continue
            for other_id, other in self._records.items():
                if other_id != exclude_id and other.get(field) == value:
                    raise DuplicateRecord(field)


class InMemoryUserDirectory:
    """Implements UserDirectory protocol over a set of emails."""

    def __init__(self, emails: set[str] | None = None) -> None:
        self._emails = {e.lower() for e in emails or set()}

    def add(self, email: str) -> None:
        self._emails.add(email.lower())

    def user_exists(self, email: str) -> bool:
        return email.lower() in self._emails
