"""
Waitlist entry repository - typed access to the waitlist collection.

Wraps a generic RecordStore and translates between raw records and
WaitlistEntry values. Every email that crosses this boundary is
normalized. Store errors propagate unchanged; nothing is retried.
"""

from dataclasses import dataclass, fields
from typing import Any

from .ports import (
    RecordStore,
    SortDirection,
    SortField,
    WaitlistEntry,
    WaitlistStatus,
)

_ENTRY_FIELDS = tuple(f.name for f in fields(WaitlistEntry))


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def _to_record(values: dict[str, Any]) -> dict[str, Any]:
    record = dict(values)
    if "email" in record and record["email"] is not None:
        record["email"] = normalize_email(record["email"])
    if isinstance(record.get("status"), WaitlistStatus):
        record["status"] = record["status"].value
    return record


def _to_entry(record: dict[str, Any]) -> WaitlistEntry:
    values = {name: record.get(name) for name in _ENTRY_FIELDS}
    values["id"] = str(values["id"])
    values["status"] = WaitlistStatus(values["status"])
    return WaitlistEntry(**values)


@dataclass
class WaitlistEntryRepository:
    """Typed operations on the waitlist entry collection."""

    store: RecordStore

    def find_by_email(self, email: str) -> WaitlistEntry | None:
        record = self.store.find_one({"email": normalize_email(email)})
        return _to_entry(record) if record is not None else None

    def find_by_id(self, entry_id: str) -> WaitlistEntry | None:
        record = self.store.find_one({"id": entry_id})
        return _to_entry(record) if record is not None else None

    def find_by_invite_code(self, code: str) -> WaitlistEntry | None:
        """Find the approved entry holding this invite code."""
        record = self.store.find_one(
            {"invite_code": code, "status": WaitlistStatus.APPROVED.value}
        )
        return _to_entry(record) if record is not None else None

    def insert(self, draft: dict[str, Any]) -> WaitlistEntry:
        """
        Persist a new entry.

        Raises:
            DuplicateRecord: If the email or invite code already exists
        """
        return _to_entry(self.store.create(_to_record(draft)))

    def update(
        self,
        patch: dict[str, Any],
        *,
        email: str | None = None,
        entry_id: str | None = None,
    ) -> WaitlistEntry | None:
        """
        Apply a patch to the entry identified by email or id.

        Returns the updated entry, or None if no entry matched.
        """
        if (email is None) == (entry_id is None):
            raise ValueError("update() needs exactly one of email or entry_id")
        where = {"email": normalize_email(email)} if email is not None else {"id": entry_id}
        record = self.store.update(where, _to_record(patch))
        return _to_entry(record) if record is not None else None

    def count(self, status: WaitlistStatus | None = None) -> int:
        where = {"status": status.value} if status is not None else None
        return self.store.count(where)

    def list_paginated(
        self,
        status: WaitlistStatus | None = None,
        sort_by: SortField = SortField.CREATED_AT,
        direction: SortDirection = SortDirection.DESC,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[WaitlistEntry], int]:
        """
        Return one page of entries and the total matching count.

        Args:
            status: Optional status filter
            sort_by: Ordering field
            direction: Ordering direction
            page: 1-based page number
            limit: Page size
        """
        where = {"status": status.value} if status is not None else None
        records = self.store.find_many(
            where,
            sort_by=sort_by.value,
            direction=direction,
            limit=limit,
            offset=(page - 1) * limit,
        )
        total = self.store.count(where)
        return [_to_entry(r) for r in records], total

    def list_pending_by_position(self, limit: int) -> list[WaitlistEntry]:
        """Oldest pending entries first."""
        records = self.store.find_many(
            {"status": WaitlistStatus.PENDING.value},
            sort_by=SortField.POSITION.value,
            direction=SortDirection.ASC,
            limit=limit,
        )
        return [_to_entry(r) for r in records]
