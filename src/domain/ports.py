"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the value types that cross them. Adapters
implement these protocols.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class WaitlistStatus(str, Enum):
    """
    Waitlist lifecycle states.

    State Transitions:
    - PENDING -> APPROVED (approve, bulk approve, auto-approve on join)
    - PENDING -> REJECTED (reject)
    - APPROVED -> APPROVED (re-approve issues a fresh invite code)
    - APPROVED -> REJECTED (reject)
    - REJECTED -> APPROVED (approve)
    - APPROVED -> REGISTERED (user record created)

    Terminal States:
    - REGISTERED: no operation moves an entry out of it
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REGISTERED = "registered"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortField(str, Enum):
    """Fields the admin listing can be ordered by."""

    CREATED_AT = "created_at"
    POSITION = "position"
    EMAIL = "email"
    STATUS = "status"


@dataclass(frozen=True)
class WaitlistEntry:
    """A persisted waitlist entry tracking one email's journey."""

    id: str
    email: str
    status: WaitlistStatus
    created_at: datetime
    updated_at: datetime
    invite_code: str | None = None
    invite_expires_at: datetime | None = None
    position: int | None = None
    referred_by: str | None = None
    metadata: str | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    registered_at: datetime | None = None


@dataclass(frozen=True)
class InviteEmail:
    """Payload handed to the notifier when an invite code is issued."""

    email: str
    invite_code: str
    expires_at: datetime


class RecordStore(Protocol):
    """
    Port interface for a generic single-collection record store.

    Records are plain dicts keyed by field name. ``where`` filters are
    conjunctions of field-equality predicates. Implementations enforce
    uniqueness of ``email`` and ``invite_code`` and raise
    ``DuplicateRecord`` on violation.
    """

    def find_one(self, where: dict[str, Any]) -> dict[str, Any] | None:
        """Return the first record matching every predicate, or None."""
        ...

    def find_many(
        self,
        where: dict[str, Any] | None = None,
        sort_by: str | None = None,
        direction: SortDirection = SortDirection.ASC,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Return matching records ordered by ``sort_by``."""
        ...

    def count(self, where: dict[str, Any] | None = None) -> int:
        """Count matching records."""
        ...

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a record and return it as stored (with ``id`` assigned).

        Raises:
            DuplicateRecord: If a unique field collides with an existing record
        """
        ...

    def update(self, where: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any] | None:
        """
        Apply ``patch`` to the record matching ``where`` and return it.

        Returns None when no record matches.

        Raises:
            DuplicateRecord: If the patch collides with another record's unique field
        """
        ...


class UserDirectory(Protocol):
    """Port interface onto the host's user accounts."""

    def user_exists(self, email: str) -> bool:
        """
        Check whether an account is already registered for this email.

        Args:
            email: Normalized email address
        """
        ...


class WaitlistNotifier(Protocol):
    """
    Port interface for waitlist event notifications.

    Each method is invoked at most once per triggering transition, after
    the mutation is persisted.
    """

    def on_join_waitlist(self, entry: WaitlistEntry) -> None: ...

    def on_approved(self, entry: WaitlistEntry) -> None: ...

    def on_rejected(self, entry: WaitlistEntry) -> None: ...

    def send_invite_email(self, invite: InviteEmail) -> None:
        """
        Deliver an invite code to the entry's email address.

        Args:
            invite: Recipient, invite code and absolute expiration instant
        """
        ...


class NullNotifier:
    """Notifier that ignores every event."""

    def on_join_waitlist(self, entry: WaitlistEntry) -> None:
        pass

    def on_approved(self, entry: WaitlistEntry) -> None:
        pass

    def on_rejected(self, entry: WaitlistEntry) -> None:
        pass

    def send_invite_email(self, invite: InviteEmail) -> None:
        pass
