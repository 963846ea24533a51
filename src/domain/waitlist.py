"""
Waitlist domain service - state transitions for waitlist entries.

Waitlist State Machine
======================

States:
- pending:    joined, awaiting a decision
- approved:   holds a live invite code and may register
- rejected:   turned down by an administrator
- registered: a user account was created for the email (terminal)

Transitions performed here (each is one store write):
    join               -> pending, or approved when auto-approve says so
    approve            pending | approved | rejected -> approved
    reject             pending | approved | rejected -> rejected
    bulk approve       pending -> approved (other states skipped)
    mark_registered    any -> registered

Side effects run after the write is persisted, in this order:
    send_invite_email (only when a code was issued)
    on_join_waitlist  (join only)
    on_approved / on_rejected

Known limitation: position is computed as count + 1 before the insert,
with no serialization between concurrent joins. Two simultaneous joins
can share a position. Email and invite-code uniqueness are enforced by
the store, not here.
"""

import json
import logging
import secrets
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from .exceptions import (
    AlreadyRegistered,
    DuplicateRecord,
    EmailAlreadyInWaitlist,
    WaitlistEntryNotFound,
    WaitlistFull,
)
from .options import WaitlistOptions
from .policy import AdmissionPolicy
from .ports import (
    Clock,
    InviteEmail,
    NullNotifier,
    WaitlistEntry,
    WaitlistNotifier,
    WaitlistStatus,
    utc_now,
)
from .repository import WaitlistEntryRepository, normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InviteVerification:
    valid: bool
    email: str | None = None


@dataclass(frozen=True)
class BulkApproveResult:
    """Aggregate of a bulk approval; only successes are reported."""

    approved: int
    entries: list[WaitlistEntry]


@dataclass
class WaitlistService:
    """
    Domain service for waitlist transitions.

    Orchestrates joins, approvals, rejections and registration
    completion on top of the entry repository.
    """

    options: WaitlistOptions
    repository: WaitlistEntryRepository
    policy: AdmissionPolicy
    notifier: WaitlistNotifier = field(default_factory=NullNotifier)
    clock: Clock = field(default=utc_now)

    def join(
        self,
        email: str,
        referred_by: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> WaitlistEntry:
        """
        Add an email to the waitlist.

        Args:
            email: Email address (will be normalized)
            referred_by: Opaque referral identifier
            metadata: Arbitrary JSON-serializable payload

        Returns:
            The created entry

        Raises:
            EmailAlreadyInWaitlist: If an entry exists for the email
            WaitlistFull: If max_waitlist_size entries already exist
        """
        normalized_email = normalize_email(email)

        if self.repository.find_by_email(normalized_email) is not None:
            raise EmailAlreadyInWaitlist(normalized_email)

        max_size = self.options.max_waitlist_size
        if max_size and self.repository.count() >= max_size:
            raise WaitlistFull(normalized_email)

        position = self.repository.count() + 1
        now = self.clock()
        draft: dict[str, Any] = {
            "email": normalized_email,
            "status": WaitlistStatus.PENDING,
            "invite_code": None,
            "invite_expires_at": None,
            "position": position,
            "referred_by": referred_by,
            "metadata": json.dumps(metadata) if metadata is not None else None,
            "approved_at": None,
            "rejected_at": None,
            "registered_at": None,
            "created_at": now,
            "updated_at": now,
        }
        if self.policy.decide_on_join(normalized_email):
            draft.update(self._approval_patch())

        try:
            entry = self.repository.insert(draft)
        except DuplicateRecord as e:
            if e.field == "email":
                raise EmailAlreadyInWaitlist(normalized_email) from e
            raise

        logger.info(
            "Waitlist join: %s status=%s position=%s", entry.email, entry.status.value, position
        )

        if entry.status == WaitlistStatus.APPROVED:
            self._send_invite(entry)
        self.notifier.on_join_waitlist(entry)
        if entry.status == WaitlistStatus.APPROVED:
            self.notifier.on_approved(entry)
        return entry

    def get_status(self, email: str) -> WaitlistEntry:
        """
        Look up an entry by email.

        Raises:
            WaitlistEntryNotFound: If the email never joined
        """
        entry = self.repository.find_by_email(email)
        if entry is None:
            raise WaitlistEntryNotFound(normalize_email(email))
        return entry

    def verify_invite(self, code: str) -> InviteVerification:
        """Check an invite code; invalid or expired codes are not errors."""
        entry = self.repository.find_by_invite_code(code)
        if entry is None or not self.policy.is_invite_valid(entry):
            return InviteVerification(valid=False, email=None)
        return InviteVerification(valid=True, email=entry.email)

    def approve(self, email: str) -> WaitlistEntry:
        """
        Approve an entry and issue a fresh invite code.

        Raises:
            WaitlistEntryNotFound: If no entry exists for the email
            AlreadyRegistered: If the entry was already used to register
        """
        entry = self.get_status(email)
        if entry.status == WaitlistStatus.REGISTERED:
            raise AlreadyRegistered(entry.email)
        return self._apply_approval(entry)

    def reject(self, email: str, reason: str | None = None) -> WaitlistEntry:
        """
        Reject an entry. Rejecting a rejected entry is harmless.

        Raises:
            WaitlistEntryNotFound: If no entry exists for the email
            AlreadyRegistered: If the entry was already used to register
        """
        entry = self.get_status(email)
        if entry.status == WaitlistStatus.REGISTERED:
            raise AlreadyRegistered(entry.email)

        now = self.clock()
        updated = self._persist(
            entry,
            {"status": WaitlistStatus.REJECTED, "rejected_at": now, "updated_at": now},
        )
        logger.info("Waitlist reject: %s reason=%s", updated.email, reason or "-")
        self.notifier.on_rejected(updated)
        return updated

    def bulk_approve_by_emails(self, emails: list[str]) -> BulkApproveResult:
        """
        Approve every listed email whose entry is currently pending.

        Missing or non-pending entries are skipped silently. A failure on
        one email is logged and does not stop the rest.
        """
        approved: list[WaitlistEntry] = []
        for email in emails:
            try:
                entry = self.repository.find_by_email(email)
                if entry is None or entry.status != WaitlistStatus.PENDING:
                    continue
                approved.append(self._apply_approval(entry))
            except Exception:
                logger.exception("Bulk approve failed for %s", email)
        return BulkApproveResult(approved=len(approved), entries=approved)

    def bulk_approve_by_count(self, count: int) -> BulkApproveResult:
        """Approve the ``count`` oldest pending entries by position."""
        approved: list[WaitlistEntry] = []
        for entry in self.repository.list_pending_by_position(count):
            try:
                approved.append(self._apply_approval(entry))
            except Exception:
                logger.exception("Bulk approve failed for %s", entry.email)
        return BulkApproveResult(approved=len(approved), entries=approved)

    def mark_registered(self, email: str) -> WaitlistEntry | None:
        """
        Record that a user account now exists for this email.

        No-op (returns None) when the email has no entry.
        """
        now = self.clock()
        updated = self.repository.update(
            {"status": WaitlistStatus.REGISTERED, "registered_at": now, "updated_at": now},
            email=email,
        )
        if updated is not None:
            logger.info("Waitlist registered: %s", updated.email)
        return updated

    def _approval_patch(self) -> dict[str, Any]:
        now = self.clock()
        return {
            "status": WaitlistStatus.APPROVED,
            "invite_code": self._generate_invite_code(),
            "invite_expires_at": now + timedelta(seconds=self.options.invite_code_expiration),
            "approved_at": now,
            "updated_at": now,
        }

    def _apply_approval(self, entry: WaitlistEntry) -> WaitlistEntry:
        updated = self._persist(entry, self._approval_patch())
        logger.info("Waitlist approve: %s", updated.email)
        self._send_invite(updated)
        self.notifier.on_approved(updated)
        return updated

    def _persist(self, entry: WaitlistEntry, patch: dict[str, Any]) -> WaitlistEntry:
        updated = self.repository.update(patch, entry_id=entry.id)
        if updated is None:
            raise WaitlistEntryNotFound(entry.email)
        return updated

    def _send_invite(self, entry: WaitlistEntry) -> None:
        if entry.invite_code is None or entry.invite_expires_at is None:
            return
        self.notifier.send_invite_email(
            InviteEmail(
                email=entry.email,
                invite_code=entry.invite_code,
                expires_at=entry.invite_expires_at,
            )
        )

    def _generate_invite_code(self) -> str:
        """
        Generate an unguessable invite code.

        Uses secrets module for cryptographic randomness. Uniqueness is
        left to the store's unique constraint.
        """
        return secrets.token_urlsafe(24)
