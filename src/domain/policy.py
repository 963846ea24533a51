"""
Admission policy - decides whether a registration attempt may proceed.

The policy never mutates state. Every decision reads the store afresh,
so the two enforcement layers (see interception.py) can each call it
standalone and reach a correct answer without sharing anything but this
object.

Decision order for a registration attempt:
    1. Gate disabled                      -> ADMIT
    2. Email belongs to an existing user  -> ADMIT (login, not signup)
    3. Invite code required               -> code must match an approved,
                                             unexpired entry
    4. Email present                      -> entry must be APPROVED
    5. Nothing to check                   -> ADMIT (safety net decides)
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field

from .exceptions import WaitlistErrorCode
from .options import (
    AlwaysApprove,
    AutoApproveDisabled,
    PredicateApprove,
    WaitlistOptions,
)
from .ports import Clock, UserDirectory, WaitlistEntry, WaitlistStatus, utc_now
from .repository import WaitlistEntryRepository, normalize_email

logger = logging.getLogger(__name__)


async def _resolve(awaitable: Awaitable[bool]) -> bool:
    return await awaitable


@dataclass(frozen=True)
class RegistrationAttempt:
    """
    Identifying data available before an account materializes.

    Federated callbacks typically carry neither email nor invite code.
    """

    path: str
    email: str | None = None
    invite_code: str | None = None
    invite_code_header: str | None = None

    @property
    def presented_code(self) -> str | None:
        return self.invite_code or self.invite_code_header or None


@dataclass(frozen=True)
class AdmissionDecision:
    admitted: bool
    reason: WaitlistErrorCode | None = None

    @classmethod
    def admit(cls) -> "AdmissionDecision":
        return cls(admitted=True)

    @classmethod
    def deny(cls, reason: WaitlistErrorCode) -> "AdmissionDecision":
        return cls(admitted=False, reason=reason)


@dataclass
class AdmissionPolicy:
    """Pure admission rules over the waitlist repository."""

    options: WaitlistOptions
    repository: WaitlistEntryRepository
    users: UserDirectory
    clock: Clock = field(default=utc_now)

    def decide_on_join(self, email: str) -> bool:
        """Return True when a newly joining email is approved immediately."""
        rule = self.options.auto_approve
        if isinstance(rule, AutoApproveDisabled):
            return False
        if isinstance(rule, AlwaysApprove):
            return True
        if isinstance(rule, PredicateApprove):
            try:
                result = rule.predicate(email)
                if inspect.isawaitable(result):
                    result = asyncio.run(_resolve(result))
                return bool(result)
            except Exception:
                logger.exception("Auto-approve predicate failed for %s; leaving pending", email)
                return False
        raise TypeError(f"Unknown auto-approve rule: {rule!r}")

    def decide_on_attempt(self, attempt: RegistrationAttempt) -> AdmissionDecision:
        if not self.options.enabled:
            return AdmissionDecision.admit()

        email = normalize_email(attempt.email) if attempt.email else None

        if email is not None and self.users.user_exists(email):
            return AdmissionDecision.admit()

        if self.options.require_invite_code:
            code = attempt.presented_code
            if not code:
                return AdmissionDecision.deny(WaitlistErrorCode.INVITE_CODE_REQUIRED)
            entry = self.repository.find_by_invite_code(code)
            if entry is None or not self.is_invite_valid(entry):
                return AdmissionDecision.deny(WaitlistErrorCode.INVALID_INVITE_CODE)
            return AdmissionDecision.admit()

        if email is not None:
            return self.check_approved(email)

        return AdmissionDecision.admit()

    def check_approved(self, email: str) -> AdmissionDecision:
        """Admit only if the email's entry is exactly APPROVED."""
        entry = self.repository.find_by_email(email)
        if entry is None or entry.status != WaitlistStatus.APPROVED:
            return AdmissionDecision.deny(WaitlistErrorCode.NOT_APPROVED)
        return AdmissionDecision.admit()

    def is_invite_valid(self, entry: WaitlistEntry) -> bool:
        """Invite is usable if it is unexpired at this instant."""
        if entry.status != WaitlistStatus.APPROVED or entry.invite_code is None:
            return False
        if entry.invite_expires_at is None:
            return True
        return entry.invite_expires_at >= self.clock()
