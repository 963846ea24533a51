"""
Registration gate - the two enforcement points around account creation.

Layer A (before_request) runs on the incoming registration request and
sees whatever the request carries: email, invite code, header. Layer B
(before_user_create) runs right before the host persists a user record
and sees only that record. Layer B is what stops federated flows whose
requests carry no email.

Both layers ask the same AdmissionPolicy; neither trusts the other's
result. After the host persists the record, after_user_create marks the
waitlist entry registered.
"""

import logging
from dataclasses import dataclass

from .exceptions import error_for
from .options import WaitlistOptions
from .policy import AdmissionDecision, AdmissionPolicy, RegistrationAttempt
from .ports import WaitlistEntry
from .repository import normalize_email
from .waitlist import WaitlistService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateUser:
    """The user record the host is about to persist (or has persisted)."""

    email: str | None = None
    is_anonymous: bool = False


@dataclass
class RegistrationGate:
    options: WaitlistOptions
    policy: AdmissionPolicy
    service: WaitlistService

    def matches(self, path: str | None) -> bool:
        """True when the path is a registration flow the gate intercepts."""
        if not self.options.enabled or not path:
            return False
        return any(path == p or path.startswith(p) for p in self.options.intercept_paths)

    def before_request(self, attempt: RegistrationAttempt) -> AdmissionDecision:
        """
        Layer A: gate a registration request before any account exists.

        Returns the admit decision for requests outside the intercepted
        paths or that pass the policy.

        Raises:
            WaitlistError: The denial matching the policy's reason
        """
        if not self.matches(attempt.path):
            return AdmissionDecision.admit()

        decision = self.policy.decide_on_attempt(attempt)
        if not decision.admitted:
            logger.warning(
                "Registration blocked on %s: %s", attempt.path, decision.reason.value
            )
            raise error_for(decision.reason)
        return decision

    def before_user_create(self, candidate: CandidateUser) -> bool:
        """
        Layer B: safety net immediately before a user record is persisted.

        Returns:
            False if the host must not persist the record
        """
        if not self.options.enabled:
            return True
        if self.options.skip_anonymous and candidate.is_anonymous:
            return True
        if not candidate.email:
            return True

        decision = self.policy.check_approved(candidate.email)
        if not decision.admitted:
            logger.warning("User creation blocked for %s", normalize_email(candidate.email))
        return decision.admitted

    def after_user_create(self, user: CandidateUser) -> WaitlistEntry | None:
        """Completion step: mark the entry registered once the user exists."""
        if not self.options.enabled or not user.email:
            return None
        return self.service.mark_registered(user.email)
