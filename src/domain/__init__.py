"""
Domain layer - Pure business logic with zero framework imports.

This package contains the waitlist state machine and admission-control
logic. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .admin import Actor, WaitlistAdministration, WaitlistPage, WaitlistStats
from .exceptions import (
    AlreadyRegistered,
    DuplicateRecord,
    EmailAlreadyInWaitlist,
    InvalidInviteCode,
    InviteCodeRequired,
    NotApproved,
    RecordConflict,
    UnauthorizedAdminAction,
    WaitlistEntryNotFound,
    WaitlistError,
    WaitlistErrorCode,
    WaitlistFull,
)
from .interception import CandidateUser, RegistrationGate
from .options import (
    AlwaysApprove,
    AutoApprove,
    AutoApproveDisabled,
    PredicateApprove,
    WaitlistOptions,
)
from .policy import AdmissionDecision, AdmissionPolicy, RegistrationAttempt
from .ports import (
    InviteEmail,
    NullNotifier,
    RecordStore,
    UserDirectory,
    WaitlistEntry,
    WaitlistNotifier,
    WaitlistStatus,
)
from .repository import WaitlistEntryRepository
from .waitlist import BulkApproveResult, InviteVerification, WaitlistService

__all__ = [
    "Actor",
    "AdmissionDecision",
    "AdmissionPolicy",
    "AlreadyRegistered",
    "AlwaysApprove",
    "AutoApprove",
    "AutoApproveDisabled",
    "BulkApproveResult",
    "CandidateUser",
    "DuplicateRecord",
    "EmailAlreadyInWaitlist",
    "InvalidInviteCode",
    "InviteCodeRequired",
    "InviteEmail",
    "InviteVerification",
    "NotApproved",
    "NullNotifier",
    "PredicateApprove",
    "RecordConflict",
    "RecordStore",
    "RegistrationAttempt",
    "RegistrationGate",
    "UnauthorizedAdminAction",
    "UserDirectory",
    "WaitlistAdministration",
    "WaitlistEntry",
    "WaitlistEntryNotFound",
    "WaitlistEntryRepository",
    "WaitlistError",
    "WaitlistErrorCode",
    "WaitlistFull",
    "WaitlistNotifier",
    "WaitlistOptions",
    "WaitlistPage",
    "WaitlistService",
    "WaitlistStats",
    "WaitlistStatus",
]
