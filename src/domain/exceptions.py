"""
Domain exceptions - Semantic error types for the waitlist.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each waitlist denial carries a stable error code; mapping codes to
transport status codes is the API layer's job.
"""

from enum import Enum


class WaitlistErrorCode(str, Enum):
    """Closed set of denial kinds exposed to callers."""

    EMAIL_ALREADY_IN_WAITLIST = "EMAIL_ALREADY_IN_WAITLIST"
    WAITLIST_ENTRY_NOT_FOUND = "WAITLIST_ENTRY_NOT_FOUND"
    NOT_APPROVED = "NOT_APPROVED"
    INVALID_INVITE_CODE = "INVALID_INVITE_CODE"
    INVITE_CODE_REQUIRED = "INVITE_CODE_REQUIRED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    WAITLIST_FULL = "WAITLIST_FULL"
    UNAUTHORIZED_ADMIN_ACTION = "UNAUTHORIZED_ADMIN_ACTION"


ERROR_MESSAGES: dict[WaitlistErrorCode, str] = {
    WaitlistErrorCode.EMAIL_ALREADY_IN_WAITLIST: "This email is already on the waitlist",
    WaitlistErrorCode.WAITLIST_ENTRY_NOT_FOUND: "Waitlist entry not found",
    WaitlistErrorCode.NOT_APPROVED: "You must be approved from the waitlist to register",
    WaitlistErrorCode.INVALID_INVITE_CODE: "Invalid or expired invite code",
    WaitlistErrorCode.INVITE_CODE_REQUIRED: "An invite code is required to register",
    WaitlistErrorCode.ALREADY_REGISTERED: (
        "This waitlist entry has already been used for registration"
    ),
    WaitlistErrorCode.WAITLIST_FULL: "The waitlist is currently full",
    WaitlistErrorCode.UNAUTHORIZED_ADMIN_ACTION: "You are not authorized to perform this action",
}


class WaitlistError(Exception):
    """Base class for waitlist domain errors."""

    code: WaitlistErrorCode

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.message)

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.code]


class EmailAlreadyInWaitlist(WaitlistError):
    code = WaitlistErrorCode.EMAIL_ALREADY_IN_WAITLIST


class WaitlistEntryNotFound(WaitlistError):
    code = WaitlistErrorCode.WAITLIST_ENTRY_NOT_FOUND


class NotApproved(WaitlistError):
    code = WaitlistErrorCode.NOT_APPROVED


class InvalidInviteCode(WaitlistError):
    code = WaitlistErrorCode.INVALID_INVITE_CODE


class InviteCodeRequired(WaitlistError):
    code = WaitlistErrorCode.INVITE_CODE_REQUIRED


class AlreadyRegistered(WaitlistError):
    code = WaitlistErrorCode.ALREADY_REGISTERED


class WaitlistFull(WaitlistError):
    code = WaitlistErrorCode.WAITLIST_FULL


class UnauthorizedAdminAction(WaitlistError):
    code = WaitlistErrorCode.UNAUTHORIZED_ADMIN_ACTION


_ERRORS_BY_CODE: dict[WaitlistErrorCode, type[WaitlistError]] = {
    cls.code: cls
    for cls in (
        EmailAlreadyInWaitlist,
        WaitlistEntryNotFound,
        NotApproved,
        InvalidInviteCode,
        InviteCodeRequired,
        AlreadyRegistered,
        WaitlistFull,
        UnauthorizedAdminAction,
    )
}


def error_for(code: WaitlistErrorCode) -> WaitlistError:
    """Build the exception matching an error code."""
    return _ERRORS_BY_CODE[code]()


class RecordConflict(Exception):
    """A store unique constraint was violated outside of a handled case."""

    pass


class DuplicateRecord(RecordConflict):
    """The record store rejected a write that collides on a unique field."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Duplicate value for unique field: {field}")
