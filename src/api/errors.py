"""
API error mapping - domain error codes to HTTP responses.

The domain raises WaitlistError subclasses that carry only a code.
This module is the single place where codes become status codes.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.domain.exceptions import RecordConflict, WaitlistError, WaitlistErrorCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[WaitlistErrorCode, int] = {
    WaitlistErrorCode.EMAIL_ALREADY_IN_WAITLIST: status.HTTP_400_BAD_REQUEST,
    WaitlistErrorCode.WAITLIST_FULL: status.HTTP_400_BAD_REQUEST,
    WaitlistErrorCode.ALREADY_REGISTERED: status.HTTP_400_BAD_REQUEST,
    WaitlistErrorCode.WAITLIST_ENTRY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    WaitlistErrorCode.NOT_APPROVED: status.HTTP_403_FORBIDDEN,
    WaitlistErrorCode.INVALID_INVITE_CODE: status.HTTP_403_FORBIDDEN,
    WaitlistErrorCode.INVITE_CODE_REQUIRED: status.HTTP_403_FORBIDDEN,
    WaitlistErrorCode.UNAUTHORIZED_ADMIN_ACTION: status.HTTP_403_FORBIDDEN,
}


def error_response(error: WaitlistError) -> JSONResponse:
    """
    Render a domain error.

    The body carries the generic message and code only, never the
    email or invite code the error was raised for.
    """
    return JSONResponse(
        status_code=STATUS_BY_CODE[error.code],
        content={"detail": error.message, "code": error.code.value},
    )


async def waitlist_error_handler(request: Request, exc: WaitlistError) -> JSONResponse:
    return error_response(exc)


async def record_conflict_handler(request: Request, exc: RecordConflict) -> JSONResponse:
    logger.warning("Record conflict on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Conflicting update", "code": "CONFLICT"},
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register domain exception handlers on an application."""
    app.add_exception_handler(WaitlistError, waitlist_error_handler)
    app.add_exception_handler(RecordConflict, record_conflict_handler)
