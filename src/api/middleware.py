"""
Waitlist gate middleware - pre-processing admission check for HTTP hosts.

Mount this in the host application in front of its registration routes.
Requests whose path (relative to ``base_path``) matches an intercepted
registration flow are checked before they reach the host's handler.
The check needs the email and invite code from the JSON body, plus
the ``x-invite-code`` header.
"""

import logging
from typing import Any

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.api.dependencies import get_components
from src.api.errors import error_response
from src.domain.exceptions import WaitlistError
from src.domain.policy import RegistrationAttempt

logger = logging.getLogger(__name__)

INVITE_CODE_HEADER = "x-invite-code"


class WaitlistGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, base_path: str = "") -> None:
        super().__init__(app)
        self.base_path = base_path.rstrip("/")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if self.base_path:
            if not path.startswith(self.base_path):
                return await call_next(request)
            path = path[len(self.base_path):] or "/"

        gate = get_components(request).gate
        if not gate.matches(path):
            return await call_next(request)

        body = await self._json_body(request)
        attempt = RegistrationAttempt(
            path=path,
            email=_string(body.get("email")),
            invite_code=_string(body.get("invite_code") or body.get("inviteCode")),
            invite_code_header=request.headers.get(INVITE_CODE_HEADER),
        )
        try:
            await run_in_threadpool(gate.before_request, attempt)
        except WaitlistError as e:
            return error_response(e)
        return await call_next(request)

    async def _json_body(self, request: Request) -> dict[str, Any]:
        if "json" not in request.headers.get("content-type", ""):
            return {}
        try:
            body = await request.json()
        except ValueError:
            logger.debug("Unparseable JSON body on %s", request.url.path)
            return {}
        return body if isinstance(body, dict) else {}


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None
