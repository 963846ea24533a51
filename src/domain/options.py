"""
Waitlist options - the configuration struct shared by every component.

Options are built once (see src.api.dependencies) and passed into each
component constructor. Nothing in the domain reads configuration from
the environment.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Union

DEFAULT_INVITE_CODE_EXPIRATION = 172800  # 48 hours

DEFAULT_INTERCEPT_PATHS: tuple[str, ...] = (
    "/sign-up/email",
    "/callback/",
    "/oauth2/callback/",
    "/magic-link/verify",
    "/sign-in/email-otp",
    "/email-otp/verify-email",
    "/phone-number/verify",
    "/sign-in/anonymous",
    "/one-tap/callback",
    "/siwe/verify",
)


@dataclass(frozen=True)
class AutoApproveDisabled:
    """New entries always start pending."""


@dataclass(frozen=True)
class AlwaysApprove:
    """Every new entry is approved on join."""


@dataclass(frozen=True)
class PredicateApprove:
    """
    New entries are approved when the predicate returns a truthy value.

    The predicate may be a coroutine function; its result is awaited.
    """

    predicate: Callable[[str], bool | Awaitable[bool]]


AutoApprove = Union[AutoApproveDisabled, AlwaysApprove, PredicateApprove]


def approve_domains(*domains: str) -> PredicateApprove:
    """
    Build an auto-approve rule matching email domains.

    Args:
        domains: Domains such as "vip.com" (a leading "@" is optional)
    """
    suffixes = tuple("@" + d.strip().lower().lstrip("@") for d in domains)
    return PredicateApprove(lambda email: email.endswith(suffixes))


@dataclass(frozen=True)
class WaitlistOptions:
    """Waitlist behaviour switches."""

    enabled: bool = True
    require_invite_code: bool = False
    invite_code_expiration: int = DEFAULT_INVITE_CODE_EXPIRATION  # seconds
    max_waitlist_size: int | None = None  # None or 0 = unlimited
    skip_anonymous: bool = False
    auto_approve: AutoApprove = field(default_factory=AutoApproveDisabled)
    intercept_paths: tuple[str, ...] = DEFAULT_INTERCEPT_PATHS
    admin_roles: tuple[str, ...] = ("admin",)
