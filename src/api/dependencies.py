"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes, and the
one place where Settings become WaitlistOptions.
"""

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.adapters.notify.console import ConsoleWaitlistNotifier
from src.config.settings import Settings, get_settings
from src.domain.admin import Actor, WaitlistAdministration
from src.domain.interception import RegistrationGate
from src.domain.options import (
    DEFAULT_INTERCEPT_PATHS,
    AlwaysApprove,
    AutoApprove,
    AutoApproveDisabled,
    WaitlistOptions,
    approve_domains,
)
from src.domain.policy import AdmissionPolicy
from src.domain.ports import RecordStore, UserDirectory, WaitlistNotifier
from src.domain.repository import WaitlistEntryRepository
from src.domain.waitlist import WaitlistService

# Module-level singleton - ConsoleWaitlistNotifier is stateless
_notifier = ConsoleWaitlistNotifier()


def build_options(settings: Settings) -> WaitlistOptions:
    """Translate environment settings into the domain's options struct."""
    auto_approve: AutoApprove
    if settings.auto_approve:
        auto_approve = AlwaysApprove()
    elif settings.auto_approve_domains:
        auto_approve = approve_domains(*settings.auto_approve_domains)
    else:
        auto_approve = AutoApproveDisabled()

    return WaitlistOptions(
        enabled=settings.waitlist_enabled,
        require_invite_code=settings.require_invite_code,
        invite_code_expiration=settings.invite_code_expiration,
        max_waitlist_size=settings.max_waitlist_size,
        skip_anonymous=settings.skip_anonymous,
        auto_approve=auto_approve,
        intercept_paths=tuple(settings.intercept_paths or DEFAULT_INTERCEPT_PATHS),
        admin_roles=tuple(settings.admin_roles),
    )


@dataclass
class WaitlistComponents:
    """Domain components wired over one store."""

    repository: WaitlistEntryRepository
    policy: AdmissionPolicy
    service: WaitlistService
    gate: RegistrationGate
    admin: WaitlistAdministration


def build_components(
    options: WaitlistOptions,
    store: RecordStore,
    users: UserDirectory,
    notifier: WaitlistNotifier,
) -> WaitlistComponents:
    """Wire the domain components together."""
    repository = WaitlistEntryRepository(store)
    policy = AdmissionPolicy(options=options, repository=repository, users=users)
    service = WaitlistService(
        options=options, repository=repository, policy=policy, notifier=notifier
    )
    return WaitlistComponents(
        repository=repository,
        policy=policy,
        service=service,
        gate=RegistrationGate(options=options, policy=policy, service=service),
        admin=WaitlistAdministration(options=options, repository=repository, service=service),
    )


def get_notifier() -> ConsoleWaitlistNotifier:
    """Get console notifier (singleton)."""
    return _notifier


def get_components(request: Request) -> WaitlistComponents:
    """
    Create domain components from app state.

    The store, user directory and options are created during app
    lifespan startup and stored in app.state.
    """
    state = request.app.state
    return build_components(
        options=state.options,
        store=state.store,
        users=state.users,
        notifier=get_notifier(),
    )


def get_waitlist_service(
    components: WaitlistComponents = Depends(get_components),
) -> WaitlistService:
    return components.service


def get_administration(
    components: WaitlistComponents = Depends(get_components),
) -> WaitlistAdministration:
    return components.admin


def get_registration_gate(
    components: WaitlistComponents = Depends(get_components),
) -> RegistrationGate:
    return components.gate


# Bearer security scheme for OpenAPI documentation. Missing credentials are
# not rejected here; the domain turns a role-less actor into a 403.
http_bearer = HTTPBearer(auto_error=False)


def get_admin_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    settings: Settings = Depends(get_settings),
) -> Actor:
    """
    Resolve the caller of an admin endpoint from its bearer token.

    Returns:
        Actor whose role is the one configured for the token, or None
        when the token is missing or unknown.
    """
    if credentials is None:
        return Actor(subject="anonymous")
    token = credentials.credentials
    return Actor(subject=f"token:{token[:6]}", role=settings.admin_tokens.get(token))
