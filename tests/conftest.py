"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock
- In-memory store and user directory
- A factory that wires the domain components with given options
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryRecordStore, InMemoryUserDirectory
from src.domain.admin import WaitlistAdministration
from src.domain.interception import RegistrationGate
from src.domain.options import WaitlistOptions
from src.domain.policy import AdmissionPolicy
from src.domain.repository import WaitlistEntryRepository
from src.domain.waitlist import WaitlistService


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class Waitlist:
    """Domain components wired over an in-memory store."""

    store: InMemoryRecordStore
    users: InMemoryUserDirectory
    notifier: Mock
    clock: FakeClock
    repository: WaitlistEntryRepository
    policy: AdmissionPolicy
    service: WaitlistService
    gate: RegistrationGate
    admin: WaitlistAdministration
    options: WaitlistOptions = field(default_factory=WaitlistOptions)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_waitlist(clock: FakeClock) -> Callable[..., Waitlist]:
    """Build a fully wired waitlist; keyword arguments become WaitlistOptions."""

    def factory(**option_overrides) -> Waitlist:
        options = WaitlistOptions(**option_overrides)
        store = InMemoryRecordStore()
        users = InMemoryUserDirectory()
        notifier = Mock()
        repository = WaitlistEntryRepository(store)
        policy = AdmissionPolicy(options=options, repository=repository, users=users, clock=clock)
        service = WaitlistService(
            options=options,
            repository=repository,
            policy=policy,
            notifier=notifier,
            clock=clock,
        )
        return Waitlist(
            store=store,
            users=users,
            notifier=notifier,
            clock=clock,
            repository=repository,
            policy=policy,
            service=service,
            gate=RegistrationGate(options=options, policy=policy, service=service),
            admin=WaitlistAdministration(options=options, repository=repository, service=service),
            options=options,
        )

    return factory


@pytest.fixture
def waitlist(make_waitlist: Callable[..., Waitlist]) -> Waitlist:
    """Waitlist with default options."""
    return make_waitlist()
