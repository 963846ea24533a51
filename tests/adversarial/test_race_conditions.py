"""
Adversarial tests for race condition attack prevention.

Verifies that concurrent operations on the same email are resolved by
the store's unique constraints, preventing attackers from:
- Queuing the same email several times
- Ending up with two entries sharing one invite code
- Corrupting entries through concurrent approvals and rejections
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.api.dependencies import WaitlistComponents
from src.domain.exceptions import EmailAlreadyInWaitlist
from src.domain.ports import WaitlistStatus

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial


def run_concurrently(fn, args: list) -> list:
    """Call fn once per argument on a thread pool; collect results or exceptions."""
    results: list = []
    lock = threading.Lock()
    barrier = threading.Barrier(len(args))

    def worker(arg) -> None:
        barrier.wait()
        try:
            outcome = fn(arg)
        except Exception as e:
            outcome = e
        with lock:
            results.append(outcome)

    with ThreadPoolExecutor(max_workers=len(args)) as executor:
        for future in [executor.submit(worker, a) for a in args]:
            future.result()
    return results


class TestRaceConditionAttacks:
    """
    Adversarial tests simulating race condition attacks.

    These tests fire simultaneous requests for the same email hoping
    to slip past the duplicate check that precedes the insert.
    """

    def test_concurrent_joins_exactly_one_succeeds(self, components: WaitlistComponents) -> None:
        """
        Attack scenario: submit the same email (in varying case) from
        several clients at once.

        Expected defense: the unique email constraint lets exactly one
        insert through; the rest surface as EmailAlreadyInWaitlist.
        """
        num_attackers = 8
        variants = [
            "Attack@Example.com" if i % 2 else " attack@example.com " for i in range(num_attackers)
        ]

        results = run_concurrently(components.service.join, variants)

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1, f"{len(successes)} joins succeeded (expected exactly 1)"
        assert all(isinstance(f, EmailAlreadyInWaitlist) for f in failures)
        assert components.repository.count() == 1

    def test_concurrent_approvals_leave_one_valid_code(
        self, components: WaitlistComponents
    ) -> None:
        """
        Attack scenario: hammer approve for one entry to mint several
        invite codes and hoard them.

        Expected defense: each approval overwrites the code; only the
        last persisted code verifies.
        """
        components.service.join("target@example.com")

        results = run_concurrently(components.service.approve, ["target@example.com"] * 6)

        codes = {r.invite_code for r in results if not isinstance(r, Exception)}
        valid = [c for c in codes if components.service.verify_invite(c).valid]
        assert len(valid) == 1
        final = components.service.get_status("target@example.com")
        assert final.status == WaitlistStatus.APPROVED
        assert final.invite_code == valid[0]

    def test_concurrent_bulk_approvals_do_not_duplicate(
        self, components: WaitlistComponents
    ) -> None:
        """Overlapping bulk approvals approve each listed entry and nothing else."""
        for i in range(5):
            components.service.join(f"user{i}@example.com")
        selected = [f"user{i}@example.com" for i in range(3)]

        run_concurrently(components.service.bulk_approve_by_emails, [selected] * 3)

        assert components.repository.count(WaitlistStatus.APPROVED) == 3
        assert components.repository.count(WaitlistStatus.PENDING) == 2
        approved, _ = components.repository.list_paginated(status=WaitlistStatus.APPROVED)
        assert {e.email for e in approved} == {f"user{i}@example.com" for i in range(3)}
        assert len({e.invite_code for e in approved}) == 3

    def test_registration_wins_over_late_reject(self, components: WaitlistComponents) -> None:
        """A rejection after registration is refused, never applied."""
        components.service.join("user@example.com")
        components.service.approve("user@example.com")
        components.service.mark_registered("user@example.com")

        results = run_concurrently(components.service.reject, ["user@example.com"] * 4)

        assert all(isinstance(r, Exception) for r in results)
        final = components.service.get_status("user@example.com")
        assert final.status == WaitlistStatus.REGISTERED
