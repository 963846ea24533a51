"""
Waitlist administration - role-gated transitions and queries.

Authorization is checked before any repository access.
"""

import math
from dataclasses import dataclass

from .exceptions import UnauthorizedAdminAction
from .options import WaitlistOptions
from .ports import SortDirection, SortField, WaitlistEntry, WaitlistStatus
from .repository import WaitlistEntryRepository
from .waitlist import BulkApproveResult, WaitlistService

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Actor:
    """The caller of an administrative operation."""

    subject: str
    role: str | None = None


@dataclass(frozen=True)
class WaitlistPage:
    entries: list[WaitlistEntry]
    total: int
    page: int
    total_pages: int


@dataclass(frozen=True)
class WaitlistStats:
    total: int
    pending: int
    approved: int
    rejected: int
    registered: int


@dataclass
class WaitlistAdministration:
    """Administrative surface over the waitlist."""

    options: WaitlistOptions
    repository: WaitlistEntryRepository
    service: WaitlistService

    def authorize(self, actor: Actor | None) -> None:
        """
        Raises:
            UnauthorizedAdminAction: If the actor holds no admin role
        """
        if actor is None or not actor.role or actor.role not in self.options.admin_roles:
            raise UnauthorizedAdminAction(actor.subject if actor else None)

    def approve(self, actor: Actor, email: str) -> WaitlistEntry:
        self.authorize(actor)
        return self.service.approve(email)

    def reject(self, actor: Actor, email: str, reason: str | None = None) -> WaitlistEntry:
        self.authorize(actor)
        return self.service.reject(email, reason)

    def bulk_approve(
        self,
        actor: Actor,
        emails: list[str] | None = None,
        count: int | None = None,
    ) -> BulkApproveResult:
        """
        Approve by explicit email list, or the ``count`` oldest pending entries.

        The email list wins when both are given; neither yields an empty result.
        """
        self.authorize(actor)
        if emails:
            return self.service.bulk_approve_by_emails(emails)
        if count:
            return self.service.bulk_approve_by_count(count)
        return BulkApproveResult(approved=0, entries=[])

    def list_entries(
        self,
        actor: Actor,
        status: WaitlistStatus | None = None,
        page: int = 1,
        limit: int = 20,
        sort_by: SortField = SortField.CREATED_AT,
        direction: SortDirection = SortDirection.DESC,
    ) -> WaitlistPage:
        self.authorize(actor)
        if page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        entries, total = self.repository.list_paginated(
            status=status, sort_by=sort_by, direction=direction, page=page, limit=limit
        )
        return WaitlistPage(
            entries=entries,
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    def stats(self, actor: Actor) -> WaitlistStats:
        self.authorize(actor)
        return WaitlistStats(
            total=self.repository.count(),
            pending=self.repository.count(WaitlistStatus.PENDING),
            approved=self.repository.count(WaitlistStatus.APPROVED),
            rejected=self.repository.count(WaitlistStatus.REJECTED),
            registered=self.repository.count(WaitlistStatus.REGISTERED),
        )
