"""
Console notifier adapter - Implements WaitlistNotifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging waitlist events and invite codes to stdout for
demo purposes.
"""

import logging

from src.domain.ports import InviteEmail, WaitlistEntry

logger = logging.getLogger(__name__)


class ConsoleWaitlistNotifier:
    """
    Implements WaitlistNotifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints invite codes to stdout.
    """

    def on_join_waitlist(self, entry: WaitlistEntry) -> None:
        logger.info("[WAITLIST] Joined: %s position=%s", entry.email, entry.position)

    def on_approved(self, entry: WaitlistEntry) -> None:
        logger.info("[WAITLIST] Approved: %s", entry.email)

    def on_rejected(self, entry: WaitlistEntry) -> None:
        logger.info("[WAITLIST] Rejected: %s", entry.email)

    def send_invite_email(self, invite: InviteEmail) -> None:
        """
        Log the invite code to console (simulates email delivery).

        In production, this would be replaced with an SMTP adapter.
        The code is logged at INFO level to be visible in docker-compose logs.

        Args:
            invite: Recipient, invite code and expiration instant
        """
        logger.info(
            "[INVITE] Email: %s Code: %s Expires: %s",
            invite.email,
            invite.invite_code,
            invite.expires_at.isoformat(),
        )
