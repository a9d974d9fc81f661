"""
Console mailer adapter - Implements Mailer protocol.

This module provides a console-based implementation of the domain's
mailer port, logging welcome emails to stdout for development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleMailer:
    """
    Implements Mailer protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development - prints the welcome email instead of sending it.
    """

    def send_welcome(self, email: str, first_name: str | None) -> None:
        """
        Log the welcome email to console (simulates email delivery).

        Logged at INFO level to be visible in docker-compose logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            first_name: Recipient first name, if known
        """
        logger.info("[WELCOME] Email: %s Name: %s", email, first_name or "")
