"""
SMTP mailer adapter - Implements Mailer protocol.

Sends plain-text welcome emails through an SMTP relay.
"""

import logging
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to musterroll"

WELCOME_BODY = """Hi {name},

Thanks for joining! Your account is ready. Complete your profile to get
matched with mentors and find others near you.
"""


class SmtpMailer:
    """Implements Mailer protocol via smtplib."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        starttls: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.starttls = starttls

    def send_welcome(self, email: str, first_name: str | None) -> None:
        message = EmailMessage()
        message["Subject"] = WELCOME_SUBJECT
        message["From"] = self.sender
        message["To"] = email
        message.set_content(WELCOME_BODY.format(name=first_name or "there"))

        with smtplib.SMTP(self.host, self.port) as client:
            if self.starttls:
                client.starttls()
            if self.username:
                client.login(self.username, self.password or "")
            client.send_message(message)

        logger.info("Welcome email sent to %s", email)
