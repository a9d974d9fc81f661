"""Mail adapters - Welcome email delivery."""

from .console import ConsoleMailer
from .smtp import SmtpMailer

__all__ = ["ConsoleMailer", "SmtpMailer"]
