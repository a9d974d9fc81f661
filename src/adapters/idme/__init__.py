"""Identity verification adapters."""

from .client import IdMeClient

__all__ = ["IdMeClient"]
