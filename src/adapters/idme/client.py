"""
ID.me client adapter - Implements IdentityVerifier protocol.

Exchanges an ID.me OAuth access token for the user's group verification
status via the public attributes endpoint:

    GET {base_url}/attributes.json?access_token=...

    {"attributes": [...], "status": [{"group": "military", "verified": true}]}
"""

import logging

import httpx

from src.domain.exceptions import IdentityVerificationError

logger = logging.getLogger(__name__)


class IdMeClient:
    """
    Implements IdentityVerifier protocol via httpx.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: ID.me public API root, e.g. https://api.id.me/api/public/v3
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def verify(self, access_token: str | None) -> bool:
        """
        Return True if ID.me reports any verified group for this token.

        Raises:
            IdentityVerificationError: Missing token or malformed payload
            httpx.HTTPError: Transport failure or non-2xx response
        """
        if not access_token:
            raise IdentityVerificationError("access token is required")

        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.get(
                f"{self.base_url}/attributes.json",
                params={"access_token": access_token},
            )
            response.raise_for_status()
            payload = response.json()

        statuses = payload.get("status") if isinstance(payload, dict) else None
        if not isinstance(statuses, list):
            raise IdentityVerificationError("ID.me response has no status list")

        logger.debug("ID.me returned %d status entries", len(statuses))
        return any(entry.get("verified") is True for entry in statuses if isinstance(entry, dict))
