"""
Token issuers.

An issuer turns (resource URL, endpoint, realm) into a token string.
HttpTokenIssuer posts the realm and resource to the endpoint and reads
the token from the JSON reply.
"""

from typing import Optional, Protocol

import httpx
import structlog

from auth_negotiation.config import Settings, settings as default_settings
from auth_negotiation.http.exceptions import TokenIssuerError

logger = structlog.get_logger(__name__)


class TokenIssuer(Protocol):
    """Obtains a token for a resource from an issuer endpoint."""

    def issue_token(self, resource: httpx.URL, endpoint: httpx.URL, realm: str) -> Optional[str]:
        """
        Returns:
            Token string, or None when the issuer declines

        Raises:
            TokenIssuerError: The issuer could not be reached or replied garbage
        """
        ...


class HttpTokenIssuer:
    """
    Token issuer speaking a minimal JSON protocol.

    POST {endpoint} with form fields realm and resource; expects
    {"token": "..."} on success.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.settings = settings or default_settings
        self._transport = transport

    def issue_token(self, resource: httpx.URL, endpoint: httpx.URL, realm: str) -> Optional[str]:
        logger.info("Requesting token", endpoint=str(endpoint), realm=realm)

        try:
            with httpx.Client(
                timeout=httpx.Timeout(self.settings.STS_ISSUER_TIMEOUT),
                transport=self._transport,
            ) as client:
                response = client.post(
                    endpoint,
                    data={"realm": realm, "resource": str(resource)},
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise TokenIssuerError(
                f"Token issuer returned {e.response.status_code}",
                details={"endpoint": str(endpoint), "status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            raise TokenIssuerError(
                f"Token issuer unreachable: {e}",
                details={"endpoint": str(endpoint)},
            ) from e
        except ValueError as e:
            raise TokenIssuerError(
                "Token issuer returned invalid JSON",
                details={"endpoint": str(endpoint)},
            ) from e

        token = payload.get("token") if isinstance(payload, dict) else None
        if not token:
            return None
        return str(token)
