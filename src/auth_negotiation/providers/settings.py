"""
Configured credentials.

Hands out credentials that were configured up front for a package source
(and the configured proxy credentials), once. A retry means the
configured credentials were rejected, so the call is passed on to the
fallback provider, typically the interactive one.
"""

from typing import Mapping, Optional

import httpx
import structlog

from auth_negotiation.config import Settings, settings as default_settings
from auth_negotiation.models.credentials import CredentialType, Credentials, NetworkCredential
from auth_negotiation.models.request import WebRequest
from auth_negotiation.providers.base import CredentialProvider, NullCredentialProvider

logger = structlog.get_logger(__name__)


class SettingsCredentialProvider:
    """
    Credential provider backed by configured source credentials.

    Attributes:
        source_credentials: Source URL prefix -> credentials
        fallback: Provider consulted on retries and misses
        settings: Source of the configured proxy credentials
    """

    def __init__(
        self,
        source_credentials: Optional[Mapping[str, NetworkCredential]] = None,
        fallback: Optional[CredentialProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self.source_credentials = {
            str(httpx.URL(url)).rstrip("/"): credentials
            for url, credentials in (source_credentials or {}).items()
        }
        self.fallback = fallback or NullCredentialProvider()
        self.settings = settings or default_settings

    def _lookup_source(self, url: httpx.URL) -> Optional[NetworkCredential]:
        target = str(url)
        matches = [
            prefix for prefix in self.source_credentials
            if target == prefix or target.startswith(prefix + "/")
        ]
        if not matches:
            return None
        return self.source_credentials[max(matches, key=len)]

    def _lookup_proxy(self) -> Optional[NetworkCredential]:
        if not self.settings.HTTP_PROXY_USER:
            return None
        return NetworkCredential(
            username=self.settings.HTTP_PROXY_USER,
            password=self.settings.HTTP_PROXY_PASSWORD or "",
        )

    def get_credentials(
        self,
        request: WebRequest,
        credential_type: CredentialType,
        retrying: bool,
    ) -> Optional[Credentials]:
        if not retrying:
            if credential_type == CredentialType.PROXY_CREDENTIALS:
                credentials = self._lookup_proxy()
            else:
                credentials = self._lookup_source(request.url)

            if credentials is not None:
                logger.debug(
                    "Using configured credentials",
                    url=str(request.url),
                    credential_type=credential_type.value,
                )
                return credentials

        return self.fallback.get_credentials(request, credential_type, retrying)
