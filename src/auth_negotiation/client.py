"""
HTTP client facade.

Wires a RequestHelper to process-wide caches and exposes the request
knobs a feed client needs: user agent, compression, extra headers and a
hook that sees every attempt right before it is sent.
"""

import platform
import sys
from typing import Callable, Mapping, Optional

import httpx
import structlog

from auth_negotiation.cache.credential_cache import CredentialCacheProtocol, CredentialStore
from auth_negotiation.cache.proxy_cache import ProxyCache, ProxyCacheProtocol
from auth_negotiation.config import Settings, settings as default_settings
from auth_negotiation.http.transport import HttpxTransport, Transport
from auth_negotiation.logging_config import configure_logging
from auth_negotiation.models.request import WebRequest
from auth_negotiation.providers.base import CredentialProvider, NullCredentialProvider
from auth_negotiation.retry.engine import RequestHelper
from auth_negotiation.sts.helper import StsAuthHelper

logger = structlog.get_logger(__name__)

# Shared across clients for the lifetime of the process
_default_proxy_cache: Optional[ProxyCache] = None
_default_credential_cache: Optional[CredentialStore] = None
_default_sts_helper: Optional[StsAuthHelper] = None


def get_default_proxy_cache() -> ProxyCache:
    global _default_proxy_cache
    if _default_proxy_cache is None:
        _default_proxy_cache = ProxyCache()
    return _default_proxy_cache


def get_default_credential_cache() -> CredentialStore:
    global _default_credential_cache
    if _default_credential_cache is None:
        _default_credential_cache = CredentialStore()
    return _default_credential_cache


def get_default_sts_helper() -> StsAuthHelper:
    global _default_sts_helper
    if _default_sts_helper is None:
        _default_sts_helper = StsAuthHelper()
    return _default_sts_helper


def build_user_agent(settings: Settings) -> str:
    if settings.USER_AGENT:
        return settings.USER_AGENT
    python_version = f"{sys.version_info.major}.{sys.version_info.minor}"
    return f"{settings.APP_NAME}/{settings.APP_VERSION} (Python {python_version}; {platform.system()})"


class HttpClient:
    """
    Authenticating HTTP client for a single URL.

    Attributes:
        url: Target URL
        user_agent: User-Agent header value
        accept_compression: Ask for gzip/deflate encoded responses
        send_request_hooks: Callables invoked with each attempt before it is sent
    """

    def __init__(
        self,
        url: httpx.URL | str,
        settings: Optional[Settings] = None,
        proxy_cache: Optional[ProxyCacheProtocol] = None,
        credential_cache: Optional[CredentialCacheProtocol] = None,
        credential_provider: Optional[CredentialProvider] = None,
        transport: Optional[Transport] = None,
        sts_helper: Optional[StsAuthHelper] = None,
    ):
        self.url = httpx.URL(url)
        self.settings = settings or default_settings
        if self.settings.CONFIGURE_LOGGING:
            configure_logging(self.settings)
        self.user_agent = build_user_agent(self.settings)
        self.accept_compression = True
        self.send_request_hooks: list[Callable[[WebRequest], None]] = []

        self.helper = RequestHelper(
            proxy_cache=proxy_cache or get_default_proxy_cache(),
            credential_cache=credential_cache or get_default_credential_cache(),
            credential_provider=credential_provider or NullCredentialProvider(),
            transport=transport or HttpxTransport(self.settings),
            sts_helper=sts_helper or get_default_sts_helper(),
        )

    def _create_request(
        self,
        method: str,
        headers: Optional[Mapping[str, str]],
    ) -> Callable[[], WebRequest]:
        def create_request() -> WebRequest:
            request = WebRequest(
                url=self.url,
                method=method,
                headers=dict(headers or {}),
                timeout=self.settings.REQUEST_TIMEOUT,
            )
            request.headers["User-Agent"] = self.user_agent
            if self.accept_compression:
                request.headers["Accept-Encoding"] = "gzip, deflate"
            return request

        return create_request

    def _prepare_request(self, content: Optional[bytes]) -> Callable[[WebRequest], None]:
        def prepare_request(request: WebRequest) -> None:
            for hook in self.send_request_hooks:
                hook(request)
            if content is not None:
                request.content = content

        return prepare_request

    def get_response(
        self,
        method: str = "GET",
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """
        Send the request with authentication negotiation.

        Raises:
            WebRequestError: The request failed and could not be authenticated
        """
        logger.debug("Requesting", method=method, url=str(self.url))
        return self.helper.get_response(
            self._create_request(method, headers),
            self._prepare_request(content),
        )

    def download_data(self) -> bytes:
        """GET the URL and return the body."""
        response = self.get_response()
        try:
            return response.content
        finally:
            response.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(url={self.url})"
