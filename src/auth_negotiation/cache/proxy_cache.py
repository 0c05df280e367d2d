"""
Proxy resolution and cache.

Default proxy settings come from configuration (HTTP_PROXY and its
user/password) or, failing that, from the system proxy environment
(http_proxy, https_proxy, no_proxy). Once a proxy has authenticated
successfully it is cached by address and handed out in place of the raw
default, so later requests start with the working proxy credentials.
"""

import threading
import urllib.request
from typing import Callable, Optional, Protocol

import httpx
import structlog

from auth_negotiation.config import Settings, settings as default_settings
from auth_negotiation.models.credentials import NetworkCredential, ProxyConfig

logger = structlog.get_logger(__name__)


class ProxyCacheProtocol(Protocol):
    """Proxy cache consumed by the RequestHelper."""

    def get_proxy(self, url: httpx.URL | str) -> Optional[ProxyConfig]:
        ...

    def add(self, proxy: Optional[ProxyConfig]) -> None:
        ...


class ProxyCache:
    """
    Resolves the proxy for a URL and remembers proxies that worked.

    Attributes:
        settings: Source of the explicitly configured proxy
        get_system_proxies: Returns the scheme -> proxy URL mapping of the system
        proxy_bypass: Returns True when a host must be reached directly
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        get_system_proxies: Callable[[], dict[str, str]] = urllib.request.getproxies,
        proxy_bypass: Callable[[str], bool] = urllib.request.proxy_bypass,
    ):
        self.settings = settings or default_settings
        self.get_system_proxies = get_system_proxies
        self.proxy_bypass = proxy_bypass
        self._cache: dict[str, ProxyConfig] = {}
        self._lock = threading.Lock()

    def get_configured_proxy(self) -> Optional[ProxyConfig]:
        """Proxy from HTTP_PROXY settings, with its configured credentials."""
        if not self.settings.HTTP_PROXY:
            return None

        credentials = None
        if self.settings.HTTP_PROXY_USER:
            credentials = NetworkCredential(
                username=self.settings.HTTP_PROXY_USER,
                password=self.settings.HTTP_PROXY_PASSWORD or "",
            )
        return ProxyConfig(url=self.settings.HTTP_PROXY, credentials=credentials)

    def get_system_proxy(self, url: httpx.URL | str) -> Optional[ProxyConfig]:
        """Proxy from the environment for url, or None when unset or bypassed."""
        url = httpx.URL(url)
        proxy_url = self.get_system_proxies().get(url.scheme)
        if not proxy_url:
            return None
        if self.proxy_bypass(url.host):
            return None
        return ProxyConfig(url=proxy_url)

    def get_proxy(self, url: httpx.URL | str) -> Optional[ProxyConfig]:
        proxy = self.get_configured_proxy() or self.get_system_proxy(url)
        if proxy is None:
            return None

        with self._lock:
            # A cached proxy means the default credentials were not good enough
            return self._cache.get(proxy.address, proxy)

    def add(self, proxy: Optional[ProxyConfig]) -> None:
        if proxy is None:
            return

        with self._lock:
            self._cache[proxy.address] = proxy

        logger.debug("Cached proxy", proxy=proxy.address)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
