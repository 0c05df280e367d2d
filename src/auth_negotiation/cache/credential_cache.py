"""
In-memory credential cache.

Credentials that worked for a URL are stored under the URL itself and
under its root (scheme + authority), so later requests to other paths of
the same feed start out with the right credentials instead of a 401.
Nothing is persisted beyond the process.
"""

import threading
from typing import Any, Optional, Protocol

import httpx
import structlog

logger = structlog.get_logger(__name__)


class CredentialCacheProtocol(Protocol):
    """Credential cache consumed by the RequestHelper."""

    def get_credentials(self, url: httpx.URL | str) -> Optional[Any]:
        ...

    def add(self, url: httpx.URL | str, credentials: Optional[Any]) -> None:
        ...


def get_root_url(url: httpx.URL | str) -> httpx.URL:
    """Scheme and authority of url, e.g. https://host:8443/"""
    url = httpx.URL(url)
    return httpx.URL(f"{url.scheme}://{url.netloc.decode('ascii')}/")


class CredentialStore:
    """
    Thread-safe credential cache.

    The exact URL keeps the first credentials stored for it; the root URL
    always holds the most recent ones.
    """

    def __init__(self) -> None:
        self._credentials: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_credentials(self, url: httpx.URL | str) -> Optional[Any]:
        url = httpx.URL(url)
        with self._lock:
            credentials = self._credentials.get(str(url))
            if credentials is None:
                credentials = self._credentials.get(str(get_root_url(url)))
        return credentials

    def add(self, url: httpx.URL | str, credentials: Optional[Any]) -> None:
        if credentials is None:
            return

        url = httpx.URL(url)
        root_url = get_root_url(url)
        with self._lock:
            self._credentials.setdefault(str(url), credentials)
            self._credentials[str(root_url)] = credentials

        logger.debug("Cached credentials", url=str(url), root_url=str(root_url))

    def clear(self) -> None:
        with self._lock:
            self._credentials.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._credentials)

    def __contains__(self, url: httpx.URL | str) -> bool:
        with self._lock:
            return str(httpx.URL(url)) in self._credentials
