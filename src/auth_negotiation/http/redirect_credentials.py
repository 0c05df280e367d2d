"""
Redirect-safe credential wrapping.

When the transport follows a redirect internally it has to decide, per
hop, which credentials to offer. Wrapping the attempt's credentials in a
SchemeCredentialCache registered for the request URL lets every hop look
its credentials up by URL prefix, so a redirect that stays under the same
prefix is answered without an extra 401 round trip.
"""

from typing import Any, Optional

import httpx

AUTHENTICATION_SCHEMES = ("Basic", "Digest", "NTLM", "Negotiate", "Kerberos")


class SchemeCredentialCache:
    """
    Maps (URL prefix, authentication scheme) to credentials.

    Lookup picks the longest registered prefix with the same scheme, host
    and port whose path is a prefix of the requested path.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str, int | None, str, str], Any] = {}

    @staticmethod
    def _key(url: httpx.URL, scheme: str) -> tuple[str, str, int | None, str, str]:
        return (url.scheme, url.host, url.port, url.path, scheme.lower())

    def add(self, url: httpx.URL | str, scheme: str, credentials: Any) -> None:
        self._entries[self._key(httpx.URL(url), scheme)] = credentials

    def get_credential(self, url: httpx.URL | str, scheme: str = "Basic") -> Optional[Any]:
        url = httpx.URL(url)
        best: Optional[Any] = None
        best_length = -1
        for (url_scheme, host, port, path, auth_scheme), credentials in self._entries.items():
            if (url_scheme, host, port, auth_scheme) != (url.scheme, url.host, url.port, scheme.lower()):
                continue
            if url.path.startswith(path) and len(path) > best_length:
                best = credentials
                best_length = len(path)
        return best

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(entries={len(self._entries)})"


def as_credential_cache(credentials: Any, url: httpx.URL | str) -> Optional[Any]:
    """
    Wrap credentials in a SchemeCredentialCache keyed by url.

    Args:
        credentials: NetworkCredential, DEFAULT_CREDENTIALS, an existing cache, or None
        url: URL the credentials were chosen for

    Returns:
        None for None, the same object for an existing cache, a new cache otherwise
    """
    if credentials is None or isinstance(credentials, SchemeCredentialCache):
        return credentials

    cache = SchemeCredentialCache()
    for scheme in AUTHENTICATION_SCHEMES:
        cache.add(url, scheme, credentials)
    return cache


def unwrap_credentials(credentials: Any, url: httpx.URL | str) -> Optional[Any]:
    """Return the plain credentials a cache would offer for url."""
    if isinstance(credentials, SchemeCredentialCache):
        return credentials.get_credential(url, "Basic")
    return credentials
