"""
Mutable request attempt.

A WebRequest is created by the caller's factory for every attempt, then
filled in by the retry engine (proxy, credentials, keep-alive policy) and
finally by the caller's preparation callback (body) right before it is
handed to the transport.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from auth_negotiation.models.credentials import ProxyConfig


@dataclass
class WebRequest:
    """
    One transmission attempt.

    Attributes:
        url: Target URL
        method: HTTP method
        headers: Request headers (mutable, case-insensitive)
        content: Request body, usually written by the preparation callback
        proxy: Proxy resolved for this attempt (None = direct)
        credentials: Credentials offered to the server. Holds a
            NetworkCredential, DEFAULT_CREDENTIALS, or the redirect-safe
            SchemeCredentialCache wrapping one of them.
        use_default_credentials: Offer ambient (netrc) credentials
        keep_alive: Keep the connection open across the handshake
        http_version: "HTTP/1.1" or "HTTP/1.0"
        timeout: Per-attempt timeout in seconds (None = transport default)
    """

    url: httpx.URL
    method: str = "GET"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: Optional[bytes] = None
    proxy: Optional[ProxyConfig] = None
    credentials: Optional[Any] = None
    use_default_credentials: bool = False
    keep_alive: bool = True
    http_version: str = "HTTP/1.1"
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        self.url = httpx.URL(self.url)
        self.method = self.method.upper()
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"method={self.method}, "
            f"url={self.url}, "
            f"proxy={self.proxy.address if self.proxy else None})"
        )
