"""
Authentication-negotiating HTTP requests.

Issues an outbound HTTP request and transparently negotiates:
- Proxy authentication (407)
- Server authentication (401: Basic/Digest/NTLM/Kerberos-style)
- Token ("STS") authentication advertised in response headers

Architecture: RequestHelper retry engine + pluggable caches, credential
providers and an httpx-backed transport.
"""

__version__ = "0.1.0"

from auth_negotiation.client import HttpClient
from auth_negotiation.http.exceptions import AuthNegotiationError, FailureStatus, WebRequestError
from auth_negotiation.models.credentials import (
    DEFAULT_CREDENTIALS,
    CredentialType,
    NetworkCredential,
    ProxyConfig,
)
from auth_negotiation.models.request import WebRequest
from auth_negotiation.retry.engine import RequestHelper, get_response

__all__ = [
    "__version__",
    "HttpClient",
    "AuthNegotiationError",
    "FailureStatus",
    "WebRequestError",
    "DEFAULT_CREDENTIALS",
    "CredentialType",
    "NetworkCredential",
    "ProxyConfig",
    "WebRequest",
    "RequestHelper",
    "get_response",
]
