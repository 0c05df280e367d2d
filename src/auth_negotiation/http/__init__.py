"""
HTTP layer: transport, failure classification and redirect-safe credentials.

Components:
- HttpxTransport: sends one WebRequest over httpx
- ClassifiedResponse / classify_response: uniform view over failed responses
- SchemeCredentialCache / as_credential_cache: redirect-safe credentials
- exceptions: WebRequestError and FailureStatus
"""

from auth_negotiation.http.exceptions import (
    AuthNegotiationError,
    FailureStatus,
    TokenIssuerError,
    WebRequestError,
)
from auth_negotiation.http.redirect_credentials import (
    SchemeCredentialCache,
    as_credential_cache,
    unwrap_credentials,
)
from auth_negotiation.http.response import (
    PROXY_AUTHENTICATION_REQUIRED,
    UNAUTHORIZED,
    ClassifiedResponse,
    classify_response,
    is_authentication_response,
)
from auth_negotiation.http.transport import CredentialCacheAuth, HttpxTransport, Transport

__all__ = [
    "AuthNegotiationError",
    "FailureStatus",
    "TokenIssuerError",
    "WebRequestError",
    "SchemeCredentialCache",
    "as_credential_cache",
    "unwrap_credentials",
    "PROXY_AUTHENTICATION_REQUIRED",
    "UNAUTHORIZED",
    "ClassifiedResponse",
    "classify_response",
    "is_authentication_response",
    "CredentialCacheAuth",
    "HttpxTransport",
    "Transport",
]
