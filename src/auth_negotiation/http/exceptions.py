"""
Custom exceptions for the HTTP layer.

These exceptions give the retry engine one failure type to classify:
every unsuccessful attempt surfaces as a WebRequestError carrying a
FailureStatus and, when the server answered, the response itself.
"""

from enum import Enum
from typing import Any, Optional


class AuthNegotiationError(Exception):
    """
    Base exception for all auth-negotiation errors.

    All package-specific exceptions inherit from this to allow catching
    any negotiation-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FailureStatus(str, Enum):
    """Why a transmission attempt failed."""

    PROTOCOL_ERROR = "protocol_error"  # Server answered with a failure status
    SECURE_CHANNEL_FAILURE = "secure_channel_failure"
    CONNECT_FAILURE = "connect_failure"
    NAME_RESOLUTION_FAILURE = "name_resolution_failure"
    PROXY_NAME_RESOLUTION_FAILURE = "proxy_name_resolution_failure"
    TIMEOUT = "timeout"
    UNKNOWN_ERROR = "unknown_error"


class WebRequestError(AuthNegotiationError):
    """
    Raised by a transport when an attempt does not succeed.

    The retry engine re-raises the very same instance on every terminal
    path, so callers always see the original failure.

    Attributes:
        status: FailureStatus classification
        response: Error-carried response (httpx.Response, ClassifiedResponse) or None
        request: WebRequest that failed, if known
    """

    def __init__(
        self,
        message: str,
        status: FailureStatus = FailureStatus.UNKNOWN_ERROR,
        response: Optional[Any] = None,
        request: Optional[Any] = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.response = response
        self.request = request

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.response, "status_code", None)


class TokenIssuerError(AuthNegotiationError):
    """
    Raised when a token issuer endpoint cannot produce a token.

    The STS helper treats this as "no token available".
    """
    pass
