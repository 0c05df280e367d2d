"""
Cross-attempt state for one RequestHelper.get_response call.

The retry engine threads a single AttemptHistory through its loop; every
transition it makes is one of the methods below, so the transition table
can be exercised without a transport.
"""

from dataclasses import dataclass
from typing import Optional

from auth_negotiation.http.response import (
    PROXY_AUTHENTICATION_REQUIRED,
    UNAUTHORIZED,
    ClassifiedResponse,
)


@dataclass
class AttemptHistory:
    """
    Attempt history.

    Attributes:
        attempts: Transmissions made so far
        previous_status: Status that governs credential selection for the next attempt
        previous_response: Last classified failed response (already closed)
        proxy_retry_count: Proxy credential prompts so far
        credentials_retry_count: Request credential prompts so far
        continue_if_failed: False once a provider declined; the next auth failure is final
        using_sts_auth: Token authentication is active; no request credential prompts
        secure_channel_retried: A secure-channel failure was already retried
    """

    attempts: int = 0
    previous_status: Optional[int] = None
    previous_response: Optional[ClassifiedResponse] = None
    proxy_retry_count: int = 0
    credentials_retry_count: int = 0
    continue_if_failed: bool = True
    using_sts_auth: bool = False
    secure_channel_retried: bool = False

    @property
    def is_first_attempt(self) -> bool:
        return self.attempts == 0

    @property
    def needs_proxy_credentials(self) -> bool:
        return self.previous_status == PROXY_AUTHENTICATION_REQUIRED

    @property
    def needs_request_credentials(self) -> bool:
        return self.previous_status == UNAUTHORIZED and not self.using_sts_auth

    @property
    def retrying_proxy(self) -> bool:
        return self.proxy_retry_count > 0

    @property
    def retrying_credentials(self) -> bool:
        return self.credentials_retry_count > 0

    def record_proxy_prompt(self, obtained: bool) -> None:
        self.continue_if_failed = obtained
        self.proxy_retry_count += 1

    def record_credentials_prompt(self, obtained: bool) -> None:
        self.continue_if_failed = obtained
        self.credentials_retry_count += 1

    def proxy_authenticated(self, response: ClassifiedResponse) -> bool:
        """The proxy credentials offered last time got us past the proxy."""
        return (
            self.previous_status == PROXY_AUTHENTICATION_REQUIRED
            and response.status_code != PROXY_AUTHENTICATION_REQUIRED
        )

    def server_authenticated(self, response: ClassifiedResponse) -> bool:
        """The request credentials offered last time got past the server's 401."""
        return (
            self.previous_status == UNAUTHORIZED
            and response.status_code != UNAUTHORIZED
        )

    def treat_as_unauthorized(self) -> None:
        """A secure-channel failure is retried as if the server had answered 401."""
        self.previous_status = UNAUTHORIZED
        self.secure_channel_retried = True

    def record_failure(self, response: ClassifiedResponse) -> None:
        self.previous_response = response
        self.previous_status = response.status_code
