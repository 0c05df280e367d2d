"""
Response classification.

A failed attempt may carry its response in different shapes: a raw
httpx.Response attached by the transport, an already-classified response
(test doubles and custom transports), or nothing at all. classify_response
folds them into one read-only ClassifiedResponse that the retry engine
reads for exactly one iteration and then closes.
"""

from typing import Any, Optional

import httpx

UNAUTHORIZED = 401
PROXY_AUTHENTICATION_REQUIRED = 407


class ClassifiedResponse:
    """
    Transport-agnostic view over a failed attempt's response.

    Attributes:
        status_code: HTTP status code
        response_url: Final URL (after any redirects the transport followed)
        authentication_type: Raw WWW-Authenticate header value, or None
        headers: Full response headers
    """

    def __init__(
        self,
        status_code: int,
        response_url: httpx.URL | str,
        headers: httpx.Headers | dict | None = None,
        response: Optional[httpx.Response] = None,
    ):
        self._status_code = status_code
        self._response_url = httpx.URL(response_url)
        self._headers = httpx.Headers(headers or {})
        self._response = response
        self._closed = False

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "ClassifiedResponse":
        return cls(
            status_code=response.status_code,
            response_url=response.url,
            headers=response.headers,
            response=response,
        )

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def response_url(self) -> httpx.URL:
        return self._response_url

    @property
    def authentication_type(self) -> Optional[str]:
        return self._headers.get("WWW-Authenticate")

    @property
    def headers(self) -> httpx.Headers:
        return self._headers

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the underlying response. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._response is not None:
            self._response.close()

    def __enter__(self) -> "ClassifiedResponse":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"status_code={self._status_code}, "
            f"response_url={self._response_url})"
        )


def classify_response(raw: Any) -> Optional[ClassifiedResponse]:
    """
    Normalize an error-carried response into a ClassifiedResponse.

    Args:
        raw: Whatever the failure carried as its response

    Returns:
        ClassifiedResponse, or None when there is no usable response
    """
    if isinstance(raw, ClassifiedResponse):
        return raw
    if isinstance(raw, httpx.Response):
        return ClassifiedResponse.from_httpx(raw)
    return None


def is_authentication_response(response: ClassifiedResponse) -> bool:
    """True for 401 Unauthorized and 407 Proxy Authentication Required."""
    return response.status_code in (UNAUTHORIZED, PROXY_AUTHENTICATION_REQUIRED)
