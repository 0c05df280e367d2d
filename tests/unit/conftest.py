"""Unit test fixtures (mocks and stubs).

Provides a scripted transport and mock collaborators so the retry engine
can be exercised without a network.
"""

from typing import Any, Callable
from unittest.mock import MagicMock

import httpx
import pytest

from auth_negotiation.cache.credential_cache import CredentialStore
from auth_negotiation.cache.proxy_cache import ProxyCache
from auth_negotiation.http.exceptions import FailureStatus, WebRequestError
from auth_negotiation.models.request import WebRequest
from auth_negotiation.sts.helper import StsAuthHelper

FEED_URL = "https://feed.example.com/api/v2/packages"


class ScriptedTransport:
    """
    Transport replaying a fixed list of outcomes, one per attempt.

    Each outcome is one of:
    - int: status code answered for the request URL
    - (int, dict): status code and response headers
    - (int, dict, str): status code, headers and final (post-redirect) URL
    - BaseException: raised as-is
    """

    def __init__(self, outcomes: list[Any]):
        self.outcomes = list(outcomes)
        self.requests: list[WebRequest] = []
        self.errors: list[WebRequestError] = []

    def send(self, request: WebRequest) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            if isinstance(outcome, WebRequestError):
                self.errors.append(outcome)
            raise outcome

        if isinstance(outcome, int):
            outcome = (outcome,)
        status_code = outcome[0]
        headers = outcome[1] if len(outcome) > 1 else {}
        final_url = outcome[2] if len(outcome) > 2 else request.url

        response = httpx.Response(
            status_code,
            headers=headers,
            request=httpx.Request(request.method, final_url),
        )
        if response.is_success:
            return response

        error = WebRequestError(
            f"status {status_code}",
            status=FailureStatus.PROTOCOL_ERROR,
            response=response,
            request=request,
        )
        self.errors.append(error)
        raise error


@pytest.fixture
def scripted_transport() -> Callable[[list[Any]], ScriptedTransport]:
    """Factory for ScriptedTransport instances."""
    return ScriptedTransport


@pytest.fixture
def create_request() -> Callable[[], WebRequest]:
    """Request factory for the feed URL."""
    def factory() -> WebRequest:
        return WebRequest(url=FEED_URL)
    return factory


@pytest.fixture
def mock_proxy_cache() -> MagicMock:
    """ProxyCache mock resolving no proxy."""
    mock = MagicMock(spec=ProxyCache)
    mock.get_proxy.return_value = None
    return mock


@pytest.fixture
def mock_credential_cache() -> MagicMock:
    """CredentialStore mock with nothing cached."""
    mock = MagicMock(spec=CredentialStore)
    mock.get_credentials.return_value = None
    return mock


@pytest.fixture
def mock_provider() -> MagicMock:
    """Credential provider mock; set side_effect per test."""
    mock = MagicMock()
    mock.get_credentials.return_value = None
    return mock


@pytest.fixture
def mock_issuer() -> MagicMock:
    """Token issuer mock handing out a fixed token."""
    mock = MagicMock()
    mock.issue_token.return_value = "sts-token"
    return mock


@pytest.fixture
def sts_helper(mock_issuer: MagicMock) -> StsAuthHelper:
    return StsAuthHelper(issuer=mock_issuer)
