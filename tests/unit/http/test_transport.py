"""
Unit tests for HttpxTransport against httpx.MockTransport.
"""

import base64

import httpx
import pytest

from auth_negotiation.http.exceptions import FailureStatus, WebRequestError
from auth_negotiation.http.redirect_credentials import as_credential_cache
from auth_negotiation.http.transport import (
    CredentialCacheAuth,
    HttpxTransport,
    classify_transport_error,
)
from auth_negotiation.models.credentials import NetworkCredential, ProxyConfig, DEFAULT_CREDENTIALS
from auth_negotiation.models.request import WebRequest

FEED_URL = "https://feed.example.com/api/v2/packages"
ALICE = NetworkCredential(username="alice", password="secret")


def basic(username: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


def make_transport(test_settings, handler) -> HttpxTransport:
    return HttpxTransport(test_settings, transport=httpx.MockTransport(handler))


# ============================================================================
# Success and failure responses
# ============================================================================


def test_success_returns_response(test_settings):
    transport = make_transport(test_settings, lambda request: httpx.Response(200, content=b"ok"))

    response = transport.send(WebRequest(url=FEED_URL))

    assert response.status_code == 200
    assert response.content == b"ok"


def test_failure_status_raises_with_response(test_settings):
    transport = make_transport(
        test_settings,
        lambda request: httpx.Response(401, headers={"WWW-Authenticate": "Basic realm=\"feed\""}),
    )
    request = WebRequest(url=FEED_URL)

    with pytest.raises(WebRequestError) as exc_info:
        transport.send(request)

    error = exc_info.value
    assert error.status == FailureStatus.PROTOCOL_ERROR
    assert error.status_code == 401
    assert error.request is request
    assert error.response.headers["WWW-Authenticate"] == "Basic realm=\"feed\""


def test_connection_header_follows_keep_alive(test_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Connection"])
        return httpx.Response(200)

    transport = make_transport(test_settings, handler)
    transport.send(WebRequest(url=FEED_URL, keep_alive=False, http_version="HTTP/1.0"))
    transport.send(WebRequest(url=FEED_URL, keep_alive=True))

    assert seen == ["close", "keep-alive"]


def test_method_headers_and_content_are_sent(test_settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["agent"] = request.headers["User-Agent"]
        seen["body"] = request.content
        return httpx.Response(201)

    transport = make_transport(test_settings, handler)
    transport.send(
        WebRequest(url=FEED_URL, method="put", headers={"User-Agent": "test"}, content=b"pkg")
    )

    assert seen == {"method": "PUT", "agent": "test", "body": b"pkg"}


# ============================================================================
# Credentials
# ============================================================================


def test_wrapped_credentials_sent_as_basic(test_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200)

    transport = make_transport(test_settings, handler)
    transport.send(WebRequest(url=FEED_URL, credentials=as_credential_cache(ALICE, FEED_URL)))

    assert seen == [basic("alice", "secret")]


def test_credentials_reoffered_after_redirect(test_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, request.headers.get("Authorization")))
        if request.url.path == "/api/v2/packages":
            return httpx.Response(302, headers={"Location": "/api/v2/packages/page2"})
        return httpx.Response(200)

    transport = make_transport(test_settings, handler)
    response = transport.send(WebRequest(url=FEED_URL, credentials=as_credential_cache(ALICE, FEED_URL)))

    assert response.url == httpx.URL(FEED_URL + "/page2")
    assert seen == [
        ("/api/v2/packages", basic("alice", "secret")),
        ("/api/v2/packages/page2", basic("alice", "secret")),
    ]


def test_digest_challenge_is_answered(test_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        authorization = request.headers.get("Authorization", "")
        seen.append(authorization.split(" ")[0])
        if authorization.startswith("Digest "):
            return httpx.Response(200)
        return httpx.Response(
            401,
            headers={"WWW-Authenticate": 'Digest realm="feed", nonce="abc", qop="auth"'},
        )

    transport = make_transport(test_settings, handler)
    response = transport.send(WebRequest(url=FEED_URL, credentials=as_credential_cache(ALICE, FEED_URL)))

    assert response.status_code == 200
    assert seen == ["Basic", "Digest"]


def test_default_credentials_come_from_netrc(test_settings, netrc_file):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200)

    transport = make_transport(test_settings, handler)
    transport.send(WebRequest(url=FEED_URL, use_default_credentials=True))

    assert seen == [basic("ambient", "ambient-secret")]


def test_default_credentials_without_netrc_send_nothing(test_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200)

    transport = make_transport(test_settings, handler)
    transport.send(WebRequest(url=FEED_URL, use_default_credentials=True))

    assert seen == [None]


def test_credential_for_resolves_default_marker(test_settings, netrc_file):
    auth = CredentialCacheAuth(
        credentials=as_credential_cache(DEFAULT_CREDENTIALS, FEED_URL),
        netrc_file=test_settings.NETRC_FILE,
    )

    credential = auth.credential_for(httpx.URL(FEED_URL))

    assert credential.username == "ambient"


# ============================================================================
# Proxy wiring
# ============================================================================


def test_build_proxy_with_credentials(test_settings):
    transport = HttpxTransport(test_settings)
    proxy = ProxyConfig(url="http://proxy.example.com:8080", credentials=ALICE)

    built = transport._build_proxy(proxy)

    assert built.url == httpx.URL("http://proxy.example.com:8080")
    assert built.auth == ("alice", "secret")


def test_build_proxy_default_credentials_from_netrc(test_settings, netrc_file):
    transport = HttpxTransport(test_settings)
    proxy = ProxyConfig(url="http://proxy.example.com:8080", credentials=DEFAULT_CREDENTIALS)

    built = transport._build_proxy(proxy)

    assert built.auth == ("proxyuser", "proxy-secret")


def test_build_proxy_default_credentials_without_netrc(test_settings):
    transport = HttpxTransport(test_settings)
    proxy = ProxyConfig(url="http://proxy.example.com:8080", credentials=DEFAULT_CREDENTIALS)

    assert transport._build_proxy(proxy).auth is None
    assert transport._build_proxy(None) is None


# ============================================================================
# Transport error mapping
# ============================================================================


@pytest.mark.parametrize(
    "exc,expected",
    [
        (httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED] certificate verify failed"), FailureStatus.SECURE_CHANNEL_FAILURE),
        (httpx.ConnectError("[Errno 111] Connection refused"), FailureStatus.CONNECT_FAILURE),
        (httpx.ConnectTimeout("timed out"), FailureStatus.TIMEOUT),
        (httpx.ReadTimeout("timed out"), FailureStatus.TIMEOUT),
        (httpx.ProxyError("proxy said no"), FailureStatus.CONNECT_FAILURE),
        (httpx.ProxyError("407 Proxy Authentication Required"), FailureStatus.PROTOCOL_ERROR),
        (httpx.ReadError("reset"), FailureStatus.UNKNOWN_ERROR),
    ],
)
def test_classify_transport_error(exc, expected):
    assert classify_transport_error(exc) == expected


def test_transport_error_raised_without_response(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("[SSL: WRONG_VERSION_NUMBER] wrong version number", request=request)

    transport = make_transport(test_settings, handler)

    with pytest.raises(WebRequestError) as exc_info:
        transport.send(WebRequest(url=FEED_URL))

    assert exc_info.value.status == FailureStatus.SECURE_CHANNEL_FAILURE
    assert exc_info.value.response is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_proxy_tunnel_407_carries_proxy_challenge(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ProxyError("407 Proxy Authentication Required", request=request)

    transport = make_transport(test_settings, handler)
    request = WebRequest(url=FEED_URL, proxy=ProxyConfig(url="http://proxy.example.com:8080"))

    with pytest.raises(WebRequestError) as exc_info:
        transport.send(request)

    error = exc_info.value
    assert error.status == FailureStatus.PROTOCOL_ERROR
    assert error.status_code == 407
    assert error.response.response_url == httpx.URL(FEED_URL)
    assert isinstance(error.__cause__, httpx.ProxyError)
