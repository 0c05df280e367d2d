"""
Unit tests for credential and request models.
"""

import httpx
import pytest
from pydantic import ValidationError

from auth_negotiation.models.credentials import (
    DEFAULT_CREDENTIALS,
    CredentialType,
    DefaultCredentials,
    NetworkCredential,
    ProxyConfig,
)
from auth_negotiation.models.request import WebRequest


def test_network_credential_hides_password():
    credential = NetworkCredential(username="alice", password="secret")

    assert "secret" not in repr(credential)
    assert credential.password.get_secret_value() == "secret"


def test_network_credential_requires_username():
    with pytest.raises(ValidationError):
        NetworkCredential(username="", password="x")


def test_network_credential_is_frozen():
    credential = NetworkCredential(username="alice")

    with pytest.raises(ValidationError):
        credential.username = "bob"


def test_qualified_username_with_domain():
    assert NetworkCredential(username="alice").qualified_username == "alice"
    assert NetworkCredential(username="alice", domain="CORP").qualified_username == "CORP\\alice"


def test_as_basic_auth_builds_header():
    auth = NetworkCredential(username="alice", password="secret").as_basic_auth()
    request = httpx.Request("GET", "https://feed.example.com/")

    flowed = next(auth.auth_flow(request))

    assert flowed.headers["Authorization"].startswith("Basic ")


def test_default_credentials_marker():
    assert DEFAULT_CREDENTIALS == DefaultCredentials()
    assert repr(DEFAULT_CREDENTIALS) == "DEFAULT_CREDENTIALS"


def test_credential_type_values():
    assert CredentialType.PROXY_CREDENTIALS.value == "proxy"
    assert CredentialType.REQUEST_CREDENTIALS.value == "request"


def test_proxy_config_with_credentials_returns_copy():
    proxy = ProxyConfig(url="http://proxy.example.com:8080")
    credential = NetworkCredential(username="alice")

    updated = proxy.with_credentials(credential)

    assert proxy.credentials is None
    assert updated.credentials == credential
    assert updated.address == proxy.address


def test_proxy_address_is_normalized():
    assert ProxyConfig(url="http://proxy.example.com:8080/").address == ProxyConfig(
        url="http://proxy.example.com:8080"
    ).address


def test_web_request_normalizes_fields():
    request = WebRequest(url="https://feed.example.com/api", method="post", headers={"X-A": "1"})

    assert isinstance(request.url, httpx.URL)
    assert request.method == "POST"
    assert isinstance(request.headers, httpx.Headers)
    assert request.headers["x-a"] == "1"
    assert request.keep_alive is True
    assert request.http_version == "HTTP/1.1"
    assert "feed.example.com" in repr(request)
