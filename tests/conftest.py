"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across the unit tests.
"""

from pathlib import Path

import pytest

from auth_negotiation.config import Settings


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with safe defaults for local testing.

    Points NETRC_FILE at an empty temp location so the developer's own
    ~/.netrc never leaks into tests. Override specific settings in
    individual tests as needed:
        def test_something(test_settings):
            test_settings.HTTP_PROXY = "http://proxy:8080"
    """
    return Settings(
        # === Application ===
        APP_NAME="auth-negotiation-test",
        APP_VERSION="0.1.0",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        CONFIGURE_LOGGING=False,

        # === Proxy ===
        HTTP_PROXY=None,
        HTTP_PROXY_USER=None,
        HTTP_PROXY_PASSWORD=None,

        # === Transport ===
        REQUEST_TIMEOUT=5.0,
        FOLLOW_REDIRECTS=True,
        MAX_REDIRECTS=5,
        USER_AGENT=None,

        # === Ambient credentials ===
        NETRC_FILE=str(tmp_path / "netrc"),

        # === STS ===
        STS_ISSUER_TIMEOUT=5.0,
    )


@pytest.fixture
def netrc_file(test_settings: Settings) -> Path:
    """Write a netrc file with entries for feed.example.com and proxy.example.com."""
    path = Path(test_settings.NETRC_FILE)
    path.write_text(
        "machine feed.example.com login ambient password ambient-secret\n"
        "machine proxy.example.com login proxyuser password proxy-secret\n"
    )
    path.chmod(0o600)
    return path
