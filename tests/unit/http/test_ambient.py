"""
Unit tests for ambient (netrc) credentials.
"""

from auth_negotiation.http.ambient import netrc_credential


def test_netrc_entry(test_settings, netrc_file):
    credential = netrc_credential("feed.example.com", test_settings.NETRC_FILE)

    assert credential.username == "ambient"
    assert credential.password.get_secret_value() == "ambient-secret"


def test_netrc_missing_host(test_settings, netrc_file):
    assert netrc_credential("unknown.example.com", test_settings.NETRC_FILE) is None


def test_netrc_missing_file(tmp_path):
    assert netrc_credential("feed.example.com", str(tmp_path / "absent")) is None


def test_netrc_entry_without_login(tmp_path):
    path = tmp_path / "netrc"
    path.write_text("machine feed.example.com login\n")

    assert netrc_credential("feed.example.com", str(path)) is None
