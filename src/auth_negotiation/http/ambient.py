"""
Ambient (platform default) credentials.

The platform's default credential store is the user's netrc file, the
same source httpx.NetRCAuth reads.
"""

import netrc
import os
from typing import Optional

import structlog

from auth_negotiation.models.credentials import NetworkCredential

logger = structlog.get_logger(__name__)


def default_netrc_path() -> str:
    return os.path.join(os.path.expanduser("~"), ".netrc")


def netrc_credential(host: str, netrc_file: Optional[str] = None) -> Optional[NetworkCredential]:
    """
    Look up ambient credentials for a host.

    Args:
        host: Host name to look up
        netrc_file: netrc path (default ~/.netrc)

    Returns:
        NetworkCredential, or None when there is no netrc file or no entry
    """
    path = netrc_file or default_netrc_path()
    if not os.path.isfile(path):
        return None

    try:
        entry = netrc.netrc(path).authenticators(host)
    except netrc.NetrcParseError as e:
        logger.warning("Ignoring unreadable netrc file", path=path, error=str(e))
        return None

    if entry is None:
        return None

    login, _account, password = entry
    if not login:
        return None
    return NetworkCredential(username=login, password=password or "")
