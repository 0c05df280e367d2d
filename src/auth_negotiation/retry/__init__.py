"""
Authentication retry engine.

RequestHelper keeps sending a request until it succeeds, fails with
something other than an authentication challenge, or the credential
provider stops supplying credentials.

Main Components:
    - RequestHelper: the retry/negotiation loop
    - AttemptHistory: cross-attempt state threaded through the loop
    - set_keep_alive: connection policy for multi-round handshakes

Usage:
    >>> from auth_negotiation.retry import RequestHelper
    >>> helper = RequestHelper(proxy_cache, credential_cache, provider)
    >>> response = helper.get_response(create_request, prepare_request)
"""

from auth_negotiation.retry.engine import (
    KEEP_ALIVE_SCHEMES,
    RequestHelper,
    get_response,
    set_keep_alive,
)
from auth_negotiation.retry.history import AttemptHistory

__all__ = [
    "KEEP_ALIVE_SCHEMES",
    "RequestHelper",
    "get_response",
    "set_keep_alive",
    "AttemptHistory",
]
