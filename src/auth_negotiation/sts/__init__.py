"""
Token-based ("STS") authentication.

A server that prefers token authentication answers 401 with two headers
naming a token issuer endpoint and a realm. The helper obtains a token
from the issuer and attaches it to later requests for the same host, in
place of interactive credentials.
"""

from auth_negotiation.sts.helper import (
    STS_ENDPOINT_HEADER,
    STS_REALM_HEADER,
    STS_TOKEN_HEADER,
    StsAuthHelper,
)
from auth_negotiation.sts.issuer import HttpTokenIssuer, TokenIssuer

__all__ = [
    "STS_ENDPOINT_HEADER",
    "STS_REALM_HEADER",
    "STS_TOKEN_HEADER",
    "StsAuthHelper",
    "HttpTokenIssuer",
    "TokenIssuer",
]
