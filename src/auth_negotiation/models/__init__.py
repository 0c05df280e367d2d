"""
Data models for authentication negotiation.

Models:
- NetworkCredential / DefaultCredentials: credentials offered to servers and proxies
- CredentialType: which kind of credentials a provider is asked for
- ProxyConfig: resolved proxy address plus its credentials
- WebRequest: one mutable transmission attempt
"""

from auth_negotiation.models.credentials import (
    DEFAULT_CREDENTIALS,
    CredentialType,
    Credentials,
    DefaultCredentials,
    NetworkCredential,
    ProxyConfig,
)
from auth_negotiation.models.request import WebRequest

__all__ = [
    "DEFAULT_CREDENTIALS",
    "CredentialType",
    "Credentials",
    "DefaultCredentials",
    "NetworkCredential",
    "ProxyConfig",
    "WebRequest",
]
