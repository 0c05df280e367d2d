"""
Process-local caches consulted at the start of every request.

- ProxyCache: default proxy resolution plus proxies that authenticated
- CredentialStore: credentials that authenticated, keyed by URL and root URL
"""

from auth_negotiation.cache.credential_cache import CredentialCacheProtocol, CredentialStore
from auth_negotiation.cache.proxy_cache import ProxyCache, ProxyCacheProtocol

__all__ = [
    "CredentialCacheProtocol",
    "CredentialStore",
    "ProxyCache",
    "ProxyCacheProtocol",
]
