"""
Credential and proxy value models.

Credentials are immutable: a retry never edits the credential that was
rejected, it asks the provider for a new one. Passwords are kept as
SecretStr so they never show up in logs or reprs.
"""

from enum import Enum
from typing import Literal, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr


class CredentialType(str, Enum):
    """Kind of credentials requested from a CredentialProvider."""

    PROXY_CREDENTIALS = "proxy"
    REQUEST_CREDENTIALS = "request"


class NetworkCredential(BaseModel):
    """
    User name / password pair, optionally scoped to a Windows-style domain.
    """
    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1)
    password: SecretStr = Field(default=SecretStr(""))
    domain: Optional[str] = Field(default=None, description="Authentication domain (NTLM)")

    @property
    def qualified_username(self) -> str:
        """User name prefixed with the domain when one is set."""
        if self.domain:
            return f"{self.domain}\\{self.username}"
        return self.username

    def as_basic_auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.qualified_username, self.password.get_secret_value())

    def as_digest_auth(self) -> httpx.DigestAuth:
        return httpx.DigestAuth(self.qualified_username, self.password.get_secret_value())


class DefaultCredentials(BaseModel):
    """
    Marker for the platform's ambient credentials.

    The ambient credential store is the user's netrc file; the transport
    resolves it per host at send time.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["default"] = "default"

    def __repr__(self) -> str:
        return "DEFAULT_CREDENTIALS"


DEFAULT_CREDENTIALS = DefaultCredentials()

Credentials = Union[NetworkCredential, DefaultCredentials]


class ProxyConfig(BaseModel):
    """
    A resolved forward proxy.

    Proxies are cached by address, so two configs with the same url are
    the same proxy even if their credentials differ.
    """
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Proxy address, e.g. http://proxy.corp:8080")
    credentials: Optional[Credentials] = Field(default=None)
    bypass_list: tuple[str, ...] = Field(default=(), description="Hosts reached without the proxy")

    @property
    def address(self) -> str:
        """Normalized proxy address used as the cache key."""
        return str(httpx.URL(self.url)).rstrip("/")

    def with_credentials(self, credentials: Optional[Credentials]) -> "ProxyConfig":
        return self.model_copy(update={"credentials": credentials})
