"""
Credential provider interface.
"""

from typing import Optional, Protocol

from auth_negotiation.models.credentials import CredentialType, Credentials
from auth_negotiation.models.request import WebRequest


class CredentialProvider(Protocol):
    """
    Supplies credentials for a rejected request.

    The provider owns the retry bound: the RequestHelper keeps asking as
    long as credentials come back.
    """

    def get_credentials(
        self,
        request: WebRequest,
        credential_type: CredentialType,
        retrying: bool,
    ) -> Optional[Credentials]:
        """
        Get credentials for a request or its proxy.

        Args:
            request: The attempt about to be sent
            credential_type: PROXY_CREDENTIALS or REQUEST_CREDENTIALS
            retrying: True when credentials of this type were already offered and rejected

        Returns:
            Credentials, or None to stop retrying
        """
        ...


class NullCredentialProvider:
    """Never supplies credentials: the first 401/407 is final."""

    def get_credentials(
        self,
        request: WebRequest,
        credential_type: CredentialType,
        retrying: bool,
    ) -> Optional[Credentials]:
        return None
