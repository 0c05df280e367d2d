"""
Credential providers.

A provider is asked for credentials every time the server or proxy
rejects an attempt. Returning None tells the RequestHelper to stop
retrying and surface the original failure.

Components:
- CredentialProvider: Protocol consumed by the RequestHelper
- NullCredentialProvider: never supplies credentials
- SettingsCredentialProvider: configured credentials, then a fallback provider
- ConsoleCredentialProvider: interactive terminal prompt
"""

from auth_negotiation.providers.base import CredentialProvider, NullCredentialProvider
from auth_negotiation.providers.console import ConsoleCredentialProvider
from auth_negotiation.providers.settings import SettingsCredentialProvider

__all__ = [
    "CredentialProvider",
    "NullCredentialProvider",
    "ConsoleCredentialProvider",
    "SettingsCredentialProvider",
]
