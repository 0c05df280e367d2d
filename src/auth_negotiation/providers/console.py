"""
Interactive credential prompt.
"""

import getpass
import sys
from typing import Callable, Optional, TextIO

import structlog

from auth_negotiation.models.credentials import CredentialType, Credentials, NetworkCredential
from auth_negotiation.models.request import WebRequest

logger = structlog.get_logger(__name__)


class ConsoleCredentialProvider:
    """
    Prompts for a user name and password on the terminal.

    An empty user name means the user gave up, which ends the retry loop.
    When the session is not interactive, no credentials are supplied.

    Attributes:
        non_interactive: Never prompt
        input_func: Reads the user name
        password_func: Reads the password without echo
        output: Stream the prompts are written to
    """

    def __init__(
        self,
        non_interactive: bool = False,
        input_func: Callable[[str], str] = input,
        password_func: Callable[[str], str] = getpass.getpass,
        output: Optional[TextIO] = None,
    ):
        self.non_interactive = non_interactive
        self.input_func = input_func
        self.password_func = password_func
        self.output = output or sys.stderr

    def _is_interactive(self) -> bool:
        if self.non_interactive:
            return False
        stdin = sys.stdin
        return stdin is not None and stdin.isatty()

    def get_credentials(
        self,
        request: WebRequest,
        credential_type: CredentialType,
        retrying: bool,
    ) -> Optional[Credentials]:
        if not self._is_interactive():
            logger.info(
                "Credentials required but session is non-interactive",
                url=str(request.url),
                credential_type=credential_type.value,
            )
            return None

        if retrying:
            self.output.write("The credentials you entered were rejected.\n")

        if credential_type == CredentialType.PROXY_CREDENTIALS:
            target = request.proxy.address if request.proxy else str(request.url)
            self.output.write(f"Please provide proxy credentials for {target}:\n")
        else:
            self.output.write(f"Please provide credentials for {request.url}:\n")
        self.output.flush()

        username = self.input_func("UserName: ").strip()
        if not username:
            return None
        password = self.password_func("Password: ")

        return NetworkCredential(username=username, password=password)
