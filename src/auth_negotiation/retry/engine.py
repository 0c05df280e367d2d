"""
Authentication retry engine.

RequestHelper sends a request, and whenever the proxy (407) or the server
(401) rejects it, asks for better credentials and sends it again. It stops
when the request succeeds, fails for a reason that credentials cannot fix,
or the credential provider declines to supply more credentials.

Per attempt:
    1. Build a fresh request and resolve its proxy
    2. Pick credentials from the attempt history (cache, provider prompt, or none)
    3. Apply keep-alive policy and, in token mode, attach the STS token
    4. Run the caller's preparation callback (last, it may write the body)
    5. Wrap credentials so internal redirects re-offer them
    6. Send; on success populate the caches and return
    7. On failure classify the response and decide: retry or re-raise

The engine has no attempt limit. The credential provider bounds the loop
by returning None.

Usage:
    helper = RequestHelper(proxy_cache, credential_cache, credential_provider)
    response = helper.get_response(create_request, prepare_request)
"""

from contextlib import nullcontext
from typing import Callable, Optional

import httpx
import structlog

from auth_negotiation.cache.credential_cache import CredentialCacheProtocol
from auth_negotiation.cache.proxy_cache import ProxyCacheProtocol
from auth_negotiation.http.exceptions import FailureStatus, WebRequestError
from auth_negotiation.http.redirect_credentials import as_credential_cache, unwrap_credentials
from auth_negotiation.http.response import (
    UNAUTHORIZED,
    ClassifiedResponse,
    classify_response,
    is_authentication_response,
)
from auth_negotiation.http.transport import HttpxTransport, Transport
from auth_negotiation.models.credentials import DEFAULT_CREDENTIALS, CredentialType
from auth_negotiation.models.request import WebRequest
from auth_negotiation.providers.base import CredentialProvider
from auth_negotiation.retry.history import AttemptHistory
from auth_negotiation.sts.helper import STS_TOKEN_HEADER, StsAuthHelper

logger = structlog.get_logger(__name__)

# Schemes whose handshake spans several round trips on one connection
KEEP_ALIVE_SCHEMES = ("NTLM", "Kerberos")


def set_keep_alive(request: WebRequest, previous_response: Optional[ClassifiedResponse]) -> None:
    """
    Keep the connection alive only for connection-oriented schemes.

    Without a previous challenge naming NTLM or Kerberos the request goes
    out down-level (HTTP/1.0, no keep-alive), which avoids connections
    being dropped mid-handshake.
    """
    authentication_type = previous_response.authentication_type if previous_response else None
    if authentication_type is not None and authentication_type.lower() in (
        scheme.lower() for scheme in KEEP_ALIVE_SCHEMES
    ):
        request.keep_alive = True
        return

    request.keep_alive = False
    request.http_version = "HTTP/1.0"


class RequestHelper:
    """
    Retry/negotiation loop for a single logical request.

    Attributes:
        proxy_cache: Resolves proxies and remembers ones that authenticated
        credential_cache: Remembers credentials that authenticated
        credential_provider: Supplies credentials after a 401/407
        transport: Sends one attempt
        sts_helper: Token authentication hooks
    """

    def __init__(
        self,
        proxy_cache: ProxyCacheProtocol,
        credential_cache: CredentialCacheProtocol,
        credential_provider: CredentialProvider,
        transport: Optional[Transport] = None,
        sts_helper: Optional[StsAuthHelper] = None,
    ):
        self.proxy_cache = proxy_cache
        self.credential_cache = credential_cache
        self.credential_provider = credential_provider
        self.transport = transport or HttpxTransport()
        self.sts_helper = sts_helper or StsAuthHelper()

    def get_response(
        self,
        create_request: Callable[[], WebRequest],
        prepare_request: Optional[Callable[[WebRequest], None]] = None,
    ) -> httpx.Response:
        """
        Send the request, negotiating authentication until it succeeds.

        Args:
            create_request: Builds a fresh WebRequest for every attempt
            prepare_request: Finalizes the attempt (e.g. writes the body), called
                exactly once per attempt right before it is sent

        Returns:
            The successful httpx.Response

        Raises:
            WebRequestError: The original failure of the last attempt, when it is
                not an authentication challenge or no further credentials are available.
                When the credential provider declines, the request is still sent once
                more and the failure raised is the one from that final attempt, not
                the challenge that triggered the prompt.
        """
        history = AttemptHistory()

        while True:
            request = create_request()
            self._assign_proxy(request)
            self._assign_credentials(request, history)

            try:
                credentials = request.credentials

                set_keep_alive(request, history.previous_response)

                if history.using_sts_auth:
                    self.sts_helper.prepare_request(request)

                # Last step before sending: the callback may write the request body
                if prepare_request is not None:
                    prepare_request(request)

                request.credentials = as_credential_cache(request.credentials, request.url)

                history.attempts += 1
                logger.debug(
                    "Sending attempt",
                    url=str(request.url),
                    attempt=history.attempts,
                    previous_status=history.previous_status,
                    using_sts_auth=history.using_sts_auth,
                )
                response = self.transport.send(request)

                if request.proxy is not None:
                    self.proxy_cache.add(request.proxy)
                self.credential_cache.add(request.url, credentials)
                self.credential_cache.add(response.url, credentials)

                if history.attempts > 1:
                    logger.info(
                        "Request authenticated",
                        url=str(request.url),
                        attempts=history.attempts,
                        proxy_prompts=history.proxy_retry_count,
                        credential_prompts=history.credentials_retry_count,
                    )
                return response

            except WebRequestError as error:
                if not self._should_retry(request, error, history):
                    logger.info(
                        "Giving up on request",
                        url=str(request.url),
                        attempts=history.attempts,
                        failure_status=error.status.value,
                        status_code=error.status_code,
                    )
                    raise

    def _assign_proxy(self, request: WebRequest) -> None:
        proxy = self.proxy_cache.get_proxy(request.url)
        if proxy is not None and proxy.credentials is None:
            proxy = proxy.with_credentials(DEFAULT_CREDENTIALS)
        request.proxy = proxy

    def _assign_credentials(self, request: WebRequest, history: AttemptHistory) -> None:
        if history.is_first_attempt:
            request.credentials = self.credential_cache.get_credentials(request.url)
            if request.credentials is None:
                request.use_default_credentials = True

        elif history.needs_proxy_credentials:
            if request.proxy is None:
                logger.warning("Proxy authentication required but no proxy is configured", url=str(request.url))
                history.record_proxy_prompt(obtained=False)
                return

            credentials = self.credential_provider.get_credentials(
                request, CredentialType.PROXY_CREDENTIALS, retrying=history.retrying_proxy
            )
            request.proxy = request.proxy.with_credentials(credentials)
            history.record_proxy_prompt(obtained=credentials is not None)

        elif history.needs_request_credentials:
            # In token mode the STS header carries authentication; never prompt
            request.credentials = self.credential_provider.get_credentials(
                request, CredentialType.REQUEST_CREDENTIALS, retrying=history.retrying_credentials
            )
            history.record_credentials_prompt(obtained=request.credentials is not None)

    def _should_retry(self, request: WebRequest, error: WebRequestError, history: AttemptHistory) -> bool:
        """Classify a failed attempt and update history. False means re-raise."""
        response = classify_response(error.response)
        secure_channel_failure = error.status == FailureStatus.SECURE_CHANNEL_FAILURE

        if response is None and not secure_channel_failure:
            return False

        with response if response is not None else nullcontext():
            if secure_channel_failure:
                # The server may want client authentication: prompt as for a 401, once
                if history.continue_if_failed and not history.secure_channel_retried:
                    logger.info("Secure channel failure, retrying with credentials", url=str(request.url))
                    history.treat_as_unauthorized()
                    return True
                return False

            if history.proxy_authenticated(response):
                if request.proxy is not None:
                    self.proxy_cache.add(request.proxy)
            elif history.server_authenticated(response):
                credentials = unwrap_credentials(request.credentials, request.url)
                self.credential_cache.add(request.url, credentials)
                self.credential_cache.add(response.response_url, credentials)

            sent_token = request.headers.get(STS_TOKEN_HEADER)
            if self.sts_helper.try_retrieve_token(request.url, response, sent_token):
                history.using_sts_auth = True
            elif history.using_sts_auth and response.status_code == UNAUTHORIZED:
                # The token was rejected and no new one is available
                history.continue_if_failed = False

            if not is_authentication_response(response) or not history.continue_if_failed:
                return False

            history.record_failure(response)
            logger.info(
                "Authentication required",
                url=str(request.url),
                status_code=response.status_code,
                authentication_type=response.authentication_type,
                attempt=history.attempts,
            )
            return True


def get_response(
    create_request: Callable[[], WebRequest],
    prepare_request: Optional[Callable[[WebRequest], None]],
    proxy_cache: ProxyCacheProtocol,
    credential_cache: CredentialCacheProtocol,
    credential_provider: CredentialProvider,
    transport: Optional[Transport] = None,
    sts_helper: Optional[StsAuthHelper] = None,
) -> httpx.Response:
    """One-shot form of RequestHelper.get_response."""
    helper = RequestHelper(
        proxy_cache,
        credential_cache,
        credential_provider,
        transport=transport,
        sts_helper=sts_helper,
    )
    return helper.get_response(create_request, prepare_request)
