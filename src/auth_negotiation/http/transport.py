"""
httpx-backed transport.

Sends one WebRequest and either returns the successful httpx.Response or
raises WebRequestError. It does not retry; retrying with new
credentials is the RequestHelper's job.

Proxy settings and HTTP version are client-level in httpx, so a
short-lived httpx.Client is built per attempt. The response body is read
before the client is closed, so returned responses stay usable.
"""

import socket
import ssl
from typing import Any, Generator, Optional, Protocol

import httpx
import structlog

from auth_negotiation.config import Settings, settings as default_settings
from auth_negotiation.http.ambient import netrc_credential
from auth_negotiation.http.exceptions import FailureStatus, WebRequestError
from auth_negotiation.http.redirect_credentials import SchemeCredentialCache
from auth_negotiation.http.response import PROXY_AUTHENTICATION_REQUIRED, ClassifiedResponse
from auth_negotiation.models.credentials import (
    DEFAULT_CREDENTIALS,
    DefaultCredentials,
    NetworkCredential,
    ProxyConfig,
)
from auth_negotiation.models.request import WebRequest

logger = structlog.get_logger(__name__)


class Transport(Protocol):
    """Sends a single request attempt."""

    def send(self, request: WebRequest) -> httpx.Response:
        """
        Transmit the request.

        Returns:
            Successful httpx.Response

        Raises:
            WebRequestError: Any failure, with the response attached when the server answered
        """
        ...


class CredentialCacheAuth(httpx.Auth):
    """
    httpx auth flow backed by the attempt's credentials.

    Credentials are looked up by the URL of every request the flow sees,
    so redirected hops get whatever the SchemeCredentialCache offers for
    their URL. Basic is sent preemptively; a Digest challenge is answered
    with httpx.DigestAuth using the same credential.
    """

    def __init__(
        self,
        credentials: Any = None,
        use_default_credentials: bool = False,
        netrc_file: Optional[str] = None,
    ):
        self._credentials = credentials
        self._use_default_credentials = use_default_credentials
        self._netrc_file = netrc_file

    def credential_for(self, url: httpx.URL) -> Optional[NetworkCredential]:
        if isinstance(self._credentials, SchemeCredentialCache):
            credential = self._credentials.get_credential(url, "Basic")
        else:
            credential = self._credentials

        if credential is None and self._use_default_credentials:
            credential = DEFAULT_CREDENTIALS

        if isinstance(credential, DefaultCredentials):
            return netrc_credential(url.host, self._netrc_file)
        return credential

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        credential = self.credential_for(request.url)
        if credential is None:
            yield request
            return

        request = next(credential.as_basic_auth().auth_flow(request))
        response = yield request

        challenge = response.headers.get("WWW-Authenticate", "")
        if response.status_code != 401 or "digest" not in challenge.lower():
            return

        digest_flow = credential.as_digest_auth().auth_flow(request)
        next(digest_flow)
        try:
            retry = digest_flow.send(response)
        except StopIteration:
            return
        yield retry


def _caused_by(exc: BaseException, exc_type: type[BaseException]) -> bool:
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, exc_type):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def is_proxy_auth_rejection(exc: httpx.RequestError) -> bool:
    """True when a proxy refused to open a CONNECT tunnel with a 407."""
    # httpx reports tunnel failures as ProxyError("<status> <reason>") without a response
    return isinstance(exc, httpx.ProxyError) and str(exc).startswith(str(PROXY_AUTHENTICATION_REQUIRED))


def classify_transport_error(exc: httpx.RequestError) -> FailureStatus:
    """Map an httpx exception onto a FailureStatus."""
    if isinstance(exc, httpx.TimeoutException):
        return FailureStatus.TIMEOUT
    if is_proxy_auth_rejection(exc):
        return FailureStatus.PROTOCOL_ERROR
    if isinstance(exc, httpx.ProxyError):
        if _caused_by(exc, socket.gaierror):
            return FailureStatus.PROXY_NAME_RESOLUTION_FAILURE
        return FailureStatus.CONNECT_FAILURE
    if isinstance(exc, httpx.ConnectError):
        if _caused_by(exc, ssl.SSLError) or "SSL" in str(exc) or "CERTIFICATE" in str(exc).upper():
            return FailureStatus.SECURE_CHANNEL_FAILURE
        if _caused_by(exc, socket.gaierror):
            return FailureStatus.NAME_RESOLUTION_FAILURE
        return FailureStatus.CONNECT_FAILURE
    return FailureStatus.UNKNOWN_ERROR


class HttpxTransport:
    """
    Transport implementation using a per-attempt httpx.Client.

    Attributes:
        settings: Timeout, redirect and netrc settings
        transport: Optional httpx transport override (httpx.MockTransport in tests)
        verify: TLS verification passed through to httpx
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
        verify: ssl.SSLContext | bool = True,
    ):
        self.settings = settings or default_settings
        self._transport = transport
        self._verify = verify

    def _build_proxy(self, proxy: Optional[ProxyConfig]) -> Optional[httpx.Proxy]:
        if proxy is None:
            return None

        credential = proxy.credentials
        if isinstance(credential, DefaultCredentials):
            credential = netrc_credential(httpx.URL(proxy.url).host, self.settings.NETRC_FILE)

        if isinstance(credential, NetworkCredential):
            return httpx.Proxy(
                proxy.url,
                auth=(credential.qualified_username, credential.password.get_secret_value()),
            )
        return httpx.Proxy(proxy.url)

    def _build_client(self, request: WebRequest) -> httpx.Client:
        kwargs: dict[str, Any] = {
            "timeout": httpx.Timeout(request.timeout or self.settings.REQUEST_TIMEOUT),
            "follow_redirects": self.settings.FOLLOW_REDIRECTS,
            "max_redirects": self.settings.MAX_REDIRECTS,
            "verify": self._verify,
            # Proxies and ambient credentials are resolved by ProxyCache and netrc_credential
            "trust_env": False,
        }
        if self._transport is not None:
            # An explicit transport carries its own proxy wiring
            kwargs["transport"] = self._transport
        else:
            proxy = self._build_proxy(request.proxy)
            if proxy is not None and not self._bypassed(request):
                kwargs["proxy"] = proxy
        return httpx.Client(**kwargs)

    @staticmethod
    def _bypassed(request: WebRequest) -> bool:
        if request.proxy is None:
            return True
        return request.url.host in request.proxy.bypass_list

    def send(self, request: WebRequest) -> httpx.Response:
        headers = httpx.Headers(request.headers)
        # httpx only speaks HTTP/1.1; a down-level request is sent with Connection: close
        headers["Connection"] = "keep-alive" if request.keep_alive else "close"

        auth = CredentialCacheAuth(
            credentials=request.credentials,
            use_default_credentials=request.use_default_credentials,
            netrc_file=self.settings.NETRC_FILE,
        )

        logger.debug(
            "Sending request",
            method=request.method,
            url=str(request.url),
            proxy=request.proxy.address if request.proxy else None,
            keep_alive=request.keep_alive,
            http_version=request.http_version,
        )

        try:
            with self._build_client(request) as client:
                httpx_request = client.build_request(
                    request.method,
                    request.url,
                    headers=headers,
                    content=request.content,
                )
                response = client.send(httpx_request, auth=auth)
        except httpx.RequestError as e:
            if is_proxy_auth_rejection(e):
                logger.info("Proxy rejected tunnel", url=str(request.url), error=str(e))
                raise WebRequestError(
                    str(e),
                    status=FailureStatus.PROTOCOL_ERROR,
                    response=ClassifiedResponse(PROXY_AUTHENTICATION_REQUIRED, request.url),
                    request=request,
                    details={"status_code": PROXY_AUTHENTICATION_REQUIRED},
                ) from e

            status = classify_transport_error(e)
            logger.info(
                "Request failed without a response",
                url=str(request.url),
                failure_status=status.value,
                error=str(e),
            )
            raise WebRequestError(str(e), status=status, request=request) from e

        if response.is_success or response.is_redirect:
            logger.debug(
                "Request succeeded",
                url=str(request.url),
                status_code=response.status_code,
                response_url=str(response.url),
            )
            return response

        logger.info(
            "Request failed",
            url=str(request.url),
            status_code=response.status_code,
        )
        raise WebRequestError(
            f"The remote server returned an error: ({response.status_code}) {response.reason_phrase}",
            status=FailureStatus.PROTOCOL_ERROR,
            response=response,
            request=request,
            details={"status_code": response.status_code},
        )
