"""
STS token helper.

Two entry points are consumed by the RequestHelper:
- prepare_request: attach a cached token to an outgoing request
- try_retrieve_token: inspect a 401 for a token challenge and obtain a token

Tokens are cached per authority (scheme://host:port) for the lifetime of
the helper.
"""

import base64
import threading
from typing import Optional

import httpx
import structlog

from auth_negotiation.http.exceptions import TokenIssuerError
from auth_negotiation.http.response import UNAUTHORIZED, ClassifiedResponse
from auth_negotiation.models.request import WebRequest
from auth_negotiation.sts.issuer import HttpTokenIssuer, TokenIssuer

logger = structlog.get_logger(__name__)

STS_ENDPOINT_HEADER = "X-NuGet-STS-EndPoint"
STS_REALM_HEADER = "X-NuGet-STS-Realm"
STS_TOKEN_HEADER = "X-NuGet-STS-Token"


def get_cache_key(url: httpx.URL | str) -> str:
    url = httpx.URL(url)
    return f"{url.scheme}://{url.netloc.decode('ascii')}"


def encode_token(token: str) -> str:
    return base64.b64encode(token.encode("utf-8")).decode("ascii")


class StsAuthHelper:
    """
    Token cache plus the two STS hooks.

    Attributes:
        issuer: TokenIssuer used when a token challenge is seen
    """

    def __init__(self, issuer: Optional[TokenIssuer] = None):
        self.issuer = issuer or HttpTokenIssuer()
        self._tokens: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_token(self, url: httpx.URL | str) -> Optional[str]:
        with self._lock:
            return self._tokens.get(get_cache_key(url))

    def prepare_request(self, request: WebRequest) -> None:
        """Attach the cached token for the request's authority, if any."""
        token = self.get_token(request.url)
        if token is not None:
            request.headers[STS_TOKEN_HEADER] = encode_token(token)

    def try_retrieve_token(
        self,
        url: httpx.URL | str,
        response: ClassifiedResponse,
        sent_token: Optional[str] = None,
    ) -> bool:
        """
        Obtain a token if the response is a token challenge.

        A 401 to a request that carried a token means that token was
        rejected: it is evicted and no new token is fetched on this round.
        A token cached by an earlier call but not sent on this request is
        simply replaced.

        Args:
            url: Request URL the response answers
            response: Classified failed response
            sent_token: Encoded token header the request carried, if any

        Returns:
            True when a token was obtained and cached
        """
        if response.status_code != UNAUTHORIZED:
            return False

        cache_key = get_cache_key(url)
        if sent_token is not None:
            with self._lock:
                cached = self._tokens.get(cache_key)
                if cached is not None and encode_token(cached) == sent_token:
                    del self._tokens[cache_key]
            logger.info("Token was rejected", authority=cache_key)
            return False

        endpoint = self._get_endpoint(response)
        realm = response.headers.get(STS_REALM_HEADER)
        if endpoint is None or not realm:
            return False

        try:
            token = self.issuer.issue_token(httpx.URL(url), endpoint, realm)
        except TokenIssuerError as e:
            logger.warning(
                "Token issuer failed",
                authority=cache_key,
                endpoint=str(endpoint),
                error=e.message,
            )
            return False

        if not token:
            return False

        with self._lock:
            self._tokens[cache_key] = token

        logger.info("Token acquired", authority=cache_key, endpoint=str(endpoint))
        return True

    @staticmethod
    def _get_endpoint(response: ClassifiedResponse) -> Optional[httpx.URL]:
        value = response.headers.get(STS_ENDPOINT_HEADER)
        if not value:
            return None
        try:
            endpoint = httpx.URL(value)
        except httpx.InvalidURL:
            return None
        if not endpoint.is_absolute_url:
            return None
        return endpoint
