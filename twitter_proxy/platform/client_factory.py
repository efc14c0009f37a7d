"""Construction of per-request platform clients.

A client is built from the envelope on every packaged-method call: the
caller's header seed becomes the generated ``ApiClient``'s default headers,
the authentication headers are overwritten, the feature flags become the
client's placeholder table and the transaction seed becomes its
``ClientTransaction``. The generated REST transport is wrapped so each raw
response is recorded in a ``ResponseCapture``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from twitter_openapi_python import TwitterOpenapiPythonClient
from twitter_openapi_python_generated import ApiClient, Configuration

from twitter_proxy.core.envelope import Envelope
from twitter_proxy.platform.capture import ResponseCapture
from twitter_proxy.platform.session import TRANSACTION_ID_HEADER, authentication_headers
from twitter_proxy.platform.transaction_id import client_transaction_from_seed

logger = logging.getLogger(__name__)

# Public bearer token of the platform's web client
WEB_BEARER_TOKEN = (
    "AAAAAAAAAAAAAAAAAAAAANRILgAAAAAAnNwIzUejRCOuH5E6I8xnZz4puTs%3D1Zv7ttfk8LF81IUq16cHjhLTvJu4FA33AGWWjCpTnA"
)
BEARER_PREFIX = "Bearer "


@dataclass
class PlatformClient:
    """A configured client library instance and its raw-response capture."""

    client: Any
    capture: ResponseCapture = field(default_factory=ResponseCapture)


def instrument_rest_client(rest_client: Any, capture: ResponseCapture) -> None:
    """Wrap ``rest_client.request`` to drop empty transaction ids and record responses."""
    send = rest_client.request

    def request(method, url, headers=None, body=None, post_params=None, _request_timeout=None):
        headers = dict(headers or {})
        # An unseeded ClientTransaction signs with an empty token
        if not headers.get(TRANSACTION_ID_HEADER):
            headers.pop(TRANSACTION_ID_HEADER, None)
        response = send(
            method,
            url,
            headers=headers,
            body=body,
            post_params=post_params,
            _request_timeout=_request_timeout,
        )
        capture.record(response.status, response.reason, url, response.read())
        return response

    rest_client.request = request


def build_platform_client(envelope: Envelope) -> PlatformClient:
    """Build a platform client configured with the envelope's session material."""
    headers = envelope.header_seed
    authorization = headers.pop("authorization", "")
    access_token = authorization[len(BEARER_PREFIX) :] if authorization.startswith(BEARER_PREFIX) else WEB_BEARER_TOKEN
    user_agent = headers.pop("user-agent", None)

    auth_headers = authentication_headers(envelope.auth_token or "", envelope.csrf_token or "")
    cookie = auth_headers.pop("cookie")
    headers.update(auth_headers)

    api_client = ApiClient(configuration=Configuration(access_token=access_token), cookie=cookie)
    if user_agent:
        api_client.user_agent = user_agent
    for name, value in headers.items():
        api_client.set_default_header(name, value)

    capture = ResponseCapture()
    instrument_rest_client(api_client.rest_client, capture)

    seed = envelope.transaction_seed
    transaction = client_transaction_from_seed(
        seed.verification if seed else None,
        seed.animation_key if seed else None,
    )

    logger.debug(f"Platform client built with {len(headers)} default headers")
    client = TwitterOpenapiPythonClient(api=api_client, placeholder=envelope.feature_flags, ct=transaction)
    return PlatformClient(client=client, capture=capture)
