"""Raw passthrough requests to the platform.

Platform domains:
- internal API paths (``/i/api/graphql/...``, ``/i/api/1.1/...``) are only
  served by the web origin ``https://x.com``;
- REST paths (``/1.1/...``, ``/2/...``) are only served by ``https://api.x.com``.
Sending a path to the wrong origin returns an opaque 404.
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode, urlsplit

import httpx

from twitter_proxy.core.envelope import Envelope
from twitter_proxy.errors.normalizer import simplify_url
from twitter_proxy.exceptions import MissingCsrfTokenError, RemoteCallError, RemoteResponse
from twitter_proxy.platform.session import CONTENT_TYPE_HEADER, TRANSACTION_ID_HEADER, merge_headers
from twitter_proxy.platform.transaction_id import TransactionIdGenerator, generate_transaction_id

logger = logging.getLogger(__name__)

WEB_ORIGIN = "https://x.com"
API_ORIGIN = "https://api.x.com"
INTERNAL_API_PREFIX = "/i/api/"


def select_origin(endpoint_path: str) -> str:
    return WEB_ORIGIN if endpoint_path.startswith(INTERNAL_API_PREFIX) else API_ORIGIN


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def build_url(endpoint_path: str, query_params: Optional[Dict[str, Any]] = None) -> str:
    """Join the origin for the path with the path and non-null query parameters."""
    url = f"{select_origin(endpoint_path)}{endpoint_path}"
    params = [(key, _query_value(value)) for key, value in (query_params or {}).items() if value is not None]
    if params:
        url += f"?{urlencode(params)}"
    return url


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError):
        return ""


async def execute_raw_request(
    envelope: Envelope,
    http_client: httpx.AsyncClient,
    generate_tx_id: TransactionIdGenerator = generate_transaction_id,
) -> Any:
    """Send the envelope's raw request and return the parsed JSON body.

    Raises:
        MissingCsrfTokenError: If the envelope has no CSRF token.
        RemoteCallError: If the platform answers with a non-success status.
    """
    if not envelope.csrf_token:
        raise MissingCsrfTokenError()
    endpoint_path = envelope.endpoint_path or ""

    headers = merge_headers(
        envelope.header_seed, envelope.extra_headers, envelope.auth_token or "", envelope.csrf_token
    )
    url = build_url(endpoint_path, envelope.query_params)
    method = envelope.http_method.upper()

    seed = envelope.transaction_seed
    if seed is not None and seed.is_complete:
        tx_id = generate_tx_id(method, urlsplit(url).path, seed.verification, seed.animation_key)
        if tx_id:
            headers[TRANSACTION_ID_HEADER] = tx_id

    content = None
    body = envelope.request_body
    if body is not None and body != "":
        content = body if isinstance(body, str) else json.dumps(body)
        headers[CONTENT_TYPE_HEADER] = "application/json"

    logger.info(f"Sending raw {method} request to {select_origin(endpoint_path)}{endpoint_path}")
    response = await http_client.request(method, url, headers=headers, content=content)

    if not response.is_success:
        logger.warning(f"Raw request to {endpoint_path} failed with HTTP {response.status_code}")
        raise RemoteCallError(
            f"HTTP {response.status_code}: {response.reason_phrase}",
            RemoteResponse(
                status=response.status_code,
                status_text=response.reason_phrase,
                url=simplify_url(str(response.url)),
                body=_response_text(response),
            ),
        )
    return response.json()
