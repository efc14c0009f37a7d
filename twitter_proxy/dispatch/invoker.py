import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi.encoders import jsonable_encoder

from twitter_proxy.dispatch.registry import get_packaged_method, to_keyword_arguments
from twitter_proxy.errors.empty_result import EmptyResultPolicy
from twitter_proxy.errors.normalizer import response_metadata, simplify_url
from twitter_proxy.exceptions import RemoteCallError, RemoteResponse
from twitter_proxy.platform.capture import ResponseCapture
from twitter_proxy.platform.client_factory import PlatformClient

logger = logging.getLogger(__name__)

PARSE_ERROR_STATUS_TEXT = "API Response Parse Error"


def read_response_body(source: Any) -> str:
    """Best-effort text form of a response body.

    JSON bodies are re-serialized, anything else falls back to raw text, and a
    body that cannot be read at all yields an empty string.
    """
    if source is None:
        return ""
    if isinstance(source, httpx.Response):
        try:
            return json.dumps(source.json())
        except ValueError:
            try:
                return source.text
            except (httpx.ResponseNotRead, UnicodeDecodeError):
                return ""
        except httpx.ResponseNotRead:
            return ""
    if isinstance(source, bytes):
        return source.decode("utf-8", errors="replace")
    if isinstance(source, str):
        return source
    return json.dumps(jsonable_encoder(source))


def _library_error_body(error: BaseException, meta: RemoteResponse) -> str:
    data = getattr(error, "data", None)
    if data is not None:
        return json.dumps(jsonable_encoder(data))
    errors = getattr(error, "errors", None)
    if errors:
        return json.dumps({"errors": jsonable_encoder(errors)})
    return read_response_body(meta.body)


def _parse_failure_error(error: BaseException, capture: Optional[ResponseCapture]) -> RemoteCallError:
    status = None
    body_preview = None
    diagnostics = ""
    if capture is not None and capture.has_response:
        status = capture.status
        body_preview = capture.body_preview
        diagnostics = f" [HTTP {status} {capture.status_text or ''}]"
        if body_preview:
            diagnostics += f" body: {body_preview[:200]}"
    return RemoteCallError(
        f"API response parse failure{diagnostics}[{error}]",
        RemoteResponse(
            status=status or 500,
            status_text=PARSE_ERROR_STATUS_TEXT,
            url=simplify_url(capture.url) if capture is not None else None,
            body=body_preview,
        ),
    )


async def invoke_packaged_method(
    platform_client: PlatformClient,
    method_name: str,
    params: Optional[Dict[str, Any]],
    empty_result_policy: EmptyResultPolicy,
) -> Any:
    """Call a registered packaged method and return its JSON-ready result.

    Raises:
        UnsupportedMethodError: If the method name is not registered.
        RemoteCallError: If the call failed with response metadata attached, or
            the client's decoder crashed on a response that is not empty.
        Exception: Any failure without response metadata, unchanged.
    """
    operation = get_packaged_method(method_name).resolve(platform_client.client)
    kwargs = to_keyword_arguments(params)

    try:
        result = await asyncio.to_thread(operation, **kwargs)
    except Exception as error:
        capture = platform_client.capture
        if empty_result_policy.matches_crash(error):
            if empty_result_policy.is_empty_result(error, capture):
                return None
            logger.warning(f"Client decode failure in {method_name}: {error}")
            raise _parse_failure_error(error, capture) from error

        meta = response_metadata(error)
        if meta is None:
            raise

        status_text = meta.status_text or "Unknown"
        logger.warning(f"{method_name} failed with HTTP {meta.status}: {status_text}")
        raise RemoteCallError(
            f"HTTP {meta.status}: {status_text}",
            RemoteResponse(
                status=meta.status,
                status_text=meta.status_text,
                url=simplify_url(meta.url),
                body=_library_error_body(error, meta),
            ),
        ) from error

    return jsonable_encoder(result)
