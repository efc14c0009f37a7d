import logging
import time
from typing import Any, Dict

import fastapi
from fastapi import status
from fastapi.responses import JSONResponse

from twitter_proxy.core.dependency_container import DependencyContainer
from twitter_proxy.core.envelope import parse_envelope
from twitter_proxy.core.logging import log_proxy_outcome
from twitter_proxy.dispatch.dispatcher import Dispatcher
from twitter_proxy.errors.normalizer import normalize_error, response_metadata
from twitter_proxy.exceptions import ClientRequestError, ProxyError

logger = logging.getLogger(__name__)


def failure_response(error: BaseException, target: str) -> JSONResponse:
    """Build the failure envelope for an error raised while handling a call."""
    normalized = normalize_error(error)
    details: Dict[str, Any] = {"message": str(error)}
    meta = response_metadata(error)
    if meta is not None:
        details["status"] = meta.status
        if meta.url:
            details["url"] = meta.url
        details["body"] = normalized.body_snapshot if normalized.body_snapshot is not None else normalized.raw_body

    http_status = normalized.status_code if 400 <= normalized.status_code <= 599 else 500
    return JSONResponse(
        status_code=http_status,
        content={
            "success": False,
            "error": f"[{target}] {normalized.message}",
            "statusCode": normalized.status_code,
            "apiMethod": target,
            "details": details,
        },
    )


def simple_error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def run_proxy_flow(request: fastapi.Request, dependencies: DependencyContainer) -> fastapi.Response:
    """
    Validates the request envelope, dispatches the call and assembles the response.
    Every failure is turned into a JSON failure envelope here; nothing escapes.

    Args:
        request: The incoming FastAPI request.
        dependencies: The application's dependency container.

    Returns:
        The final FastAPI response.
    """
    try:
        payload = await request.json()
    except ValueError:
        return simple_error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON")

    try:
        envelope = parse_envelope(payload)
    except ClientRequestError as e:
        logger.warning(f"Rejected request envelope: {e.detail}")
        return simple_error_response(e.status_code, str(e.detail))

    target = envelope.target
    start_time = time.time()
    try:
        result = await Dispatcher(dependencies).execute(envelope)
    except ProxyError as e:
        log_proxy_outcome(target, "failed", time.time() - start_time, e)
        return failure_response(e, target)
    except Exception as e:
        log_proxy_outcome(target, "error", time.time() - start_time, e)
        return failure_response(e, target)

    log_proxy_outcome(target, "success", time.time() - start_time)
    return JSONResponse(status_code=status.HTTP_200_OK, content={"success": True, "data": result})
