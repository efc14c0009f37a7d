"""Reduce any failure from either call path to one stable error shape.

Failures arrive in several forms: ``RemoteCallError`` raised by this package
with a ``RemoteResponse`` attached, ``httpx.HTTPStatusError``, exceptions from
the generated platform client (which expose ``status``/``reason``/``body``),
and plain exceptions from transport or decoding. ``normalize_error`` turns each
of them into a ``NormalizedError`` and never raises itself.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

import httpx

from twitter_proxy.exceptions import ProxyError, RemoteCallError, RemoteResponse

MAX_URL_LENGTH = 200
QUERY_REDACTION_MARKER = "?[query omitted]"
MAX_RAW_BODY_LENGTH = 2000
DEFAULT_STATUS_CODE = 500
DEFAULT_MESSAGE = "API call failed"

_HTTP_STATUS_PATTERN = re.compile(r"HTTP (\d+)")


@dataclass(frozen=True)
class NormalizedError:
    """Canonical description of a failed call."""

    status_code: int
    message: str
    body_snapshot: Any = None
    raw_body: Optional[str] = None


def simplify_url(url: Optional[str]) -> Optional[str]:
    """Shorten URLs longer than MAX_URL_LENGTH and drop their query string.

    Query strings can carry tokens, so an over-long URL is reduced to origin and
    path (itself capped) followed by a redaction marker.
    """
    if not url or len(url) <= MAX_URL_LENGTH:
        return url
    try:
        parts = urlsplit(url)
        base = f"{parts.scheme}://{parts.netloc}{parts.path}" if parts.scheme else parts.path
    except ValueError:
        base = url.split("?", 1)[0]
    return base[:MAX_URL_LENGTH] + QUERY_REDACTION_MARKER


def parse_body(body: Any) -> Any:
    """Return the structured form of a body, or None if it is not JSON."""
    if body is None:
        return None
    if isinstance(body, (dict, list)):
        return body
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str) or not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


def extract_remote_detail(body: Any) -> Optional[str]:
    """Pull the platform's own error text out of a parsed body.

    Recognizes ``{"errors": [{"message"|"detail": ..., "code": ...}]}`` and
    ``{"error": "..."}``. The error code, when present, is appended as
    ``(code=N)``.
    """
    if not isinstance(body, dict):
        return None
    errors = body.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0]
        detail = first.get("message") or first.get("detail")
        if detail:
            code = first.get("code")
            return f"{detail} (code={code})" if code is not None and code != "" else str(detail)
    if body.get("error"):
        return str(body["error"])
    return None


def response_metadata(error: BaseException) -> Optional[RemoteResponse]:
    """Return the response metadata attached to an error, if any."""
    if isinstance(error, RemoteCallError):
        return error.response
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        try:
            text = response.text
        except (httpx.ResponseNotRead, UnicodeDecodeError):
            text = ""
        return RemoteResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            url=simplify_url(str(error.request.url)),
            body=text,
        )
    # Exceptions raised by the generated platform client
    status = getattr(error, "status", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return RemoteResponse(
            status=status,
            status_text=getattr(error, "reason", None),
            url=None,
            body=getattr(error, "body", None),
        )
    return None


def status_from_message(message: str) -> Optional[int]:
    match = _HTTP_STATUS_PATTERN.search(message or "")
    return int(match.group(1)) if match else None


def _with_cause(message: str, error: BaseException) -> str:
    # ProxyErrors already carry everything worth saying about their cause
    cause = error.__cause__
    if cause is None or isinstance(error, ProxyError):
        return message
    cause_message = str(cause) or cause.__class__.__name__
    if cause_message in message:
        return message
    return f"{message} (cause: {cause_message})"


def _raw_text(body: Any) -> Optional[str]:
    if body is None:
        return None
    if isinstance(body, bytes):
        text = body.decode("utf-8", errors="replace")
    elif isinstance(body, str):
        text = body
    else:
        try:
            text = json.dumps(body, default=str)
        except (TypeError, ValueError):
            text = str(body)
    return text[:MAX_RAW_BODY_LENGTH]


def normalize_error(error: BaseException) -> NormalizedError:
    """Map any failure to a ``NormalizedError``.

    The status code comes from attached response metadata, then from the
    status a locally raised ``ProxyError`` carries, then from an ``HTTP <n>``
    pattern in the message, and defaults to 500. When a body is attached and
    parses as JSON with a recognizable error payload, the message becomes
    ``HTTP <status>: <remote detail>``.
    """
    raw_message = str(error) or DEFAULT_MESSAGE
    meta = response_metadata(error)

    status_code = None
    if meta is not None and meta.status:
        status_code = meta.status
    if status_code is None and isinstance(error, ProxyError) and not isinstance(error, RemoteCallError):
        status_code = error.status_code
    if status_code is None:
        status_code = status_from_message(raw_message)
    if status_code is None and isinstance(error, ProxyError):
        status_code = error.status_code
    if status_code is None:
        status_code = DEFAULT_STATUS_CODE

    message = _with_cause(raw_message, error)
    body_snapshot = None
    raw_body = None

    if meta is not None and meta.body not in (None, "", b""):
        raw_body = _raw_text(meta.body)
        body_snapshot = parse_body(meta.body)
        detail = extract_remote_detail(body_snapshot)
        if detail:
            message = f"HTTP {status_code}: {detail}"

    return NormalizedError(
        status_code=status_code,
        message=message,
        body_snapshot=body_snapshot,
        raw_body=raw_body,
    )
