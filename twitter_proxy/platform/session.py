"""Session header assembly shared by both call paths."""

from typing import Any, Dict, Mapping, Optional

AUTH_TYPE_HEADER = "x-twitter-auth-type"
AUTH_TYPE_VALUE = "OAuth2Session"
CSRF_HEADER = "x-csrf-token"
COOKIE_HEADER = "cookie"
TRANSACTION_ID_HEADER = "x-client-transaction-id"
CONTENT_TYPE_HEADER = "content-type"


def build_cookie(auth_token: str, csrf_token: Optional[str]) -> str:
    cookies = {"auth_token": auth_token}
    if csrf_token:
        cookies["ct0"] = csrf_token
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


def authentication_headers(auth_token: str, csrf_token: str) -> Dict[str, str]:
    """The three headers that authenticate a session-scoped call."""
    return {
        AUTH_TYPE_HEADER: AUTH_TYPE_VALUE,
        CSRF_HEADER: csrf_token,
        COOKIE_HEADER: build_cookie(auth_token, csrf_token),
    }


def merge_headers(
    seed: Mapping[str, str],
    extra: Optional[Mapping[str, Any]],
    auth_token: str,
    csrf_token: str,
) -> Dict[str, str]:
    """Merge seed and caller headers, then overwrite the authentication headers.

    Keys are lower-cased before merging so that a caller-supplied
    ``X-Csrf-Token`` cannot survive next to the real one.
    """
    headers: Dict[str, str] = {}
    for source in (seed, extra or {}):
        for key, value in source.items():
            if value is None:
                continue
            headers[str(key).lower()] = str(value)
    headers.update(authentication_headers(auth_token, csrf_token))
    return headers
