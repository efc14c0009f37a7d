from twitter_proxy.platform.session import (
    AUTH_TYPE_HEADER,
    AUTH_TYPE_VALUE,
    COOKIE_HEADER,
    CSRF_HEADER,
    authentication_headers,
    build_cookie,
    merge_headers,
)


def test_build_cookie_with_and_without_csrf():
    assert build_cookie("auth", "ct0") == "auth_token=auth; ct0=ct0"
    assert build_cookie("auth", None) == "auth_token=auth"


def test_authentication_headers():
    assert authentication_headers("auth", "ct0") == {
        AUTH_TYPE_HEADER: AUTH_TYPE_VALUE,
        CSRF_HEADER: "ct0",
        COOKIE_HEADER: "auth_token=auth; ct0=ct0",
    }


def test_merge_order_seed_then_extra():
    headers = merge_headers({"accept": "seed", "x-a": "1"}, {"Accept": "extra"}, "auth", "ct0")

    assert headers["accept"] == "extra"
    assert headers["x-a"] == "1"


def test_caller_cannot_spoof_authentication_headers():
    headers = merge_headers(
        {"x-csrf-token": "seed-spoof", "cookie": "auth_token=evil"},
        {"X-Csrf-Token": "extra-spoof", "X-Twitter-Auth-Type": "none", "Cookie": "x=y"},
        "auth",
        "ct0",
    )

    assert headers[CSRF_HEADER] == "ct0"
    assert headers[AUTH_TYPE_HEADER] == AUTH_TYPE_VALUE
    assert headers[COOKIE_HEADER] == "auth_token=auth; ct0=ct0"
    assert "X-Csrf-Token" not in headers


def test_null_extra_headers_are_skipped():
    headers = merge_headers({}, {"x-skip": None, "x-count": 2}, "auth", "ct0")

    assert "x-skip" not in headers
    assert headers["x-count"] == "2"
