from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from twitter_proxy.settings import (
    DEFAULT_EMPTY_RESULT_CRASH_SIGNATURES,
    DEFAULT_EMPTY_RESULT_ERROR_MARKERS,
    Settings,
)

from tests.helpers.fakes import TEST_API_TOKEN


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {TEST_API_TOKEN}"}


@pytest.fixture
def client(monkeypatch):
    """Pytest fixture for the FastAPI TestClient with API_TOKEN configured.
    TestClient handles startup/shutdown, so the lifespan builds a real container.
    """
    from fastapi.testclient import TestClient
    from twitter_proxy.main import app

    monkeypatch.setenv("API_TOKEN", TEST_API_TOKEN)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_settings() -> MagicMock:
    """Provides a mock Settings instance."""
    settings = MagicMock(spec=Settings)
    settings.get_api_token.return_value = TEST_API_TOKEN
    settings.get_empty_result_crash_signatures.return_value = list(DEFAULT_EMPTY_RESULT_CRASH_SIGNATURES)
    settings.get_empty_result_error_markers.return_value = list(DEFAULT_EMPTY_RESULT_ERROR_MARKERS)
    return settings


@pytest.fixture
def mock_http_client() -> AsyncMock:
    """Provides a mock httpx.AsyncClient instance."""
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def packaged_payload() -> Dict[str, Any]:
    return {
        "authToken": "auth-123",
        "csrfToken": "ct0-456",
        "headers": {"api": {"user-agent": "Mozilla/5.0", "x-twitter-active-user": "yes"}},
        "featureFlags": {"UserByScreenName": {"queryId": "abc"}},
        "methodName": "getUserByScreenName",
        "methodParams": {"screenName": "jack"},
    }


@pytest.fixture
def raw_payload() -> Dict[str, Any]:
    return {
        "authToken": "auth-123",
        "csrfToken": "ct0-456",
        "headers": {"api": {"user-agent": "Mozilla/5.0"}},
        "featureFlags": {},
        "endpointPath": "/1.1/account/settings.json",
        "httpMethod": "GET",
    }
