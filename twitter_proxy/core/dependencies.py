import logging
import secrets

import httpx
from fastapi import Depends, HTTPException, Request, status

from twitter_proxy.core.dependency_container import DependencyContainer
from twitter_proxy.exceptions import ClientAuthenticationError, ServerConfigurationError
from twitter_proxy.settings import Settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
KEEPALIVE_EXPIRY_SECONDS = 30.0

# --- Dependency Providers --- #


def get_dependencies(request: Request) -> DependencyContainer:
    """Dependency to retrieve the DependencyContainer from application state."""
    dependencies: DependencyContainer | None = getattr(request.app.state, "dependencies", None)
    if dependencies is None:
        logger.critical(
            "DependencyContainer not found in application state. "
            "This indicates a critical setup error in the application lifespan."
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error: Application dependencies not initialized.",
        )
    return dependencies


# --- Client Token Check --- #


async def verify_client_token(
    request: Request,
    dependencies: DependencyContainer = Depends(get_dependencies),
) -> None:
    """
    Checks the Authorization header against the configured API token.

    Raises:
        ServerConfigurationError: If no API token is configured (500).
        ClientAuthenticationError: If the header is missing or the token does not match (401).
    """
    expected = dependencies.settings.get_api_token()
    if not expected:
        logger.error("API_TOKEN is not configured; rejecting request.")
        raise ServerConfigurationError("Server configuration error: API_TOKEN not set")

    header_value = request.headers.get("authorization", "")
    supplied = header_value[len(BEARER_PREFIX) :] if header_value.startswith(BEARER_PREFIX) else header_value

    if not secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        logger.warning(f"Rejected request to {request.url.path}: invalid or missing bearer token.")
        raise ClientAuthenticationError("Unauthorized")


async def initialize_app_dependencies(app_settings: Settings) -> DependencyContainer:
    """Initialize and configure core application dependencies.

    Args:
        app_settings: The application settings instance.

    Returns:
        A DependencyContainer instance populated with initialized dependencies.

    Raises:
        RuntimeError: If the Dependency Container cannot be created.
    """
    logger.info("Initializing core application dependencies...")

    # Keep-alive pool shared by every raw passthrough request
    timeout = httpx.Timeout(
        app_settings.get_outbound_read_timeout(),
        connect=app_settings.get_outbound_connect_timeout(),
    )
    limits = httpx.Limits(
        max_connections=app_settings.get_outbound_max_connections(),
        max_keepalive_connections=app_settings.get_outbound_max_connections(),
        keepalive_expiry=KEEPALIVE_EXPIRY_SECONDS,
    )
    http_client = httpx.AsyncClient(timeout=timeout, limits=limits, follow_redirects=True)
    logger.info("HTTP Client initialized for DependencyContainer.")

    try:
        dependencies = DependencyContainer(settings=app_settings, http_client=http_client)
        logger.info("Dependency Container created successfully.")
        return dependencies
    except Exception as container_exc:
        logger.critical(f"Failed to create Dependency Container instance: {container_exc}", exc_info=True)
        await http_client.aclose()
        logger.info("HTTP client closed due to Dependency Container instantiation failure.")
        raise RuntimeError(f"Failed to create Dependency Container instance: {container_exc}") from container_exc
