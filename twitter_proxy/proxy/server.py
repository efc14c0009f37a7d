import logging

from fastapi import APIRouter, Depends, Request, Response

from twitter_proxy.core.dependencies import get_dependencies, verify_client_token
from twitter_proxy.core.dependency_container import DependencyContainer
from twitter_proxy.proxy.orchestration import run_proxy_flow

logger = logging.getLogger(__name__)

router = APIRouter()


# The body is read inside run_proxy_flow so that the token check runs before any
# body parsing.
@router.post("/api/twitter/proxy", dependencies=[Depends(verify_client_token)])
async def twitter_proxy_endpoint(
    request: Request,
    dependencies: DependencyContainer = Depends(get_dependencies),
) -> Response:
    """
    Forwards one call to the platform.

    The body is a request envelope naming either a packaged method
    (`methodName` + `methodParams`) or a raw endpoint (`endpointPath` +
    `queryParams`/`requestBody`/`extraHeaders`), together with the session
    credentials to use.

    **Authentication Note:** requires `Authorization: Bearer <API_TOKEN>`.
    """
    client_ip = request.client.host if request.client else "unknown"
    logger.info("Proxy request received", extra={"client_ip": client_ip, "path": request.url.path})

    response = await run_proxy_flow(request, dependencies)

    logger.info(
        "Proxy response sent",
        extra={"status_code": response.status_code, "client_ip": client_ip},
    )
    return response
