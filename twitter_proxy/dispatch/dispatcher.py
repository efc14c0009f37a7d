import logging
from typing import Any

from twitter_proxy.core.dependency_container import DependencyContainer
from twitter_proxy.core.envelope import Envelope
from twitter_proxy.dispatch.invoker import invoke_packaged_method
from twitter_proxy.dispatch.raw_request import execute_raw_request
from twitter_proxy.dispatch.registry import get_packaged_method
from twitter_proxy.exceptions import MissingDispatchTargetError

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes an envelope to the packaged-method path or the raw passthrough path."""

    def __init__(self, container: DependencyContainer) -> None:
        self.container = container

    async def execute(self, envelope: Envelope) -> Any:
        """
        Runs the call described by the envelope.

        Args:
            envelope: A validated request envelope.

        Returns:
            The JSON-ready result of the call.

        Raises:
            MissingDispatchTargetError: If the envelope names no dispatch target.
            UnsupportedMethodError: If methodName is not a registered method.
            Exception: Whatever the selected call path raises.
        """
        if envelope.method_name:
            logger.info(f"Dispatching packaged method '{envelope.method_name}'")
            # Unknown names are rejected before any client is built
            get_packaged_method(envelope.method_name)
            platform_client = self.container.create_platform_client(envelope)
            return await invoke_packaged_method(
                platform_client,
                envelope.method_name,
                envelope.method_params,
                self.container.empty_result_policy,
            )
        if envelope.endpoint_path:
            logger.info(f"Dispatching raw request to '{envelope.endpoint_path}'")
            return await execute_raw_request(
                envelope,
                self.container.http_client,
                self.container.transaction_id_generator,
            )
        raise MissingDispatchTargetError("Provide methodName or endpointPath")
