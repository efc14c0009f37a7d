# Dependency Injection Container.

import httpx

from twitter_proxy.core.envelope import Envelope
from twitter_proxy.errors.empty_result import EmptyResultPolicy
from twitter_proxy.platform.client_factory import PlatformClient, build_platform_client
from twitter_proxy.platform.transaction_id import TransactionIdGenerator, generate_transaction_id
from twitter_proxy.settings import Settings


class DependencyContainer:
    """Holds shared dependencies for the application.

    This class is responsible for holding all shared dependencies for the application.
    It is used to inject dependencies into the application and to make it easier to mock dependencies for testing.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        transaction_id_generator: TransactionIdGenerator = generate_transaction_id,
    ) -> None:
        """
        Initializes the container.

        Args:
            settings: Application settings.
            http_client: Shared asynchronous HTTP client for raw passthrough requests.
            transaction_id_generator: Function computing x-client-transaction-id tokens for raw requests.
        """
        self.settings = settings
        self.http_client = http_client
        self.transaction_id_generator = transaction_id_generator
        self.empty_result_policy = EmptyResultPolicy.from_settings(settings)

    def create_platform_client(self, envelope: Envelope) -> PlatformClient:
        """
        Creates a platform client configured with the envelope's session material.

        We include this factory here for the sake of consistency with other external dependencies.
        By maintaining all external dependencies in one place, we can easily mock them for testing.

        Args:
            envelope: The validated request envelope.

        Returns:
            A configured PlatformClient.
        """
        return build_platform_client(envelope)
