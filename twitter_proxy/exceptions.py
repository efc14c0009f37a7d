# Proxy Exceptions

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class RemoteResponse:
    """Response metadata attached to a failed remote call."""

    status: Optional[int] = None
    status_text: Optional[str] = None
    url: Optional[str] = None
    body: Any = None


class ProxyError(Exception):
    """Base exception for all proxy errors."""

    default_status_code: int = 500

    def __init__(self, *args, status_code: int | None = None, detail: str | None = None):
        super().__init__(*args)
        self.status_code = status_code or self.default_status_code
        # Use the first arg as detail if detail kwarg is not provided and args exist
        self.detail = detail or (args[0] if args else None)


class ClientRequestError(ProxyError):
    """Raised for requests the proxy refuses before any remote call is made."""

    default_status_code = 400


class InvalidEnvelopeError(ClientRequestError):
    """The request envelope is missing fields or has fields of the wrong shape."""

    pass


class MissingDispatchTargetError(ClientRequestError):
    """Neither a packaged method name nor a raw endpoint path was supplied."""

    pass


class UnsupportedMethodError(ClientRequestError):
    """The packaged method name is not in the registry."""

    def __init__(self, method_name: str):
        self.method_name = method_name
        super().__init__(f"Unsupported API method: {method_name}")


class MissingCsrfTokenError(ClientRequestError):
    """The raw passthrough path cannot authenticate without a CSRF token."""

    def __init__(self, detail: str = "CSRF token (ct0) is missing"):
        super().__init__(detail)


class ClientAuthenticationError(ProxyError):
    """Raised when the client bearer token is missing or does not match."""

    default_status_code = 401


class ServerConfigurationError(ProxyError):
    """Raised when the server is missing required configuration."""

    default_status_code = 500


class RemoteCallError(ProxyError):
    """A remote call failed and the failure carries response metadata."""

    def __init__(self, message: str, response: RemoteResponse):
        self.response = response
        super().__init__(message, status_code=response.status or 500)
