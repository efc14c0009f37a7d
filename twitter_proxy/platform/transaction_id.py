"""x-client-transaction-id support.

The platform's web client signs each request with a token derived from the
HTTP method, the request path and two values scraped from the web app (the
``twitter-site-verification`` key and an animation key). The caller does the
scraping and passes both values in the envelope's transaction seed; the token
itself is computed by ``x_client_transaction`` from that pair.
"""

from typing import Callable, Optional

from twitter_openapi_python.tid import PairClientTransaction
from x_client_transaction import ClientTransaction

TransactionIdGenerator = Callable[[str, str, Optional[str], Optional[str]], Optional[str]]


class UnseededClientTransaction(ClientTransaction):
    """Stands in for a ClientTransaction when the caller sent no complete seed.

    It produces an empty token, which the instrumented transport drops.
    """

    def __init__(self) -> None:
        self.key = None
        self.animation_key = None

    def generate_transaction_id(self, method: str, path: str, *args, **kwargs) -> str:
        return ""


def _pad_base64(value: str) -> str:
    return value + "=" * (-len(value) % 4)


def client_transaction_from_seed(verification: Optional[str], animation_key: Optional[str]) -> ClientTransaction:
    """Build the library's ClientTransaction from a (verification, animation key) pair."""
    if not verification or not animation_key:
        return UnseededClientTransaction()
    return PairClientTransaction(verification=_pad_base64(verification), animation_key=animation_key)


def generate_transaction_id(
    method: str,
    path: str,
    verification: Optional[str],
    animation_key: Optional[str],
    time_now: Optional[int] = None,
) -> Optional[str]:
    """Compute an x-client-transaction-id for one request.

    Args:
        method: HTTP method of the outgoing request.
        path: URL path of the outgoing request, without query string.
        verification: Base64 site-verification key, padding optional.
        animation_key: Animation key derived from the web app's SVG frames.
        time_now: Seconds since the platform epoch; defaults to now.

    Returns:
        The token, or None when either seed value is missing.
    """
    if not verification or not animation_key:
        return None
    transaction = client_transaction_from_seed(verification, animation_key)
    return transaction.generate_transaction_id(method=method.upper(), path=path, time_now=time_now) or None
