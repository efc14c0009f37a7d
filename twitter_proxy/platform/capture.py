from dataclasses import dataclass
from typing import Any, Optional

from twitter_proxy.errors.normalizer import simplify_url

BODY_PREVIEW_LENGTH = 500


@dataclass
class ResponseCapture:
    """The last raw HTTP response seen by a platform client.

    The client library decodes responses itself; when its decoder crashes the
    raw status and body recorded here are the only record of what the platform
    actually returned.
    """

    status: Optional[int] = None
    status_text: Optional[str] = None
    url: Optional[str] = None
    body_preview: Optional[str] = None

    def record(self, status: Optional[int], status_text: Optional[str], url: Optional[str], body: Any) -> None:
        self.status = status
        self.status_text = status_text
        self.url = simplify_url(url)
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        self.body_preview = body[:BODY_PREVIEW_LENGTH] if isinstance(body, str) else None

    @property
    def has_response(self) -> bool:
        return self.status is not None
