"""Reclassification of client-library decode crashes as empty results.

The client library's response decoder sometimes crashes on legitimately empty
datasets (an empty timeline, a user with no followings) instead of returning
an empty object. This module holds the heuristic that recognizes that case.
It is pattern matching on undocumented failure text and must stay isolated:
disable it with ``enabled=False`` or tune the two lists through settings.

The check is exactly three steps, all of which must hold:

1. the exception text contains one of ``crash_signatures``;
2. a raw response was captured and its status is 200;
3. the captured body is non-empty and contains none of ``error_markers``.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from twitter_proxy.platform.capture import ResponseCapture
from twitter_proxy.settings import DEFAULT_EMPTY_RESULT_CRASH_SIGNATURES, DEFAULT_EMPTY_RESULT_ERROR_MARKERS, Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmptyResultPolicy:
    crash_signatures: List[str] = field(default_factory=lambda: list(DEFAULT_EMPTY_RESULT_CRASH_SIGNATURES))
    error_markers: List[str] = field(default_factory=lambda: list(DEFAULT_EMPTY_RESULT_ERROR_MARKERS))
    enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmptyResultPolicy":
        return cls(
            crash_signatures=settings.get_empty_result_crash_signatures(),
            error_markers=settings.get_empty_result_error_markers(),
        )

    def matches_crash(self, error: BaseException) -> bool:
        """Whether the exception looks like a client-library decode crash."""
        text = str(error)
        return any(signature in text for signature in self.crash_signatures)

    def is_empty_result(self, error: BaseException, capture: Optional[ResponseCapture]) -> bool:
        if not self.enabled or not self.matches_crash(error):
            return False
        if capture is None or capture.status != 200:
            return False
        body = capture.body_preview
        if not body:
            return False
        if any(marker in body for marker in self.error_markers):
            return False
        logger.info(
            "Treating client decode crash on HTTP 200 as empty result",
            extra={"url": capture.url, "error": str(error)},
        )
        return True
