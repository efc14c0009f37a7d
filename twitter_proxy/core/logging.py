"""Logging setup for the proxy.

Log lines go to stderr. Session credentials travel through every request, so
the console handler masks cookie values and bearer tokens before a record is
written.
"""

import logging
import re
import sys
from typing import Optional

from twitter_proxy.settings import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_LEVEL = "INFO"
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# httpx/httpcore carry raw passthrough calls, urllib3 carries the packaged client's
NOISY_LIBRARIES = ["httpx", "httpcore", "urllib3"]

REDACTED = "***"

_CREDENTIAL_PATTERNS = [
    re.compile(r"(?P<prefix>\b(?:auth_token|ct0)=)[^;\s\"']+"),
    re.compile(r"(?P<prefix>\bBearer\s+)[^\s\"',]+", re.IGNORECASE),
    re.compile(r"(?P<prefix>[\"'](?:authToken|csrfToken|x-csrf-token)[\"']\s*:\s*[\"'])[^\"']+"),
]


def mask_credentials(text: str) -> str:
    """Replace session cookie values and bearer tokens in ``text`` with a mask."""
    for pattern in _CREDENTIAL_PATTERNS:
        text = pattern.sub(lambda match: match.group("prefix") + REDACTED, text)
    return text


class CredentialMaskingFilter(logging.Filter):
    """Masks credentials in the rendered message of every record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_credentials(message)
        if masked != message:
            record.msg = masked
            record.args = ()
        return True


def setup_logging(settings: Optional[Settings] = None):
    """
    Configures root logging for the proxy.

    The level comes from ``settings.get_log_level()``; an unknown level falls
    back to INFO with a warning on stderr. Any handlers already on the root
    logger are replaced by one masked stderr handler.
    """
    settings = settings or Settings()
    log_level_name = settings.get_log_level(default=DEFAULT_LOG_LEVEL)

    if log_level_name not in VALID_LOG_LEVELS:
        print(
            f"WARNING: Invalid LOG_LEVEL '{log_level_name}'. "
            f"Defaulting to {DEFAULT_LOG_LEVEL}. "
            f"Valid levels are: {', '.join(VALID_LOG_LEVELS)}",
            file=sys.stderr,
        )
        log_level_name = DEFAULT_LOG_LEVEL

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.getLevelName(log_level_name))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler.addFilter(CredentialMaskingFilter())
    root_logger.addHandler(console_handler)

    for lib_name in NOISY_LIBRARIES:
        logging.getLogger(lib_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured with level {log_level_name}.")


def log_proxy_outcome(
    target: str,
    outcome: str,
    duration: float,
    error: Optional[BaseException] = None,
) -> None:
    """Log how one proxied call ended.

    ``outcome`` is ``success``, ``failed`` (a ProxyError) or ``error`` (anything
    else, logged with its traceback).
    """
    logger = logging.getLogger("twitter_proxy.proxy.call")
    log_data = {"target": target, "outcome": outcome, "duration_seconds": round(duration, 3)}

    if error is not None:
        log_data["error"] = str(error)
        log_data["error_type"] = error.__class__.__name__

    if outcome == "error":
        logger.error(f"Unexpected error during proxy call - {target}", exc_info=error, extra=log_data)
    elif outcome == "failed":
        logger.warning(f"Proxy call failed - {target}", extra=log_data)
    else:
        logger.info(f"Proxy call complete - {target}", extra=log_data)
