import os
from typing import List, Optional

from dotenv import load_dotenv

# Load .env file variables into environment
load_dotenv(verbose=True)

DEFAULT_EMPTY_RESULT_ERROR_MARKERS = ['"errors"', '"code"', "suspended", "locked"]
DEFAULT_EMPTY_RESULT_CRASH_SIGNATURES = [
    "'NoneType' object",
    "Cannot read properties of undefined",
    "Denied by access control",
    "No data",
]


def _split_list(raw: Optional[str], default: List[str]) -> List[str]:
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_int(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} environment variable must be an integer.")


def _parse_float(name: str, default: str) -> float:
    value = os.getenv(name, default)
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} environment variable must be a number.")


class Settings:
    """Application configuration settings loaded from environment variables.

    Values are captured once when the instance is built; the getters never
    re-read the environment, so a Settings object is effectively immutable.
    """

    def __init__(self) -> None:
        self._api_token = os.getenv("API_TOKEN") or None
        self._host = os.getenv("HOST", "0.0.0.0")  # nosec B104
        self._port = _parse_int("PORT", "3003")
        self._reload = os.getenv("RELOAD", "false").lower() == "true"
        self._log_level = os.getenv("LOG_LEVEL")
        self._error_markers = _split_list(os.getenv("EMPTY_RESULT_ERROR_MARKERS"), DEFAULT_EMPTY_RESULT_ERROR_MARKERS)
        self._crash_signatures = _split_list(
            os.getenv("EMPTY_RESULT_CRASH_SIGNATURES"), DEFAULT_EMPTY_RESULT_CRASH_SIGNATURES
        )
        self._connect_timeout = _parse_float("OUTBOUND_CONNECT_TIMEOUT", "10")
        self._read_timeout = _parse_float("OUTBOUND_READ_TIMEOUT", "60")
        self._max_connections = _parse_int("OUTBOUND_MAX_CONNECTIONS", "10")

    # --- Core Settings ---
    def get_api_token(self) -> Optional[str]:
        """Returns the bearer token clients must present, if set."""
        return self._api_token

    def get_app_host(self) -> str:
        return self._host

    def get_app_port(self) -> int:
        """Returns the port the server listens on."""
        return self._port

    def get_app_reload(self) -> bool:
        return self._reload

    # --- Logging Settings ---
    def get_log_level(self, default: str = "INFO") -> str:
        """Gets the configured log level, defaulting if not set."""
        return (self._log_level or default).upper()

    # --- Empty-result heuristic ---
    def get_empty_result_error_markers(self) -> List[str]:
        """Body substrings that mark a captured response as a real remote error."""
        return list(self._error_markers)

    def get_empty_result_crash_signatures(self) -> List[str]:
        """Client-library crash texts that may hide a legitimately empty dataset."""
        return list(self._crash_signatures)

    # --- Outbound transport ---
    def get_outbound_connect_timeout(self) -> float:
        return self._connect_timeout

    def get_outbound_read_timeout(self) -> float:
        return self._read_timeout

    def get_outbound_max_connections(self) -> int:
        return self._max_connections
