# =============================================================================
# core/config.py  —  Runtime Configuration
# =============================================================================
#
# All settings come from environment variables (a .env file is loaded by the
# entry points with python-dotenv before this module is consulted):
#
#   PIPEDRIVE_API_KEY    required: the server refuses to start without it
#   PIPEDRIVE_BASE_URL   optional: default https://api.pipedrive.com
#   PIPEDRIVE_TIMEOUT    optional: request timeout in seconds, default 30
#   LOG_LEVEL            optional: default INFO
# =============================================================================

from dataclasses import dataclass
import os
from typing import Mapping, Optional

from core.provider import DEFAULT_BASE_URL, DEFAULT_TIMEOUT


class ConfigurationError(Exception):
    """The process cannot start with the current environment."""


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"Settings(api_key='***', base_url={self.base_url!r}, "
            f"timeout={self.timeout!r}, log_level={self.log_level!r})"
        )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment.

    Raises:
        ConfigurationError: PIPEDRIVE_API_KEY is missing or blank, or
            PIPEDRIVE_TIMEOUT is not a positive number.
    """
    env = os.environ if environ is None else environ

    api_key = (env.get("PIPEDRIVE_API_KEY") or "").strip()
    if not api_key:
        raise ConfigurationError("PIPEDRIVE_API_KEY environment variable is required")

    raw_timeout = env.get("PIPEDRIVE_TIMEOUT")
    timeout = DEFAULT_TIMEOUT
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"PIPEDRIVE_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
            ) from None
        if timeout <= 0:
            raise ConfigurationError("PIPEDRIVE_TIMEOUT must be greater than zero")

    return Settings(
        api_key=api_key,
        base_url=env.get("PIPEDRIVE_BASE_URL") or DEFAULT_BASE_URL,
        timeout=timeout,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
