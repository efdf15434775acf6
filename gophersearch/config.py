"""
Client configuration.

Settings are read from the environment once, at startup, and passed to the
client as a ``ClientConfig``. Nothing in the client reads ``os.environ``.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping, Optional, Tuple, TypeVar

from .errors import ConfigError
from .schema import SERVICE_MAX_RESULTS

DEFAULT_BASE_URL = "https://data.gopher-ai.com/api/v1"
DEFAULT_MAX_RESULTS = 15
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_POLL_ATTEMPTS = 30
DEFAULT_POLL_INTERVAL = 2.0
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

T = TypeVar("T")


def _env_number(
    env: Mapping[str, str],
    key: str,
    default: T,
    cast: Callable[[str], T],
    minimum: float,
    maximum: Optional[float] = None,
) -> T:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        return default
    if value < minimum:
        return default
    if maximum is not None and value > maximum:
        return default
    return value


def logging_from_env(env: Optional[Mapping[str, str]] = None) -> Tuple[str, Optional[str]]:
    """Return (LOG_LEVEL, LOG_DIR); unknown levels fall back to INFO."""
    env = os.environ if env is None else env
    level = env.get("LOG_LEVEL", "").strip().upper()
    if level not in LOG_LEVELS:
        level = "INFO"
    return level, env.get("LOG_DIR", "").strip() or None


@dataclass(frozen=True)
class ClientConfig:
    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    max_results: int = DEFAULT_MAX_RESULTS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_attempts: int = DEFAULT_POLL_ATTEMPTS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    # Consecutive unrecognized result bodies tolerated before failing.
    # None keeps polling through them until the attempt budget runs out.
    unrecognized_limit: Optional[int] = None
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    def __post_init__(self):
        if not self.api_key:
            raise ConfigError("Missing GOPHER_API. Set env var or pass api_key.")
        if self.max_results < 1:
            raise ConfigError("max_results must be a positive integer")
        if self.max_results > SERVICE_MAX_RESULTS:
            raise ConfigError(f"max_results must not exceed {SERVICE_MAX_RESULTS}")
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")
        if self.poll_attempts < 1:
            raise ConfigError("poll_attempts must be at least 1")
        if self.poll_interval < 0:
            raise ConfigError("poll_interval must not be negative")
        if self.unrecognized_limit is not None and self.unrecognized_limit < 1:
            raise ConfigError("unrecognized_limit must be at least 1 if provided")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides) -> "ClientConfig":
        """
        Build a config from environment variables.

        Args:
            env: Mapping to read from (default: os.environ)
            **overrides: Field values that take precedence over the environment

        Raises:
            ConfigError: If GOPHER_API is missing
        """
        env = os.environ if env is None else env
        log_level, log_dir = logging_from_env(env)
        values = {
            "api_key": env.get("GOPHER_API", "").strip(),
            "base_url": env.get("GOPHER_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            "max_results": _env_number(
                env, "MAX_RESULTS", DEFAULT_MAX_RESULTS, int, 1, SERVICE_MAX_RESULTS
            ),
            "request_timeout": _env_number(
                env, "GOPHER_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float, 0.001
            ),
            "poll_attempts": _env_number(
                env, "GOPHER_POLL_ATTEMPTS", DEFAULT_POLL_ATTEMPTS, int, 1
            ),
            "poll_interval": _env_number(
                env, "GOPHER_POLL_INTERVAL", DEFAULT_POLL_INTERVAL, float, 0
            ),
            "log_level": log_level,
            "log_dir": log_dir,
        }
        values.update(overrides)
        return cls(**values)

    def with_overrides(self, **changes) -> "ClientConfig":
        return replace(self, **changes)
