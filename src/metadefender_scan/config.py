"""Configuration for the MetaDefender scan client.

Only service tunables live here. The API key is always passed in explicitly
and is never read from the environment or a file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from metadefender_scan.exceptions import ConfigurationError

logger = logging.getLogger("metadefender_scan")

METADEFENDER_BASE_URL = "https://api.metadefender.com/v4"

# Environment overrides for the integer tunables
_INT_ENV_VARS: dict[str, str] = {
    "request_timeout": "METADEFENDER_REQUEST_TIMEOUT",
    "poll_interval": "METADEFENDER_POLL_INTERVAL",
    "max_wait": "METADEFENDER_MAX_WAIT",
    "max_poll_failures": "METADEFENDER_MAX_POLL_FAILURES",
}


@dataclass
class ScanConfig:
    """Tunables for talking to MetaDefender Cloud.

    Values left at their defaults can be overridden from environment
    variables (or a .env file):

        METADEFENDER_BASE_URL           API root, e.g. an on-prem gateway
        METADEFENDER_REQUEST_TIMEOUT    seconds per HTTP request
        METADEFENDER_POLL_INTERVAL      seconds between progress polls
        METADEFENDER_MAX_WAIT           seconds before polling gives up
        METADEFENDER_MAX_POLL_FAILURES  consecutive failed polls tolerated
    """

    base_url: str = METADEFENDER_BASE_URL

    # Timeouts (seconds)
    request_timeout: int = 60
    poll_interval: int = 10
    max_wait: int = 900

    # Polling failure bound
    max_poll_failures: int = 5

    # Misc
    env_file: str | None = None
    _loaded: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if not self._loaded:
            self._load_from_env()
            self._loaded = True

    def _load_from_env(self) -> None:
        """Fill defaulted values from environment variables / .env file."""
        if self.env_file:
            env_path = Path(self.env_file)
            if env_path.exists():
                load_dotenv(env_path)
            else:
                logger.warning("Specified .env file not found: %s", self.env_file)
        else:
            load_dotenv()  # auto-discover .env in cwd or parents

        if self.base_url == METADEFENDER_BASE_URL:
            override = os.getenv("METADEFENDER_BASE_URL", "")
            if override:
                self.base_url = override

        defaults = ScanConfig.__dataclass_fields__
        for attr, env_var in _INT_ENV_VARS.items():
            raw = os.getenv(env_var, "")
            if not raw or getattr(self, attr) != defaults[attr].default:
                continue
            try:
                setattr(self, attr, int(raw))
            except ValueError as e:
                raise ConfigurationError(
                    f"{env_var} must be an integer, got {raw!r}"
                ) from e

    def validate(self) -> None:
        """Validate the configuration. Raises ConfigurationError if unusable."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Invalid base URL '{self.base_url}'. It must start with http:// or https://"
            )

        for attr in ("request_timeout", "poll_interval", "max_wait", "max_poll_failures"):
            value = getattr(self, attr)
            if value <= 0:
                raise ConfigurationError(f"{attr} must be a positive integer, got {value}")

    @property
    def api_root(self) -> str:
        return self.base_url.rstrip("/")
