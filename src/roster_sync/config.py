from __future__ import annotations

import os
from typing import List, Mapping, Optional

from pydantic import BaseModel

from roster_sync.domain.errors import ConfigurationError

REQUIRED_ENV_VARS = [
    "EVENTLINK_USERNAME",
    "EVENTLINK_PASSWORD",
]

DEFAULT_BASE_URL = "https://api.tabletop.wizards.com"
DEFAULT_TIMEOUT = 10.0


class Settings(BaseModel):
    """EventLink connection settings."""

    username: Optional[str] = None
    password: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, require_credentials: bool = True) -> "Settings":
        """
        Build settings from the environment.

        Required environment variables (unless ``require_credentials`` is False):
        - EVENTLINK_USERNAME
        - EVENTLINK_PASSWORD

        Optional:
        - EVENTLINK_BASE_URL (default: https://api.tabletop.wizards.com)
        - EVENTLINK_TIMEOUT  (seconds, default: 10)
        """

        env = os.environ if environ is None else environ
        if require_credentials:
            missing = _missing_env(REQUIRED_ENV_VARS, env)
            if missing:
                joined = ", ".join(missing)
                raise ConfigurationError(f"Missing required environment variables: {joined}")
        raw_timeout = env.get("EVENTLINK_TIMEOUT") or DEFAULT_TIMEOUT
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(f"EVENTLINK_TIMEOUT must be a number of seconds, got {raw_timeout!r}") from e
        return cls(
            username=env.get("EVENTLINK_USERNAME"),
            password=env.get("EVENTLINK_PASSWORD"),
            base_url=env.get("EVENTLINK_BASE_URL") or DEFAULT_BASE_URL,
            timeout=timeout,
        )


def _missing_env(vars_to_check: List[str], env: Mapping[str, str]) -> List[str]:
    return [name for name in vars_to_check if not env.get(name)]
