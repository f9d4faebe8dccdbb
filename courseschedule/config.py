"""
Runtime settings.

Values come from environment variables; CLI flags override them.

    COURSESCHEDULE_DATA_DIR    directory with JSON exports (file source)
    COURSESCHEDULE_API_URL     base URL of the REST API (selects the HTTP source)
    COURSESCHEDULE_CACHE_TTL   seconds to cache course collections (default 90)
    COURSESCHEDULE_TIMEOUT     HTTP timeout in seconds (default 30)
    COURSESCHEDULE_LOG_LEVEL   logging level name (default WARNING)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from courseschedule.storage import default_data_dir

ENV_PREFIX = "COURSESCHEDULE_"


def _float(value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    data_dir: Path = field(default_factory=default_data_dir)
    api_url: Optional[str] = None
    cache_ttl: float = 90.0
    request_timeout: float = 30.0
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from the environment. Invalid numbers keep their defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        data_dir = env.get(ENV_PREFIX + "DATA_DIR", "").strip()
        api_url = env.get(ENV_PREFIX + "API_URL", "").strip()

        return cls(
            data_dir=Path(data_dir) if data_dir else defaults.data_dir,
            api_url=api_url or None,
            cache_ttl=_float(env.get(ENV_PREFIX + "CACHE_TTL"), defaults.cache_ttl),
            request_timeout=_float(env.get(ENV_PREFIX + "TIMEOUT"), defaults.request_timeout),
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL", "").strip().upper() or defaults.log_level,
        )
