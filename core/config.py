"""
Application configuration.

All settings come from environment variables (optionally a
local ``.env`` file). Nothing is read at import time; call
``AppConfig.from_env()`` at process start.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from core.clock import DEFAULT_TIMEZONE


DEFAULT_DATA_URL = "https://hydro.chmi.cz/hppsoldv/hpps_prfdata.php?seq=307338"
DEFAULT_DATABASE_URL = "sqlite:///hydro_monitor.db"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class AppConfig:
    """Process-wide settings for the fetch job and the read API."""

    database_url: str = DEFAULT_DATABASE_URL
    data_url: str = DEFAULT_DATA_URL
    fetch_timeout_seconds: int = 30
    user_agent: str = DEFAULT_USER_AGENT
    source_timezone: str = DEFAULT_TIMEZONE
    retention_days: int = 7
    fetch_interval_seconds: int = 1800

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self) -> None:
        if self.fetch_timeout_seconds < 1:
            raise ValueError("FETCH_TIMEOUT_SECONDS must be at least 1")
        if self.retention_days < 1:
            raise ValueError("RETENTION_DAYS must be at least 1")
        if self.fetch_interval_seconds < 1:
            raise ValueError("FETCH_INTERVAL_SECONDS must be at least 1")

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        load_dotenv_file: bool = True,
    ) -> "AppConfig":
        """
        Build configuration from environment variables.

        Args:
            env: Mapping to read instead of ``os.environ``
            load_dotenv_file: Load ``.env`` into the process env first

        Raises:
            ValueError: On malformed numeric settings
        """
        if env is None:
            if load_dotenv_file:
                load_dotenv()
            env = os.environ

        return cls(
            database_url=env.get("DATABASE_URL") or DEFAULT_DATABASE_URL,
            data_url=env.get("DATA_URL") or DEFAULT_DATA_URL,
            fetch_timeout_seconds=_int_setting(env, "FETCH_TIMEOUT_SECONDS", 30),
            user_agent=env.get("FETCH_USER_AGENT") or DEFAULT_USER_AGENT,
            source_timezone=env.get("SOURCE_TIMEZONE") or DEFAULT_TIMEZONE,
            retention_days=_int_setting(env, "RETENTION_DAYS", 7),
            fetch_interval_seconds=_int_setting(env, "FETCH_INTERVAL_SECONDS", 1800),
            api_host=env.get("API_HOST") or "0.0.0.0",
            api_port=_int_setting(env, "API_PORT", 8000),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            log_format=(env.get("LOG_FORMAT") or "text").lower(),
        )
