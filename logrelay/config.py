"""Runtime settings — env-driven via pydantic-settings.

Reads ``LOGRELAY_*`` environment variables and an optional ``.env``
file.  Library classes take these values as explicit arguments; only
the CLI reads the module-level ``settings`` instance.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RelaySettings(BaseSettings):
    """Settings for the log router and its file tails.

    Examples
    --------
    Override via environment::

        export LOGRELAY_LOG_DIR=/var/log/apps
        export LOGRELAY_POLL_INTERVAL=0.25
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOGRELAY_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    debug: bool = False

    # Managed log directory for tailed stdout/stderr files
    log_dir: Path = Path("logs")

    # File tails
    poll_interval: float = Field(default=0.1, gt=0)
    encoding: str = "utf-8"

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


settings = RelaySettings()
