"""Runtime settings — env-driven, separate from the pinned install constants.

Pinned versions and URLs live in ``flatvine.models.config.InstallConfig``;
this module only carries knobs about *how* the installer runs on this
machine.  Reads from a .env file and FLATVINE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Installer settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export FLATVINE_LOG_LEVEL=DEBUG
        export FLATVINE_FIXUP_SCRIPT=/opt/widevine/widevine_fixup.py
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FLATVINE_",
        env_file_encoding="utf-8",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    debug: bool = False

    # External library transformer: ``<python> <fixup_script> IN OUT``
    python: str = "python3"
    fixup_script: Path = Path("widevine_fixup.py")

    # Only the connection phase is bounded; transfers run to completion.
    connect_timeout_seconds: float = 30.0

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    @property
    def resolved_fixup_script(self) -> Path:
        """Absolute path of the fixup helper (relative paths are cwd-based)."""
        return self.fixup_script.expanduser().resolve()
