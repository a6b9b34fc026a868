"""Tool configuration loaded from FIREBASE_ENV_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseEnvSettings(BaseSettings):
    """firebase-env settings.

    All fields are read from environment variables with the ``FIREBASE_ENV_``
    prefix.  For example, ``FIREBASE_ENV_LOG_LEVEL=DEBUG`` maps to
    ``log_level``.  Command-line options override these values.
    """

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_ENV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "WARNING"
    session_log: Path = Path("logs") / "session.log"
    error_log: Path = Path("logs") / "error.log"

    # -- Local config ----------------------------------------------------------
    config_path: Path | None = None
    """Local config file.  Defaults to ``config.json`` in the per-platform config directory."""

    # -- Delegated tool --------------------------------------------------------
    firebase_bin: str = "firebase"
    project: str | None = None
    """Firebase project id passed as ``--project``.  Uses the CLI's active project when unset."""

    # -- Session ---------------------------------------------------------------
    max_auth_attempts: int = 3
    """Authentication checks allowed per guard invocation, reauthentications included."""

    max_fetch_attempts: int = 3
    """Attempts at reading the remote config before returning to the menu."""

    end_session_delay: float = 0.5
    """Grace period, in seconds, between "End session" and process exit."""


@lru_cache(maxsize=1)
def get_settings() -> FirebaseEnvSettings:
    """Return a cached settings instance.

    Call ``get_settings.cache_clear()`` in tests to force a re-read after
    overriding env vars.
    """
    return FirebaseEnvSettings()
