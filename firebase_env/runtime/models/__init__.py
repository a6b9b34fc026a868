"""Data models for the session runtime."""

from firebase_env.runtime.models.config import ConfigOption, LocalConfig, OptionDescriptor
from firebase_env.runtime.models.enums import (
    COMPLETION_EVENTS,
    AuthOutcome,
    AuthStatus,
    OptionType,
    SessionEvent,
)

__all__ = [
    "COMPLETION_EVENTS",
    "AuthOutcome",
    "AuthStatus",
    "ConfigOption",
    "LocalConfig",
    "OptionDescriptor",
    "OptionType",
    "SessionEvent",
]
