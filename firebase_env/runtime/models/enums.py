"""Shared enumerations used across the session runtime."""

from __future__ import annotations

from enum import StrEnum

# -- Session -----------------------------------------------------------------


class SessionEvent(StrEnum):
    """Events exchanged between the session loop and the editors.

    Prompt events are transitions: the session loop emits them and moves to
    whatever event their handler returns.  Completion events are
    notifications and carry the affected variable or option key.
    """

    # Transitions
    START_SESSION = "startSession"
    SET_ENV_VAR_PROMPT = "setEnvVarPrompt"
    UNSET_ENV_VAR_PROMPT = "unsetEnvVarPrompt"
    EDIT_CONFIG_PROMPT = "editConfigPrompt"
    ENABLE_CONFIG_OPTION = "enableConfigOption"
    DISABLE_CONFIG_OPTION = "disableConfigOption"
    END_SESSION = "endSession"

    # Completions
    ENV_VAR_SET = "envVarSet"
    ENV_VAR_UNSET = "envVarUnset"
    CONFIG_OPTION_ENABLED = "configOptionEnabled"
    CONFIG_OPTION_DISABLED = "configOptionDisabled"
    CONFIG_OPTION_EDITED = "configOptionEdited"


COMPLETION_EVENTS: frozenset[SessionEvent] = frozenset(
    {
        SessionEvent.ENV_VAR_SET,
        SessionEvent.ENV_VAR_UNSET,
        SessionEvent.CONFIG_OPTION_ENABLED,
        SessionEvent.CONFIG_OPTION_DISABLED,
        SessionEvent.CONFIG_OPTION_EDITED,
    }
)


# -- Authentication ----------------------------------------------------------


class AuthStatus(StrEnum):
    """Lifecycle of the authentication guard."""

    UNCHECKED = "unchecked"
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class AuthOutcome(StrEnum):
    """Result of a single ``login:list`` probe.  Never persisted."""

    AUTHENTICATED = "authenticated"
    NO_ACCOUNTS = "no_accounts"
    ERROR = "error"


# -- Config ------------------------------------------------------------------


class OptionType(StrEnum):
    """Question style used to ask for a config option."""

    LIST = "list"
    INPUT = "input"
