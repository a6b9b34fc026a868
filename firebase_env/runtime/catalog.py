"""Static catalogs: the local config options and the reserved-key policy.

Bump ``CATALOG_VERSION`` whenever ``USER_CONFIG_OPTIONS`` changes so that
existing config files are reconciled on their next load.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from firebase_env.runtime.models.config import ConfigOption, OptionDescriptor
from firebase_env.runtime.models.enums import OptionType

# ---------------------------------------------------------------------------
# Local config options
# ---------------------------------------------------------------------------

CATALOG_VERSION = 1

GEN_1 = "Gen 1"
GEN_2 = "Gen 2"


def _is_gen_1(answers: Mapping[str, Any]) -> bool:
    return answers.get("functionGeneration") == GEN_1


USER_CONFIG_OPTIONS: dict[str, ConfigOption] = {
    "functionGeneration": ConfigOption(
        type=OptionType.LIST,
        message="Select the generation of functions you want to handle:",
        choices=[GEN_1, GEN_2],
        required=True,
    ),
    "runtimeConfig": ConfigOption(
        type=OptionType.INPUT,
        message="Enter the path to your .runtimeconfig.json file:",
        default=".",
        required=_is_gen_1,
    ),
}


def catalog_descriptors(options: Mapping[str, ConfigOption] | None = None) -> dict[str, OptionDescriptor]:
    """Serializable view of the catalog, as stored in the config file."""
    options = USER_CONFIG_OPTIONS if options is None else options
    return {key: option.descriptor() for key, option in options.items()}


# ---------------------------------------------------------------------------
# Reserved environment keys
# ---------------------------------------------------------------------------

# Names set by the Cloud Functions runtime itself.
RESERVED_KEYS: frozenset[str] = frozenset(
    {
        "CLOUD_RUNTIME_CONFIG",
        "ENTRY_POINT",
        "FIREBASE_CONFIG",
        "FUNCTION_IDENTITY",
        "FUNCTION_MEMORY_MB",
        "FUNCTION_NAME",
        "FUNCTION_REGION",
        "FUNCTION_SIGNATURE_TYPE",
        "FUNCTION_TARGET",
        "FUNCTION_TIMEOUT_SEC",
        "FUNCTION_TRIGGER_TYPE",
        "GCLOUD_PROJECT",
        "GCP_PROJECT",
        "GOOGLE_CLOUD_PROJECT",
        "K_CONFIGURATION",
        "K_REVISION",
        "K_SERVICE",
        "PORT",
    }
)

RESERVED_PREFIXES: tuple[str, ...] = ("X_GOOGLE_", "EXT_", "FIREBASE_")

RESERVED_KEY_MESSAGE = "This key is reserved for internal use. Please enter a different key."


def is_reserved_key(name: str) -> bool:
    """True if *name* is reserved by the platform (case-insensitive)."""
    upper = name.strip().upper()
    return upper in RESERVED_KEYS or upper.startswith(RESERVED_PREFIXES)
