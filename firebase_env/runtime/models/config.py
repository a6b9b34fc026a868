"""Local config data models.

``ConfigOption`` describes one entry of the option catalog; ``LocalConfig``
is the document persisted to the user's config file.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from firebase_env.runtime.models.enums import OptionType

RequiredPredicate = Callable[[Mapping[str, Any]], bool]

# -- Catalog -----------------------------------------------------------------


class OptionDescriptor(BaseModel):
    """Serializable part of a catalog option, stored alongside the values."""

    type: OptionType
    message: str
    choices: list[str] | None = None
    default: str | None = None


class ConfigOption(OptionDescriptor):
    """Catalog option with its ``required`` rule.

    ``required`` is either a static flag or a predicate evaluated against the
    answers collected so far, so later options can depend on earlier ones.
    """

    required: bool | RequiredPredicate = True

    def is_required(self, answers: Mapping[str, Any]) -> bool:
        if callable(self.required):
            return bool(self.required(answers))
        return self.required

    def descriptor(self) -> OptionDescriptor:
        return OptionDescriptor.model_validate(self.model_dump(include={"type", "message", "choices", "default"}))


# -- Persisted document ------------------------------------------------------


class LocalConfig(BaseModel):
    """User preferences file.

    ``values`` maps option keys to their string value; ``None`` marks a
    disabled option.  ``catalog`` and ``catalog_version`` record which option
    catalog the file was written against.
    """

    catalog_version: int = 0
    catalog: dict[str, OptionDescriptor] = Field(default_factory=dict)
    values: dict[str, str | None] = Field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    @property
    def enabled_keys(self) -> list[str]:
        return [key for key, value in self.values.items() if value is not None]

    @property
    def disabled_keys(self) -> list[str]:
        return [key for key, value in self.values.items() if value is None]
