"""Local config file store.

The user's preferences live in a single JSON document::

    {
      "catalog_version": 1,
      "catalog": {"functionGeneration": {...}, "runtimeConfig": {...}},
      "values": {"functionGeneration": "Gen 1", "runtimeConfig": "."}
    }

The default location is ``config.json`` in a per-platform directory (see
``get_config_directory``).  The whole file is rewritten on every change.
Writes are atomic (temp file + rename) but there is no locking across
processes: the last writer wins.

Uses ``anyio.to_thread.run_sync`` for non-blocking file I/O.
"""

from __future__ import annotations

import contextlib
import json
import os
import platform
import tempfile
from collections.abc import Mapping
from functools import partial
from pathlib import Path
from typing import Any

import click
from anyio import to_thread
from loguru import logger
from pydantic import ValidationError

from firebase_env.runtime.catalog import CATALOG_VERSION, USER_CONFIG_OPTIONS, catalog_descriptors
from firebase_env.runtime.errors import ConfigError
from firebase_env.runtime.models.config import ConfigOption, LocalConfig
from firebase_env.runtime.models.enums import OptionType
from firebase_env.runtime.prompts import Prompter

APP_DIR_NAME = "firebase-env-cli"
CONFIG_FILE_NAME = "config.json"
LEGACY_CATALOG_KEY = "USER_CONFIG_OPTIONS"


def get_config_directory(*, create: bool = True) -> Path:
    """Per-platform directory holding the config file.

    Windows uses ``%USERPROFILE%/AppData/Roaming/firebase-env-cli``; every
    other platform uses ``~/.firebase-env-cli``.
    """
    home = Path.home()
    if platform.system() == "Windows":
        config_dir = home / "AppData" / "Roaming" / APP_DIR_NAME
    else:
        config_dir = home / f".{APP_DIR_NAME}"
    if create:
        config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def default_config_path() -> Path:
    return get_config_directory() / CONFIG_FILE_NAME


def reconcile(
    config: LocalConfig,
    options: Mapping[str, ConfigOption] | None = None,
    version: int = CATALOG_VERSION,
) -> bool:
    """Bring *config* in line with the current option catalog.

    Values of options that still exist are kept, new options get their
    default (``None`` when there is none) and options that left the catalog
    are dropped.  Returns ``True`` if anything changed.
    """
    options = USER_CONFIG_OPTIONS if options is None else options
    descriptors = catalog_descriptors(options)
    if config.catalog_version == version and config.catalog == descriptors and set(config.values) == set(options):
        return False

    config.values = {key: config.values.get(key, option.default) for key, option in options.items()}
    config.catalog = descriptors
    config.catalog_version = version
    return True


def parse_config(raw: str) -> LocalConfig:
    """Parse a config document.

    Files written before the catalog was versioned hold the values at the top
    level next to a ``USER_CONFIG_OPTIONS`` copy of the catalog; their values
    are picked up and the catalog is left for ``reconcile`` to fill in.
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        msg = "config file must contain a JSON object"
        raise ValueError(msg)
    if "values" in data:
        return LocalConfig.model_validate(data)
    values = {key: None if value is None else str(value) for key, value in data.items() if key != LEGACY_CATALOG_KEY}
    return LocalConfig(values=values)


class LocalConfigStore:
    """Reads, generates and writes the local config file."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        prompter: Prompter,
        *,
        options: Mapping[str, ConfigOption] | None = None,
        version: int = CATALOG_VERSION,
    ) -> None:
        self.path = Path(path)
        self.prompter = prompter
        self.options = dict(USER_CONFIG_OPTIONS if options is None else options)
        self.version = version
        self.config: LocalConfig | None = None

    # -- Read ------------------------------------------------------------------

    async def read(self) -> LocalConfig:
        """Load the config file, generating it if it does not exist.

        Raises ``ConfigError`` if the file cannot be read or parsed.
        """
        exists = await to_thread.run_sync(self.path.exists)
        if not exists:
            logger.info("Config file {} not found, generating defaults", self.path)
            self.config = await self.generate()
            return self.config

        try:
            raw = await to_thread.run_sync(partial(_read_file, self.path))
            config = parse_config(raw)
        except (OSError, ValueError, ValidationError) as exc:
            msg = f"Could not read config file {self.path}: {exc}"
            raise ConfigError(msg) from exc

        if reconcile(config, self.options, self.version):
            logger.info("Config file {} updated to catalog version {}", self.path, self.version)
            await self.write(config)
        self.config = config
        return config

    async def generate(self) -> LocalConfig:
        """Ask for every required option and write a fresh config file."""
        click.echo("Config file not found. Generating default config file...")

        answers: dict[str, Any] = {}
        for key, option in self.options.items():
            if option.is_required(answers):
                answers[key] = await self.ask(option)
            else:
                answers[key] = option.default

        config = LocalConfig(
            catalog_version=self.version,
            catalog=catalog_descriptors(self.options),
            values=answers,
        )
        await self.write(config)
        return config

    async def ask(self, option: ConfigOption, current: str | None = None) -> str:
        """Ask the question for a single option."""
        if option.type == OptionType.LIST and option.choices:
            return await self.prompter.select(option.message, option.choices)
        return await self.prompter.text(option.message, default=current or option.default)

    # -- Write -----------------------------------------------------------------

    async def write(self, config: LocalConfig | None = None) -> None:
        """Persist *config* (default: the loaded config) as a whole file."""
        if config is None:
            config = self.config
        if config is None:
            msg = "No config loaded"
            raise ConfigError(msg)
        data = config.model_dump_json(indent=2)
        try:
            await to_thread.run_sync(partial(atomic_write, self.path, data))
        except OSError as exc:
            msg = f"Could not write config file {self.path}: {exc}"
            raise ConfigError(msg) from exc
        self.config = config

    # -- Mutation --------------------------------------------------------------

    async def set_value(self, key: str, value: str | None) -> LocalConfig:
        """Set (or, with ``None``, disable) an option and persist the file."""
        if self.config is None:
            await self.read()
        assert self.config is not None  # noqa: S101
        if key not in self.options:
            msg = f"Unknown config option: {key}"
            raise ConfigError(msg)
        self.config.values[key] = value
        await self.write()
        return self.config


# -- Sync helpers (run in thread pool) -----------------------------------------


def atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _read_file(path: Path) -> str:
    return path.read_text(encoding="utf-8")
