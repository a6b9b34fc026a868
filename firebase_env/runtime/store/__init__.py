"""Local persistence for user preferences."""

from firebase_env.runtime.store.local import LocalConfigStore, default_config_path, get_config_directory

__all__ = ["LocalConfigStore", "default_config_path", "get_config_directory"]
