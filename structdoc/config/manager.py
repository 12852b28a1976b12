from __future__ import annotations

"""Configuration loading and access helpers.

This module centralises the declarative settings of the engine. It loads YAML
files packaged with *structdoc* and merges them with user overrides.

Lookup order for the user directory:
``$STRUCTDOC_CONFIG_DIR``, then ``%LOCALAPPDATA%\\StructDoc\\config`` on
Windows, ``~/.structdoc`` elsewhere.

Missing or invalid files never raise: the affected section is left empty and
the problem is logged, so callers always get a mapping back.
"""

from importlib import resources
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

__all__ = ["ConfigManager", "get_user_config_dir"]


def get_user_config_dir() -> Path:
    """Get the user configuration directory."""
    override = os.environ.get("STRUCTDOC_CONFIG_DIR")
    if override:
        return Path(override)
    if os.name == "nt":  # Windows
        local_appdata = os.environ.get("LOCALAPPDATA")
        if local_appdata:
            return Path(local_appdata) / "StructDoc" / "config"
        return Path.home() / "AppData" / "Local" / "StructDoc" / "config"
    return Path.home() / ".structdoc"


class _Singleton(type):
    _instance: "ConfigManager" | None = None

    def __call__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__call__(*args, **kwargs)
        return cls._instance


class ConfigManager(metaclass=_Singleton):
    """Lazy-loads and exposes configuration sections as dictionaries."""

    _DEFAULT_FILENAMES = {
        "engine": "engine.yml",
        "logging": "logging.yml",
    }

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._ensure_loaded()

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance so the next call reloads from disk."""
        cls._instance = None

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def get_engine_config(self) -> Dict[str, Any]:
        return self._data.get("engine", {})

    def get_logging_config(self) -> Dict[str, Any]:
        return self._data.get("logging", {})

    # ------------------------------------------------------------------
    # Internal loading logic
    # ------------------------------------------------------------------
    def _ensure_loaded(self) -> None:
        if self._data:
            return  # already loaded

        startup_summary = []
        user_config_dir = get_user_config_dir()

        for key, filename in self._DEFAULT_FILENAMES.items():
            merged_cfg: Dict[str, Any] = {}
            status = "missing"

            # 1. load packaged default
            try:
                text = resources.files(__package__).joinpath(filename).read_text(encoding="utf-8")
                packaged_data = yaml.safe_load(text) or {}
                if isinstance(packaged_data, dict):
                    merged_cfg.update(packaged_data)
                    status = "loaded"
                else:
                    logger.error("Packaged config %s is not a mapping", filename)
                    status = "invalid"
            except (FileNotFoundError, OSError):
                logger.error("Missing packaged config for %s (%s)", key, filename)
                status = "missing"
            except yaml.YAMLError as exc:
                logger.error("Invalid packaged config for %s (%s): %s", key, filename, exc)
                status = "invalid"

            # 2. load user overrides
            user_path = user_config_dir / filename
            if user_path.exists():
                try:
                    user_data = yaml.safe_load(user_path.read_text(encoding="utf-8")) or {}
                    if isinstance(user_data, dict):
                        merged_cfg.update(user_data)
                        if status == "loaded":
                            status = "loaded+overrides"
                    else:
                        logger.error("User config %s is not a mapping; ignored", user_path)
                except (OSError, yaml.YAMLError) as exc:
                    logger.error("Could not parse user config %s: %s", user_path, exc)

            self._data[key] = merged_cfg
            startup_summary.append(f"{key}: {status}")

        logger.info("Config startup: %s", " | ".join(startup_summary))
