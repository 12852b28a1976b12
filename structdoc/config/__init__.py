"""Configuration files (YAML) and helpers.

:class:`ConfigManager` reads the default files shipped in this folder and
merges them with user overrides; :class:`EngineSettings` is the typed view of
the ``engine`` section consumed by the core.
"""

from .manager import ConfigManager
from .settings import EngineSettings

__all__ = [
    "ConfigManager",
    "EngineSettings",
]
