from __future__ import annotations

"""Typed view of the ``engine`` configuration section."""

from dataclasses import dataclass, fields
import logging
from typing import Any, Dict, Mapping, Optional

__all__ = ["EngineSettings"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    """Tunable thresholds of the hotzone classifier and edit services.

    Attributes
    ----------
    column_hotzone_threshold
        Half-width in px of the hotzone centred on a column gap.
    enable_column_guideline / enable_editor_border_guideline
        Switch the two vertical guideline families on or off.
    editor_border_horizontal_threshold
        Distance in px outside the editor border still classified as border.
    editor_border_vertical_tolerance
        Slack in px above and below the editor for border classification.
    horizontal_guideline_thickness
        Height in px of the insert-between-blocks line.
    resize_epsilon
        Column resizes below this many percent are reported unchanged.
    max_history
        Undo snapshots kept per editor context.
    """

    column_hotzone_threshold: float = 24
    enable_column_guideline: bool = True
    enable_editor_border_guideline: bool = True
    editor_border_horizontal_threshold: float = 1000
    editor_border_vertical_tolerance: float = 50
    horizontal_guideline_thickness: float = 2
    resize_epsilon: float = 0.1
    max_history: int = 50

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "EngineSettings":
        """Build settings from a config mapping.

        Unknown keys are ignored; values that cannot be converted to the
        field's type keep the default and log a warning.
        """
        defaults = cls()
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if not data or f.name not in data:
                continue
            raw = data[f.name]
            default = getattr(defaults, f.name)
            try:
                if isinstance(default, bool):
                    if isinstance(raw, str):
                        value: Any = raw.strip().lower() in {"1", "true", "yes", "on"}
                    elif isinstance(raw, (bool, int)):
                        value = bool(raw)
                    else:
                        raise ValueError(raw)
                elif f.name == "max_history":
                    value = max(1, int(raw))
                else:
                    value = float(raw)
                    if value < 0:
                        raise ValueError(raw)
            except (TypeError, ValueError):
                logger.warning("Invalid engine setting %s=%r; using default %r", f.name, raw, default)
                continue
            values[f.name] = value
        return cls(**values)

    @classmethod
    def from_config(cls) -> "EngineSettings":
        """Load settings from the shared :class:`ConfigManager`."""
        from structdoc.config.manager import ConfigManager

        return cls.from_mapping(ConfigManager().get_engine_config())
