from __future__ import annotations

"""Service layer of the structural engine.

Pure calculators (heading analysis, width arithmetic, hotzone
classification) sit next to the edit services that turn user commands into
transactions on an :class:`~structdoc.core.context.EditorContext`.
"""

from .column_service import (
    CleanupExecutor,
    ColumnService,
    NestingValidator,
    detect_cleanup_action,
    execute_cleanup,
    find_columns_nodes,
)
from .drop_service import DropOutcome, DropService
from .heading_analysis_service import (
    calculate_fold_range,
    calculate_folded_blocks,
    calculate_numbering,
    display_label,
    get_heading_depth,
)
from .heading_structure_service import HeadingStructureService
from .hotzone_service import (
    GuidelineSession,
    HorizontalGuidelineCalculator,
    VerticalGuidelineCalculator,
    detect_column_gap,
    detect_editor_border,
    resolve_target_block,
)
from .undo_service import UndoService
from .width_calculator import WidthCalculationResult, WidthCalculator, resize_adjacent_columns

__all__ = [
    "CleanupExecutor",
    "ColumnService",
    "NestingValidator",
    "detect_cleanup_action",
    "execute_cleanup",
    "find_columns_nodes",
    "DropOutcome",
    "DropService",
    "calculate_fold_range",
    "calculate_folded_blocks",
    "calculate_numbering",
    "display_label",
    "get_heading_depth",
    "HeadingStructureService",
    "GuidelineSession",
    "HorizontalGuidelineCalculator",
    "VerticalGuidelineCalculator",
    "detect_column_gap",
    "detect_editor_border",
    "resolve_target_block",
    "UndoService",
    "WidthCalculationResult",
    "WidthCalculator",
    "resize_adjacent_columns",
]
