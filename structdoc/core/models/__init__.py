from __future__ import annotations

"""Shared data structures used across the structdoc core.

This package exposes the document tree, the schema, transactions and the
small value objects exchanged between services. It is intentionally free of
UI and I/O code so that everything here can be reused in any context
(unit-tests, a headless front end, a GUI).
"""

from .node import Node, ResolvedPos
from .schema import AttrSpec, NodeSpec, Schema, SchemaError, DEFAULT_SCHEMA
from .transform import (
    ADD_TO_HISTORY_META,
    CLEANUP_SKIP_META,
    FOLD_CHANGED_META,
    NUMBERING_CHANGED_META,
    AttrStep,
    Mapping,
    ReplaceStep,
    StepError,
    StepMap,
    Transaction,
)
from .columns import (
    COLUMN_GAP,
    DEFAULT_COLUMNS,
    MAX_COLUMNS,
    MIN_COLUMN_WIDTH,
    MIN_COLUMNS,
    CleanupAction,
    NoCleanup,
    RemoveEmptyColumn,
    UnwrapSingleColumn,
    is_column_empty,
)
from .ranges import FoldRange, NumberingMap
from .guideline import (
    IDLE,
    ColumnsEdgeGuideline,
    EditorBorderGuideline,
    GuidelineState,
    HorizontalGuidelineState,
    IdleGuideline,
)
from .layout import LayoutBox, LayoutSnapshot, Rect
from .drag import DraggedFragment, VersionedPos
from .results import OperationResult

__all__ = [
    "Node",
    "ResolvedPos",
    "AttrSpec",
    "NodeSpec",
    "Schema",
    "SchemaError",
    "DEFAULT_SCHEMA",
    "ADD_TO_HISTORY_META",
    "CLEANUP_SKIP_META",
    "FOLD_CHANGED_META",
    "NUMBERING_CHANGED_META",
    "AttrStep",
    "Mapping",
    "ReplaceStep",
    "StepError",
    "StepMap",
    "Transaction",
    "COLUMN_GAP",
    "DEFAULT_COLUMNS",
    "MAX_COLUMNS",
    "MIN_COLUMN_WIDTH",
    "MIN_COLUMNS",
    "CleanupAction",
    "NoCleanup",
    "RemoveEmptyColumn",
    "UnwrapSingleColumn",
    "is_column_empty",
    "FoldRange",
    "NumberingMap",
    "IDLE",
    "ColumnsEdgeGuideline",
    "EditorBorderGuideline",
    "GuidelineState",
    "HorizontalGuidelineState",
    "IdleGuideline",
    "LayoutBox",
    "LayoutSnapshot",
    "Rect",
    "DraggedFragment",
    "VersionedPos",
    "OperationResult",
]
