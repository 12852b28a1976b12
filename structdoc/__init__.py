"""structdoc - structural document engine.

Maintains a position-addressed document tree, computes heading folds and
numbering, and keeps multi-column layouts valid through edits and drag and
drop.

Public re-exports:
- EditorContext: authoritative document holder and transaction dispatcher
- Node, Transaction, DEFAULT_SCHEMA: the document model
- the edit services and pure calculators
"""

from .core.context import EditorContext
from .core.models import (
    DEFAULT_SCHEMA,
    DraggedFragment,
    LayoutBox,
    LayoutSnapshot,
    Node,
    OperationResult,
    Rect,
    Schema,
    Transaction,
)
from .core.services import (
    ColumnService,
    DropService,
    HeadingStructureService,
    calculate_fold_range,
    calculate_numbering,
    detect_cleanup_action,
    detect_column_gap,
    detect_editor_border,
    execute_cleanup,
    resize_adjacent_columns,
)
from .version import __version__

__all__ = [
    "EditorContext",
    "DEFAULT_SCHEMA",
    "DraggedFragment",
    "LayoutBox",
    "LayoutSnapshot",
    "Node",
    "OperationResult",
    "Rect",
    "Schema",
    "Transaction",
    "ColumnService",
    "DropService",
    "HeadingStructureService",
    "calculate_fold_range",
    "calculate_numbering",
    "detect_cleanup_action",
    "detect_column_gap",
    "detect_editor_border",
    "execute_cleanup",
    "resize_adjacent_columns",
    "__version__",
]
