from __future__ import annotations

"""Column container constants and cleanup action variants."""

from dataclasses import dataclass
from typing import Union

from structdoc.core.models.node import Node

__all__ = [
    "MIN_COLUMNS",
    "MAX_COLUMNS",
    "MIN_COLUMN_WIDTH",
    "DEFAULT_COLUMNS",
    "COLUMN_GAP",
    "NoCleanup",
    "UnwrapSingleColumn",
    "RemoveEmptyColumn",
    "CleanupAction",
    "is_column_empty",
]

MIN_COLUMNS = 2
MAX_COLUMNS = 7
MIN_COLUMN_WIDTH = 5
DEFAULT_COLUMNS = 2
COLUMN_GAP = 12  # px between rendered columns


@dataclass(frozen=True)
class NoCleanup:
    kind: str = "none"


@dataclass(frozen=True)
class UnwrapSingleColumn:
    """Replace the container at ``container_pos`` by its columns' content."""

    container_pos: int
    kind: str = "unwrap-single-column"


@dataclass(frozen=True)
class RemoveEmptyColumn:
    """Delete column ``column_index`` of the container at ``container_pos``."""

    container_pos: int
    column_index: int
    kind: str = "remove-empty-column"


CleanupAction = Union[NoCleanup, UnwrapSingleColumn, RemoveEmptyColumn]


def is_column_empty(column: Node) -> bool:
    """Return True for a column with no children or one childless paragraph."""
    if column.child_count == 0:
        return True
    if column.child_count == 1:
        only = column.children[0]
        return only.type == "paragraph" and only.child_count == 0
    return False
