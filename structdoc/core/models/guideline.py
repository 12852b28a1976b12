from __future__ import annotations

"""Guideline state variants produced by the hotzone classifier.

Two guideline families exist while dragging. The *vertical* family marks a
column edge or an editor border where a drop creates or extends a column
layout; the *horizontal* family marks an insertion line between blocks. Both
are plain values tagged with the document version they were computed
against, so a drop can tell whether they went stale.
"""

from dataclasses import dataclass
from typing import Optional, Union

__all__ = [
    "IdleGuideline",
    "ColumnsEdgeGuideline",
    "EditorBorderGuideline",
    "GuidelineState",
    "HorizontalGuidelineState",
    "IDLE",
    "HIDDEN_HORIZONTAL",
    "REASON_OK",
    "REASON_READONLY",
    "REASON_NO_DRAGGING",
    "REASON_OUTSIDE_EDITOR",
    "REASON_DROP_ON_SELF",
    "REASON_COLUMN_GAP",
    "REASON_NO_RECT",
]

REASON_OK = "ok"
REASON_READONLY = "readonly"
REASON_NO_DRAGGING = "no-dragging"
REASON_OUTSIDE_EDITOR = "outside-editor"
REASON_DROP_ON_SELF = "drop-on-self"
REASON_COLUMN_GAP = "column-gap-hotzone"
REASON_NO_RECT = "no-rect"


@dataclass(frozen=True)
class IdleGuideline:
    kind: str = "idle"

    @property
    def is_active(self) -> bool:
        return False


@dataclass(frozen=True)
class ColumnsEdgeGuideline:
    """Pointer sits on the gap between two columns of an existing container.

    ``column_index`` is the index of the column a dropped fragment is
    inserted after.
    """

    edge_x: float
    side: str
    column_index: int
    container_pos: int
    top: float
    bottom: float
    doc_version: int
    kind: str = "columns-edge"

    @property
    def is_active(self) -> bool:
        return True


@dataclass(frozen=True)
class EditorBorderGuideline:
    """Pointer sits outside the left/right editor border next to a block."""

    edge_x: float
    side: str
    target_pos: int
    is_inside_columns: bool
    top: float
    bottom: float
    doc_version: int
    kind: str = "editor-border"

    @property
    def is_active(self) -> bool:
        return True


GuidelineState = Union[IdleGuideline, ColumnsEdgeGuideline, EditorBorderGuideline]

IDLE = IdleGuideline()


@dataclass(frozen=True)
class HorizontalGuidelineState:
    is_visible: bool
    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0
    reason: str = REASON_NO_DRAGGING
    drop_pos: Optional[int] = None

    @classmethod
    def hidden(cls, reason: str) -> "HorizontalGuidelineState":
        return cls(is_visible=False, reason=reason)


HIDDEN_HORIZONTAL = HorizontalGuidelineState.hidden(REASON_NO_DRAGGING)
