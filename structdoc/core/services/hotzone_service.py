from __future__ import annotations

"""Pointer hotzone classification for drag and drop (UI-agnostic).

Everything here is a pure function of pointer coordinates, a
:class:`LayoutSnapshot` measured by the front end and the current document.
Nothing mutates the tree: the classifiers turn continuous coordinates into a
discrete, serializable guideline state that the drop service later consumes.

Two vertical hotzone families are kept disjoint on purpose. Gaps *between*
the columns of a container are classified by :func:`detect_column_gap`; the
outer left and right edges belong to :func:`detect_editor_border`, which
only fires outside the editor.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence

from structdoc.config.settings import EngineSettings
from structdoc.core.models.drag import DraggedFragment
from structdoc.core.models.guideline import (
    HIDDEN_HORIZONTAL,
    IDLE,
    REASON_COLUMN_GAP,
    REASON_DROP_ON_SELF,
    REASON_NO_DRAGGING,
    REASON_NO_RECT,
    REASON_OK,
    REASON_OUTSIDE_EDITOR,
    REASON_READONLY,
    ColumnsEdgeGuideline,
    EditorBorderGuideline,
    GuidelineState,
    HorizontalGuidelineState,
)
from structdoc.core.models.layout import LayoutBox, LayoutSnapshot, Rect
from structdoc.core.models.node import Node
from structdoc.core.services.column_service import NestingValidator, columns_at
from structdoc.core.utils import clamp

__all__ = [
    "ColumnGapHit",
    "EditorBorderHit",
    "detect_column_gap",
    "detect_editor_border",
    "resolve_target_block",
    "VerticalGuidelineCalculator",
    "HorizontalGuidelineCalculator",
    "GuidelineSession",
]

logger = logging.getLogger(__name__)

_CONTAINER_TYPES = frozenset({"columns", "table", "callout"})
_LIST_TYPES = frozenset({"bulletList", "orderedList", "taskList"})


@dataclass(frozen=True)
class ColumnGapHit:
    column_index: int
    gap_center: float


@dataclass(frozen=True)
class EditorBorderHit:
    side: str
    edge_x: float


# ------------------------------------------------------------------------- Detection


def detect_column_gap(
    x: float,
    y: float,
    container_rect: Rect,
    column_rects: Sequence[Rect],
    threshold: float = 24,
) -> Optional[ColumnGapHit]:
    """Return the gap between two adjacent columns the pointer sits on.

    Gap ``i`` lies between columns ``i`` and ``i + 1``. The outer edges of
    the container are never reported.
    """
    if y < container_rect.top - threshold or y > container_rect.bottom + threshold:
        return None
    for index in range(len(column_rects) - 1):
        gap_center = (column_rects[index].right + column_rects[index + 1].left) / 2
        if abs(x - gap_center) <= threshold:
            return ColumnGapHit(index, gap_center)
    return None


def detect_editor_border(
    x: float,
    y: float,
    editor_rect: Rect,
    horizontal_threshold: float = 1000,
    vertical_tolerance: float = 50,
) -> Optional[EditorBorderHit]:
    """Return the editor side the pointer hovers just outside of."""
    if y < editor_rect.top - vertical_tolerance or y > editor_rect.bottom + vertical_tolerance:
        return None
    if editor_rect.left - horizontal_threshold <= x < editor_rect.left:
        return EditorBorderHit("left", editor_rect.left)
    if editor_rect.right < x <= editor_rect.right + horizontal_threshold:
        return EditorBorderHit("right", editor_rect.right)
    return None


def resolve_target_block(x: float, y: float, layout: LayoutSnapshot) -> Optional[LayoutBox]:
    """Map a pointer to the structural unit a guideline should span.

    ``y`` is clamped to the editor. Among the boxes whose vertical extent
    contains it, the outermost container (columns, table, callout) wins, then
    the outermost list, then the outermost plain block. When the pointer is
    horizontally inside the editor, boxes also containing ``x`` are tried
    first. With no box under the pointer, the top-level box nearest to ``y``
    is returned.
    """
    editor = layout.editor_rect
    y = clamp(y, editor.top, editor.bottom)
    inside_x = editor.left <= x <= editor.right

    def pick(require_x: bool) -> Optional[LayoutBox]:
        container: Optional[LayoutBox] = None
        list_box: Optional[LayoutBox] = None
        block: Optional[LayoutBox] = None
        for box, _depth in layout.iter_boxes():
            if not box.rect.contains_y(y):
                continue
            if require_x and not (box.rect.left <= x <= box.rect.right):
                continue
            if box.node_type in _CONTAINER_TYPES:
                if container is None:
                    container = box
            elif box.node_type in _LIST_TYPES:
                if list_box is None:
                    list_box = box
            elif block is None:
                block = box
        return container or list_box or block

    found = pick(True) if inside_x else None
    if found is None:
        found = pick(False)
    if found is None and layout.boxes:
        found = min(
            layout.boxes,
            key=lambda b: 0.0 if b.rect.contains_y(y) else min(abs(y - b.rect.top), abs(y - b.rect.bottom)),
        )
    return found


def _column_rects(container: LayoutBox) -> List[Rect]:
    rects = [child.rect for child in container.children if child.node_type == "column"]
    return sorted(rects, key=lambda r: r.left)


# ------------------------------------------------------------------------- Vertical


class VerticalGuidelineCalculator:
    """Build vertical guideline states from pointer positions."""

    def __init__(self, settings: Optional[EngineSettings] = None) -> None:
        self.settings = settings or EngineSettings()

    def calculate_for_editor_dragover(
        self,
        x: float,
        y: float,
        layout: LayoutSnapshot,
        doc: Node,
        doc_version: int,
    ) -> GuidelineState:
        """Classify a dragover inside the editor: column gaps only."""
        if not self.settings.enable_column_guideline:
            return IDLE
        threshold = self.settings.column_hotzone_threshold
        for box in layout.boxes_of_type("columns"):
            hit = detect_column_gap(x, y, box.rect, _column_rects(box), threshold)
            if hit is None:
                continue
            if columns_at(doc, box.pos) is None:
                logger.debug("Gap hit on stale columns box pos=%s", box.pos)
                continue
            logger.debug("Column gap hit pos=%s gap=%s", box.pos, hit.column_index)
            return ColumnsEdgeGuideline(
                edge_x=hit.gap_center,
                side="right",
                column_index=hit.column_index,
                container_pos=box.pos,
                top=box.rect.top,
                bottom=box.rect.bottom,
                doc_version=doc_version,
            )
        return IDLE

    def calculate_for_global_dragover(
        self,
        x: float,
        y: float,
        layout: LayoutSnapshot,
        doc: Node,
        doc_version: int,
    ) -> GuidelineState:
        """Classify a dragover anywhere in the window: editor borders only."""
        if not self.settings.enable_editor_border_guideline:
            return IDLE
        editor = layout.editor_rect
        if editor.contains(x, y):
            return IDLE
        hit = detect_editor_border(
            x,
            y,
            editor,
            self.settings.editor_border_horizontal_threshold,
            self.settings.editor_border_vertical_tolerance,
        )
        if hit is None:
            return IDLE
        box = resolve_target_block(x, y, layout)
        if box is None or not (0 <= box.pos <= doc.content_size) or doc.node_at(box.pos) is None:
            return IDLE
        inside_columns = box.node_type == "columns" or NestingValidator.find_ancestor(doc, box.pos, "columns") is not None
        logger.debug("Editor border hit side=%s target=%s inside_columns=%s", hit.side, box.pos, inside_columns)
        return EditorBorderGuideline(
            edge_x=hit.edge_x,
            side=hit.side,
            target_pos=box.pos,
            is_inside_columns=inside_columns,
            top=box.rect.top,
            bottom=box.rect.bottom,
            doc_version=doc_version,
        )


# ------------------------------------------------------------------------- Horizontal


class HorizontalGuidelineCalculator:
    """Insert-between-blocks line shown while dragging inside the editor."""

    def __init__(self, settings: Optional[EngineSettings] = None) -> None:
        self.settings = settings or EngineSettings()

    def calculate(
        self,
        x: float,
        y: float,
        layout: LayoutSnapshot,
        doc: Node,
        fragment: Optional[DraggedFragment],
        editable: bool = True,
        vertical: GuidelineState = IDLE,
    ) -> HorizontalGuidelineState:
        if not editable:
            return HorizontalGuidelineState.hidden(REASON_READONLY)
        if fragment is None:
            return HorizontalGuidelineState.hidden(REASON_NO_DRAGGING)
        if not layout.editor_rect.contains(x, y):
            return HorizontalGuidelineState.hidden(REASON_OUTSIDE_EDITOR)
        if vertical.is_active or self._in_column_gap(x, y, layout):
            return HorizontalGuidelineState.hidden(REASON_COLUMN_GAP)

        box = resolve_target_block(x, y, layout)
        node = None
        if box is not None and 0 <= box.pos <= doc.content_size:
            node = doc.node_at(box.pos)
        if box is None or node is None or box.rect.height <= 0:
            return HorizontalGuidelineState.hidden(REASON_NO_RECT)

        if y < (box.rect.top + box.rect.bottom) / 2:
            line_y, drop_pos = box.rect.top, box.pos
        else:
            line_y, drop_pos = box.rect.bottom, box.pos + node.size
        if fragment.has_source and fragment.source_from <= drop_pos <= fragment.source_to:
            return HorizontalGuidelineState.hidden(REASON_DROP_ON_SELF)

        half = self.settings.horizontal_guideline_thickness / 2
        return HorizontalGuidelineState(
            is_visible=True,
            left=box.rect.left,
            right=box.rect.right,
            top=line_y - half,
            bottom=line_y + half,
            reason=REASON_OK,
            drop_pos=drop_pos,
        )

    def _in_column_gap(self, x: float, y: float, layout: LayoutSnapshot) -> bool:
        if not self.settings.enable_column_guideline:
            return False
        threshold = self.settings.column_hotzone_threshold
        return any(
            detect_column_gap(x, y, box.rect, _column_rects(box), threshold) is not None
            for box in layout.boxes_of_type("columns")
        )


# ------------------------------------------------------------------------- Session


class GuidelineSession:
    """One slot per guideline family; the vertical family preempts.

    While a vertical guideline is active the horizontal slot is forced to
    hidden. A horizontal guideline never hides a vertical one.
    """

    def __init__(self) -> None:
        self.vertical: GuidelineState = IDLE
        self.horizontal: HorizontalGuidelineState = HIDDEN_HORIZONTAL

    def __repr__(self) -> str:
        return f"GuidelineSession(vertical={self.vertical.kind}, horizontal={self.horizontal.reason})"

    def update_vertical(self, state: GuidelineState) -> None:
        self.vertical = state
        if state.is_active and self.horizontal.is_visible:
            self.horizontal = HorizontalGuidelineState.hidden(REASON_COLUMN_GAP)

    def update_horizontal(self, state: HorizontalGuidelineState) -> None:
        if self.vertical.is_active and state.is_visible:
            state = HorizontalGuidelineState.hidden(REASON_COLUMN_GAP)
        self.horizontal = state

    def reset(self) -> None:
        """Discard both slots (drop, drag end or document change)."""
        self.vertical = IDLE
        self.horizontal = HIDDEN_HORIZONTAL

    @property
    def is_idle(self) -> bool:
        return not self.vertical.is_active and not self.horizontal.is_visible
