from __future__ import annotations

"""Layout snapshot consumed by the hotzone classifier.

A front end measures its rendered blocks and hands the result over as a
:class:`LayoutSnapshot`: the editor rectangle plus a tree of
:class:`LayoutBox` entries, each tying a document position to the bounding
rectangle of the node rendered there. Coordinates are viewport pixels.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

__all__ = ["Rect", "LayoutBox", "LayoutSnapshot"]


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def contains_y(self, y: float) -> bool:
        return self.top <= y <= self.bottom


@dataclass(frozen=True)
class LayoutBox:
    """Rendered extent of the node starting at document position ``pos``."""

    pos: int
    node_type: str
    rect: Rect
    children: Tuple["LayoutBox", ...] = ()


@dataclass(frozen=True)
class LayoutSnapshot:
    editor_rect: Rect
    boxes: Tuple[LayoutBox, ...] = field(default_factory=tuple)

    def iter_boxes(self) -> Iterator[Tuple[LayoutBox, int]]:
        """Yield ``(box, depth)`` pairs in pre-order, top-level boxes at depth 0."""
        stack: List[Tuple[LayoutBox, int]] = [(box, 0) for box in reversed(self.boxes)]
        while stack:
            box, depth = stack.pop()
            yield box, depth
            stack.extend((child, depth + 1) for child in reversed(box.children))

    def box_at(self, pos: int) -> Optional[LayoutBox]:
        for box, _depth in self.iter_boxes():
            if box.pos == pos:
                return box
        return None

    def boxes_of_type(self, node_type: str) -> List[LayoutBox]:
        return [box for box, _depth in self.iter_boxes() if box.node_type == node_type]
