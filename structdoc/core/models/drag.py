from __future__ import annotations

"""Drag payload and version-tagged positions."""

from dataclasses import dataclass
from typing import Optional, Tuple

from structdoc.core.models.node import Node

__all__ = ["DraggedFragment", "VersionedPos"]


@dataclass(frozen=True)
class VersionedPos:
    """A position together with the document version it was resolved against."""

    pos: int
    doc_version: int


@dataclass(frozen=True)
class DraggedFragment:
    """Nodes being dragged and, for a move, the source range they came from.

    ``source_from``/``source_to`` are positions in document version
    ``doc_version``; they are only used when ``is_move`` is set. A fragment
    without a version is trusted to match the current document.
    """

    content: Tuple[Node, ...]
    source_from: Optional[int] = None
    source_to: Optional[int] = None
    is_move: bool = False
    doc_version: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", tuple(self.content))

    @property
    def has_source(self) -> bool:
        return self.is_move and self.source_from is not None and self.source_to is not None

    def overlaps(self, from_: int, to: int) -> bool:
        """Return True when the source range intersects ``[from_, to)``."""
        if not self.has_source:
            return False
        return self.source_from < to and from_ < self.source_to
