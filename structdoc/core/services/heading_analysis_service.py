from __future__ import annotations

"""Heading analysis over the document tree (UI-agnostic).

This module computes the derived heading state a front end needs: the range a
collapsed heading hides, the dotted numbering labels of numbered headings and
the list of blocks currently hidden by folds. All functions are pure and
total: a position that does not address a heading, or a heading with nothing
to hide, yields ``None`` / empty results rather than exceptions.

Two depths are in play. Folding uses the heading ``level`` (clamped to 1..6),
numbering uses the heading ``indent``. They are independent on purpose: a
numbered heading may be indented deeper than its level suggests.
"""

import logging
from typing import List, Optional, Tuple

from structdoc.core.models.node import Node, ResolvedPos
from structdoc.core.models.ranges import FoldRange, NumberingMap
from structdoc.core.models.schema import (
    DEFAULT_SCHEMA,
    MAX_HEADING_LEVEL,
    MAX_INDENT,
    MIN_HEADING_LEVEL,
    Schema,
)
from structdoc.core.utils import clamp

__all__ = [
    "get_heading_depth",
    "get_heading_indent",
    "heading_at",
    "calculate_fold_range",
    "calculate_numbering",
    "calculate_folded_blocks",
    "display_label",
]

logger = logging.getLogger(__name__)


def get_heading_depth(attrs: dict) -> int:
    """Return the fold depth of a heading: its level clamped to 1..6."""
    try:
        level = int(float(attrs.get("level", MIN_HEADING_LEVEL)))
    except (TypeError, ValueError):
        return MIN_HEADING_LEVEL
    return int(clamp(level, MIN_HEADING_LEVEL, MAX_HEADING_LEVEL))


def get_heading_indent(attrs: dict) -> int:
    """Return the numbering depth of a heading: its indent clamped to 0..5."""
    try:
        indent = int(float(attrs.get("indent", 0) or 0))
    except (TypeError, ValueError):
        return 0
    return int(clamp(indent, 0, MAX_INDENT))


def heading_at(doc: Node, pos: int) -> Optional[Node]:
    """Return the heading starting exactly at ``pos``, else ``None``."""
    if pos < 0 or pos > doc.content_size:
        return None
    node = doc.node_at(pos)
    if node is None or node.type != "heading":
        return None
    rpos = doc.resolve(pos)
    if rpos.text_offset or rpos.node_after is not node:
        return None
    return node


def _isolating_bounds(rpos: ResolvedPos, schema: Schema) -> Tuple[int, int]:
    """Content bounds of the nearest isolating ancestor, or of the document."""
    for depth in range(rpos.depth, 0, -1):
        if schema.is_isolating(rpos.node(depth)):
            return rpos.start(depth), rpos.end(depth)
    return 0, rpos.doc.content_size


# ------------------------------------------------------------------------- Folding


def calculate_fold_range(heading_pos: int, doc: Node, schema: Schema = DEFAULT_SCHEMA) -> Optional[FoldRange]:
    """Return the range hidden when the heading at ``heading_pos`` collapses.

    The range starts right after the heading and ends at the first later
    heading of the same isolating container whose depth is lower than or
    equal to the origin's, or at the end of that container. Headings that
    live in a deeper isolating container (a table cell or a column nested
    below the origin's container) are folded along with it and never stop
    the range.

    Parameters
    ----------
    heading_pos
        Position directly before the heading node.
    doc
        Document the position was resolved against.
    schema
        Schema deciding which node types are isolating.

    Returns
    -------
    Optional[FoldRange]
        ``None`` when ``heading_pos`` does not address a heading or when
        there is nothing after it to hide.
    """
    heading = heading_at(doc, heading_pos)
    if heading is None:
        logger.debug("Fold range requested for non-heading pos=%s", heading_pos)
        return None

    origin_depth = get_heading_depth(heading.attrs)
    owner_start, container_end = _isolating_bounds(doc.resolve(heading_pos), schema)
    from_ = heading_pos + heading.size
    if from_ >= container_end:
        return None

    to = container_end
    for node, pos in doc.nodes_between(from_, container_end, lambda n, p: not schema.is_textblock(n)):
        if pos < from_ or node.type != "heading":
            continue
        candidate_owner, _end = _isolating_bounds(doc.resolve(pos), schema)
        if candidate_owner != owner_start:
            continue
        if get_heading_depth(node.attrs) <= origin_depth:
            to = pos
            break

    if from_ >= to:
        return None
    return FoldRange(from_, to)


def _covered_blocks(doc: Node, fold: FoldRange, schema: Schema) -> List[FoldRange]:
    """Maximal non-text nodes lying fully inside ``fold``."""
    covered: List[FoldRange] = []

    def descend(node: Node, pos: int) -> bool:
        if schema.is_textblock(node):
            return False
        return not (pos >= fold.from_ and pos + node.size <= fold.to)

    for node, pos in doc.nodes_between(fold.from_, fold.to, descend):
        if node.is_text:
            continue
        end = pos + node.size
        if pos >= fold.from_ and end <= fold.to:
            covered.append(FoldRange(pos, end))
    return covered


def calculate_folded_blocks(doc: Node, schema: Schema = DEFAULT_SCHEMA) -> List[FoldRange]:
    """Return the ranges of blocks hidden by collapsed headings.

    Ranges nested in another hidden range are dropped; the result is in
    document order.
    """
    collected: List[FoldRange] = []
    for node, pos, _parent, _index in doc.descendants():
        if node.type != "heading" or not node.attrs.get("collapsed"):
            continue
        fold = calculate_fold_range(pos, doc, schema)
        if fold is not None:
            collected.extend(_covered_blocks(doc, fold, schema))

    collected.sort(key=lambda r: (r.from_, -r.to))
    result: List[FoldRange] = []
    for block in collected:
        if result and block.from_ >= result[-1].from_ and block.to <= result[-1].to:
            continue
        result.append(block)
    return result


# ----------------------------------------------------------------------- Numbering


def calculate_numbering(doc: Node) -> NumberingMap:
    """Return dotted labels for every numbered heading, keyed by position.

    A single pre-order pass keeps one counter per indent level. A numbered
    heading at indent ``n`` truncates the stack to ``n + 1`` entries,
    zero-fills it up to that length, then increments counter ``n``.
    Headings without ``numbered`` neither read nor reset the stack.
    """
    counters: List[int] = []
    labels: NumberingMap = {}
    for node, pos, _parent, _index in doc.descendants():
        if node.type != "heading" or not node.attrs.get("numbered"):
            continue
        indent = get_heading_indent(node.attrs)
        del counters[indent + 1:]
        while len(counters) < indent + 1:
            counters.append(0)
        counters[indent] += 1
        labels[pos] = ".".join(str(c) for c in counters[: indent + 1])
    return labels


def display_label(numbering: NumberingMap, pos: int, heading: Node) -> Optional[str]:
    """Label shown next to a heading: its manual number, else the computed one."""
    manual = heading.attrs.get("manualNumber")
    if manual:
        return str(manual)
    return numbering.get(pos)
