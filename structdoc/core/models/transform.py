from __future__ import annotations

"""Steps, position maps and transactions.

A :class:`Transaction` accumulates an ordered list of steps against a
document value. Each step produces a new document (the previous one is left
untouched) plus a :class:`StepMap` describing how positions shift. The
transaction's :class:`Mapping` composes those maps so that any position
computed against :attr:`Transaction.before` can be carried forward to the
current :attr:`Transaction.doc`.

Nothing here is observable until a caller commits ``tr.doc`` somewhere (see
:meth:`structdoc.core.context.EditorContext.dispatch`), which is what makes
transactions atomic.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from structdoc.core.models.node import Node

__all__ = [
    "StepError",
    "StepMap",
    "Mapping",
    "Step",
    "ReplaceStep",
    "AttrStep",
    "Transaction",
    "CLEANUP_SKIP_META",
    "FOLD_CHANGED_META",
    "NUMBERING_CHANGED_META",
    "ADD_TO_HISTORY_META",
]

logger = logging.getLogger(__name__)

# Transaction meta keys
CLEANUP_SKIP_META = "columnCleanupSkip"
FOLD_CHANGED_META = "fold-changed"
NUMBERING_CHANGED_META = "numbering-changed"
ADD_TO_HISTORY_META = "addToHistory"


class StepError(Exception):
    """Raised when a step cannot be applied to the given document."""


class StepMap:
    """Position map of a single step.

    ``ranges`` is a sequence of ``(start, old_size, new_size)`` triples in
    ascending order of ``start`` (pre-step coordinates).
    """

    EMPTY: "StepMap"

    def __init__(self, ranges: Sequence[Tuple[int, int, int]] = ()) -> None:
        self.ranges: Tuple[Tuple[int, int, int], ...] = tuple(ranges)

    def __repr__(self) -> str:
        return f"StepMap({list(self.ranges)!r})"

    def map(self, pos: int, assoc: int = 1) -> int:
        """Map ``pos`` through this step.

        A position at the start of a replaced range stays at its start, one
        at the end moves to the end of the new content. Positions strictly
        inside a replaced range and pure insertion points follow ``assoc``
        (negative: before the new content, positive: after it).
        """
        diff = 0
        for start, old_size, new_size in self.ranges:
            if start > pos:
                break
            end = start + old_size
            if pos <= end:
                if old_size == 0:
                    side = assoc
                elif pos == start:
                    side = -1
                elif pos == end:
                    side = 1
                else:
                    side = assoc
                return start + diff + (0 if side < 0 else new_size)
            diff += new_size - old_size
        return pos + diff

    def is_deleted(self, pos: int) -> bool:
        """Return True when ``pos`` lies strictly inside a replaced range."""
        for start, old_size, _new_size in self.ranges:
            if start < pos < start + old_size:
                return True
        return False


StepMap.EMPTY = StepMap()


class Mapping:
    """Ordered composition of step maps."""

    def __init__(self, maps: Optional[Iterable[StepMap]] = None) -> None:
        self.maps: List[StepMap] = list(maps or [])

    def append(self, step_map: StepMap) -> None:
        self.maps.append(step_map)

    def map(self, pos: int, assoc: int = 1) -> int:
        for step_map in self.maps:
            pos = step_map.map(pos, assoc)
        return pos


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def _join_text(children: Sequence[Node]) -> Tuple[Node, ...]:
    """Merge adjacent text nodes and drop empty ones."""
    joined: List[Node] = []
    for child in children:
        if child.is_text:
            if not child.text:
                continue
            if joined and joined[-1].is_text:
                joined[-1] = Node("text", text=(joined[-1].text or "") + child.text)
                continue
        joined.append(child)
    return tuple(joined)


def _replace_in_parent(doc: Node, from_: int, to: int, content: Tuple[Node, ...]) -> Node:
    """Return ``doc`` with the range ``[from_, to)`` replaced by ``content``.

    Both boundaries must sit in the same parent node. A boundary inside a
    text node splits it; the pieces outside the range are kept.
    """
    if from_ > to:
        raise StepError(f"Invalid range {from_}..{to}")
    try:
        rfrom = doc.resolve(from_)
        rto = doc.resolve(to)
    except IndexError as exc:
        raise StepError(str(exc)) from exc
    if rfrom.depth != rto.depth or rfrom.start() != rto.start():
        raise StepError(f"Range {from_}..{to} does not share a parent")

    parent = rfrom.parent
    children = parent.children
    head = children[:rfrom.index()]
    if rfrom.text_offset:
        head += (rfrom.node_before,)
    end_index = rto.index()
    tail = children[end_index:]
    if rto.text_offset:
        tail = (rto.node_after,) + children[end_index + 1:]
    merged = head + tuple(content) + tail
    if rfrom.text_offset or rto.text_offset:
        merged = _join_text(merged)
    updated: Node = parent.copy(merged)
    for depth in range(rfrom.depth - 1, -1, -1):
        updated = rfrom.node(depth).replace_child(rfrom.index(depth), updated)
    return updated


class Step:
    """Base class of document steps."""

    def apply(self, doc: Node) -> Node:  # pragma: no cover - interface
        raise NotImplementedError

    def get_map(self) -> StepMap:
        return StepMap.EMPTY


class ReplaceStep(Step):
    """Replace the child range ``[from_, to)`` of one parent with ``content``."""

    def __init__(self, from_: int, to: int, content: Sequence[Node] = ()) -> None:
        self.from_ = from_
        self.to = to
        self.content: Tuple[Node, ...] = tuple(content)

    def __repr__(self) -> str:
        return f"ReplaceStep({self.from_}, {self.to}, {[n.type for n in self.content]})"

    def apply(self, doc: Node) -> Node:
        return _replace_in_parent(doc, self.from_, self.to, self.content)

    def get_map(self) -> StepMap:
        new_size = sum(node.size for node in self.content)
        return StepMap([(self.from_, self.to - self.from_, new_size)])


class AttrStep(Step):
    """Replace the attributes (and optionally the type) of the node at ``pos``."""

    def __init__(self, pos: int, attrs: Dict[str, Any], type: Optional[str] = None) -> None:
        self.pos = pos
        self.attrs = dict(attrs)
        self.type = type

    def __repr__(self) -> str:
        return f"AttrStep({self.pos}, {self.attrs!r}, type={self.type!r})"

    def apply(self, doc: Node) -> Node:
        target = doc.node_at(self.pos)
        if target is None or target.is_text:
            raise StepError(f"No node at position {self.pos}")
        rpos = doc.resolve(self.pos)
        if rpos.text_offset or rpos.node_after is not target:
            raise StepError(f"Position {self.pos} does not point at a node boundary")
        replacement = target.with_markup(self.type, self.attrs)
        return _replace_in_parent(doc, self.pos, self.pos + target.size, (replacement,))


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


class Transaction:
    """An atomic, ordered set of steps against a starting document.

    Examples
    --------
        tr = Transaction(doc)
        tr.insert(0, schema.paragraph("x"))
        tr.set_node_attribute(tr.mapping.map(pos), "collapsed", True)
        context.dispatch(tr)
    """

    def __init__(self, doc: Node) -> None:
        self.before: Node = doc
        self.doc: Node = doc
        self.steps: List[Step] = []
        self.mapping = Mapping()
        self._meta: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"Transaction(steps={self.steps!r}, meta={self._meta!r})"

    # -------------------------------------------------------------- steps

    def step(self, step: Step) -> "Transaction":
        """Apply ``step`` to the current document; raises StepError."""
        new_doc = step.apply(self.doc)
        self.steps.append(step)
        self.mapping.append(step.get_map())
        self.doc = new_doc
        return self

    def replace_with(self, from_: int, to: int, content: Union[Node, Sequence[Node]] = ()) -> "Transaction":
        nodes = (content,) if isinstance(content, Node) else tuple(content)
        return self.step(ReplaceStep(from_, to, nodes))

    def insert(self, pos: int, content: Union[Node, Sequence[Node]]) -> "Transaction":
        return self.replace_with(pos, pos, content)

    def delete(self, from_: int, to: int) -> "Transaction":
        return self.replace_with(from_, to, ())

    def set_node_markup(
        self,
        pos: int,
        type: Optional[str] = None,
        attrs: Optional[Dict[str, Any]] = None,
    ) -> "Transaction":
        """Change the type and/or replace the full attribute set of a node."""
        target = self.doc.node_at(pos)
        if target is None:
            raise StepError(f"No node at position {pos}")
        return self.step(AttrStep(pos, target.attrs if attrs is None else attrs, type))

    def set_node_attribute(self, pos: int, name: str, value: Any) -> "Transaction":
        target = self.doc.node_at(pos)
        if target is None:
            raise StepError(f"No node at position {pos}")
        attrs = dict(target.attrs)
        attrs[name] = value
        return self.step(AttrStep(pos, attrs))

    # -------------------------------------------------------------- state

    @property
    def doc_changed(self) -> bool:
        return bool(self.steps)

    def map(self, pos: int, assoc: int = 1) -> int:
        return self.mapping.map(pos, assoc)

    def set_meta(self, key: str, value: Any) -> "Transaction":
        self._meta[key] = value
        return self

    def get_meta(self, key: str, default: Any = None) -> Any:
        return self._meta.get(key, default)
