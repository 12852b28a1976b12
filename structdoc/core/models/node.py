from __future__ import annotations

"""Immutable, position-addressed document tree.

Positions address the gaps between tokens of the pre-order flattening of the
tree. Every non-text node contributes an opening and a closing token around
its content, a text node contributes one token per character. The tokens of
the root ``doc`` node are not counted, so position ``0`` is the start of the
document content and ``doc.content_size`` is its end.

Nodes are never mutated in place. Edits build new nodes that share the
untouched subtrees of the previous document (see
:mod:`structdoc.core.models.transform`), which is what makes a document value
safe to keep as an undo snapshot or to compare against a later version.

Examples
--------
    doc = Node("doc", children=(
        Node("heading", {"level": 1}, (Node("text", text="A"),)),
        Node("paragraph"),
    ))
    doc.content_size          # 3 + 2
    doc.node_at(3).type       # "paragraph"
    doc.resolve(1).parent     # the heading
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

__all__ = ["Node", "ResolvedPos"]


@dataclass(frozen=True)
class Node:
    """A single node of the document tree.

    Attributes
    ----------
    type
        Node type name as declared in the schema (``"heading"``, ``"column"``…).
    attrs
        Attribute values. Treated as read-only; use :meth:`with_attrs`.
    children
        Child nodes in document order. Always empty for text nodes.
    text
        Character content of a ``text`` node, ``None`` for every other node.
    """

    type: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    children: Tuple["Node", ...] = ()
    text: Optional[str] = None
    content_size: int = field(init=False, repr=False, compare=False, default=0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", dict(self.attrs or {}))
        object.__setattr__(self, "children", tuple(self.children))
        if self.text is not None:
            if self.children:
                raise ValueError("Text nodes cannot have children")
            object.__setattr__(self, "content_size", len(self.text))
        else:
            object.__setattr__(self, "content_size", sum(child.size for child in self.children))

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------
    @property
    def is_text(self) -> bool:
        return self.text is not None

    @property
    def size(self) -> int:
        """Number of position slots the node occupies, delimiters included."""
        if self.is_text:
            return self.content_size
        return self.content_size + 2

    @property
    def child_count(self) -> int:
        return len(self.children)

    def child(self, index: int) -> "Node":
        return self.children[index]

    @property
    def text_content(self) -> str:
        if self.is_text:
            return self.text or ""
        return "".join(child.text_content for child in self.children)

    # ------------------------------------------------------------------
    # Copy helpers
    # ------------------------------------------------------------------
    def with_attrs(self, **changes: Any) -> "Node":
        """Return a copy with ``changes`` merged over the current attributes."""
        merged = dict(self.attrs)
        merged.update(changes)
        return Node(self.type, merged, self.children, self.text)

    def with_markup(self, type: Optional[str] = None, attrs: Optional[Dict[str, Any]] = None) -> "Node":
        return Node(type or self.type, self.attrs if attrs is None else attrs, self.children, self.text)

    def copy(self, children: Tuple["Node", ...]) -> "Node":
        """Return a node of the same type and attributes with new children."""
        return Node(self.type, self.attrs, tuple(children))

    def replace_child(self, index: int, node: "Node") -> "Node":
        children = list(self.children)
        children[index] = node
        return self.copy(tuple(children))

    # ------------------------------------------------------------------
    # Addressing
    # ------------------------------------------------------------------
    def iter_children(self, start: int = 0) -> Iterator[Tuple["Node", int, int]]:
        """Yield ``(child, pos, index)`` with ``pos`` offset by ``start``."""
        pos = start
        for index, child in enumerate(self.children):
            yield child, pos, index
            pos += child.size

    def find_index(self, offset: int) -> Tuple[int, int]:
        """Return ``(index, child_offset)`` of the child covering ``offset``.

        ``offset`` is relative to this node's content. When it sits exactly on
        a child boundary the child *after* the boundary is reported; at the end
        of the content the index equals :attr:`child_count`.
        """
        if offset < 0 or offset > self.content_size:
            raise IndexError(f"Offset {offset} outside of {self.type} content (size {self.content_size})")
        if offset == self.content_size:
            return len(self.children), offset
        pos = 0
        for index, child in enumerate(self.children):
            end = pos + child.size
            if end > offset:
                return index, pos
            pos = end
        return len(self.children), pos

    def node_at(self, pos: int) -> Optional["Node"]:
        """Return the node starting directly after ``pos``, or ``None``.

        Positions inside a text node report that text node.
        """
        node = self
        while True:
            if node.is_text or pos < 0 or pos > node.content_size:
                return None
            index, offset = node.find_index(pos)
            if index >= node.child_count:
                return None
            child = node.children[index]
            if offset == pos or child.is_text:
                return child
            node = child
            pos -= offset + 1

    def resolve(self, pos: int) -> "ResolvedPos":
        """Resolve ``pos`` into its ancestor chain and parent offset."""
        if pos < 0 or pos > self.content_size:
            raise IndexError(f"Position {pos} out of range (0..{self.content_size})")
        path: List[Tuple[Node, int, int]] = []
        node = self
        start = 0
        parent_offset = pos
        while True:
            index, offset = node.find_index(parent_offset)
            remainder = parent_offset - offset
            path.append((node, index, start + offset))
            if remainder == 0:
                break
            child = node.children[index]
            if child.is_text:
                break
            node = child
            start += offset + 1
            parent_offset = remainder - 1
        return ResolvedPos(pos, path, parent_offset)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def descendants(self, start: int = 0) -> Iterator[Tuple["Node", int, "Node", int]]:
        """Pre-order walk yielding ``(node, pos, parent, index)``.

        ``pos`` is the position before ``node``; pass the content start of
        this node as ``start`` to get absolute positions for a subtree.
        """
        for child, pos, index in self.iter_children(start):
            yield child, pos, self, index
            if child.children:
                yield from child.descendants(pos + 1)

    def nodes_between(
        self,
        from_: int,
        to: int,
        descend: Optional[Callable[["Node", int], bool]] = None,
        start: int = 0,
    ) -> Iterator[Tuple["Node", int]]:
        """Yield ``(node, pos)`` for nodes overlapping ``[from_, to)``.

        ``descend`` decides whether the walk enters a yielded node; by
        default every node is entered.
        """
        for child, pos, _index in self.iter_children(start):
            end = pos + child.size
            if end <= from_:
                continue
            if pos >= to:
                break
            yield child, pos
            if child.children and (descend is None or descend(child, pos)):
                yield from child.nodes_between(from_, to, descend, pos + 1)


class ResolvedPos:
    """A position resolved against a specific document value.

    ``path`` holds one ``(node, index, offset)`` triple per depth: the node at
    that depth, the index of the child the position points into (or after),
    and the absolute position where that child starts.
    """

    def __init__(self, pos: int, path: List[Tuple[Node, int, int]], parent_offset: int) -> None:
        self.pos = pos
        self._path = path
        self.parent_offset = parent_offset

    def __repr__(self) -> str:
        return f"ResolvedPos(pos={self.pos}, depth={self.depth}, parent={self.parent.type})"

    @property
    def depth(self) -> int:
        return len(self._path) - 1

    def _depth(self, depth: Optional[int]) -> int:
        if depth is None:
            return self.depth
        if depth < 0:
            return self.depth + depth
        return depth

    def node(self, depth: Optional[int] = None) -> Node:
        return self._path[self._depth(depth)][0]

    def index(self, depth: Optional[int] = None) -> int:
        return self._path[self._depth(depth)][1]

    def start(self, depth: Optional[int] = None) -> int:
        """Absolute position where the content of ``node(depth)`` starts."""
        d = self._depth(depth)
        return 0 if d == 0 else self._path[d - 1][2] + 1

    def end(self, depth: Optional[int] = None) -> int:
        d = self._depth(depth)
        return self.start(d) + self.node(d).content_size

    def before(self, depth: Optional[int] = None) -> int:
        """Absolute position directly before ``node(depth)``."""
        d = self._depth(depth)
        if d == 0:
            raise ValueError("There is no position before the top-level node")
        return self._path[d - 1][2]

    def after(self, depth: Optional[int] = None) -> int:
        d = self._depth(depth)
        return self.before(d) + self.node(d).size

    @property
    def parent(self) -> Node:
        return self.node(self.depth)

    @property
    def doc(self) -> Node:
        return self.node(0)

    @property
    def text_offset(self) -> int:
        """Offset into the text node the position points into (0 on boundaries)."""
        return self.pos - self._path[-1][2]

    @property
    def node_after(self) -> Optional[Node]:
        parent = self.parent
        index = self.index()
        if index >= parent.child_count:
            return None
        child = parent.child(index)
        offset = self.text_offset
        if offset:
            return Node("text", text=(child.text or "")[offset:])
        return child

    @property
    def node_before(self) -> Optional[Node]:
        parent = self.parent
        index = self.index()
        offset = self.text_offset
        if offset:
            return Node("text", text=(parent.child(index).text or "")[:offset])
        return parent.child(index - 1) if index > 0 else None

    def ancestors(self) -> Iterator[Tuple[int, Node]]:
        """Yield ``(depth, node)`` from the innermost parent up to the root."""
        for d in range(self.depth, -1, -1):
            yield d, self.node(d)
