from __future__ import annotations

"""Column container lifecycle: add, remove, resize, wrap and clean up.

A ``columns`` container holds between ``MIN_COLUMNS`` and ``MAX_COLUMNS``
``column`` children whose ``width`` attributes mirror the container's
``columnWidths``. This module keeps that invariant:

- :class:`ColumnService` validates user commands *before* building any
  transaction, so a rejected command never touches the document.
- :class:`CleanupExecutor` re-establishes the invariant after arbitrary
  edits by unwrapping containers left with a single column and removing
  empty columns, one action at a time until nothing is left to do.

Examples
--------
    service = ColumnService()
    result = service.add_column(ctx, columns_pos, after_index=0)
    if not result.success:
        print(result.message)
"""

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from structdoc.core.models.columns import (
    MAX_COLUMNS,
    MIN_COLUMNS,
    CleanupAction,
    NoCleanup,
    RemoveEmptyColumn,
    UnwrapSingleColumn,
    is_column_empty,
)
from structdoc.core.models.node import Node
from structdoc.core.models.results import (
    OperationResult,
    REASON_INVALID_TARGET,
    REASON_INVARIANT_VIOLATION,
    REASON_UNCHANGED,
)
from structdoc.core.models.schema import DEFAULT_SCHEMA, Schema
from structdoc.core.models.transform import CLEANUP_SKIP_META, StepError, Transaction
from structdoc.core.services.edit_support import commit, fail, step_failed
from structdoc.core.services.width_calculator import WidthCalculator

if TYPE_CHECKING:
    from structdoc.core.context import EditorContext

__all__ = [
    "detect_cleanup_action",
    "execute_cleanup",
    "find_columns_nodes",
    "columns_at",
    "sync_column_widths",
    "CleanupExecutor",
    "NestingValidator",
    "ColumnService",
]

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------- Helpers


def columns_at(doc: Node, pos: int) -> Optional[Node]:
    """Return the columns container starting exactly at ``pos``, else ``None``."""
    if pos < 0 or pos > doc.content_size:
        return None
    node = doc.node_at(pos)
    if node is None or node.type != "columns":
        return None
    rpos = doc.resolve(pos)
    if rpos.text_offset or rpos.node_after is not node:
        return None
    return node


def _child_pos(container: Node, container_pos: int, index: int) -> int:
    """Position before child ``index`` of the container at ``container_pos``."""
    return container_pos + 1 + sum(child.size for child in container.children[:index])


def sync_column_widths(tr: Transaction, container_pos: int, widths: Sequence[float]) -> Transaction:
    """Write ``widths`` to the container attrs and to each column's ``width``.

    Attribute steps never change node sizes, so the positions computed
    against the container before the loop stay valid throughout.
    """
    container = columns_at(tr.doc, container_pos)
    if container is None:
        raise StepError(f"No columns container at {container_pos}")
    widths = tuple(float(w) for w in widths)
    if len(widths) != container.child_count:
        raise StepError(f"{len(widths)} widths for {container.child_count} columns")

    attrs = dict(container.attrs)
    attrs["count"] = container.child_count
    attrs["columnWidths"] = widths
    tr.set_node_markup(container_pos, attrs=attrs)
    for (column, pos, index) in container.iter_children(container_pos + 1):
        if column.type == "column" and column.attrs.get("width") != widths[index]:
            tr.set_node_attribute(pos, "width", widths[index])
    return tr


def find_columns_nodes(doc: Node) -> List[Tuple[Node, int]]:
    """Return ``(container, pos)`` for every columns container in document order.

    The walk does not descend into a container once found.
    """
    found: List[Tuple[Node, int]] = []

    def walk(parent: Node, start: int) -> None:
        for child, pos, _index in parent.iter_children(start):
            if child.type == "columns":
                found.append((child, pos))
            elif child.children and not child.is_text:
                walk(child, pos + 1)

    walk(doc, 0)
    return found


# ------------------------------------------------------------------------- Cleanup


def detect_cleanup_action(container: Node, pos: int) -> CleanupAction:
    """Return the single cleanup action needed by ``container``, if any.

    Priority: unwrap a container with fewer than ``MIN_COLUMNS`` columns,
    then remove the first empty column. Only one action is reported; callers
    re-detect after executing it.
    """
    if container.type != "columns":
        return NoCleanup()
    if container.child_count < MIN_COLUMNS:
        return UnwrapSingleColumn(pos)
    for index, column in enumerate(container.children):
        if column.type == "column" and is_column_empty(column):
            return RemoveEmptyColumn(pos, index)
    return NoCleanup()


def execute_cleanup(tr: Transaction, action: CleanupAction, schema: Schema = DEFAULT_SCHEMA) -> Transaction:
    """Append the steps for ``action`` to ``tr`` and return it.

    Removing a column from a two-column container cascades into unwrapping
    it, leaving the surviving column's content in the parent.
    """
    if isinstance(action, NoCleanup):
        return tr

    container = columns_at(tr.doc, action.container_pos)
    if container is None:
        raise StepError(f"No columns container at {action.container_pos}")

    if isinstance(action, UnwrapSingleColumn):
        content = tuple(child for column in container.children for child in column.children)
        logger.debug("Cleanup: unwrap pos=%s blocks=%s", action.container_pos, len(content))
        return tr.replace_with(action.container_pos, action.container_pos + container.size, content)

    if isinstance(action, RemoveEmptyColumn):
        if not (0 <= action.column_index < container.child_count):
            raise StepError(f"Column index {action.column_index} out of range")
        column = container.child(action.column_index)
        column_pos = _child_pos(container, action.container_pos, action.column_index)
        tr.delete(column_pos, column_pos + column.size)
        new_count = container.child_count - 1
        logger.debug(
            "Cleanup: remove empty column pos=%s index=%s remaining=%s",
            action.container_pos, action.column_index, new_count,
        )
        if new_count < MIN_COLUMNS:
            # Deleting inside the container leaves its start position intact
            return execute_cleanup(tr, UnwrapSingleColumn(action.container_pos), schema)
        return sync_column_widths(tr, action.container_pos, WidthCalculator.initialize_widths(new_count))

    raise TypeError(f"Unknown cleanup action {action!r}")


class CleanupExecutor:
    """Run cleanup actions on a transaction until no container needs one.

    Containers are inspected from the last to the first so that an action
    never shifts the position of a container still waiting to be checked.
    Every action strictly lowers the number of columns or of containers, so
    the loop terminates; ``max_passes`` only guards against a broken schema.
    """

    def __init__(self, schema: Schema = DEFAULT_SCHEMA, max_passes: int = 1000) -> None:
        self.schema = schema
        self.max_passes = max_passes

    def next_action(self, doc: Node) -> CleanupAction:
        for container, pos in reversed(find_columns_nodes(doc)):
            action = detect_cleanup_action(container, pos)
            if not isinstance(action, NoCleanup):
                return action
        return NoCleanup()

    def run_cleanup_pass(self, tr: Transaction) -> int:
        """Append cleanup steps to ``tr``; return the number of actions run."""
        applied = 0
        while applied < self.max_passes:
            action = self.next_action(tr.doc)
            if isinstance(action, NoCleanup):
                break
            execute_cleanup(tr, action, self.schema)
            applied += 1
        else:
            logger.warning("Cleanup stopped after %s passes", self.max_passes)
        if applied:
            logger.info("Cleanup: %s action(s) applied", applied)
        return applied


# ------------------------------------------------------------------------- Nesting


class NestingValidator:
    """Answer whether a position may host a new columns container."""

    @staticmethod
    def find_ancestor(doc: Node, pos: int, node_type: str) -> Optional[Tuple[Node, int]]:
        """Return the innermost ancestor of ``pos`` with ``node_type`` and its position."""
        if pos < 0 or pos > doc.content_size:
            return None
        rpos = doc.resolve(pos)
        for depth, node in rpos.ancestors():
            if depth == 0:
                break
            if node.type == node_type:
                return node, rpos.before(depth)
        return None

    @classmethod
    def is_inside_column(cls, doc: Node, pos: int) -> bool:
        return cls.find_ancestor(doc, pos, "column") is not None

    @classmethod
    def can_create_columns(cls, doc: Node, pos: int) -> bool:
        """Columns never nest: no column or columns ancestor may exist at ``pos``."""
        if pos < 0 or pos > doc.content_size:
            return False
        return (
            cls.find_ancestor(doc, pos, "column") is None
            and cls.find_ancestor(doc, pos, "columns") is None
        )


# ------------------------------------------------------------------------- Service


class ColumnService:
    """User-facing column commands on an :class:`EditorContext`.

    Design principles:
    - Validation first: count and width bounds are checked before any step
      is built.
    - No exceptions for expected invalid actions; return OperationResult.
    - Widths are redistributed equally whenever the column count changes.
    """

    def __init__(self, calculator: Optional[WidthCalculator] = None) -> None:
        self._calculator = calculator
        self._logger = logging.getLogger(f"{__name__}.ColumnService")

    def _width_calculator(self, context: "EditorContext") -> WidthCalculator:
        if self._calculator is not None:
            return self._calculator
        return WidthCalculator(context.settings.resize_epsilon)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def add_column(self, context: "EditorContext", columns_pos: int, after_index: int) -> OperationResult:
        """Insert an empty column after ``after_index`` (``-1`` prepends)."""
        op = "add_column"
        logger.info("Edit: %s pos=%s after=%s", op, columns_pos, after_index)
        container = columns_at(context.doc, columns_pos)
        if container is None:
            return fail(op, "No columns container at this position.", REASON_INVALID_TARGET, pos=columns_pos)
        count = container.child_count
        if count + 1 > MAX_COLUMNS:
            return fail(op, f"A layout holds at most {MAX_COLUMNS} columns.", REASON_INVARIANT_VIOLATION, count=count)
        if not (-1 <= after_index < count):
            return fail(op, "Column index out of range.", REASON_INVALID_TARGET, after_index=after_index)

        schema = context.schema
        widths = WidthCalculator.initialize_widths(count + 1)
        insert_index = after_index + 1
        column = schema.node("column", {"width": widths[insert_index]}, (schema.paragraph(),))
        tr = context.transaction()
        try:
            tr.insert(_child_pos(container, columns_pos, insert_index), column)
            sync_column_widths(tr, columns_pos, widths)
        except StepError as exc:
            return step_failed(op, exc)
        # The fresh column is empty; keep it alive through its own transaction
        tr.set_meta(CLEANUP_SKIP_META, True)
        return commit(context, tr, op, "Column added.", {"count": count + 1, "index": insert_index})

    def remove_column(self, context: "EditorContext", columns_pos: int, column_index: int) -> OperationResult:
        op = "remove_column"
        logger.info("Edit: %s pos=%s index=%s", op, columns_pos, column_index)
        container = columns_at(context.doc, columns_pos)
        if container is None:
            return fail(op, "No columns container at this position.", REASON_INVALID_TARGET, pos=columns_pos)
        count = container.child_count
        if count - 1 < MIN_COLUMNS:
            return fail(op, f"A layout needs at least {MIN_COLUMNS} columns.", REASON_INVARIANT_VIOLATION, count=count)
        if not (0 <= column_index < count):
            return fail(op, "Column index out of range.", REASON_INVALID_TARGET, column_index=column_index)

        column = container.child(column_index)
        column_pos = _child_pos(container, columns_pos, column_index)
        tr = context.transaction()
        try:
            tr.delete(column_pos, column_pos + column.size)
            sync_column_widths(tr, columns_pos, WidthCalculator.initialize_widths(count - 1))
        except StepError as exc:
            return step_failed(op, exc)
        return commit(context, tr, op, "Column removed.", {"count": count - 1})

    def resize_columns(
        self,
        context: "EditorContext",
        columns_pos: int,
        left_index: int,
        right_index: int,
        delta_px: float,
        container_width_px: float,
    ) -> OperationResult:
        """Apply a gap drag of ``delta_px`` between two adjacent columns."""
        op = "resize_columns"
        container = columns_at(context.doc, columns_pos)
        if container is None:
            return fail(op, "No columns container at this position.", REASON_INVALID_TARGET, pos=columns_pos)
        widths = self._current_widths(container)
        result = self._width_calculator(context).calculate_resized_widths(
            left_index, right_index, delta_px, container_width_px, widths
        )
        if not result.changed:
            return fail(op, "Column widths unchanged.", REASON_UNCHANGED)
        return self.update_column_widths(context, columns_pos, result.new_widths)

    def update_column_widths(
        self,
        context: "EditorContext",
        columns_pos: int,
        widths: Sequence[float],
    ) -> OperationResult:
        op = "update_column_widths"
        logger.info("Edit: %s pos=%s widths=%s", op, columns_pos, list(widths))
        container = columns_at(context.doc, columns_pos)
        if container is None:
            return fail(op, "No columns container at this position.", REASON_INVALID_TARGET, pos=columns_pos)
        problem = WidthCalculator.validate_widths(widths, container.child_count)
        if problem is not None:
            return fail(op, problem, REASON_INVARIANT_VIOLATION)

        tr = context.transaction()
        try:
            sync_column_widths(tr, columns_pos, widths)
        except StepError as exc:
            return step_failed(op, exc)
        return commit(context, tr, op, "Column widths updated.", {"widths": tuple(float(w) for w in widths)})

    def insert_columns(self, context: "EditorContext", block_pos: int, count: int = 2) -> OperationResult:
        """Wrap the block at ``block_pos`` into a new ``count``-column layout.

        The block goes into the first column; the others get an empty
        paragraph each.
        """
        op = "insert_columns"
        logger.info("Edit: %s pos=%s count=%s", op, block_pos, count)
        doc = context.doc
        if not (MIN_COLUMNS <= count <= MAX_COLUMNS):
            return fail(op, f"Column count must be within {MIN_COLUMNS}..{MAX_COLUMNS}.", REASON_INVARIANT_VIOLATION)
        block = doc.node_at(block_pos) if 0 <= block_pos <= doc.content_size else None
        if block is None or block.is_text or block.type in ("columns", "column"):
            return fail(op, "No block at this position.", REASON_INVALID_TARGET, pos=block_pos)
        if not NestingValidator.can_create_columns(doc, block_pos):
            return fail(op, "Columns cannot be nested.", REASON_INVALID_TARGET, pos=block_pos)

        schema = context.schema
        widths = WidthCalculator.initialize_widths(count)
        columns = [schema.node("column", {"width": widths[0]}, (block,))]
        columns.extend(schema.node("column", {"width": w}, (schema.paragraph(),)) for w in widths[1:])
        container = schema.node("columns", {"count": count, "columnWidths": widths}, columns)
        tr = context.transaction()
        try:
            tr.replace_with(block_pos, block_pos + block.size, container)
        except StepError as exc:
            return step_failed(op, exc)
        tr.set_meta(CLEANUP_SKIP_META, True)
        return commit(context, tr, op, "Columns inserted.", {"count": count})

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _current_widths(container: Node) -> Tuple[float, ...]:
        widths = tuple(container.attrs.get("columnWidths") or ())
        if len(widths) != container.child_count:
            return WidthCalculator.initialize_widths(container.child_count)
        return tuple(float(w) for w in widths)
