from __future__ import annotations

"""Turn a classified drop target and a dragged fragment into one transaction.

Three cases are distinguished from the guideline state:

A. The target is an existing columns container (a gap guideline, or a border
   guideline whose target is or sits inside a container): a new column
   holding the fragment is spliced in and all widths are redistributed.
B. The target is an ordinary block outside any container: the block and
   the fragment become the two columns of a new ``[50, 50]`` layout,
   ordered by the side the pointer came from.
C. The target sits in a ``column`` with no ``columns`` ancestor: the drop is
   refused, so malformed documents never grow nested containers.

For a move, the source range is carried through the transaction's mapping
*after* the insertion and deleted there, so it is never read at a position
the insertion already shifted.
"""

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from structdoc.core.models.columns import MAX_COLUMNS
from structdoc.core.models.drag import DraggedFragment
from structdoc.core.models.guideline import ColumnsEdgeGuideline, EditorBorderGuideline, GuidelineState
from structdoc.core.models.node import Node
from structdoc.core.models.results import (
    OperationResult,
    REASON_INVALID_TARGET,
    REASON_INVARIANT_VIOLATION,
    REASON_NO_FRAGMENT,
    REASON_STALE_STATE,
)
from structdoc.core.models.schema import DEFAULT_SCHEMA, Schema
from structdoc.core.models.transform import Mapping, StepError, Transaction
from structdoc.core.services.column_service import (
    NestingValidator,
    columns_at,
    sync_column_widths,
)
from structdoc.core.services.edit_support import commit, fail, step_failed
from structdoc.core.services.width_calculator import WidthCalculator

if TYPE_CHECKING:
    from structdoc.core.context import EditorContext

__all__ = ["DropOutcome", "DropService"]

logger = logging.getLogger(__name__)

_OP = "drop"


@dataclass(frozen=True)
class DropOutcome:
    """A built transaction, or the result explaining why none was built."""

    transaction: Optional[Transaction]
    result: OperationResult

    @property
    def ok(self) -> bool:
        return self.transaction is not None


def _rejected(message: str, reason: str, **details) -> DropOutcome:
    return DropOutcome(None, fail(_OP, message, reason, **details))


def _flatten_layout(nodes: Sequence[Node]) -> List[Node]:
    """Replace layout nodes by their content, recursively."""
    flat: List[Node] = []
    for node in nodes:
        if node.type in ("columns", "column"):
            flat.extend(_flatten_layout(node.children))
        else:
            flat.append(node)
    return flat


class DropService:
    """Synthesize column layouts from drops."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.DropService")

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def execute(
        self,
        context: "EditorContext",
        state: GuidelineState,
        fragment: Optional[DraggedFragment],
    ) -> OperationResult:
        """Apply a drop on ``context``; the guideline session is reset either way."""
        logger.info("Edit: %s state=%s", _OP, state.kind)
        try:
            if isinstance(state, (ColumnsEdgeGuideline, EditorBorderGuideline)) and state.doc_version != context.version:
                return fail(_OP, "Drop target is out of date.", REASON_STALE_STATE,
                            state_version=state.doc_version, version=context.version)
            if fragment is not None and fragment.doc_version is not None and fragment.doc_version != context.version:
                return fail(_OP, "Dragged content is out of date.", REASON_STALE_STATE,
                            fragment_version=fragment.doc_version, version=context.version)

            outcome = self.build_transaction(context.doc, state, fragment, context.schema)
            if not outcome.ok:
                return outcome.result
            return commit(context, outcome.transaction, _OP, outcome.result.message, outcome.result.details)
        finally:
            context.guidelines.reset()

    def build_transaction(
        self,
        doc: Node,
        state: GuidelineState,
        fragment: Optional[DraggedFragment],
        schema: Schema = DEFAULT_SCHEMA,
    ) -> DropOutcome:
        """Build (without applying) the transaction for a drop on ``doc``."""
        if not isinstance(state, (ColumnsEdgeGuideline, EditorBorderGuideline)):
            return _rejected("No active drop target.", REASON_INVALID_TARGET)
        if fragment is None or not fragment.content:
            return _rejected("Nothing is being dragged.", REASON_NO_FRAGMENT)
        schema.require("columns", "column", "paragraph")

        try:
            if isinstance(state, ColumnsEdgeGuideline):
                container = columns_at(doc, state.container_pos)
                if container is None:
                    return _rejected("No columns container at the drop target.", REASON_INVALID_TARGET)
                return self._insert_into_container(
                    doc, state.container_pos, container, state.column_index + 1, fragment, schema
                )
            return self._drop_on_border(doc, state, fragment, schema)
        except StepError as exc:
            return DropOutcome(None, step_failed(_OP, exc))

    # -------------------------------------------------------------------------
    # Cases
    # -------------------------------------------------------------------------

    def _drop_on_border(
        self,
        doc: Node,
        state: EditorBorderGuideline,
        fragment: DraggedFragment,
        schema: Schema,
    ) -> DropOutcome:
        located = self._block_at(doc, state.target_pos)
        if located is None:
            return _rejected("Drop target no longer resolves.", REASON_INVALID_TARGET, pos=state.target_pos)
        target, target_pos = located

        if target.type == "columns":
            index = 0 if state.side == "left" else target.child_count
            return self._insert_into_container(doc, target_pos, target, index, fragment, schema)

        ancestor = NestingValidator.find_ancestor(doc, target_pos, "columns")
        if ancestor is not None:
            container, container_pos = ancestor
            index = 0 if state.side == "left" else container.child_count
            return self._insert_into_container(doc, container_pos, container, index, fragment, schema)

        if NestingValidator.is_inside_column(doc, target_pos):
            logger.warning("Drop refused: column without columns ancestor at pos=%s", target_pos)
            return _rejected("Column found without a columns container.", REASON_INVALID_TARGET, pos=target_pos)

        return self._wrap_block(doc, target_pos, target, state.side, fragment, schema)

    def _insert_into_container(
        self,
        doc: Node,
        container_pos: int,
        container: Node,
        insert_index: int,
        fragment: DraggedFragment,
        schema: Schema,
    ) -> DropOutcome:
        count = container.child_count
        if count + 1 > MAX_COLUMNS:
            return _rejected(f"A layout holds at most {MAX_COLUMNS} columns.", REASON_INVARIANT_VIOLATION, count=count)
        if not (0 <= insert_index <= count):
            return _rejected("Column index out of range.", REASON_INVALID_TARGET, index=insert_index)
        if fragment.has_source and fragment.source_from <= container_pos and container_pos + container.size <= fragment.source_to:
            return _rejected("Cannot drop a layout into itself.", REASON_INVALID_TARGET)

        column = schema.node(
            "column",
            {"width": WidthCalculator.initialize_widths(count + 1)[insert_index]},
            self._column_content(fragment, schema),
        )
        insert_pos = container_pos + 1 + sum(child.size for child in container.children[:insert_index])
        if fragment.has_source and fragment.source_from < insert_pos < fragment.source_to:
            return _rejected("Cannot drop content inside itself.", REASON_INVALID_TARGET, pos=insert_pos)

        tr = Transaction(doc)
        tr.insert(insert_pos, column)
        inserted = len(tr.steps)
        self._delete_source(tr, fragment)

        # widths follow the final child count, once the source is gone
        container_pos = tr.mapping.map(container_pos, 1)
        final = columns_at(tr.doc, container_pos)
        if final is None:
            raise StepError(f"Columns container lost after drop at {container_pos}")
        column_pos = Mapping(tr.mapping.maps[inserted:]).map(insert_pos, 1)
        index = next((i for (_child, pos, i) in final.iter_children(container_pos + 1) if pos == column_pos), insert_index)
        sync_column_widths(tr, container_pos, WidthCalculator.initialize_widths(final.child_count))
        logger.debug("Drop into container pos=%s index=%s count=%s", container_pos, index, final.child_count)
        return DropOutcome(tr, OperationResult(True, "Column added from drop.",
                                               {"case": "insert-column", "index": index, "count": final.child_count}))

    def _wrap_block(
        self,
        doc: Node,
        target_pos: int,
        target: Node,
        side: str,
        fragment: DraggedFragment,
        schema: Schema,
    ) -> DropOutcome:
        if fragment.overlaps(target_pos, target_pos + target.size):
            return _rejected("Cannot drop a block onto itself.", REASON_INVALID_TARGET, pos=target_pos)
        if not NestingValidator.can_create_columns(doc, target_pos):
            return _rejected("Columns cannot be nested.", REASON_INVALID_TARGET, pos=target_pos)

        widths = (50.0, 50.0)
        dropped = schema.node("column", {"width": widths[0]}, self._column_content(fragment, schema))
        existing = schema.node("column", {"width": widths[1]}, (target,))
        columns = (dropped, existing) if side == "left" else (existing, dropped)
        container = schema.node("columns", {"count": 2, "columnWidths": widths}, columns)

        tr = Transaction(doc)
        tr.replace_with(target_pos, target_pos + target.size, container)
        self._delete_source(tr, fragment)
        logger.debug("Drop created two-column layout pos=%s side=%s", target_pos, side)
        return DropOutcome(tr, OperationResult(True, "Two-column layout created.", {"case": "create-columns", "side": side}))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _block_at(doc: Node, pos: int) -> Optional[Tuple[Node, int]]:
        """Block starting at ``pos``, else the innermost block around it."""
        if pos < 0 or pos > doc.content_size:
            return None
        node = doc.node_at(pos)
        rpos = doc.resolve(pos)
        if node is not None and not node.is_text and not rpos.text_offset and rpos.node_after is node:
            return node, pos
        if rpos.depth == 0:
            return None
        return rpos.node(rpos.depth), rpos.before(rpos.depth)

    @staticmethod
    def _column_content(fragment: DraggedFragment, schema: Schema) -> Tuple[Node, ...]:
        """Blocks for the new column.

        Dragged ``columns``/``column`` nodes are unpacked into the blocks they
        hold, and loose inline nodes are wrapped in a paragraph.
        """
        blocks = []
        inline = []
        for node in _flatten_layout(fragment.content):
            if node.is_text:
                inline.append(node)
                continue
            if inline:
                blocks.append(schema.node("paragraph", children=inline))
                inline = []
            blocks.append(node)
        if inline:
            blocks.append(schema.node("paragraph", children=inline))
        return tuple(blocks) or (schema.paragraph(),)

    @staticmethod
    def _delete_source(tr: Transaction, fragment: DraggedFragment) -> None:
        if not fragment.has_source:
            return
        if not (0 <= fragment.source_from < fragment.source_to <= tr.before.content_size):
            raise StepError(f"Invalid source range {fragment.source_from}..{fragment.source_to}")
        from_ = tr.mapping.map(fragment.source_from, 1)
        to = tr.mapping.map(fragment.source_to, -1)
        if from_ < to:
            tr.delete(from_, to)
