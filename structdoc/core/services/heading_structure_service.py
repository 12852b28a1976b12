from __future__ import annotations

"""Heading commands: folding, numbering and indentation.

Each command edits heading attributes on an :class:`EditorContext` through a
single transaction. Expected failures (no heading at the position, an indent
that would leave the allowed range) return ``OperationResult(success=False)``
with a ``reason`` detail and leave the document untouched.

Examples
--------
    service = HeadingStructureService()
    service.toggle_numbered(ctx, pos)
    result = service.indent_heading(ctx, pos)
    if not result.success:
        print(result.message)
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Set

from structdoc.core.models.node import Node
from structdoc.core.models.results import (
    OperationResult,
    REASON_INVALID_TARGET,
    REASON_INVARIANT_VIOLATION,
)
from structdoc.core.models.schema import MAX_HEADING_LEVEL, MAX_INDENT, MIN_HEADING_LEVEL
from structdoc.core.models.transform import FOLD_CHANGED_META, NUMBERING_CHANGED_META, StepError
from structdoc.core.services.edit_support import commit, fail, step_failed
from structdoc.core.services.heading_analysis_service import (
    get_heading_depth,
    get_heading_indent,
    heading_at,
)
from structdoc.core.utils import generate_node_id

if TYPE_CHECKING:
    from structdoc.core.context import EditorContext

__all__ = ["HeadingStructureService"]

logger = logging.getLogger(__name__)


class HeadingStructureService:
    """Encapsulates heading attribute edits.

    Design principles:
    - No UI dependencies, no disk I/O.
    - No exceptions for expected invalid actions; return OperationResult.
    - Numbering edits carry the numbering-changed meta, fold edits the
      fold-changed meta, so listeners can refresh derived state.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.HeadingStructureService")

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def toggle_fold(self, context: "EditorContext", pos: int) -> OperationResult:
        op = "toggle_fold"
        logger.info("Edit: %s pos=%s", op, pos)
        heading = heading_at(context.doc, pos)
        if heading is None:
            return fail(op, "No heading at this position.", REASON_INVALID_TARGET, pos=pos)
        collapsed = not bool(heading.attrs.get("collapsed"))
        return self._apply(context, op, pos, {"collapsed": collapsed}, FOLD_CHANGED_META,
                           "Heading folded." if collapsed else "Heading unfolded.")

    def toggle_numbered(self, context: "EditorContext", pos: int) -> OperationResult:
        """Switch numbering on or off; switching off drops the manual number."""
        op = "toggle_numbered"
        logger.info("Edit: %s pos=%s", op, pos)
        heading = heading_at(context.doc, pos)
        if heading is None:
            return fail(op, "No heading at this position.", REASON_INVALID_TARGET, pos=pos)
        numbered = not bool(heading.attrs.get("numbered"))
        changes: Dict[str, Any] = {"numbered": numbered}
        if not numbered:
            changes["manualNumber"] = None
        return self._apply(context, op, pos, changes, NUMBERING_CHANGED_META,
                           "Numbering enabled." if numbered else "Numbering disabled.")

    def indent_heading(self, context: "EditorContext", pos: int) -> OperationResult:
        """Nest a numbered heading one level deeper (indent and level move together)."""
        op = "indent_heading"
        logger.info("Edit: %s pos=%s", op, pos)
        heading = self._numbered_heading(context, pos, op)
        if isinstance(heading, OperationResult):
            return heading
        indent = get_heading_indent(heading.attrs)
        level = get_heading_depth(heading.attrs)
        if indent >= MAX_INDENT or level >= MAX_HEADING_LEVEL:
            return fail(op, "Heading is already at the deepest level.", REASON_INVARIANT_VIOLATION,
                        indent=indent, level=level)
        return self._apply(context, op, pos, {"indent": indent + 1, "level": level + 1},
                           NUMBERING_CHANGED_META, "Heading indented.")

    def outdent_heading(self, context: "EditorContext", pos: int) -> OperationResult:
        op = "outdent_heading"
        logger.info("Edit: %s pos=%s", op, pos)
        heading = self._numbered_heading(context, pos, op)
        if isinstance(heading, OperationResult):
            return heading
        indent = get_heading_indent(heading.attrs)
        if indent <= 0:
            return fail(op, "Heading is already at the top level.", REASON_INVARIANT_VIOLATION, indent=indent)
        level = max(MIN_HEADING_LEVEL, get_heading_depth(heading.attrs) - 1)
        return self._apply(context, op, pos, {"indent": indent - 1, "level": level},
                           NUMBERING_CHANGED_META, "Heading outdented.")

    def exit_numbering(self, context: "EditorContext", pos: int) -> OperationResult:
        """Leave numbered mode entirely (backspace at the start of a numbered heading)."""
        op = "exit_numbering"
        logger.info("Edit: %s pos=%s", op, pos)
        heading = self._numbered_heading(context, pos, op)
        if isinstance(heading, OperationResult):
            return heading
        return self._apply(context, op, pos, {"numbered": False, "indent": 0},
                           NUMBERING_CHANGED_META, "Numbering removed.")

    def set_manual_number(self, context: "EditorContext", pos: int, value: Optional[str]) -> OperationResult:
        """Override the displayed label; an empty value restores the computed one."""
        op = "set_manual_number"
        logger.info("Edit: %s pos=%s value=%r", op, pos, value)
        heading = heading_at(context.doc, pos)
        if heading is None:
            return fail(op, "No heading at this position.", REASON_INVALID_TARGET, pos=pos)
        cleaned = (value or "").strip() or None
        return self._apply(context, op, pos, {"manualNumber": cleaned}, NUMBERING_CHANGED_META,
                           "Manual number set." if cleaned else "Manual number cleared.")

    def ensure_heading_ids(self, context: "EditorContext") -> OperationResult:
        """Give every heading with a missing or duplicate id a fresh one."""
        op = "ensure_heading_ids"
        seen: Set[str] = set()
        targets = []
        for node, pos, _parent, _index in context.doc.descendants():
            if node.type != "heading":
                continue
            node_id = node.attrs.get("id")
            if not node_id or node_id in seen:
                targets.append(pos)
            else:
                seen.add(node_id)
        if not targets:
            return OperationResult(True, "All headings already have unique ids.", {"assigned": 0})

        logger.info("Edit: %s count=%s", op, len(targets))
        tr = context.transaction()
        try:
            for pos in targets:
                tr.set_node_attribute(pos, "id", generate_node_id())
        except StepError as exc:
            return step_failed(op, exc)
        return commit(context, tr, op, f"Assigned {len(targets)} heading id(s).", {"assigned": len(targets)})

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _numbered_heading(context: "EditorContext", pos: int, op: str):
        heading: Optional[Node] = heading_at(context.doc, pos)
        if heading is None:
            return fail(op, "No heading at this position.", REASON_INVALID_TARGET, pos=pos)
        if not heading.attrs.get("numbered"):
            return fail(op, "Only numbered headings support this command.", REASON_INVALID_TARGET, pos=pos)
        return heading

    @staticmethod
    def _apply(
        context: "EditorContext",
        op: str,
        pos: int,
        changes: Dict[str, Any],
        meta: str,
        message: str,
    ) -> OperationResult:
        tr = context.transaction()
        try:
            heading = tr.doc.node_at(pos)
            attrs = dict(heading.attrs) if heading is not None else {}
            attrs.update(changes)
            tr.set_node_markup(pos, attrs=attrs)
        except StepError as exc:
            return step_failed(op, exc)
        tr.set_meta(meta, True)
        details = {"pos": pos}
        details.update(changes)
        return commit(context, tr, op, message, details)
