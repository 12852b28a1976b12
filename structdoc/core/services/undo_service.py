from __future__ import annotations

"""Undo/redo snapshot management for EditorContext.

This service is UI-agnostic and performs pure in-memory history tracking of
the document held by an :class:`EditorContext`. Documents are immutable
values, so a snapshot is simply a reference to the document committed at
that point; restoring one swaps it back into the context.

Design principles
-----------------
- No UI imports and no I/O (filesystem/console).
- Snapshots are immutable once stored.
- Redo stack is cleared on every new snapshot push (standard undo/redo behavior).
- Memory usage controlled by a max_history ring-like policy (trim oldest).
"""

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, List, Optional

from structdoc.core.models.node import Node

if TYPE_CHECKING:
    from structdoc.core.context import EditorContext

__all__ = ["UndoService"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    """Immutable in-memory snapshot of an EditorContext.

    Attributes
    ----------
    doc :
        The committed document value.
    label :
        Optional name of the edit that produced it, for diagnostics.
    """

    doc: Node
    label: Optional[str] = None


class UndoService:
    """Manage undo/redo stacks for :class:`EditorContext`.

    The service keeps two stacks of immutable snapshots: an undo stack and a
    redo stack. The top of the undo stack always mirrors the context's
    current document; the entry below it is the baseline an undo restores.

    Parameters
    ----------
    max_history : int, default=50
        Maximum number of undo snapshots to keep. Oldest entries are discarded
        when the capacity is exceeded. Must be >= 1; if passed lower, it will be
        coerced to 1.

    Examples
    --------
    Create a service, push states, undo/redo:

    >>> ctx = EditorContext(doc)      # pushes the baseline snapshot
    >>> ctx.dispatch(tr)              # pushes the post-edit snapshot
    >>> changed = ctx.undo()          # restores the baseline
    >>> redo_ok = ctx.redo()          # re-applies the edit
    """

    def __init__(self, max_history: int = 50) -> None:
        self._max_history: int = max(1, int(max_history))
        self._undo_stack: List[_Snapshot] = []
        self._redo_stack: List[_Snapshot] = []

    # --------------------------------------------------------------------- API

    def push_snapshot(self, context: "EditorContext", label: Optional[str] = None) -> None:
        """Capture the current document and push it onto the undo stack.

        The redo stack is cleared to follow standard undo/redo semantics.
        If the undo stack exceeds max_history, the oldest snapshot is dropped.
        """
        self._undo_stack.append(_Snapshot(context.doc, label))
        # New user action invalidates redo history
        self._redo_stack.clear()
        self._trim(self._undo_stack)

    def undo(self, context: "EditorContext") -> bool:
        """Restore the previous state into the provided context.

        Semantics (baseline-oriented):
        Given undo_stack = [..., baseline, post] and current context == post:
        - Pop 'post' from undo_stack and push it onto redo_stack.
        - Restore 'baseline' from the new top of undo_stack.
        """
        if len(self._undo_stack) < 2:
            return False

        post_snap = self._undo_stack.pop()
        baseline_snap = self._undo_stack[-1]
        context.restore_document(baseline_snap.doc)
        self._redo_stack.append(post_snap)
        self._trim(self._redo_stack)
        logger.info("Undo: restored %s", baseline_snap.label or "baseline")
        return True

    def redo(self, context: "EditorContext") -> bool:
        """Re-apply a state that was previously undone.

        Given undo_stack = [..., baseline] and redo_stack = [post], redo
        restores 'post' and moves it back onto the undo stack.
        """
        if not self._redo_stack:
            return False

        post_snap = self._redo_stack.pop()
        context.restore_document(post_snap.doc)
        self._undo_stack.append(post_snap)
        self._trim(self._undo_stack)
        logger.info("Redo: restored %s", post_snap.label or "snapshot")
        return True

    def can_undo(self) -> bool:
        """Return True if an undo operation is currently possible."""
        return len(self._undo_stack) > 1

    def can_redo(self) -> bool:
        """Return True if a redo operation is currently possible."""
        return len(self._redo_stack) > 0

    def clear(self) -> None:
        """Clear both undo and redo histories."""
        self._undo_stack.clear()
        self._redo_stack.clear()

    # --------------------------------------------------------------- Internals

    def _trim(self, stack: List[_Snapshot]) -> None:
        overflow = len(stack) - self._max_history
        if overflow > 0:
            del stack[0:overflow]
