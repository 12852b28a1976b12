from __future__ import annotations

"""Commit and failure helpers shared by the edit services.

Every edit service follows the same boundary contract: expected failures are
returned as ``OperationResult(success=False, ...)`` with a ``reason`` detail,
a step that cannot be applied is logged as ``Edit FAIL`` and reported the
same way, and nothing is ever half-applied because the transaction is only
committed by :meth:`EditorContext.dispatch` once it is fully built.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from structdoc.core.models.results import OperationResult, REASON_INVALID_TARGET
from structdoc.core.models.transform import StepError, Transaction

if TYPE_CHECKING:
    from structdoc.core.context import EditorContext

__all__ = ["fail", "step_failed", "commit"]

logger = logging.getLogger(__name__)


def fail(op: str, message: str, reason: str, **details: Any) -> OperationResult:
    """Log and build a failed result for an expected rejection."""
    logger.info("Edit noop: %s reason=%s %s", op, reason, details or "")
    payload: Dict[str, Any] = {"reason": reason}
    payload.update(details)
    return OperationResult(False, message, payload)


def commit(
    context: "EditorContext",
    tr: Transaction,
    op: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> OperationResult:
    """Dispatch ``tr`` on ``context`` and translate the outcome."""
    try:
        applied = context.dispatch(tr)
    except StepError as exc:
        return step_failed(op, exc)
    if not applied:
        logger.warning("Edit FAIL: %s transaction rejected by context", op)
        return OperationResult(False, f"Could not apply {op}.", {"reason": REASON_INVALID_TARGET})
    logger.info("Edit OK: %s %s", op, details or "")
    return OperationResult(True, message, dict(details or {}))


def step_failed(op: str, exc: StepError) -> OperationResult:
    """Report a transaction that could not be built against the current document."""
    logger.error("Edit FAIL: %s %s", op, exc, exc_info=True)
    return OperationResult(False, f"Could not apply {op}: {exc}", {"reason": REASON_INVALID_TARGET})
