from __future__ import annotations

"""Result values shared by the edit services."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

__all__ = [
    "OperationResult",
    "REASON_INVALID_TARGET",
    "REASON_INVARIANT_VIOLATION",
    "REASON_STALE_STATE",
    "REASON_NO_FRAGMENT",
    "REASON_UNCHANGED",
]

REASON_INVALID_TARGET = "invalid_target"
REASON_INVARIANT_VIOLATION = "invariant_violation"
REASON_STALE_STATE = "stale_state"
REASON_NO_FRAGMENT = "no_fragment"
REASON_UNCHANGED = "unchanged"


@dataclass(frozen=True)
class OperationResult:
    """Result of a structural editing operation.

    Attributes
    ----------
    success
        Whether the operation completed successfully.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic. Failed
        results carry a ``"reason"`` key.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None

    @property
    def reason(self) -> Optional[str]:
        return (self.details or {}).get("reason")
