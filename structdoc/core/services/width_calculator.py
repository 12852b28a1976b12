from __future__ import annotations

"""Column width arithmetic.

Widths are percentages of the container's content width. Two operations are
provided: equal redistribution (used whenever the column count changes) and
the pairwise resize driven by dragging the gap between two adjacent columns.
"""

from dataclasses import dataclass
import logging
from typing import Optional, Sequence, Tuple

from structdoc.core.models.columns import MAX_COLUMNS, MIN_COLUMN_WIDTH, MIN_COLUMNS

__all__ = [
    "WidthCalculationResult",
    "WidthCalculator",
    "resize_adjacent_columns",
    "DEFAULT_RESIZE_EPSILON",
    "WIDTH_SUM_TOLERANCE",
]

logger = logging.getLogger(__name__)

DEFAULT_RESIZE_EPSILON = 0.1
WIDTH_SUM_TOLERANCE = 0.1


@dataclass(frozen=True)
class WidthCalculationResult:
    changed: bool
    new_widths: Tuple[float, ...]


class WidthCalculator:
    """Compute column widths for resize and redistribution.

    Parameters
    ----------
    epsilon : float, default=0.1
        A resize whose effect on both columns is below this many percent is
        reported as unchanged.
    """

    def __init__(self, epsilon: float = DEFAULT_RESIZE_EPSILON) -> None:
        self.epsilon = float(epsilon)

    @staticmethod
    def initialize_widths(count: int) -> Tuple[float, ...]:
        """Return ``count`` equal shares rounded to two decimals.

        The rounding remainder goes to the last column so the total is 100:
        ``initialize_widths(3) == (33.33, 33.33, 33.34)``.
        """
        if count <= 0:
            return ()
        share = round(100.0 / count, 2)
        widths = [share] * (count - 1)
        widths.append(round(100.0 - share * (count - 1), 2))
        return tuple(widths)

    def calculate_resized_widths(
        self,
        left_index: int,
        right_index: int,
        delta_px: float,
        container_width_px: float,
        widths: Sequence[float],
    ) -> WidthCalculationResult:
        """Move the boundary between two adjacent columns by ``delta_px``.

        The pair's combined width is conserved. When one side would drop
        under the minimum width it is clamped and the other side receives
        the rest of the pair's budget. Other columns are never touched.
        """
        current = tuple(float(w) for w in widths)
        n = len(current)
        if (
            container_width_px <= 0
            or not (0 <= left_index < n)
            or not (0 <= right_index < n)
            or right_index != left_index + 1
        ):
            logger.debug(
                "Resize ignored: left=%s right=%s width_px=%s n=%s",
                left_index, right_index, container_width_px, n,
            )
            return WidthCalculationResult(False, current)

        delta_percent = float(delta_px) / float(container_width_px) * 100.0
        left = current[left_index]
        right = current[right_index]
        pair_total = left + right

        new_left = left + delta_percent
        new_right = right - delta_percent
        if new_left < MIN_COLUMN_WIDTH:
            new_left = float(MIN_COLUMN_WIDTH)
            new_right = pair_total - new_left
        elif new_right < MIN_COLUMN_WIDTH:
            new_right = float(MIN_COLUMN_WIDTH)
            new_left = pair_total - new_right

        if abs(new_left - left) < self.epsilon and abs(new_right - right) < self.epsilon:
            return WidthCalculationResult(False, current)

        updated = list(current)
        updated[left_index] = new_left
        updated[right_index] = new_right
        return WidthCalculationResult(True, tuple(updated))

    # Name used by the gap-drag handler
    resize_adjacent_columns = calculate_resized_widths

    @staticmethod
    def validate_widths(widths: Sequence[float], count: Optional[int] = None) -> Optional[str]:
        """Return a problem description, or ``None`` when ``widths`` are valid."""
        n = len(widths)
        if count is not None and n != count:
            return f"Expected {count} widths, got {n}"
        if not (MIN_COLUMNS <= n <= MAX_COLUMNS):
            return f"Column count {n} outside {MIN_COLUMNS}..{MAX_COLUMNS}"
        if any(float(w) < MIN_COLUMN_WIDTH - 1e-9 for w in widths):
            return f"Every column must be at least {MIN_COLUMN_WIDTH}% wide"
        total = sum(float(w) for w in widths)
        if abs(total - 100.0) > WIDTH_SUM_TOLERANCE:
            return f"Widths sum to {total:.2f}, expected 100"
        return None


def resize_adjacent_columns(
    left_index: int,
    right_index: int,
    delta_px: float,
    container_width_px: float,
    widths: Sequence[float],
    epsilon: float = DEFAULT_RESIZE_EPSILON,
) -> WidthCalculationResult:
    """Functional form of :meth:`WidthCalculator.calculate_resized_widths`."""
    return WidthCalculator(epsilon).calculate_resized_widths(
        left_index, right_index, delta_px, container_width_px, widths
    )
