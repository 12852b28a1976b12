from __future__ import annotations

"""Derived range values computed from headings."""

from dataclasses import dataclass
from typing import Dict

__all__ = ["FoldRange", "NumberingMap"]

# heading position -> dotted label, in document order
NumberingMap = Dict[int, str]


@dataclass(frozen=True)
class FoldRange:
    """Half-open position interval ``[from_, to)`` hidden by a collapsed heading."""

    from_: int
    to: int

    def __contains__(self, pos: int) -> bool:
        return self.from_ <= pos < self.to

    @property
    def size(self) -> int:
        return self.to - self.from_
