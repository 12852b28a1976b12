from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no GUI or disk I/O; they can be
used across all layers of the engine.
"""

import uuid

__all__ = ["generate_node_id", "clamp"]


def generate_node_id() -> str:
    """Generate a globally unique ID suitable for heading anchors."""
    return f"id-{uuid.uuid4()}"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
