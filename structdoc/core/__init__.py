"""Core, UI-agnostic logic of the structural document engine.

The :pymod:`structdoc.core` package groups the document model, the edit
services and the XML notation helpers.
"""

from .context import EditorContext

__all__ = ["EditorContext"]
