from __future__ import annotations

"""Editor context: the single authoritative document and its session state.

:class:`EditorContext` owns the current document value and a monotonically
increasing ``version``. Every change goes through :meth:`EditorContext.dispatch`,
which

1. re-enforces the column container invariants on the transaction (unless
   the transaction opted out with the cleanup-skip meta),
2. swaps the document atomically and bumps the version,
3. discards guideline state and derived caches computed for the old value,
4. records an undo snapshot.

Positions handed out by the context can be tagged with the version they were
resolved against (:meth:`versioned`); :meth:`resolve_versioned` refuses them
once the document has moved on.
"""

import logging
from typing import List, Optional, Union

from structdoc.config.settings import EngineSettings
from structdoc.core.models.drag import VersionedPos
from structdoc.core.models.node import Node
from structdoc.core.models.ranges import FoldRange, NumberingMap
from structdoc.core.models.schema import DEFAULT_SCHEMA, Schema
from structdoc.core.models.transform import ADD_TO_HISTORY_META, CLEANUP_SKIP_META, Transaction
from structdoc.core.services.column_service import CleanupExecutor
from structdoc.core.services.heading_analysis_service import (
    calculate_fold_range,
    calculate_folded_blocks,
    calculate_numbering,
)
from structdoc.core.services.hotzone_service import GuidelineSession
from structdoc.core.services.undo_service import UndoService

__all__ = ["EditorContext"]

logger = logging.getLogger(__name__)


class EditorContext:
    """Document holder shared by the edit services.

    Parameters
    ----------
    doc
        Initial document. Defaults to a document with one empty paragraph.
    schema
        Node type registry; must declare ``columns`` and ``column``.
    settings
        Engine tunables. Defaults to :class:`EngineSettings` defaults; use
        ``EngineSettings.from_config()`` to honour the YAML configuration.
    """

    def __init__(
        self,
        doc: Optional[Node] = None,
        schema: Schema = DEFAULT_SCHEMA,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        schema.require("doc", "paragraph", "columns", "column")
        self.schema = schema
        self.settings = settings or EngineSettings()
        self.doc: Node = doc if doc is not None else schema.node("doc", children=(schema.paragraph(),))
        self.version = 0
        self.guidelines = GuidelineSession()
        self.undo_service = UndoService(self.settings.max_history)
        self._cleanup = CleanupExecutor(schema)
        self._numbering: Optional[NumberingMap] = None
        self._folded: Optional[List[FoldRange]] = None
        # Baseline for the first undo
        self.undo_service.push_snapshot(self, "initial")

    def __repr__(self) -> str:
        return f"EditorContext(version={self.version}, size={self.doc.content_size})"

    # ------------------------------------------------------------------
    # Construction from / export to XML
    # ------------------------------------------------------------------
    @classmethod
    def from_xml(
        cls,
        xml: Union[str, bytes],
        schema: Schema = DEFAULT_SCHEMA,
        settings: Optional[EngineSettings] = None,
    ) -> "EditorContext":
        from structdoc.core.importers.xml_importer import parse_document

        return cls(parse_document(xml, schema), schema, settings)

    def to_xml(self, pretty: bool = False) -> str:
        from structdoc.core.generators.xml_builder import to_xml_string

        return to_xml_string(self.doc, pretty=pretty)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    def transaction(self) -> Transaction:
        return Transaction(self.doc)

    def dispatch(self, tr: Transaction) -> bool:
        """Commit ``tr``; return False when it is stale or changes nothing.

        Cleanup steps are appended to ``tr`` itself, so its mapping covers
        them too. A StepError raised by cleanup propagates before anything is
        committed.
        """
        if tr.before is not self.doc:
            logger.warning("Rejected transaction built against a stale document (version=%s)", self.version)
            return False
        if not tr.doc_changed:
            return False
        if not tr.get_meta(CLEANUP_SKIP_META):
            self._cleanup.run_cleanup_pass(tr)

        self._commit(tr.doc)
        if tr.get_meta(ADD_TO_HISTORY_META, True):
            self.undo_service.push_snapshot(self)
        logger.debug("Dispatched %s step(s); version=%s", len(tr.steps), self.version)
        return True

    def restore_document(self, doc: Node) -> None:
        """Swap in ``doc`` without recording history (used by undo/redo)."""
        self._commit(doc)

    def _commit(self, doc: Node) -> None:
        self.doc = doc
        self.version += 1
        self.guidelines.reset()
        self._numbering = None
        self._folded = None

    # ------------------------------------------------------------------
    # Versioned positions
    # ------------------------------------------------------------------
    def versioned(self, pos: int) -> VersionedPos:
        return VersionedPos(pos, self.version)

    def resolve_versioned(self, vpos: VersionedPos) -> Optional[int]:
        """Return ``vpos.pos`` if it still belongs to the current document."""
        if vpos.doc_version != self.version:
            logger.debug("Stale position %s (current version %s)", vpos, self.version)
            return None
        if not (0 <= vpos.pos <= self.doc.content_size):
            return None
        return vpos.pos

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    def numbering(self) -> NumberingMap:
        if self._numbering is None:
            self._numbering = calculate_numbering(self.doc)
        return self._numbering

    def fold_range(self, pos: int) -> Optional[FoldRange]:
        return calculate_fold_range(pos, self.doc, self.schema)

    def folded_blocks(self) -> List[FoldRange]:
        if self._folded is None:
            self._folded = calculate_folded_blocks(self.doc, self.schema)
        return self._folded

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def undo(self) -> bool:
        return self.undo_service.undo(self)

    def redo(self) -> bool:
        return self.undo_service.redo(self)
