import pytest

from structdoc.core.context import EditorContext
from structdoc.core.models import (
    ADD_TO_HISTORY_META,
    CLEANUP_SKIP_META,
    IDLE,
    EditorBorderGuideline,
    NodeSpec,
    Schema,
    SchemaError,
    VersionedPos,
)

TWO_COL = (
    '<columns count="2" columnWidths="50 50">'
    '<column width="50"><paragraph>left</paragraph></column>'
    '<column width="50"><paragraph>right</paragraph></column>'
    "</columns>"
)


class TestConstruction:
    def test_default_document(self):
        ctx = EditorContext()
        assert [c.type for c in ctx.doc.children] == ["paragraph"]
        assert ctx.version == 0
        assert ctx.undo_service.can_undo() is False

    def test_schema_without_columns_is_refused(self):
        schema = Schema([NodeSpec("doc", group="top"), NodeSpec("paragraph", inline_content=True)])
        with pytest.raises(SchemaError):
            EditorContext(schema=schema)

    def test_xml_round_trip(self, make_context):
        ctx = make_context('<heading level="2" numbered="true">T</heading>' + TWO_COL)
        again = EditorContext.from_xml(ctx.to_xml())
        assert again.doc == ctx.doc


class TestDispatch:
    def test_commit_bumps_version_and_resets_guidelines(self, make_context, schema):
        ctx = make_context("<paragraph>a</paragraph>")
        ctx.guidelines.update_vertical(EditorBorderGuideline(100, "left", 0, False, 0, 10, ctx.version))

        assert ctx.dispatch(ctx.transaction().insert(3, schema.paragraph("b")))
        assert ctx.version == 1
        assert ctx.guidelines.vertical is IDLE
        assert ctx.doc.text_content == "ab"

    def test_stale_transaction_is_rejected(self, make_context, schema):
        ctx = make_context("<paragraph>a</paragraph>")
        old = ctx.transaction().insert(0, schema.paragraph("x"))
        ctx.dispatch(ctx.transaction().insert(3, schema.paragraph("b")))
        assert ctx.dispatch(old) is False
        assert ctx.version == 1

    def test_empty_transaction_is_not_committed(self, make_context):
        ctx = make_context("<paragraph>a</paragraph>")
        assert ctx.dispatch(ctx.transaction()) is False
        assert ctx.version == 0

    def test_cleanup_runs_on_every_commit(self, make_context, texts_of):
        ctx = make_context(TWO_COL)
        tr = ctx.transaction().delete(2, 8)
        assert ctx.dispatch(tr)
        assert [c.type for c in ctx.doc.children] == ["paragraph"]
        assert texts_of(ctx.doc) == ["right"]
        # cleanup steps live on the same transaction
        assert len(tr.steps) > 1

    def test_cleanup_can_be_skipped(self, make_context):
        ctx = make_context(TWO_COL)
        tr = ctx.transaction().delete(2, 8)
        tr.set_meta(CLEANUP_SKIP_META, True)
        assert ctx.dispatch(tr)
        container = ctx.doc.children[0]
        assert container.type == "columns"
        assert container.children[0].child_count == 0

    def test_history_opt_out(self, make_context, schema):
        ctx = make_context("<paragraph>a</paragraph>")
        tr = ctx.transaction().insert(3, schema.paragraph("b"))
        tr.set_meta(ADD_TO_HISTORY_META, False)
        assert ctx.dispatch(tr)
        assert ctx.undo() is False

    def test_undo_and_redo(self, make_context, schema):
        ctx = make_context("<paragraph>a</paragraph>")
        original = ctx.doc
        ctx.dispatch(ctx.transaction().insert(3, schema.paragraph("b")))
        edited = ctx.doc

        assert ctx.undo()
        assert ctx.doc is original
        assert ctx.version == 2
        assert ctx.redo()
        assert ctx.doc is edited


class TestDerivedState:
    def test_versioned_positions(self, make_context, schema):
        ctx = make_context("<paragraph>a</paragraph>")
        vpos = ctx.versioned(3)
        assert vpos == VersionedPos(3, 0)
        assert ctx.resolve_versioned(vpos) == 3
        assert ctx.resolve_versioned(VersionedPos(99, 0)) is None

        ctx.dispatch(ctx.transaction().insert(0, schema.paragraph("x")))
        assert ctx.resolve_versioned(vpos) is None

    def test_numbering_follows_edits(self, make_context, schema):
        ctx = make_context('<heading numbered="true">A</heading>')
        assert ctx.numbering() == {0: "1"}
        heading = schema.node("heading", {"numbered": True}, (schema.text("B"),))
        ctx.dispatch(ctx.transaction().insert(0, heading))
        assert ctx.numbering() == {0: "1", 3: "2"}

    def test_fold_range(self, make_context):
        ctx = make_context('<heading level="1">A</heading><paragraph>p</paragraph><heading level="1">B</heading>')
        fold = ctx.fold_range(0)
        assert (fold.from_, fold.to) == (3, 6)
        assert ctx.fold_range(3) is None
