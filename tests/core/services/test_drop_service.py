import pytest

from structdoc.core.models import (
    IDLE,
    ColumnsEdgeGuideline,
    DraggedFragment,
    EditorBorderGuideline,
)
from structdoc.core.services.drop_service import DropService

TWO_COL = (
    '<columns count="2" columnWidths="50 50">'
    '<column width="50"><paragraph>left</paragraph></column>'
    '<column width="50"><paragraph>right</paragraph></column>'
    "</columns>"
)

THREE_COL = (
    '<columns count="3" columnWidths="33.33 33.33 33.34">'
    "<column><paragraph>a</paragraph></column>"
    "<column><paragraph>b</paragraph></column>"
    "<column><paragraph>c</paragraph></column>"
    "</columns>"
)


def _gap(ctx, column_index=0, container_pos=0, version=None):
    return ColumnsEdgeGuideline(400, "right", column_index, container_pos, 0, 200,
                                ctx.version if version is None else version)


def _border(ctx, target_pos, side="left", version=None):
    return EditorBorderGuideline(100 if side == "left" else 700, side, target_pos, False, 0, 40,
                                 ctx.version if version is None else version)


def _column_texts(container):
    return [column.text_content for column in container.children]


@pytest.fixture
def service():
    return DropService()


@pytest.fixture
def copy_of(schema):
    """A copy fragment (no source) holding one paragraph."""

    def _build(text):
        return DraggedFragment((schema.paragraph(text),))

    return _build


class TestInsertIntoContainer:
    def test_gap_drop_inserts_after_column(self, make_context, service, copy_of):
        ctx = make_context(TWO_COL)
        ctx.guidelines.update_vertical(_gap(ctx))
        result = service.execute(ctx, _gap(ctx), copy_of("new"))
        assert result.success
        assert result.details == {"case": "insert-column", "index": 1, "count": 3}
        container = ctx.doc.children[0]
        assert _column_texts(container) == ["left", "new", "right"]
        assert container.attrs["columnWidths"] == (33.33, 33.33, 33.34)
        assert [c.attrs["width"] for c in container.children] == [33.33, 33.33, 33.34]
        assert ctx.guidelines.is_idle

    def test_border_inside_container_appends_on_right(self, make_context, service, copy_of):
        ctx = make_context(TWO_COL)
        result = service.execute(ctx, _border(ctx, 2, "right"), copy_of("new"))
        assert result.success
        assert _column_texts(ctx.doc.children[0]) == ["left", "right", "new"]

    def test_border_on_container_prepends_on_left(self, make_context, service, copy_of):
        ctx = make_context(TWO_COL)
        assert service.execute(ctx, _border(ctx, 0, "left"), copy_of("new")).success
        assert _column_texts(ctx.doc.children[0]) == ["new", "left", "right"]

    def test_move_within_container(self, make_context, service, schema):
        # columns[col[a, b], col[c]]: b is 5..8, the container ends at 15
        ctx = make_context(
            '<columns count="2" columnWidths="50 50">'
            "<column><paragraph>a</paragraph><paragraph>b</paragraph></column>"
            "<column><paragraph>c</paragraph></column>"
            "</columns>"
        )
        fragment = DraggedFragment((schema.paragraph("b"),), 5, 8, is_move=True, doc_version=ctx.version)
        result = service.execute(ctx, _gap(ctx, column_index=1), fragment)
        assert result.success
        assert _column_texts(ctx.doc.children[0]) == ["a", "c", "b"]

    def test_moving_a_column_keeps_widths_in_step(self, make_context, service):
        # columns a, b, c are 1..6, 6..11, 11..16
        ctx = make_context(THREE_COL)
        column = ctx.doc.children[0].children[0]
        fragment = DraggedFragment((column,), 1, 6, is_move=True, doc_version=ctx.version)
        result = service.execute(ctx, _gap(ctx, column_index=1), fragment)
        assert result.success
        assert result.details == {"case": "insert-column", "index": 1, "count": 3}
        container = ctx.doc.children[0]
        assert _column_texts(container) == ["b", "a", "c"]
        assert container.attrs["count"] == 3
        assert container.attrs["columnWidths"] == (33.33, 33.33, 33.34)
        assert [c.attrs["width"] for c in container.children] == [33.33, 33.33, 33.34]
        assert all(block.type == "paragraph" for c in container.children for block in c.children)

    def test_gap_inside_moved_range_is_refused(self, make_context, service):
        ctx = make_context(THREE_COL)
        before = ctx.doc
        fragment = DraggedFragment(ctx.doc.children[0].children[:2], 1, 11, is_move=True, doc_version=ctx.version)
        assert service.execute(ctx, _gap(ctx, column_index=0), fragment).reason == "invalid_target"
        assert ctx.doc is before


    def test_rejected_at_maximum(self, make_context, service, copy_of):
        cols = "".join(f"<column><paragraph>{i}</paragraph></column>" for i in range(7))
        ctx = make_context(f'<columns count="7">{cols}</columns>')
        before = ctx.doc
        result = service.execute(ctx, _gap(ctx), copy_of("new"))
        assert result.reason == "invariant_violation"
        assert ctx.doc is before

    def test_container_cannot_be_dropped_into_itself(self, make_context, service):
        ctx = make_context(TWO_COL)
        fragment = DraggedFragment(ctx.doc.children, 0, 19, is_move=True)
        assert service.execute(ctx, _gap(ctx), fragment).reason == "invalid_target"

    def test_stale_container_position(self, make_context, service, copy_of):
        ctx = make_context("<paragraph>x</paragraph>")
        assert service.execute(ctx, _gap(ctx), copy_of("new")).reason == "invalid_target"


class TestCreateColumns:
    @pytest.mark.parametrize("side, expected", [("left", ["new", "target"]), ("right", ["target", "new"])])
    def test_wrap_block(self, make_context, service, copy_of, side, expected):
        ctx = make_context("<paragraph>target</paragraph>")
        result = service.execute(ctx, _border(ctx, 0, side), copy_of("new"))
        assert result.success
        assert result.details == {"case": "create-columns", "side": side}
        container = ctx.doc.children[0]
        assert container.type == "columns"
        assert container.attrs["count"] == 2
        assert container.attrs["columnWidths"] == (50.0, 50.0)
        assert _column_texts(container) == expected

    def test_move_from_before_target(self, make_context, service, schema, texts_of):
        # "src" is 0..5, "target" 5..13
        ctx = make_context("<paragraph>src</paragraph><paragraph>target</paragraph>")
        fragment = DraggedFragment((schema.paragraph("src"),), 0, 5, is_move=True, doc_version=ctx.version)
        assert service.execute(ctx, _border(ctx, 5, "left"), fragment).success
        assert [c.type for c in ctx.doc.children] == ["columns"]
        assert texts_of(ctx.doc) == ["src", "target"]

    def test_move_from_after_target(self, make_context, service, schema, texts_of):
        # "target" is 0..8, "src" 8..13; the new container shifts it to 19..24
        ctx = make_context("<paragraph>target</paragraph><paragraph>src</paragraph>")
        fragment = DraggedFragment((schema.paragraph("src"),), 8, 13, is_move=True, doc_version=ctx.version)
        outcome = service.build_transaction(ctx.doc, _border(ctx, 0, "right"), fragment)
        assert outcome.ok
        assert outcome.transaction.mapping.map(8, 1) == 19
        assert service.execute(ctx, _border(ctx, 0, "right"), fragment).success
        assert [c.type for c in ctx.doc.children] == ["columns"]
        assert texts_of(ctx.doc) == ["target", "src"]

    def test_move_out_of_column_cleans_up_source_layout(self, make_context, service, schema, texts_of):
        ctx = make_context(TWO_COL + "<paragraph>tail</paragraph>")
        fragment = DraggedFragment((schema.paragraph("left"),), 2, 8, is_move=True, doc_version=ctx.version)
        assert service.execute(ctx, _border(ctx, 19, "left"), fragment).success
        assert [c.type for c in ctx.doc.children] == ["paragraph", "columns"]
        assert texts_of(ctx.doc) == ["right", "left", "tail"]

    def test_inline_fragment_is_wrapped(self, make_context, service, schema):
        ctx = make_context("<paragraph>target</paragraph>")
        fragment = DraggedFragment((schema.text("loose"),))
        assert service.execute(ctx, _border(ctx, 0, "left"), fragment).success
        dropped = ctx.doc.children[0].children[0]
        assert [c.type for c in dropped.children] == ["paragraph"]
        assert dropped.text_content == "loose"

    def test_moved_layout_is_unpacked_into_one_column(self, make_context, service, positions_of, texts_of):
        # the container is 0..19, "tail" 19..25
        ctx = make_context(TWO_COL + "<paragraph>tail</paragraph>")
        fragment = DraggedFragment(ctx.doc.children[:1], 0, 19, is_move=True, doc_version=ctx.version)
        assert service.execute(ctx, _border(ctx, 19, "left"), fragment).success
        assert [c.type for c in ctx.doc.children] == ["columns"]
        assert positions_of(ctx.doc, "columns") == [0]
        assert positions_of(ctx.doc, "column") == [1, 16]
        assert _column_texts(ctx.doc.children[0]) == ["leftright", "tail"]
        assert texts_of(ctx.doc) == ["left", "right", "tail"]

    def test_inline_move_splits_source_text(self, make_context, service, schema, texts_of):
        # "hello world" is 0..13 with "world" at 7..12, "next" 13..19
        ctx = make_context("<paragraph>hello world</paragraph><paragraph>next</paragraph>")
        fragment = DraggedFragment((schema.text("world"),), 7, 12, is_move=True, doc_version=ctx.version)
        result = service.execute(ctx, _border(ctx, 13, "left"), fragment)
        assert result.success
        assert [c.type for c in ctx.doc.children] == ["paragraph", "columns"]
        assert texts_of(ctx.doc) == ["hello ", "world", "next"]


    def test_drop_onto_itself(self, make_context, service, schema):
        ctx = make_context("<paragraph>target</paragraph>")
        fragment = DraggedFragment((schema.paragraph("target"),), 0, 8, is_move=True)
        assert service.execute(ctx, _border(ctx, 0), fragment).reason == "invalid_target"

    def test_orphan_column_is_refused(self, make_context, service, copy_of):
        ctx = make_context("<column><paragraph>orphan</paragraph></column>")
        before = ctx.doc
        result = service.execute(ctx, _border(ctx, 1), copy_of("new"))
        assert result.reason == "invalid_target"
        assert ctx.doc is before


class TestPreconditions:
    def test_stale_guideline(self, make_context, service, copy_of):
        ctx = make_context("<paragraph>target</paragraph>")
        state = _border(ctx, 0, version=ctx.version + 1)
        ctx.guidelines.update_vertical(state)
        result = service.execute(ctx, state, copy_of("new"))
        assert result.reason == "stale_state"
        assert ctx.guidelines.is_idle

    def test_stale_fragment(self, make_context, service, schema):
        ctx = make_context("<paragraph>src</paragraph><paragraph>target</paragraph>")
        fragment = DraggedFragment((schema.paragraph("src"),), 0, 5, is_move=True, doc_version=ctx.version - 1)
        assert service.execute(ctx, _border(ctx, 5), fragment).reason == "stale_state"

    def test_idle_state(self, make_context, service, copy_of):
        ctx = make_context("<paragraph>target</paragraph>")
        assert service.execute(ctx, IDLE, copy_of("new")).reason == "invalid_target"

    @pytest.mark.parametrize("fragment", [None, DraggedFragment(())])
    def test_nothing_dragged(self, make_context, service, fragment):
        ctx = make_context("<paragraph>target</paragraph>")
        assert service.execute(ctx, _border(ctx, 0), fragment).reason == "no_fragment"

    def test_build_transaction_leaves_document_alone(self, make_context, service, copy_of):
        ctx = make_context("<paragraph>target</paragraph>")
        before, version = ctx.doc, ctx.version
        outcome = service.build_transaction(ctx.doc, _border(ctx, 0), copy_of("new"))
        assert outcome.ok
        assert outcome.transaction.before is before
        assert ctx.doc is before
        assert ctx.version == version
