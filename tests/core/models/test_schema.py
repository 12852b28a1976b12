import pytest

from structdoc.core.models import (
    DEFAULT_SCHEMA,
    AttrSpec,
    DraggedFragment,
    FoldRange,
    LayoutBox,
    LayoutSnapshot,
    Rect,
    SchemaError,
)


class TestAttrSpec:
    @pytest.mark.parametrize(
        "spec, raw, expected",
        [
            (AttrSpec(1, "int"), "3", 3),
            (AttrSpec(1, "int"), "2.0", 2),
            (AttrSpec(1, "int"), "x", 1),
            (AttrSpec(False, "bool"), "TRUE", True),
            (AttrSpec(False, "bool"), "no", False),
            (AttrSpec((50.0, 50.0), "float_list"), "20,30 50", (20.0, 30.0, 50.0)),
            (AttrSpec(None, "optional_str"), "", None),
        ],
    )
    def test_coerce(self, spec, raw, expected):
        assert spec.coerce(raw) == expected


class TestSchema:
    def test_defaults_are_filled(self):
        heading = DEFAULT_SCHEMA.node("heading")
        assert heading.attrs == {
            "level": 1,
            "numbered": False,
            "manualNumber": None,
            "indent": 0,
            "collapsed": False,
            "id": None,
        }
        assert DEFAULT_SCHEMA.node("columns").attrs["columnWidths"] == (50.0, 50.0)

    def test_isolating_types(self):
        assert DEFAULT_SCHEMA.is_isolating(DEFAULT_SCHEMA.node("column"))
        assert DEFAULT_SCHEMA.is_isolating(DEFAULT_SCHEMA.node("tableCell"))
        assert not DEFAULT_SCHEMA.is_isolating(DEFAULT_SCHEMA.node("blockquote"))

    def test_unknown_type(self):
        with pytest.raises(SchemaError):
            DEFAULT_SCHEMA.node("mystery")

    def test_require(self):
        DEFAULT_SCHEMA.require("columns", "column")
        with pytest.raises(SchemaError):
            DEFAULT_SCHEMA.require("columns", "sidebar")


class TestValueTypes:
    def test_fragment_overlap_is_strict(self, schema):
        fragment = DraggedFragment((schema.paragraph("x"),), 5, 10, is_move=True)
        assert fragment.overlaps(9, 12)
        assert not fragment.overlaps(10, 12)
        assert not fragment.overlaps(0, 5)

    def test_copy_fragment_has_no_source(self, schema):
        fragment = DraggedFragment((schema.paragraph("x"),), 5, 10)
        assert not fragment.has_source
        assert not fragment.overlaps(0, 100)

    def test_fold_range(self):
        fold = FoldRange(3, 8)
        assert 3 in fold
        assert 8 not in fold
        assert fold.size == 5

    def test_layout_iteration_is_preorder(self):
        inner = LayoutBox(1, "column", Rect(0, 0, 10, 10))
        outer = LayoutBox(0, "columns", Rect(0, 0, 20, 10), (inner,))
        tail = LayoutBox(9, "paragraph", Rect(0, 20, 20, 30))
        layout = LayoutSnapshot(Rect(0, 0, 20, 30), (outer, tail))
        assert [(b.pos, d) for b, d in layout.iter_boxes()] == [(0, 0), (1, 1), (9, 0)]
        assert layout.box_at(9) is tail
        assert layout.boxes_of_type("column") == [inner]
