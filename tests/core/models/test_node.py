import pytest

from structdoc.core.models import Node


def _heading_doc():
    """[heading "A", empty paragraph]: heading spans 0..3, paragraph 3..5."""
    return Node("doc", children=(
        Node("heading", {"level": 1}, (Node("text", text="A"),)),
        Node("paragraph"),
    ))


class TestSizes:
    def test_text_size_is_length(self):
        assert Node("text", text="abc").size == 3

    def test_container_size_adds_delimiters(self):
        doc = _heading_doc()
        assert doc.children[0].size == 3
        assert doc.children[1].size == 2
        assert doc.content_size == 5

    def test_text_nodes_reject_children(self):
        with pytest.raises(ValueError):
            Node("text", children=(Node("paragraph"),), text="x")

    def test_with_attrs_returns_new_node(self):
        heading = _heading_doc().children[0]
        changed = heading.with_attrs(level=2)
        assert changed.attrs["level"] == 2
        assert heading.attrs["level"] == 1
        assert changed.children == heading.children


class TestResolve:
    def test_position_inside_heading_start(self):
        rpos = _heading_doc().resolve(1)
        assert rpos.depth == 1
        assert rpos.parent.type == "heading"
        assert rpos.parent_offset == 0
        assert rpos.start() == 1
        assert rpos.before() == 0
        assert rpos.after() == 3

    def test_position_at_heading_content_end(self):
        rpos = _heading_doc().resolve(2)
        assert rpos.parent.type == "heading"
        assert rpos.parent_offset == 1
        assert rpos.node_after is None
        assert rpos.node_before.text == "A"

    def test_position_between_blocks(self):
        rpos = _heading_doc().resolve(3)
        assert rpos.depth == 0
        assert rpos.index() == 1
        assert rpos.node_after.type == "paragraph"
        assert rpos.node_before.type == "heading"

    def test_position_inside_text_splits_node_views(self):
        doc = Node("doc", children=(Node("paragraph", children=(Node("text", text="abc"),)),))
        rpos = doc.resolve(2)
        assert rpos.parent.type == "paragraph"
        assert rpos.text_offset == 1
        assert rpos.node_before.text == "a"
        assert rpos.node_after.text == "bc"

    def test_out_of_range_raises(self):
        with pytest.raises(IndexError):
            _heading_doc().resolve(6)
        with pytest.raises(IndexError):
            _heading_doc().resolve(-1)

    def test_ancestors_innermost_first(self):
        depths = [(d, n.type) for d, n in _heading_doc().resolve(1).ancestors()]
        assert depths == [(1, "heading"), (0, "doc")]


class TestAddressing:
    def test_node_at_block_boundary(self):
        doc = _heading_doc()
        assert doc.node_at(0).type == "heading"
        assert doc.node_at(3).type == "paragraph"

    def test_node_at_inside_textblock_reports_text(self):
        assert _heading_doc().node_at(1).text == "A"

    def test_node_at_end_is_none(self):
        assert _heading_doc().node_at(5) is None

    def test_descendants_pre_order_with_positions(self):
        walked = [(n.type, pos, parent.type, index) for n, pos, parent, index in _heading_doc().descendants()]
        assert walked == [
            ("heading", 0, "doc", 0),
            ("text", 1, "heading", 0),
            ("paragraph", 3, "doc", 1),
        ]

    def test_nodes_between_skips_nodes_outside_range(self):
        found = [(n.type, pos) for n, pos in _heading_doc().nodes_between(3, 5)]
        assert found == [("paragraph", 3)]

    def test_nodes_between_honours_descend(self):
        found = [(n.type, pos) for n, pos in _heading_doc().nodes_between(0, 5, lambda n, p: False)]
        assert found == [("heading", 0), ("paragraph", 3)]

    def test_text_content_concatenates(self):
        doc = Node("doc", children=(
            Node("paragraph", children=(Node("text", text="ab"),)),
            Node("paragraph", children=(Node("text", text="cd"),)),
        ))
        assert doc.text_content == "abcd"
