"""Shared fixtures for the structdoc test-suite.

Documents are written in the XML notation understood by
:func:`structdoc.core.importers.parse_document`, which keeps positions easy
to derive by hand: every element adds 2 slots, every character 1.
"""

import os
import sys
from typing import Callable, List

import pytest

# Ensure project root is importable when running pytest from repository root
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from structdoc.config import ConfigManager
from structdoc.core.context import EditorContext
from structdoc.core.importers import parse_document
from structdoc.core.models import DEFAULT_SCHEMA, Node


def _positions_of(doc: Node, node_type: str) -> List[int]:
    return [pos for node, pos, _parent, _index in doc.descendants() if node.type == node_type]


def _texts_of(doc: Node, node_type: str = "paragraph") -> List[str]:
    return [node.text_content for node, _pos, _parent, _index in doc.descendants() if node.type == node_type]


@pytest.fixture
def positions_of():
    """Positions of every node of a type, in document order."""
    return _positions_of


@pytest.fixture
def texts_of():
    """Text content of every node of a type (paragraphs by default)."""
    return _texts_of


@pytest.fixture
def schema():
    return DEFAULT_SCHEMA


@pytest.fixture
def xml_doc() -> Callable[[str], Node]:
    """Parse an XML body (without the surrounding <doc>) into a document."""

    def _build(body: str) -> Node:
        return parse_document(f"<doc>{body}</doc>")

    return _build


@pytest.fixture
def make_context() -> Callable[[str], EditorContext]:
    """Build an EditorContext from an XML body."""

    def _build(body: str) -> EditorContext:
        return EditorContext.from_xml(f"<doc>{body}</doc>")

    return _build


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the user config directory at a temp dir and reload ConfigManager."""
    monkeypatch.setenv("STRUCTDOC_CONFIG_DIR", str(tmp_path))
    ConfigManager.reset()
    yield tmp_path
    ConfigManager.reset()
