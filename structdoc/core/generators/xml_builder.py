from __future__ import annotations

"""Build the XML notation of a document tree (inverse of the importer)."""

import logging
from typing import Any

from lxml import etree as ET

from structdoc.core.models.node import Node

logger = logging.getLogger(__name__)

__all__ = ["build_element", "to_xml_string"]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return " ".join(_format_value(v) for v in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_element(node: Node) -> ET._Element:
    """Return the lxml element for ``node``; ``None`` attributes are omitted."""
    if node.is_text:
        raise ValueError("Text nodes have no element form")
    element = ET.Element(node.type)
    for name, value in node.attrs.items():
        if value is None:
            continue
        element.set(name, _format_value(value))

    last = None
    for child in node.children:
        if child.is_text:
            if last is None:
                element.text = (element.text or "") + (child.text or "")
            else:
                last.tail = (last.tail or "") + (child.text or "")
            continue
        last = build_element(child)
        element.append(last)
    return element


def to_xml_string(node: Node, pretty: bool = False) -> str:
    return ET.tostring(build_element(node), encoding="unicode", pretty_print=pretty)
