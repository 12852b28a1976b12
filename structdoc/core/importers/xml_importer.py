from __future__ import annotations

"""XML importer for document trees.

The interchange notation is deliberately plain: one element per node, the
element name is the node type and XML attributes carry node attributes as
strings, coerced through the schema's attribute declarations. Inside nodes
with inline content the element text becomes a single text node; between
blocks, whitespace is ignored. Example::

    <doc>
      <heading level="1" numbered="true">Intro</heading>
      <columns count="2" columnWidths="50 50">
        <column width="50"><paragraph>left</paragraph></column>
        <column width="50"><paragraph>right</paragraph></column>
      </columns>
    </doc>

The notation is used for fixtures and debugging; it is not a persistence
format.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from lxml import etree as ET

from structdoc.core.models.node import Node
from structdoc.core.models.schema import DEFAULT_SCHEMA, Schema, SchemaError

logger = logging.getLogger(__name__)

__all__ = ["DocumentImportError", "parse_document", "load_document"]


class DocumentImportError(Exception):
    """Exception raised when a document cannot be imported."""

    def __init__(self, message: str, file_path: Optional[Path] = None, cause: Optional[Exception] = None):
        self.file_path = file_path
        self.cause = cause
        super().__init__(message)


def _parser() -> ET.XMLParser:
    return ET.XMLParser(resolve_entities=False, no_network=True, remove_comments=True, remove_pis=True)


def _local_name(element: ET._Element) -> str:
    return ET.QName(element).localname


def _convert(element: ET._Element, schema: Schema) -> Node:
    node_type = _local_name(element)
    spec = schema.spec(node_type)
    attrs = {key: value for key, value in element.attrib.items()}

    children: List[Node] = []
    if spec.inline_content:
        text = "".join(element.itertext())
        if text:
            children.append(schema.text(text))
    else:
        if element.text and element.text.strip():
            logger.warning("Ignoring loose text in <%s>: %r", node_type, element.text.strip()[:40])
        for child in element:
            if not isinstance(child.tag, str):
                continue
            children.append(_convert(child, schema))
            if child.tail and child.tail.strip():
                logger.warning("Ignoring loose text after <%s>", _local_name(child))
    return schema.node(node_type, attrs, children)


def parse_document(xml: Union[str, bytes], schema: Schema = DEFAULT_SCHEMA) -> Node:
    """Parse the XML notation of a document into a tree.

    Raises
    ------
    DocumentImportError
        When the XML is malformed, the root is not ``<doc>`` or an element
        names an unknown node type.
    """
    data = xml.encode("utf-8") if isinstance(xml, str) else xml
    try:
        root = ET.fromstring(data, _parser())
    except ET.XMLSyntaxError as exc:
        raise DocumentImportError(f"Malformed document XML: {exc}", cause=exc) from exc

    if _local_name(root) != "doc":
        raise DocumentImportError(f"Root element must be <doc>, got <{_local_name(root)}>")
    try:
        doc = _convert(root, schema)
    except SchemaError as exc:
        raise DocumentImportError(str(exc), cause=exc) from exc
    logger.debug("Parsed document size=%s", doc.content_size)
    return doc


def load_document(path: Union[str, Path], schema: Schema = DEFAULT_SCHEMA) -> Node:
    """Read and parse a document file."""
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise DocumentImportError(f"Cannot read {file_path}: {exc}", file_path, exc) from exc
    try:
        return parse_document(data, schema)
    except DocumentImportError as exc:
        raise DocumentImportError(str(exc), file_path, exc.cause) from exc
