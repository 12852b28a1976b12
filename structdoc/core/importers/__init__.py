from __future__ import annotations

"""Import of documents from their XML interchange notation.

Key components:
- parse_document: XML string/bytes to a document tree
- load_document: same, read from a file
"""

from .xml_importer import DocumentImportError, load_document, parse_document

__all__ = ["DocumentImportError", "parse_document", "load_document"]
