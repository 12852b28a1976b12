from __future__ import annotations

"""Modules responsible for generating the XML notation of documents."""

from .xml_builder import build_element, to_xml_string  # noqa: F401

__all__: list[str] = [
    "build_element",
    "to_xml_string",
]
