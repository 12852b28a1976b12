from __future__ import annotations

"""Node type declarations and attribute coercion.

The schema is deliberately small: it knows which node types exist, which of
them hold inline (text) content, which are *isolating* (fold and containment
traversal must not cross them implicitly) and what attributes each type
carries together with their defaults. Content expressions are not enforced;
structural invariants of the column containers live in the container service.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from structdoc.core.models.node import Node

__all__ = [
    "SchemaError",
    "AttrSpec",
    "NodeSpec",
    "Schema",
    "DEFAULT_SCHEMA",
    "MIN_HEADING_LEVEL",
    "MAX_HEADING_LEVEL",
    "MAX_INDENT",
]

logger = logging.getLogger(__name__)

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6
MAX_INDENT = 5

_TRUE_STRINGS = {"1", "true", "yes", "on"}


class SchemaError(Exception):
    """Raised when a node type is unknown or a required type is missing."""


@dataclass(frozen=True)
class AttrSpec:
    """Declaration of one node attribute.

    ``kind`` drives coercion of raw (string) values, see :meth:`coerce`.
    Supported kinds: ``int``, ``float``, ``bool``, ``str``, ``float_list``,
    ``optional_str``.
    """

    default: Any = None
    kind: str = "str"

    def coerce(self, value: Any) -> Any:
        """Coerce ``value`` to this attribute's kind; fall back to the default."""
        if value is None:
            return self.default
        try:
            if self.kind == "int":
                return int(float(value))
            if self.kind == "float":
                return float(value)
            if self.kind == "bool":
                if isinstance(value, str):
                    return value.strip().lower() in _TRUE_STRINGS
                return bool(value)
            if self.kind == "float_list":
                if isinstance(value, str):
                    parts = [p for p in value.replace(",", " ").split() if p]
                    return tuple(float(p) for p in parts)
                return tuple(float(v) for v in value)
            if self.kind == "optional_str":
                text = str(value)
                return text if text else None
            return str(value)
        except (TypeError, ValueError):
            logger.debug("Attribute coercion failed kind=%s value=%r", self.kind, value)
            return self.default


@dataclass(frozen=True)
class NodeSpec:
    name: str
    group: str = "block"
    inline_content: bool = False
    isolating: bool = False
    attrs: Mapping[str, AttrSpec] = field(default_factory=dict)

    def default_attrs(self) -> Dict[str, Any]:
        return {name: spec.default for name, spec in self.attrs.items()}


class Schema:
    """Registry of :class:`NodeSpec` keyed by type name."""

    def __init__(self, specs: Iterable[NodeSpec]) -> None:
        self._specs: Dict[str, NodeSpec] = {spec.name: spec for spec in specs}

    def __contains__(self, name: str) -> bool:
        return name in self._specs

    def spec(self, name: str) -> NodeSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise SchemaError(f"Unknown node type '{name}'") from None

    def require(self, *names: str) -> None:
        """Abort loudly when the schema lacks one of ``names``."""
        missing = [n for n in names if n not in self._specs]
        if missing:
            raise SchemaError(f"Schema is missing required node type(s): {', '.join(missing)}")

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------
    def node(
        self,
        type: str,
        attrs: Optional[Mapping[str, Any]] = None,
        children: Iterable[Node] = (),
    ) -> Node:
        """Build a node of ``type`` with defaults filled and values coerced."""
        spec = self.spec(type)
        if type == "text":
            raise SchemaError("Use Schema.text() to build text nodes")
        merged = spec.default_attrs()
        for name, value in (attrs or {}).items():
            attr_spec = spec.attrs.get(name)
            merged[name] = attr_spec.coerce(value) if attr_spec is not None else value
        return Node(type, merged, tuple(children))

    def text(self, value: str) -> Node:
        return Node("text", text=value)

    def paragraph(self, text: str = "") -> Node:
        return self.node("paragraph", children=(self.text(text),) if text else ())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_isolating(self, node: Node) -> bool:
        spec = self._specs.get(node.type)
        return bool(spec and spec.isolating)

    def is_textblock(self, node: Node) -> bool:
        spec = self._specs.get(node.type)
        return bool(spec and spec.inline_content)


def _heading_attrs() -> Dict[str, AttrSpec]:
    return {
        "level": AttrSpec(1, "int"),
        "numbered": AttrSpec(False, "bool"),
        "manualNumber": AttrSpec(None, "optional_str"),
        "indent": AttrSpec(0, "int"),
        "collapsed": AttrSpec(False, "bool"),
        "id": AttrSpec(None, "optional_str"),
    }


_DEFAULT_SPECS: Tuple[NodeSpec, ...] = (
    NodeSpec("doc", group="top"),
    NodeSpec("text", group="inline"),
    NodeSpec("paragraph", inline_content=True),
    NodeSpec("heading", inline_content=True, attrs=_heading_attrs()),
    NodeSpec("blockquote"),
    NodeSpec("codeBlock", inline_content=True, attrs={"language": AttrSpec(None, "optional_str")}),
    NodeSpec("bulletList", group="list"),
    NodeSpec("orderedList", group="list", attrs={"start": AttrSpec(1, "int")}),
    NodeSpec("listItem"),
    NodeSpec("taskList", group="list"),
    NodeSpec("taskItem", attrs={"checked": AttrSpec(False, "bool")}),
    NodeSpec("table", group="container"),
    NodeSpec("tableRow"),
    NodeSpec("tableCell", isolating=True, attrs={"colspan": AttrSpec(1, "int"), "rowspan": AttrSpec(1, "int")}),
    NodeSpec("tableHeader", isolating=True, attrs={"colspan": AttrSpec(1, "int"), "rowspan": AttrSpec(1, "int")}),
    NodeSpec("callout", group="container", attrs={"variant": AttrSpec("info", "str")}),
    NodeSpec(
        "columns",
        group="container",
        attrs={
            "count": AttrSpec(2, "int"),
            "columnWidths": AttrSpec((50.0, 50.0), "float_list"),
            "layout": AttrSpec("grid", "str"),
        },
    ),
    NodeSpec("column", isolating=True, attrs={"width": AttrSpec(50.0, "float")}),
    NodeSpec("horizontalRule"),
)

DEFAULT_SCHEMA = Schema(_DEFAULT_SPECS)
