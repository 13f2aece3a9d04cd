"""Schema emitter for structured outputs.

Serializes a ``ShapeNode`` tree into the strict JSON Schema subset
accepted by OpenAI's ``response_format={"type": "json_schema", ...}``
with ``strict: true``:

- every object sets ``additionalProperties: false`` and lists all of its
  properties in ``required``;
- optional values are expressed as a union with ``null``, never by
  leaving a property out of ``required``;
- documentation becomes ``description`` so the model sees it.

Emission is pure: the same tree always yields the same document.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from ..core.config import STRICT_DIALECT, SchemaDialect
from ..core.exceptions import UnsupportedShapeError
from ..schemas.nodes import (
    ArrayNode,
    EnumNode,
    NullableNode,
    ObjectNode,
    RefNode,
    ScalarNode,
    ShapeNode,
)
from .builder import as_shape_node

_SCHEMA_NAME_MAX = 64
_SCHEMA_NAME_INVALID = re.compile(r"[^A-Za-z0-9_-]")


def emit_schema(
    shape: Any,
    documentation: Optional[str] = None,
    dialect: Optional[SchemaDialect] = None,
) -> dict[str, Any]:
    """Build the JSON Schema document for a shape.

    Args:
        shape: A ``ShapeNode`` or a type accepted by ``describe()``.
        documentation: Root description; defaults to the root type's own
            documentation.
        dialect: Schema dialect rules (strict OpenAI dialect by default).

    Returns:
        A dict ready for ``json.dumps``.
    """
    node = as_shape_node(shape)
    return _SchemaEmitter(node, dialect or STRICT_DIALECT).emit_root(documentation)


def build_response_format(
    shape: Any,
    name: Optional[str] = None,
    dialect: Optional[SchemaDialect] = None,
) -> dict[str, Any]:
    """Build the ``response_format`` dict for OpenAI structured outputs.

    Returns:
        ``{"type": "json_schema", "json_schema": {"name": ..., "schema": ..., "strict": True}}``

    Raises:
        UnsupportedShapeError: The root shape is not an object; the
            provider only accepts objects at the top level.
    """
    node = as_shape_node(shape)
    if not isinstance(node, ObjectNode):
        raise UnsupportedShapeError(
            "The root of a structured response must be an object",
            path=getattr(node, "name", None) or type(node).__name__,
        )
    dialect = dialect or STRICT_DIALECT

    json_schema: dict[str, Any] = {"name": _schema_name(name or node.name)}
    if node.documentation:
        json_schema["description"] = node.documentation
    json_schema["schema"] = emit_schema(node, dialect=dialect)
    json_schema["strict"] = dialect.strict

    return {"type": "json_schema", "json_schema": json_schema}


class _SchemaEmitter:
    """Emits one document; collects ``$defs`` for recursive records."""

    def __init__(self, root: ShapeNode, dialect: SchemaDialect):
        self.root = root
        self.dialect = dialect
        self.ref_names = _collect_ref_names(root)
        self.defs: dict[str, dict[str, Any]] = {}

    def emit_root(self, documentation: Optional[str]) -> dict[str, Any]:
        if isinstance(self.root, ObjectNode):
            schema = self._object(self.root)
        else:
            schema = self._emit(self.root)

        doc = documentation or _documentation(self.root)
        if doc:
            schema["description"] = doc
        if self.defs:
            schema["$defs"] = self.defs
        return schema

    def _emit(self, node: ShapeNode) -> dict[str, Any]:
        if isinstance(node, ScalarNode):
            return {"type": node.kind}

        if isinstance(node, EnumNode):
            schema: dict[str, Any] = {"type": node.kind, "enum": node.wire_values}
            if node.documentation:
                schema["description"] = node.documentation
            return schema

        if isinstance(node, ArrayNode):
            return {"type": "array", "items": self._emit(node.element)}

        if isinstance(node, NullableNode):
            return self._nullable(node.inner)

        if isinstance(node, ObjectNode):
            if node.name not in self.ref_names:
                return self._object(node)
            if node.name not in self.defs:
                self.defs[node.name] = self._object(node)
            return {"$ref": f"#/$defs/{node.name}"}

        if isinstance(node, RefNode):
            if isinstance(self.root, ObjectNode) and node.name == self.root.name:
                return {"$ref": "#"}
            return {"$ref": f"#/$defs/{node.name}"}

        raise TypeError(f"Unknown shape node: {node!r}")

    def _object(self, node: ObjectNode) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        required: list[str] = []

        for field in node.wire_fields:
            prop = self._emit(field.shape)
            # Field documentation is more specific than the type's
            if field.documentation:
                prop["description"] = field.documentation
            properties[field.wire_name] = prop

            if self.dialect.require_all_fields or not isinstance(field.shape, NullableNode):
                required.append(field.wire_name)

        schema: dict[str, Any] = {"type": "object"}
        if node.documentation:
            schema["description"] = node.documentation
        schema["properties"] = properties
        schema["required"] = required
        if self.dialect.forbid_additional_properties:
            schema["additionalProperties"] = False
        return schema

    def _nullable(self, inner: ShapeNode) -> dict[str, Any]:
        schema = self._emit(inner)

        if isinstance(inner, ScalarNode):
            schema["type"] = [schema["type"], "null"]
            return schema

        if isinstance(inner, EnumNode):
            # `enum` is checked independently of `type`, so null must be listed too
            schema["type"] = [schema["type"], "null"]
            schema["enum"] = [*schema["enum"], None]
            return schema

        return {"anyOf": [schema, {"type": "null"}]}


def _collect_ref_names(node: Optional[ShapeNode]) -> set[str]:
    names: set[str] = set()

    def walk(n: Optional[ShapeNode]) -> None:
        if isinstance(n, RefNode):
            names.add(n.name)
        elif isinstance(n, ObjectNode):
            for field in n.wire_fields:
                walk(field.shape)
        elif isinstance(n, ArrayNode):
            walk(n.element)
        elif isinstance(n, NullableNode):
            walk(n.inner)

    walk(node)
    return names


def _documentation(node: ShapeNode) -> Optional[str]:
    if isinstance(node, (ObjectNode, EnumNode)):
        return node.documentation
    return None


def _schema_name(name: str) -> str:
    """Sanitize to the ``^[a-zA-Z0-9_-]{1,64}$`` pattern OpenAI requires."""
    cleaned = _SCHEMA_NAME_INVALID.sub("_", name)[:_SCHEMA_NAME_MAX]
    return cleaned or "response"
