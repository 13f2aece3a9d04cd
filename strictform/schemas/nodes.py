"""Shape descriptor tree.

A ``ShapeNode`` is one of a fixed set of frozen dataclasses. The builder
produces them, the emitter and decoder dispatch on them with
``isinstance``; nothing mutates a node after construction, so trees are
safe to share between concurrent requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

ScalarKind = Literal["string", "integer", "number", "boolean"]


@dataclass(frozen=True)
class ScalarNode:
    """A JSON primitive."""

    kind: ScalarKind


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a record shape.

    Attributes:
        wire_name: Property name used in the schema and the response
            (the rename target when set, else ``source_name``).
        source_name: Attribute name on the Python class.
        shape: Shape of the field's value; ``None`` only for a skipped
            field whose type has no schema form.
        documentation: Description shown to the model, if any.
        skip: Excluded from the schema and never read from a response.
    """

    wire_name: str
    source_name: str
    shape: Optional["ShapeNode"]
    documentation: Optional[str] = None
    skip: bool = False


@dataclass(frozen=True)
class ObjectNode:
    """A record: ordered, named, typed fields.

    Attributes:
        name: Type name, used for ``$defs`` and the schema envelope.
        fields: Field descriptors in declaration order, skipped ones included.
        documentation: Type-level description, if any.
        target: Class instantiated when decoding.
    """

    name: str
    fields: tuple[FieldDescriptor, ...]
    documentation: Optional[str] = None
    target: Optional[type] = None

    @property
    def wire_fields(self) -> tuple[FieldDescriptor, ...]:
        """Fields that take part in the schema and in decoding."""
        return tuple(f for f in self.fields if not f.skip)


@dataclass(frozen=True)
class EnumMember:
    """One alternative of an enumeration.

    Attributes:
        wire_value: Literal sent to and expected from the model.
        source_name: Member name on the Python enum (or ``repr`` of a literal).
        documentation: Member description, if any.
        value: Python object returned when decoding this member.
    """

    wire_value: Union[str, int]
    source_name: str
    documentation: Optional[str] = None
    value: Any = None


@dataclass(frozen=True)
class EnumNode:
    """A closed set of named alternatives."""

    name: Optional[str]
    members: tuple[EnumMember, ...]
    documentation: Optional[str] = None
    target: Optional[type] = None

    @property
    def kind(self) -> ScalarKind:
        """Schema type shared by all wire values."""
        if self.members and isinstance(self.members[0].wire_value, int):
            return "integer"
        return "string"

    @property
    def wire_values(self) -> list[Union[str, int]]:
        return [m.wire_value for m in self.members]


@dataclass(frozen=True)
class ArrayNode:
    """A homogeneous list."""

    element: "ShapeNode"


@dataclass(frozen=True)
class NullableNode:
    """A value that may be ``null``. Never wraps another ``NullableNode``."""

    inner: "ShapeNode"


@dataclass(frozen=True)
class RefNode:
    """Back-reference to the enclosing ``ObjectNode`` called ``name``."""

    name: str


ShapeNode = Union[ScalarNode, ObjectNode, EnumNode, ArrayNode, NullableNode, RefNode]


def nullable(inner: ShapeNode) -> NullableNode:
    """Wrap ``inner`` as nullable, collapsing nested nullables."""
    if isinstance(inner, NullableNode):
        return inner
    return NullableNode(inner)
