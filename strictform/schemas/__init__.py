"""Data types shared by the shape engine and the provider adapter.

- Shape nodes: ScalarNode, ObjectNode, EnumNode, ArrayNode, NullableNode, RefNode
- Field/member descriptors: FieldDescriptor, EnumMember
- Outcomes: Refusal, Payload, StructuredResult[T]
- UsageInfo: token counters passed through from the provider
"""

from .base import UsageInfo
from .nodes import (
    ArrayNode,
    EnumMember,
    EnumNode,
    FieldDescriptor,
    NullableNode,
    ObjectNode,
    RefNode,
    ScalarNode,
    ShapeNode,
    nullable,
)
from .structured import Payload, Refusal, RefusalOrPayload, StructuredResult

__all__ = [
    "UsageInfo",
    "ShapeNode",
    "ScalarNode",
    "ObjectNode",
    "EnumNode",
    "ArrayNode",
    "NullableNode",
    "RefNode",
    "FieldDescriptor",
    "EnumMember",
    "nullable",
    "Refusal",
    "Payload",
    "RefusalOrPayload",
    "StructuredResult",
]
