"""Tests for the schema emitter (structured outputs)."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import List, Literal, Optional

import pytest
from pydantic import BaseModel, Field

from strictform.core.config import SchemaDialect
from strictform.core.exceptions import UnsupportedShapeError
from strictform.schemas.nodes import (
    ArrayNode,
    EnumMember,
    EnumNode,
    FieldDescriptor,
    NullableNode,
    ObjectNode,
    ScalarNode,
)
from strictform.shapes.emitter import _schema_name, build_response_format, emit_schema


# ---------------------------------------------------------------------------
# Shapes under test
# ---------------------------------------------------------------------------


class SuperComplexSchema(BaseModel):
    """Hello friends"""

    optional_string: Optional[str] = Field(description="The first one.")
    regular_string: str = Field(alias="not_so_regular_string")
    regular_string_2: str = Field(default="", exclude=True)
    int_value: int


class Category(enum.Enum):
    """The category of the message that's being inquired about."""

    Question = 1
    Statement = 2
    Answer = 3


class NicenessScore(enum.IntEnum):
    """How nice the message is between 1 and 10."""

    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10


class NicenessScoreContainer(BaseModel):
    """The niceness score."""

    niceness_score: NicenessScore
    category: Category


class Address(BaseModel):
    """A postal address."""

    city: str


class Person(BaseModel):
    home: Optional[Address]
    work: Address = Field(description="Where they work.")
    nicknames: Optional[List[str]]
    mood: Optional[Category]
    tier: Literal["free", "pro"]


class Comment(BaseModel):
    """A threaded comment."""

    text: str
    replies: List["Comment"]


class Thread(BaseModel):
    title: str
    root: Comment


@dataclass
class Measurement:
    value: float
    unit: Optional[str] = field(default=None, metadata={"description": "SI unit."})


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------


class TestObjectEmission:
    def test_complex_schema(self):
        schema = emit_schema(SuperComplexSchema)
        assert schema == {
            "type": "object",
            "description": "Hello friends",
            "properties": {
                "optional_string": {"type": ["string", "null"], "description": "The first one."},
                "not_so_regular_string": {"type": "string"},
                "int_value": {"type": "integer"},
            },
            "required": ["optional_string", "not_so_regular_string", "int_value"],
            "additionalProperties": False,
        }

    def test_required_lists_nullable_fields_in_order(self):
        schema = emit_schema(Person)
        assert schema["required"] == ["home", "work", "nicknames", "mood", "tier"]
        assert list(schema["properties"]) == schema["required"]

    def test_skipped_field_absent(self):
        schema = emit_schema(SuperComplexSchema)
        assert "regular_string_2" not in schema["properties"]
        assert "regular_string_2" not in schema["required"]

    def test_nested_object(self):
        work = emit_schema(Person)["properties"]["work"]
        assert work["type"] == "object"
        assert work["additionalProperties"] is False
        assert work["properties"] == {"city": {"type": "string"}}

    def test_field_doc_overrides_type_doc(self):
        work = emit_schema(Person)["properties"]["work"]
        assert work["description"] == "Where they work."

    def test_dataclass(self):
        schema = emit_schema(Measurement)
        assert schema["properties"]["unit"] == {"type": ["string", "null"], "description": "SI unit."}
        assert "description" not in schema

    def test_explicit_root_documentation(self):
        schema = emit_schema(SuperComplexSchema, documentation="Overridden")
        assert schema["description"] == "Overridden"


# ---------------------------------------------------------------------------
# Nullable
# ---------------------------------------------------------------------------


class TestNullableEmission:
    def test_scalar_uses_type_array(self):
        assert emit_schema(Optional[int]) == {"type": ["integer", "null"]}

    def test_object_uses_any_of(self):
        home = emit_schema(Person)["properties"]["home"]
        assert home["anyOf"][1] == {"type": "null"}
        assert home["anyOf"][0]["type"] == "object"
        assert home["anyOf"][0]["description"] == "A postal address."

    def test_array_uses_any_of(self):
        nicknames = emit_schema(Person)["properties"]["nicknames"]
        assert nicknames == {
            "anyOf": [
                {"type": "array", "items": {"type": "string"}},
                {"type": "null"},
            ]
        }

    def test_enum_lists_null(self):
        mood = emit_schema(Person)["properties"]["mood"]
        assert mood["type"] == ["string", "null"]
        assert mood["enum"] == ["Question", "Statement", "Answer", None]


# ---------------------------------------------------------------------------
# Enums, arrays, scalars
# ---------------------------------------------------------------------------


class TestEnumEmission:
    def test_niceness_score_is_integer_enum(self):
        schema = emit_schema(NicenessScore)
        assert schema["type"] == "integer"
        assert schema["enum"] == list(range(1, 11))
        assert schema["description"] == "How nice the message is between 1 and 10."

    def test_plain_enum_uses_names(self):
        schema = emit_schema(NicenessScoreContainer)
        assert schema["properties"]["category"]["enum"] == ["Question", "Statement", "Answer"]
        assert schema["properties"]["category"]["type"] == "string"

    def test_literal(self):
        tier = emit_schema(Person)["properties"]["tier"]
        assert tier == {"type": "string", "enum": ["free", "pro"]}

    def test_literal_of_enum_members_is_json_ready(self):
        schema = emit_schema(Literal[NicenessScore.SEVEN, NicenessScore.TEN])
        assert schema == {"type": "integer", "enum": [7, 10]}
        assert json.dumps(schema) == '{"type": "integer", "enum": [7, 10]}'


class TestPrimitiveEmission:
    def test_scalar(self):
        assert emit_schema(bool) == {"type": "boolean"}

    def test_array(self):
        assert emit_schema(List[float]) == {"type": "array", "items": {"type": "number"}}

    def test_hand_built_tree(self):
        node = ObjectNode(
            name="Manual",
            fields=(
                FieldDescriptor("a", "a", ArrayNode(ScalarNode("string")), documentation="Letters."),
                FieldDescriptor("b", "b", NullableNode(EnumNode(None, (EnumMember(1, "1", value=1),)))),
            ),
        )
        assert emit_schema(node) == {
            "type": "object",
            "properties": {
                "a": {"type": "array", "items": {"type": "string"}, "description": "Letters."},
                "b": {"type": ["integer", "null"], "enum": [1, None]},
            },
            "required": ["a", "b"],
            "additionalProperties": False,
        }


# ---------------------------------------------------------------------------
# Recursion
# ---------------------------------------------------------------------------


class TestRecursiveEmission:
    def test_self_reference_at_root(self):
        schema = emit_schema(Comment)
        assert schema["properties"]["replies"] == {"type": "array", "items": {"$ref": "#"}}
        assert "$defs" not in schema

    def test_reference_below_root_uses_defs(self):
        schema = emit_schema(Thread)
        assert schema["properties"]["root"] == {"$ref": "#/$defs/Comment"}
        comment = schema["$defs"]["Comment"]
        assert comment["description"] == "A threaded comment."
        assert comment["properties"]["replies"]["items"] == {"$ref": "#/$defs/Comment"}


# ---------------------------------------------------------------------------
# Dialects and determinism
# ---------------------------------------------------------------------------


class TestDialect:
    def test_permissive_omits_nullable_from_required(self):
        schema = emit_schema(Person, dialect=SchemaDialect.permissive())
        assert schema["required"] == ["work", "tier"]
        assert "additionalProperties" not in schema

    def test_idempotent(self):
        first = json.dumps(emit_schema(NicenessScoreContainer))
        second = json.dumps(emit_schema(NicenessScoreContainer))
        assert first == second

    def test_emission_does_not_share_state(self):
        schema = emit_schema(Person)
        schema["properties"]["mood"]["enum"].append("mutated")
        assert "mutated" not in emit_schema(Person)["properties"]["mood"]["enum"]


# ---------------------------------------------------------------------------
# build_response_format
# ---------------------------------------------------------------------------


class TestBuildResponseFormat:
    def test_structure(self):
        result = build_response_format(SuperComplexSchema)

        assert result["type"] == "json_schema"
        js = result["json_schema"]
        assert js["name"] == "SuperComplexSchema"
        assert js["description"] == "Hello friends"
        assert js["strict"] is True
        assert js["schema"] == emit_schema(SuperComplexSchema)

    def test_no_description_when_undocumented(self):
        js = build_response_format(Person)["json_schema"]
        assert "description" not in js

    def test_custom_name_is_sanitized(self):
        js = build_response_format(Person, name="person extraction!")["json_schema"]
        assert js["name"] == "person_extraction_"

    def test_permissive_dialect_not_strict(self):
        js = build_response_format(Person, dialect=SchemaDialect.permissive())["json_schema"]
        assert js["strict"] is False

    def test_enum_root_rejected(self):
        with pytest.raises(UnsupportedShapeError, match="must be an object"):
            build_response_format(NicenessScore)

    def test_schema_name_truncated(self):
        assert len(_schema_name("x" * 100)) == 64
        assert _schema_name("") == "response"
