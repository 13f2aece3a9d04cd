"""End-to-end tests: describe, emit, then decode responses for the same shape."""

from __future__ import annotations

import enum
import json
from typing import List, Optional

import pytest
from pydantic import BaseModel, Field

from strictform import (
    Refusal,
    UnknownEnumValueError,
    build_response_format,
    decode_response,
    emit_schema,
)


class Name(BaseModel):
    """The name."""

    first_name: Optional[str] = Field(
        description="The first name. No matter what, prefix this first name with `Mr. `.",
    )
    last_name: Optional[str] = Field(alias="last_name_renamed")
    absolutely_nothing: str = Field(default="", exclude=True)


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


class Category(enum.Enum):
    """The category of the message that's being inquired about."""

    Question = enum.auto()
    Statement = enum.auto()
    Answer = enum.auto()


class NicenessScoreContainer(BaseModel):
    """The niceness score."""

    niceness_score: NicenessScore
    category: Category


class LineItem(BaseModel):
    sku: str
    quantity: int
    unit_price: float


class Invoice(BaseModel):
    """An invoice extracted from an email."""

    number: str
    items: List[LineItem]
    notes: Optional[str]
    category: Optional[Category]


# ---------------------------------------------------------------------------
# Name extraction
# ---------------------------------------------------------------------------


class TestNameExtraction:
    def test_schema(self):
        js = build_response_format(Name)["json_schema"]

        assert js["name"] == "Name"
        assert js["description"] == "The name."
        assert js["strict"] is True
        assert js["schema"] == {
            "type": "object",
            "description": "The name.",
            "properties": {
                "first_name": {
                    "type": ["string", "null"],
                    "description": "The first name. No matter what, prefix this first name with `Mr. `.",
                },
                "last_name_renamed": {"type": ["string", "null"]},
            },
            "required": ["first_name", "last_name_renamed"],
            "additionalProperties": False,
        }

    def test_decode(self):
        name = decode_response(Name, '{"first_name": "Mr. John", "last_name_renamed": null}')

        assert name.first_name == "Mr. John"
        assert name.last_name is None
        assert name.absolutely_nothing == ""

    def test_refusal(self):
        outcome = decode_response(Name, None, refusal="I'm sorry, I can't help with that.")
        assert isinstance(outcome, Refusal)
        assert outcome.text == "I'm sorry, I can't help with that."


# ---------------------------------------------------------------------------
# Niceness score
# ---------------------------------------------------------------------------


class TestNicenessScore:
    def test_schema(self):
        schema = emit_schema(NicenessScoreContainer)

        assert schema["properties"]["niceness_score"] == {
            "type": "integer",
            "enum": [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
            "description": "How nice the message is between 1 and 10.",
        }
        assert schema["properties"]["category"] == {
            "type": "string",
            "enum": ["Question", "Statement", "Answer"],
            "description": "The category of the message that's being inquired about.",
        }

    def test_decode_seventh_member(self):
        container = decode_response(
            NicenessScoreContainer,
            '{"niceness_score": 7, "category": "Statement"}',
        )
        assert container.niceness_score is list(NicenessScore)[6]
        assert container.category is Category.Statement

    def test_out_of_range(self):
        with pytest.raises(UnknownEnumValueError) as exc_info:
            decode_response(NicenessScoreContainer, '{"niceness_score": 11, "category": "Answer"}')
        assert exc_info.value.path == "$.niceness_score"


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


class TestRoundTrip:
    def test_invoice(self):
        invoice = Invoice(
            number="INV-7",
            items=[
                LineItem(sku="A-1", quantity=2, unit_price=9.5),
                LineItem(sku="B-2", quantity=1, unit_price=20.0),
            ],
            notes=None,
            category=Category.Answer,
        )
        payload = invoice.model_dump(mode="json")
        payload["category"] = invoice.category.name

        decoded = decode_response(Invoice, json.dumps(payload))

        assert decoded == invoice

    def test_every_property_is_required(self):
        schema = emit_schema(Invoice)
        assert schema["required"] == list(schema["properties"])
        item_schema = schema["properties"]["items"]["items"]
        assert item_schema["required"] == ["sku", "quantity", "unit_price"]
        assert item_schema["additionalProperties"] is False
