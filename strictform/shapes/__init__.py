"""Shape description, schema emission and response decoding.

Example:
    from typing import Optional
    from pydantic import BaseModel, Field
    from strictform.shapes import build_response_format, decode_response

    class Name(BaseModel):
        first_name: Optional[str] = Field(description="The first name.")
        last_name: Optional[str] = Field(alias="last_name_renamed")

    response_format = build_response_format(Name)
    name = decode_response(Name, message.content, message.refusal)
"""

from .builder import ShapeRegistry, as_shape_node, default_registry, describe, register
from .decoder import decode_choice, decode_response, decode_value, read_response
from .emitter import build_response_format, emit_schema

__all__ = [
    "ShapeRegistry",
    "default_registry",
    "describe",
    "register",
    "as_shape_node",
    "emit_schema",
    "build_response_format",
    "read_response",
    "decode_value",
    "decode_response",
    "decode_choice",
]
