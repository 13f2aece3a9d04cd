"""
strictform - Structured outputs for LLMs

Derives strict JSON schemas from Pydantic models, dataclasses and enums,
and decodes model responses back into those types, keeping refusals
distinct from answers.
"""

from .completion import StructuredCompletion
from .core import (
    CompletionConfig,
    DecodeError,
    MalformedJsonError,
    MissingFieldError,
    ModelValidationError,
    SchemaDialect,
    StructuredOutputError,
    TypeMismatchError,
    UnknownEnumValueError,
    UnsupportedShapeError,
)
from .schemas import Payload, Refusal, StructuredResult
from .shapes import (
    ShapeRegistry,
    build_response_format,
    decode_choice,
    decode_response,
    decode_value,
    describe,
    emit_schema,
    read_response,
    register,
)

__version__ = "0.1.0"

__all__ = [
    'StructuredCompletion',
    'CompletionConfig',
    'SchemaDialect',
    'ShapeRegistry',
    'describe',
    'register',
    'emit_schema',
    'build_response_format',
    'read_response',
    'decode_value',
    'decode_response',
    'decode_choice',
    'Refusal',
    'Payload',
    'StructuredResult',
    'StructuredOutputError',
    'UnsupportedShapeError',
    'DecodeError',
    'MalformedJsonError',
    'MissingFieldError',
    'ModelValidationError',
    'UnknownEnumValueError',
    'TypeMismatchError',
]
