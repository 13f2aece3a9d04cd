"""
Core configuration and exception types for strictform.
"""

from .config import CompletionConfig, SchemaDialect, STRICT_DIALECT
from .exceptions import (
    ConfigurationError,
    DecodeError,
    MalformedJsonError,
    MissingFieldError,
    ModelValidationError,
    StructuredOutputError,
    TypeMismatchError,
    UnknownEnumValueError,
    UnsupportedShapeError,
)

__all__ = [
    'CompletionConfig',
    'SchemaDialect',
    'STRICT_DIALECT',
    'StructuredOutputError',
    'UnsupportedShapeError',
    'ConfigurationError',
    'DecodeError',
    'MalformedJsonError',
    'MissingFieldError',
    'ModelValidationError',
    'UnknownEnumValueError',
    'TypeMismatchError',
]
