"""
Custom exceptions for strictform.

Provides specific exception types for the failure modes of shape
description and response decoding, with helpful error messages and the
path of the offending field.
"""

from __future__ import annotations

from typing import Any, Sequence


class StructuredOutputError(Exception):
    """Base exception for all strictform errors.

    Attributes:
        message: Human-readable error description.
        path: Location of the failure (``None`` if not field-specific).
    """

    def __init__(self, message: str, path: str | None = None):
        self.message = message
        self.path = path

        # Build descriptive error message
        error_parts = [message]
        if path is not None:
            error_parts.append(f"Path: {path}")

        super().__init__(" | ".join(error_parts))


class UnsupportedShapeError(StructuredOutputError):
    """Raised when a type cannot be represented in the strict schema dialect.

    Common causes:
        - Mappings (``dict[str, int]``) or ``Any``; the dialect forbids
          free-form objects.
        - Unions other than ``T | None``.
        - A skipped field without a default value.
        - Duplicate wire names or enum values after renaming.
    """

    pass


class ConfigurationError(StructuredOutputError):
    """Raised when configuration is invalid."""

    pass


class DecodeError(StructuredOutputError):
    """Base class for failures while mapping a response onto a shape."""

    pass


class MalformedJsonError(DecodeError):
    """Raised when the response content is not valid JSON.

    Usually a truncated response (``finish_reason == "length"``); the
    caller may retry the request.

    Attributes:
        content: The raw content that failed to parse.
    """

    def __init__(self, message: str, content: str | None = None, **kwargs: Any):
        self.content = content
        super().__init__(message, **kwargs)


class MissingFieldError(DecodeError):
    """Raised when a required field is absent from a response object.

    Attributes:
        field: Wire name of the missing field.
    """

    def __init__(self, message: str, field: str, **kwargs: Any):
        self.field = field
        super().__init__(message, **kwargs)


class UnknownEnumValueError(DecodeError):
    """Raised when a value matches none of an enumeration's wire values.

    Attributes:
        value: The value found in the response.
        allowed: The wire values the enumeration accepts.
    """

    def __init__(self, message: str, value: Any, allowed: Sequence[Any] = (), **kwargs: Any):
        self.value = value
        self.allowed = list(allowed)
        super().__init__(message, **kwargs)


class TypeMismatchError(DecodeError):
    """Raised when a JSON value has the wrong type for its shape.

    Attributes:
        expected: Schema type that was expected (``"string"``, ``"object"``...).
        actual: JSON type that was found.
    """

    def __init__(self, message: str, expected: str, actual: str, **kwargs: Any):
        self.expected = expected
        self.actual = actual
        super().__init__(message, **kwargs)


class ModelValidationError(DecodeError):
    """Raised when the target class rejects values that match the schema.

    The schema cannot express every constraint a model declares
    (``field_validator``, ``Field(ge=...)``, ``max_length``...), so the
    class's own validation still runs after decoding.

    Attributes:
        errors: Validation errors reported by the class (pydantic format).
    """

    def __init__(self, message: str, errors: Sequence[Any] = (), **kwargs: Any):
        self.errors = list(errors)
        super().__init__(message, **kwargs)
