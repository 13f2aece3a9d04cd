"""Response decoder for structured outputs.

Turns the raw content of one structured-output choice back into an
instance of the declared shape:

1. A refusal reported on its own channel wins; the content is not parsed.
2. Otherwise the content is parsed as JSON.
3. The JSON value is walked against the shape tree, honouring the same
   rename/skip rules the emitter used.

Decode failures raise a ``DecodeError`` subclass whose ``path`` points at
the offending value (``$.items[2].name``).
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..core.config import STRICT_DIALECT, SchemaDialect
from ..core.exceptions import (
    MalformedJsonError,
    MissingFieldError,
    ModelValidationError,
    TypeMismatchError,
    UnknownEnumValueError,
)
from ..schemas.nodes import (
    ArrayNode,
    EnumNode,
    NullableNode,
    ObjectNode,
    RefNode,
    ScalarNode,
    ShapeNode,
)
from ..schemas.structured import Payload, Refusal, RefusalOrPayload
from ..utils.logger import get_logger
from .builder import as_shape_node

logger = get_logger(__name__)

ROOT_PATH = "$"


def read_response(content: Optional[str], refusal: Optional[str] = None) -> RefusalOrPayload:
    """Classify a choice as a refusal or a parsed JSON payload.

    Args:
        content: The choice's content string.
        refusal: The choice's separate refusal string, if the provider set one.

    Raises:
        MalformedJsonError: No refusal and the content is missing or not JSON.
    """
    if refusal is not None:
        logger.debug("Model refused: %s", refusal)
        return Refusal(refusal)

    if content is None:
        raise MalformedJsonError("Response has neither content nor a refusal", path=ROOT_PATH)

    try:
        value = json.loads(content)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError, oversized integer literals and excessive nesting
        raise MalformedJsonError(
            f"Response content is not valid JSON: {exc}",
            content=content,
            path=ROOT_PATH,
        ) from exc
    return Payload(value)


def decode_value(shape: Any, value: Any, dialect: Optional[SchemaDialect] = None) -> Any:
    """Map an already-parsed JSON value onto ``shape``."""
    node = as_shape_node(shape)
    return _Decoder(dialect or STRICT_DIALECT).decode(node, value, ROOT_PATH)


def decode_response(
    shape: Any,
    content: Optional[str],
    refusal: Optional[str] = None,
    dialect: Optional[SchemaDialect] = None,
) -> Any:
    """Decode one choice into an instance of ``shape`` or a ``Refusal``.

    Usage:
        outcome = decode_response(Name, message.content, message.refusal)
        if isinstance(outcome, Refusal):
            ...
    """
    outcome = read_response(content, refusal)
    if isinstance(outcome, Refusal):
        return outcome
    return decode_value(shape, outcome.value, dialect)


def decode_choice(shape: Any, choice: Any, dialect: Optional[SchemaDialect] = None) -> Any:
    """Decode an SDK choice object (``choice.message.content`` / ``.refusal``)."""
    message = choice.message
    return decode_response(
        shape,
        getattr(message, "content", None),
        getattr(message, "refusal", None),
        dialect,
    )


class _Decoder:
    """Walks a JSON value against a tree; keeps enclosing records for ``RefNode``."""

    def __init__(self, dialect: SchemaDialect):
        self.dialect = dialect
        self._enclosing: list[ObjectNode] = []

    def decode(self, node: ShapeNode, value: Any, path: str) -> Any:
        if isinstance(node, NullableNode):
            if value is None:
                return None
            return self.decode(node.inner, value, path)

        if isinstance(node, ScalarNode):
            return _decode_scalar(node, value, path)

        if isinstance(node, EnumNode):
            return _decode_enum(node, value, path)

        if isinstance(node, ArrayNode):
            if not isinstance(value, list):
                raise _mismatch("array", value, path)
            return [self.decode(node.element, item, f"{path}[{i}]") for i, item in enumerate(value)]

        if isinstance(node, ObjectNode):
            return self._decode_object(node, value, path)

        if isinstance(node, RefNode):
            return self._decode_object(self._resolve(node, path), value, path)

        raise TypeError(f"Unknown shape node: {node!r}")

    def _decode_object(self, node: ObjectNode, value: Any, path: str) -> Any:
        if not isinstance(value, dict):
            raise _mismatch("object", value, path)

        kwargs: dict[str, Any] = {}
        self._enclosing.append(node)
        try:
            for field in node.wire_fields:
                field_path = f"{path}.{field.wire_name}"
                if field.wire_name not in value:
                    if not self.dialect.require_all_fields and isinstance(field.shape, NullableNode):
                        kwargs[field.source_name] = None
                        continue
                    raise MissingFieldError(
                        f"Missing required field '{field.wire_name}'",
                        field=field.wire_name,
                        path=field_path,
                    )
                kwargs[field.source_name] = self.decode(field.shape, value[field.wire_name], field_path)
        finally:
            self._enclosing.pop()

        # Skipped fields are left to the class's own defaults
        return _construct(node, kwargs, path)

    def _resolve(self, ref: RefNode, path: str) -> ObjectNode:
        for node in reversed(self._enclosing):
            if node.name == ref.name:
                return node
        raise TypeError(f"Reference to '{ref.name}' has no enclosing record at {path}")


def _decode_scalar(node: ScalarNode, value: Any, path: str) -> Any:
    kind = node.kind
    if kind == "string" and isinstance(value, str):
        return value
    if kind == "boolean" and isinstance(value, bool):
        return value
    if not isinstance(value, bool):
        if kind == "integer" and isinstance(value, int):
            return value
        if kind == "number" and isinstance(value, (int, float)):
            try:
                return float(value)
            except OverflowError as exc:
                raise TypeMismatchError(
                    "Expected number, got integer outside the float range",
                    expected=kind,
                    actual="integer",
                    path=path,
                ) from exc
    raise _mismatch(kind, value, path)


def _decode_enum(node: EnumNode, value: Any, path: str) -> Any:
    allowed = node.wire_values
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        for member in node.members:
            if type(member.wire_value) is type(value) and member.wire_value == value:
                return member.value
    label = f"'{node.name}'" if node.name else "literal"
    raise UnknownEnumValueError(
        f"Value {value!r} is not a member of {label} (allowed: {allowed!r})",
        value=value,
        allowed=allowed,
        path=path,
    )


def _construct(node: ObjectNode, kwargs: dict[str, Any], path: str) -> Any:
    """Instantiate the record's class, running its own validators."""
    target = node.target
    if target is None:
        return kwargs

    try:
        if issubclass(target, BaseModel):
            # Pydantic validates by alias, which is the wire name
            data = {
                f.wire_name: kwargs[f.source_name]
                for f in node.wire_fields
                if f.source_name in kwargs
            }
            return target.model_validate(data)
        return target(**kwargs)
    except ValidationError as exc:
        errors = exc.errors()
        location = errors[0]["loc"] if errors else ()
        raise ModelValidationError(
            f"{node.name} rejected the decoded values: {errors[0]['msg'] if errors else exc}",
            errors=errors,
            path=_join_path(path, location),
        ) from exc


def _join_path(path: str, location: tuple[Any, ...]) -> str:
    for part in location:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _mismatch(expected: str, value: Any, path: str) -> TypeMismatchError:
    actual = _json_type(value)
    return TypeMismatchError(
        f"Expected {expected}, got {actual}",
        expected=expected,
        actual=actual,
        path=path,
    )
