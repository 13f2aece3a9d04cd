"""Shape descriptor builder.

Reflects a statically declared Python type into an immutable ``ShapeNode``
tree. Records are Pydantic models or dataclasses, enumerations are
``Enum`` subclasses or ``Literal`` types, and ``Optional[T]`` marks a
nullable value. The resulting tree drives both schema emission and
response decoding, so rename/skip rules stay consistent in both
directions.

Per-field metadata:

- Pydantic: ``Field(alias=...)`` renames, ``Field(exclude=True)`` skips,
  ``Field(description=...)`` (or an attribute docstring with
  ``use_attribute_docstrings=True``) documents.
- Dataclasses: ``field(metadata={"rename": ..., "skip": True,
  "description": ...})``; ``init=False`` fields are skipped.
"""

from __future__ import annotations

import ast
import dataclasses
import enum
import inspect
import textwrap
import types
import typing
from typing import Annotated, Any, Literal, Optional, Union, get_args, get_origin

from pydantic import BaseModel

from ..core.exceptions import UnsupportedShapeError
from ..schemas.nodes import (
    ArrayNode,
    EnumMember,
    EnumNode,
    FieldDescriptor,
    NullableNode,
    ObjectNode,
    RefNode,
    ScalarKind,
    ScalarNode,
    ShapeNode,
    nullable,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Python scalar → schema type (exact types only; bool is not an integer here)
_SCALAR_MAP: dict[type, ScalarKind] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
}

_UNION_TYPES = (Union, types.UnionType)

_NODE_TYPES = (ScalarNode, ObjectNode, EnumNode, ArrayNode, NullableNode, RefNode)

# Docstrings Python generates for classes that declare none
_GENERATED_ENUM_DOCS = {"An enumeration."}


class ShapeRegistry:
    """Write-once cache of shape trees, keyed by the declared type.

    Trees are immutable, so one registry can serve any number of concurrent
    emit/decode calls.
    """

    def __init__(self) -> None:
        self._shapes: dict[Any, ShapeNode] = {}

    def describe(self, tp: Any) -> ShapeNode:
        """Return the shape tree for ``tp``, building it on first use.

        Raises:
            UnsupportedShapeError: ``tp`` (or a type it contains) has no
                representation in the schema dialect.
        """
        try:
            return self._shapes[tp]
        except KeyError:
            pass
        except TypeError:
            # Unhashable annotation; build without caching
            return _ShapeBuilder().build(tp, _type_name(tp))

        node = _ShapeBuilder().build(tp, _type_name(tp))
        self._shapes[tp] = node
        logger.debug("Described shape %s", _type_name(tp))
        return node

    def register(self, tp: Any) -> Any:
        """Describe ``tp`` eagerly and return it unchanged.

        Usable as a class decorator so unsupported shapes fail at import
        time instead of at the first request.
        """
        self.describe(tp)
        return tp

    def clear(self) -> None:
        self._shapes.clear()

    def __contains__(self, tp: Any) -> bool:
        try:
            return tp in self._shapes
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._shapes)


default_registry = ShapeRegistry()


def describe(tp: Any) -> ShapeNode:
    """Shape tree for ``tp`` from the default registry."""
    return default_registry.describe(tp)


def register(tp: Any) -> Any:
    """Register ``tp`` with the default registry (class decorator)."""
    return default_registry.register(tp)


def as_shape_node(shape: Any) -> ShapeNode:
    """Accept either a ready ``ShapeNode`` or a type to describe."""
    if isinstance(shape, _NODE_TYPES):
        return shape
    return describe(shape)


# ---------------------------------------------------------------------------
# Tree construction
# ---------------------------------------------------------------------------


class _ShapeBuilder:
    """Builds one tree; tracks records in progress to detect recursion."""

    def __init__(self) -> None:
        self._in_progress: list[type] = []
        self._names: dict[str, type] = {}

    def build(self, tp: Any, path: str) -> ShapeNode:
        origin = get_origin(tp)

        if origin is Annotated:
            return self.build(get_args(tp)[0], path)

        if origin in _UNION_TYPES:
            return self._build_union(tp, path)

        if origin is Literal:
            return _build_literal(tp, path)

        if origin is list or tp is list:
            args = get_args(tp)
            if not args:
                raise UnsupportedShapeError("list needs an element type", path=path)
            return ArrayNode(self.build(args[0], f"{path}[]"))

        if origin is not None:
            raise UnsupportedShapeError(f"Unsupported generic type {_type_name(tp)}", path=path)

        if tp in _SCALAR_MAP:
            return ScalarNode(_SCALAR_MAP[tp])

        if isinstance(tp, type):
            if issubclass(tp, enum.Enum):
                return _build_enum(tp, path)
            if issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp):
                return self._build_object(tp, path)

        raise UnsupportedShapeError(f"Cannot map type {_type_name(tp)} to a schema", path=path)

    def _build_union(self, tp: Any, path: str) -> ShapeNode:
        args = get_args(tp)
        non_null = [a for a in args if a is not type(None)]
        if len(non_null) == len(args) or len(non_null) != 1:
            raise UnsupportedShapeError(
                f"Only `T | None` unions are supported, got {_type_name(tp)}",
                path=path,
            )
        return nullable(self.build(non_null[0], path))

    def _build_object(self, cls: type, path: str) -> ShapeNode:
        if cls in self._in_progress:
            return RefNode(cls.__name__)

        known = self._names.setdefault(cls.__name__, cls)
        if known is not cls:
            raise UnsupportedShapeError(
                f"Two different types named '{cls.__name__}' in one shape",
                path=path,
            )

        self._in_progress.append(cls)
        try:
            if issubclass(cls, BaseModel):
                fields = self._model_fields(cls, path)
            else:
                fields = self._dataclass_fields(cls, path)
        finally:
            self._in_progress.pop()

        _ensure_unique([f.wire_name for f in fields if not f.skip], "field name", path)

        return ObjectNode(
            name=cls.__name__,
            fields=tuple(fields),
            documentation=_type_doc(cls),
            target=cls,
        )

    def _model_fields(self, cls: type[BaseModel], path: str) -> list[FieldDescriptor]:
        if not cls.__pydantic_complete__:
            try:
                cls.model_rebuild()
            except Exception as exc:
                raise UnsupportedShapeError(
                    f"Model '{cls.__name__}' has unresolved annotations: {exc}",
                    path=path,
                ) from exc

        descriptors: list[FieldDescriptor] = []
        for name, info in cls.model_fields.items():
            field_path = f"{path}.{name}"
            skip = info.exclude is True
            if skip and info.is_required():
                raise UnsupportedShapeError("Skipped field must declare a default", path=field_path)

            descriptors.append(FieldDescriptor(
                wire_name=info.alias or name,
                source_name=name,
                shape=self._field_shape(info.annotation, field_path, skip),
                documentation=_clean_doc(info.description),
                skip=skip,
            ))
        return descriptors

    def _dataclass_fields(self, cls: type, path: str) -> list[FieldDescriptor]:
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except NameError as exc:
            raise UnsupportedShapeError(
                f"Dataclass '{cls.__name__}' has unresolved annotations: {exc}",
                path=path,
            ) from exc

        descriptors: list[FieldDescriptor] = []
        for f in dataclasses.fields(cls):
            field_path = f"{path}.{f.name}"
            skip = bool(f.metadata.get("skip")) or not f.init
            has_default = (
                f.default is not dataclasses.MISSING
                or f.default_factory is not dataclasses.MISSING
            )
            if skip and f.init and not has_default:
                raise UnsupportedShapeError("Skipped field must declare a default", path=field_path)

            descriptors.append(FieldDescriptor(
                wire_name=f.metadata.get("rename", f.name),
                source_name=f.name,
                shape=self._field_shape(hints.get(f.name, f.type), field_path, skip),
                documentation=_clean_doc(f.metadata.get("description")),
                skip=skip,
            ))
        return descriptors

    def _field_shape(self, annotation: Any, path: str, skip: bool) -> Optional[ShapeNode]:
        if not skip:
            return self.build(annotation, path)
        # Skipped fields never reach the wire, so their type may be anything
        try:
            return self.build(annotation, path)
        except UnsupportedShapeError:
            return None


def _build_enum(cls: type[enum.Enum], path: str) -> EnumNode:
    docs = _member_docs(cls)
    members: list[EnumMember] = []
    for member in cls:
        if issubclass(cls, int):
            wire_value: Union[str, int] = int(member)
        elif issubclass(cls, str):
            wire_value = str(member.value)
        else:
            wire_value = member.name
        members.append(EnumMember(
            wire_value=wire_value,
            source_name=member.name,
            documentation=docs.get(member.name),
            value=member,
        ))

    if not members:
        raise UnsupportedShapeError(f"Enum '{cls.__name__}' has no members", path=path)
    _ensure_unique([m.wire_value for m in members], "enum value", path)

    return EnumNode(
        name=cls.__name__,
        members=tuple(members),
        documentation=_type_doc(cls),
        target=cls,
    )


def _build_literal(tp: Any, path: str) -> ShapeNode:
    values = get_args(tp)
    has_null = None in values
    values = tuple(v for v in values if v is not None)

    if not values:
        raise UnsupportedShapeError("Literal needs at least one non-null value", path=path)
    all_str = all(isinstance(v, str) for v in values)
    all_int = all(isinstance(v, int) and not isinstance(v, bool) for v in values)
    if not (all_str or all_int):
        raise UnsupportedShapeError(
            f"Literal values must be all strings or all integers, got {values!r}",
            path=path,
        )

    members: list[EnumMember] = []
    for v in values:
        if isinstance(v, enum.Enum):
            # Mixin members (IntEnum, str enums) go on the wire as their plain value
            wire_value: Union[str, int] = int(v) if all_int else str(v.value)
            members.append(EnumMember(
                wire_value=wire_value,
                source_name=v.name,
                documentation=_member_docs(type(v)).get(v.name),
                value=v,
            ))
        else:
            members.append(EnumMember(wire_value=v, source_name=repr(v), value=v))

    node = EnumNode(name=None, members=tuple(members))
    _ensure_unique(node.wire_values, "enum value", path)
    return nullable(node) if has_null else node


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _ensure_unique(values: list[Any], what: str, path: str) -> None:
    seen: set[Any] = set()
    for value in values:
        if value in seen:
            raise UnsupportedShapeError(f"Duplicate {what} {value!r}", path=path)
        seen.add(value)


def _type_doc(cls: type) -> Optional[str]:
    """The class's own docstring, ignoring inherited and generated ones."""
    doc = cls.__dict__.get("__doc__")
    if not doc:
        return None
    if dataclasses.is_dataclass(cls) and doc.startswith(cls.__name__ + "("):
        return None
    if issubclass(cls, enum.Enum) and doc in _GENERATED_ENUM_DOCS:
        return None
    return _clean_doc(doc)


def _member_docs(cls: type[enum.Enum]) -> dict[str, str]:
    """Attribute docstrings of enum members (a string literal right after the assignment)."""
    try:
        source = textwrap.dedent(inspect.getsource(cls))
        tree = ast.parse(source)
    except (OSError, TypeError, SyntaxError):
        return {}

    if not tree.body or not isinstance(tree.body[0], ast.ClassDef):
        return {}
    body = tree.body[0].body

    docs: dict[str, str] = {}
    for stmt, following in zip(body, body[1:]):
        if not (isinstance(stmt, ast.Assign) and len(stmt.targets) == 1):
            continue
        target = stmt.targets[0]
        if (
            isinstance(target, ast.Name)
            and isinstance(following, ast.Expr)
            and isinstance(following.value, ast.Constant)
            and isinstance(following.value.value, str)
        ):
            doc = _clean_doc(following.value.value)
            if doc:
                docs[target.id] = doc
    return docs


def _clean_doc(text: Optional[str]) -> Optional[str]:
    """Trim each line and join the non-blank ones with single spaces."""
    if not text:
        return None
    cleaned = " ".join(line.strip() for line in text.splitlines() if line.strip())
    return cleaned or None


def _type_name(tp: Any) -> str:
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__name__
    return repr(tp).replace("typing.", "")
