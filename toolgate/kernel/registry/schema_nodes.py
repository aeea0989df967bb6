"""Compiled schema tree for the supported JSON-Schema subset.

Raw schema fragments are plain nested mappings. ``compile_schema`` turns one into
a tree of frozen nodes, one class per kind, so the validator dispatches on node
type instead of inspecting untyped dictionaries.

Supported keywords: type, properties, required, additionalProperties (boolean),
minLength, maxLength, pattern, minimum, maximum, format, items.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

SUPPORTED_TYPES = ("object", "string", "number", "integer", "boolean", "array", "null")


@dataclass(frozen=True)
class AnySchema:
    """No type constraint.

    String and numeric constraints still apply, chosen by the runtime type of
    the value.
    """

    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    format: str | None = None


@dataclass(frozen=True)
class StringSchema:
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    format: str | None = None


@dataclass(frozen=True)
class NumberSchema:
    """Numeric node, shared by ``number`` and ``integer``."""

    minimum: float | None = None
    maximum: float | None = None
    integer: bool = False
    format: str | None = None


@dataclass(frozen=True)
class BooleanSchema:
    format: str | None = None


@dataclass(frozen=True)
class NullSchema:
    format: str | None = None


@dataclass(frozen=True)
class ArraySchema:
    items: "SchemaNode | None" = None
    format: str | None = None


@dataclass(frozen=True)
class ObjectSchema:
    properties: Mapping[str, "SchemaNode"] = field(default_factory=dict)
    required: tuple[str, ...] = ()
    additional_properties: bool = True
    format: str | None = None


@dataclass(frozen=True)
class UnsupportedTypeSchema:
    """A ``type`` name outside SUPPORTED_TYPES; matches no value."""

    declared: str


@dataclass(frozen=True)
class InvalidSchema:
    """A fragment that cannot be interpreted; fails any value it is applied to."""

    message: str
    suggestion: str


SchemaNode = Union[
    AnySchema,
    StringSchema,
    NumberSchema,
    BooleanSchema,
    NullSchema,
    ArraySchema,
    ObjectSchema,
    UnsupportedTypeSchema,
    InvalidSchema,
]

SCHEMA_NODE_TYPES = (
    AnySchema,
    StringSchema,
    NumberSchema,
    BooleanSchema,
    NullSchema,
    ArraySchema,
    ObjectSchema,
    UnsupportedTypeSchema,
    InvalidSchema,
)


def type_name(node: SchemaNode) -> str | None:
    """Return the declared type name of a node, or None for untyped nodes."""
    if isinstance(node, StringSchema):
        return "string"
    if isinstance(node, NumberSchema):
        return "integer" if node.integer else "number"
    if isinstance(node, BooleanSchema):
        return "boolean"
    if isinstance(node, NullSchema):
        return "null"
    if isinstance(node, ArraySchema):
        return "array"
    if isinstance(node, ObjectSchema):
        return "object"
    if isinstance(node, UnsupportedTypeSchema):
        return node.declared
    return None


def compile_schema(raw: Any) -> SchemaNode:
    """Compile a raw schema fragment into a schema node.

    Args:
        raw: Schema fragment (mapping), or None for "no constraint"

    Returns:
        The compiled node. Malformed fragments compile to InvalidSchema rather
        than raising, so the failure surfaces when input is validated.
    """
    if raw is None:
        return AnySchema()
    if isinstance(raw, SCHEMA_NODE_TYPES):
        return raw
    if not isinstance(raw, Mapping):
        return InvalidSchema(
            message="invalid field schema definition",
            suggestion="check schema format for this field",
        )

    declared = raw.get("type")
    fmt = raw.get("format") if isinstance(raw.get("format"), str) else None

    if declared is None:
        return AnySchema(
            min_length=_length(raw.get("minLength")),
            max_length=_length(raw.get("maxLength")),
            pattern=_pattern(raw),
            minimum=_number(raw.get("minimum")),
            maximum=_number(raw.get("maximum")),
            format=fmt,
        )
    if not isinstance(declared, str):
        return InvalidSchema(
            message="invalid type definition in schema",
            suggestion="check schema type definition",
        )

    if declared == "object":
        return _compile_object(raw, fmt)
    if declared == "string":
        return StringSchema(
            min_length=_length(raw.get("minLength")),
            max_length=_length(raw.get("maxLength")),
            pattern=_pattern(raw),
            format=fmt,
        )
    if declared in ("number", "integer"):
        return NumberSchema(
            minimum=_number(raw.get("minimum")),
            maximum=_number(raw.get("maximum")),
            integer=declared == "integer",
            format=fmt,
        )
    if declared == "boolean":
        return BooleanSchema(format=fmt)
    if declared == "null":
        return NullSchema(format=fmt)
    if declared == "array":
        items = raw.get("items")
        return ArraySchema(items=compile_schema(items) if items is not None else None, format=fmt)
    return UnsupportedTypeSchema(declared=declared)


def _compile_object(raw: Mapping[str, Any], fmt: str | None) -> ObjectSchema:
    properties = raw.get("properties")
    compiled: dict[str, SchemaNode] = {}
    if isinstance(properties, Mapping):
        for name, child in properties.items():
            compiled[str(name)] = compile_schema(child)

    required = raw.get("required")
    required_names: tuple[str, ...] = ()
    if isinstance(required, (list, tuple)):
        required_names = tuple(name for name in required if isinstance(name, str))

    return ObjectSchema(
        properties=MappingProxyType(compiled),
        required=required_names,
        additional_properties=raw.get("additionalProperties") is not False,
        format=fmt,
    )


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _pattern(raw: Mapping[str, Any]) -> str | None:
    pattern = raw.get("pattern")
    return pattern if isinstance(pattern, str) else None


def _length(value: Any) -> int | None:
    number = _number(value)
    if number is None or (isinstance(number, float) and not math.isfinite(number)):
        return None
    return int(number)
