"""SchemaValidator: structural validation of tool input against a schema tree.

Interprets the JSON-Schema subset compiled by ``schema_nodes``. Validation stops
at the first failure, except for missing required fields, which are reported
together.
"""

import logging
import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from jsonschema import FormatChecker
from jsonschema.exceptions import FormatError

from toolgate.kernel.registry.cancellation import CancellationToken, check_cancelled
from toolgate.kernel.registry.errors import SchemaValidationError
from toolgate.kernel.registry.formats import build_format_checker, format_example
from toolgate.kernel.registry.schema_nodes import (
    AnySchema,
    ArraySchema,
    InvalidSchema,
    NumberSchema,
    ObjectSchema,
    SchemaNode,
    StringSchema,
    compile_schema,
    type_name,
)


def value_type(value: Any) -> str:
    """Return the JSON type name of a Python value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return "unknown"


def _matches_type(value: Any, node: SchemaNode) -> bool:
    expected = type_name(node)
    actual = value_type(value)
    if expected == "integer":
        if isinstance(value, bool):
            return False
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    return actual == expected


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


class SchemaValidator:
    """Validates input data against tool input schemas.

    Holds no per-call state; one instance can serve concurrent callers.
    """

    def __init__(self, logger: logging.Logger, format_checker: FormatChecker | None = None) -> None:
        """Initialize schema validator.

        Args:
            logger: Logger for validation events (required)
            format_checker: Format registry; defaults to the built-in formats

        Raises:
            ValueError: If logger is None
        """
        if logger is None:
            raise ValueError("logger cannot be None")
        self._logger = logger
        self._format_checker = format_checker if format_checker is not None else build_format_checker()

    def validate_against_schema(
        self,
        data: Any,
        schema: Mapping[str, Any] | SchemaNode | None,
        *,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Validate data against a schema.

        Args:
            data: Input to validate (typically a dict)
            schema: Raw schema fragment, compiled schema node, or None
            cancel: Cancellation token checked before any work

        Raises:
            OperationCancelledError: If cancel is already cancelled
            SchemaValidationError: If validation fails
        """
        check_cancelled(cancel, "validate_against_schema")

        node = compile_schema(schema)
        self._logger.debug(
            "starting schema validation",
            extra={"input_keys": _keys(data), "schema_type": type_name(node)},
        )

        if isinstance(node, ObjectSchema):
            self._validate_object(data, node, "")
        elif not isinstance(node, AnySchema):
            self._validate_node(data, node, "")

        self._logger.debug("schema validation completed successfully")

    def validate_field(self, field_name: str, value: Any, field_schema: Any) -> None:
        """Validate one field value against its field schema fragment.

        Raises:
            SchemaValidationError: If the value or the fragment is invalid
        """
        self._validate_node(value, compile_schema(field_schema), field_name)

    def validate_required(
        self,
        data: Mapping[str, Any],
        required_fields: list[str] | tuple[str, ...],
        *,
        path: str = "",
        cancel: CancellationToken | None = None,
    ) -> None:
        """Check that every required field is present.

        All missing names are reported in a single error, in ``required_fields``
        order.

        Raises:
            SchemaValidationError: If any required field is absent
        """
        check_cancelled(cancel, "validate_required")

        missing = [name for name in required_fields if name not in data]
        if missing:
            self._logger.debug(
                "required field validation failed",
                extra={"field": path, "missing_fields": missing},
            )
            raise self.build_validation_error(
                path,
                f"missing required fields: {', '.join(missing)}",
                ["add the missing required fields to your input"],
            )

    def validate_format(
        self,
        field_name: str,
        value: Any,
        fmt: str,
        *,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Validate a value against a named string format.

        Unknown formats are accepted without checking.

        Raises:
            OperationCancelledError: If cancel is already cancelled
            SchemaValidationError: If the value does not match the format
        """
        check_cancelled(cancel, "validate_format")

        if fmt not in self._format_checker.checkers:
            self._logger.warning(
                "unknown format validator",
                extra={"format": fmt, "field": field_name},
            )
            return

        if not isinstance(value, str):
            raise self.build_validation_error(
                field_name,
                f"invalid {fmt} format: expected string value",
                [format_example(fmt)],
            )

        try:
            self._format_checker.check(value, fmt)
        except FormatError as exc:
            detail = str(exc.cause) if exc.cause is not None else exc.message
            self._logger.debug(
                "format validation failed",
                extra={"field": field_name, "format": fmt, "error": detail},
            )
            raise self.build_validation_error(
                field_name,
                f"invalid {fmt} format: {detail}",
                [format_example(fmt)],
            ) from exc

    def build_validation_error(
        self,
        field_path: str,
        message: str,
        suggestions: list[str] | None = None,
    ) -> SchemaValidationError:
        """Build a structured validation error (not raised)."""
        return SchemaValidationError(field=field_path, message=message, suggestions=suggestions)

    def _validate_object(self, data: Any, node: ObjectSchema, path: str) -> None:
        if not isinstance(data, Mapping):
            raise self.build_validation_error(
                path,
                f"expected object type, got {value_type(data)}",
                ["ensure input is a JSON object"],
            )

        self.validate_required(data, node.required, path=path)

        if not node.additional_properties:
            for key in sorted(data, key=str):
                if key not in node.properties:
                    raise self.build_validation_error(
                        _join(path, str(key)),
                        "unexpected property not allowed by schema",
                        ["remove this property or check if it's misspelled"],
                    )

        for name, child in node.properties.items():
            if name in data:
                self._validate_node(data[name], child, _join(path, name))

    def _validate_node(self, value: Any, node: SchemaNode, path: str) -> None:
        if isinstance(node, InvalidSchema):
            raise self.build_validation_error(path, node.message, [node.suggestion])

        if not isinstance(node, AnySchema) and not _matches_type(value, node):
            expected = type_name(node)
            raise self.build_validation_error(
                path,
                f"expected type {expected}, got {value_type(value)}",
                [f"provide a value of type {expected}"],
            )

        # Format, string and numeric constraints apply by the type of the value.
        fmt = getattr(node, "format", None)
        if fmt is not None:
            self.validate_format(path, value, fmt)
        if isinstance(node, (StringSchema, AnySchema)) and isinstance(value, str):
            self._validate_string(value, node, path)
        if isinstance(node, (NumberSchema, AnySchema)) and value_type(value) == "number":
            self._validate_number(value, node, path)

        if isinstance(node, ArraySchema):
            if node.items is not None:
                for index, item in enumerate(value):
                    self._validate_node(item, node.items, f"{path}[{index}]")
        elif isinstance(node, ObjectSchema):
            self._validate_object(value, node, path)

    def _validate_string(self, value: str, node: StringSchema | AnySchema, path: str) -> None:
        if node.min_length is not None and len(value) < node.min_length:
            raise self.build_validation_error(
                path,
                f"string too short: minimum length is {node.min_length}, got {len(value)}",
                [f"provide a string with at least {node.min_length} characters"],
            )
        if node.max_length is not None and len(value) > node.max_length:
            raise self.build_validation_error(
                path,
                f"string too long: maximum length is {node.max_length}, got {len(value)}",
                [f"provide a string with at most {node.max_length} characters"],
            )

        if node.pattern is not None:
            try:
                compiled = re.compile(node.pattern)
            except re.error as exc:
                raise self.build_validation_error(
                    path,
                    "invalid pattern in schema",
                    ["check schema pattern definition"],
                ) from exc
            if compiled.search(value) is None:
                raise self.build_validation_error(
                    path,
                    f"string does not match required pattern: {node.pattern}",
                    ["provide a string that matches the required pattern"],
                )

    def _validate_number(self, value: float, node: NumberSchema | AnySchema, path: str) -> None:
        if node.minimum is not None and value < node.minimum:
            raise self.build_validation_error(
                path,
                f"value too small: minimum is {_number_text(node.minimum)}, got {_number_text(value)}",
                [f"provide a value >= {_number_text(node.minimum)}"],
            )
        if node.maximum is not None and value > node.maximum:
            raise self.build_validation_error(
                path,
                f"value too large: maximum is {_number_text(node.maximum)}, got {_number_text(value)}",
                [f"provide a value <= {_number_text(node.maximum)}"],
            )


def _number_text(value: float) -> str:
    try:
        return f"{value:g}"
    except OverflowError:
        # int beyond float range
        return f"{Decimal(value):.6g}"


def _keys(data: Any) -> list[str]:
    if isinstance(data, Mapping):
        return sorted(str(key) for key in data)
    return []
