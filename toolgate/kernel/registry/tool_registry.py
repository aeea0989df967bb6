"""ToolRegistry: central, thread-safe registry for tool definitions.

The registry owns two indexes, tools by name and tool names by category. Both
are guarded by one lock so a reader never sees a tool in one index and not the
other. Registration is append-only.
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from toolgate.kernel.registry.cancellation import CancellationToken, check_cancelled
from toolgate.kernel.registry.errors import (
    DuplicateToolError,
    SchemaValidationError,
    ToolNotFoundError,
    ToolRegistrationError,
    UnknownToolError,
)
from toolgate.kernel.registry.schema_nodes import ObjectSchema, compile_schema
from toolgate.kernel.registry.schema_validator import SchemaValidator
from toolgate.kernel.registry.tool_contract import (
    MAX_TOOL_TIMEOUT,
    MIN_TOOL_TIMEOUT,
    CategoryType,
    ToolDefinition,
)
from toolgate.logging_config import configure_logging, get_logger

MAX_NAME_SUGGESTIONS = 5


class ToolRegistry:
    """Central registry for tool definitions.

    Provides:
    - Registration with structural checks on each definition
    - Exact-name lookup and category listing, returning deep copies
    - Input validation against each tool's compiled input schema
    """

    def __init__(self, validator: SchemaValidator, logger: logging.Logger) -> None:
        """Initialize tool registry.

        Args:
            validator: Schema validator used by validate_tool_input
            logger: Logger for registry events

        Raises:
            ValueError: If validator or logger is None
        """
        if validator is None:
            raise ValueError("validator cannot be None")
        if logger is None:
            raise ValueError("logger cannot be None")

        self._validator = validator
        self._logger = logger
        self._lock = threading.RLock()

        # Storage: {name: ToolDefinition}, {name: compiled schema}, {category: {names}}
        self._tools: dict[str, ToolDefinition] = {}
        self._schemas: dict[str, ObjectSchema] = {}
        self._categories: dict[CategoryType, set[str]] = {}

    def register_tool(
        self,
        tool: ToolDefinition | None,
        *,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Register a tool in the registry.

        Args:
            tool: Tool definition to register; a private copy is stored
            cancel: Cancellation token checked before any work

        Raises:
            OperationCancelledError: If cancel is already cancelled
            ToolRegistrationError: If the definition is malformed
            DuplicateToolError: If a tool with the same name is registered
        """
        check_cancelled(cancel, "register_tool")

        if tool is None:
            raise ToolRegistrationError("tool cannot be None")

        reason = self._check_definition(tool)
        if reason is not None:
            self._logger.error(
                "tool registration failed - invalid definition",
                extra={"tool_name": tool.name, "error": reason},
            )
            raise ToolRegistrationError(reason, tool.name)

        stored = tool.clone()
        category = CategoryType.parse(stored.category)
        stored.category = category
        schema = compile_schema(stored.input_schema)

        with self._lock:
            if stored.name in self._tools:
                self._logger.error(
                    "tool registration failed - duplicate name",
                    extra={"tool_name": stored.name},
                )
                raise DuplicateToolError(stored.name)

            self._tools[stored.name] = stored
            self._schemas[stored.name] = schema
            self._categories.setdefault(category, set()).add(stored.name)
            total = len(self._tools)

        self._logger.info(
            "tool registered successfully",
            extra={"tool_name": stored.name, "category": category.value, "tool_count": total},
        )

    def get_tool(self, name: str, *, cancel: CancellationToken | None = None) -> ToolDefinition:
        """Look up a tool by exact name.

        Returns:
            A deep copy of the registered definition

        Raises:
            OperationCancelledError: If cancel is already cancelled
            ToolNotFoundError: If no tool has this name
        """
        check_cancelled(cancel, "get_tool")

        with self._lock:
            tool = self._tools.get(name)
            if tool is None:
                suggestions = self._similar_names(name)
                available = len(self._tools)

        if tool is None:
            self._logger.debug(
                "tool lookup failed",
                extra={"tool_name": name, "tool_count": available},
            )
            raise ToolNotFoundError(name, suggestions)

        self._logger.debug(
            "tool lookup successful",
            extra={"tool_name": name, "category": tool.category.value},
        )
        return tool.clone()

    def list_tools(
        self,
        category: CategoryType | str | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> list[ToolDefinition]:
        """List registered tools, optionally restricted to one category.

        Args:
            category: Category to list; None or "" lists every tool
            cancel: Cancellation token checked before any work

        Returns:
            Deep copies sorted by name. Unknown or empty categories yield [].
        """
        check_cancelled(cancel, "list_tools")

        with self._lock:
            if not category:
                tools = list(self._tools.values())
            else:
                names = self._categories.get(CategoryType.parse(category), set())
                tools = [self._tools[name] for name in names]
            total = len(self._tools)

        result = sorted((tool.clone() for tool in tools), key=lambda tool: tool.name)
        self._logger.debug(
            "tool discovery completed",
            extra={
                "category": category.value if isinstance(category, CategoryType) else category or "",
                "tool_count": len(result),
                "total_registered": total,
            },
        )
        return result

    def validate_tool_input(
        self,
        name: str,
        data: Mapping[str, Any],
        *,
        cancel: CancellationToken | None = None,
    ) -> None:
        """Validate input for a registered tool.

        Raises:
            OperationCancelledError: If cancel is already cancelled
            UnknownToolError: If no tool has this name
            SchemaValidationError: If the input violates the tool's schema
        """
        check_cancelled(cancel, "validate_tool_input")

        with self._lock:
            schema = self._schemas.get(name)
            if schema is None:
                suggestions = self._similar_names(name)

        if schema is None:
            raise UnknownToolError(name, suggestions)

        try:
            self._validator.validate_against_schema(data, schema, cancel=cancel)
        except SchemaValidationError as exc:
            self._logger.debug(
                "tool input validation failed",
                extra={"tool_name": name, "error": str(exc), "input_keys": _sorted_keys(data)},
            )
            raise

        self._logger.debug(
            "tool input validation successful",
            extra={"tool_name": name, "input_keys": _sorted_keys(data)},
        )

    def get_categories(self, *, cancel: CancellationToken | None = None) -> list[CategoryType]:
        """Return the categories that hold at least one tool, sorted by value."""
        check_cancelled(cancel, "get_categories")

        with self._lock:
            categories = sorted(self._categories, key=lambda category: category.value)

        self._logger.debug("category discovery completed", extra={"category_count": len(categories)})
        return categories

    def _check_definition(self, tool: ToolDefinition) -> str | None:
        """Return the first violated registration invariant, or None."""
        if not tool.name:
            return "tool name cannot be empty"
        if tool.name != tool.name.lower() or any(ch.isspace() for ch in tool.name):
            return f"tool name must be lowercase without spaces, got: {tool.name!r}"
        if not tool.description.strip():
            return "tool description cannot be empty"
        if tool.input_schema is None:
            return "tool input schema cannot be None"
        schema_type = tool.input_schema.get("type")
        if schema_type != "object":
            return f"tool input schema type must be 'object', got: {schema_type!r}"
        if CategoryType.parse(tool.category) is None:
            return f"invalid tool category: {tool.category!r}"
        if not MIN_TOOL_TIMEOUT <= tool.timeout <= MAX_TOOL_TIMEOUT:
            return f"tool timeout must be between 1 second and 10 minutes, got: {tool.timeout}"
        if not tool.version.strip():
            return "tool version cannot be empty"
        if not tool.cli_command.strip():
            return "tool CLI command cannot be empty"
        for index, example in enumerate(tool.examples):
            if not example.description.strip():
                return f"tool example {index} description cannot be empty"
            if example.input is None:
                return f"tool example {index} input cannot be None"
        return None

    def _similar_names(self, name: str) -> list[str]:
        # Caller holds the lock.
        needle = name.lower()
        if not needle:
            return []
        matches = []
        for candidate in self._tools:
            lowered = candidate.lower()
            if needle in lowered or needle.startswith(lowered):
                matches.append(candidate)
        return sorted(matches)[:MAX_NAME_SUGGESTIONS]


def create_tool_registry(logger: logging.Logger | None = None) -> ToolRegistry:
    """Build a registry wired to a default SchemaValidator.

    Without a logger, the process logging is configured from settings and the
    registry logs under the ``registry`` child logger.
    """
    if logger is None:
        configure_logging()
        logger = get_logger("registry")
    return ToolRegistry(SchemaValidator(logger), logger)


def _sorted_keys(data: Any) -> list[str]:
    if isinstance(data, Mapping):
        return sorted(str(key) for key in data)
    return []
