"""Error types raised by the tool registry and schema validator.

Callers branch on the exception class: ``SchemaValidationError`` maps to a
400-style response, ``ToolNotFoundError`` to a 404-style one.
"""

from enum import Enum


class ValidationErrorCode(str, Enum):
    """Standardized validation error codes."""

    VALIDATION_FAILED = "validation_failed"


class SchemaValidationError(ValueError):
    """Raised when input does not conform to a tool's input schema.

    Attributes:
        field: Dotted path to the offending field, empty for whole-object errors
        message: Human-readable error description
        code: Standardized error code
        suggestions: Ordered remediation hints
    """

    def __init__(
        self,
        field: str,
        message: str,
        suggestions: list[str] | None = None,
        code: ValidationErrorCode = ValidationErrorCode.VALIDATION_FAILED,
    ) -> None:
        """Initialize validation error.

        Args:
            field: Dotted path to the offending field
            message: Human-readable error description
            suggestions: Ordered remediation hints
            code: Standardized error code
        """
        self.field = field
        self.message = message
        self.code = code
        self.suggestions = list(suggestions or [])
        super().__init__(self._render())

    def _render(self) -> str:
        text = self.message
        if self.field:
            text = f"{self.field}: {text}"
        if self.suggestions:
            text += f" (suggestions: {', '.join(self.suggestions)})"
        return text


class ToolNotFoundError(LookupError):
    """Raised when a requested tool is not found in the registry.

    Attributes:
        tool_name: Name of the tool that was not found
        available_tools: Registered names similar to the requested one
        category: Category hint for the caller, if any
    """

    def __init__(
        self,
        tool_name: str,
        available_tools: list[str] | None = None,
        category: str = "",
    ) -> None:
        """Initialize tool not found error.

        Args:
            tool_name: Name of the tool that was not found
            available_tools: Registered names similar to the requested one
            category: Category hint for the caller
        """
        self.tool_name = tool_name
        self.available_tools = list(available_tools or [])
        self.category = category
        super().__init__(self._render())

    def _render(self) -> str:
        text = f"tool not found: {self.tool_name}"
        if self.available_tools:
            text += f" (available tools: {', '.join(self.available_tools)})"
        if self.category:
            text += f" (try searching in category: {self.category})"
        return text


class UnknownToolError(ToolNotFoundError):
    """Raised when input validation is requested for an unregistered tool."""

    def _render(self) -> str:
        return f"cannot validate input for unknown tool: {super()._render()}"


class ToolRegistrationError(ValueError):
    """Raised when a tool definition is rejected at registration time.

    Attributes:
        reason: Which registration invariant was violated
        tool_name: Name of the rejected tool (may be empty)
    """

    def __init__(self, reason: str, tool_name: str = "") -> None:
        self.reason = reason
        self.tool_name = tool_name
        super().__init__(self._render())

    def _render(self) -> str:
        return f"invalid tool definition: {self.reason}"


class DuplicateToolError(ToolRegistrationError):
    """Raised when a tool name is already taken."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"tool already registered: {tool_name}", tool_name)

    def _render(self) -> str:
        return self.reason


class UnknownCategoryError(LookupError):
    """Raised when category metadata is requested for an unknown category."""

    def __init__(self, category: str) -> None:
        super().__init__(f"unknown category: {category}")
        self.category = category


class OperationCancelledError(RuntimeError):
    """Raised when an operation is invoked with an already-cancelled token."""

    def __init__(self, operation: str = "") -> None:
        message = "operation cancelled"
        if operation:
            message = f"{operation}: {message}"
        super().__init__(message)
        self.operation = operation
