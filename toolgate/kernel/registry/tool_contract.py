"""ToolDefinition: tool specification with input schema and execution metadata."""

from datetime import timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

MIN_TOOL_TIMEOUT = timedelta(seconds=1)
MAX_TOOL_TIMEOUT = timedelta(minutes=10)


class CategoryType(str, Enum):
    """Domain categories a tool can belong to."""

    INVOICE_MANAGEMENT = "invoice_management"
    DATA_IMPORT = "data_import"
    DATA_EXPORT = "data_export"
    CLIENT_MANAGEMENT = "client_management"
    CONFIGURATION = "configuration"
    REPORTING = "reporting"

    @classmethod
    def parse(cls, value: Any) -> "CategoryType | None":
        """Return the matching category, or None if value is not recognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class ToolExample(BaseModel):
    """Usage example shown to callers; never validated against the schema."""

    description: str = ""
    use_case: str = ""
    input: dict[str, Any] | None = None
    expected_output: str = ""


class ToolDefinition(BaseModel):
    """Tool specification with schema and execution metadata.

    The registry stores and hands out deep copies, so mutating an instance
    after registration (or after lookup) never affects registry state.
    """

    model_config = ConfigDict(frozen=False)

    name: str
    description: str = ""
    help_text: str = ""
    input_schema: dict[str, Any] | None = None  # JSON Schema subset
    category: CategoryType | str = ""

    # External invocation (consumed by the CLI bridge, not by the registry)
    cli_command: str = ""
    cli_args: list[str] = Field(default_factory=list)

    version: str = ""
    timeout: timedelta = timedelta(seconds=30)  # Descriptive; not enforced here
    examples: list[ToolExample] = Field(default_factory=list)

    def clone(self) -> "ToolDefinition":
        """Return a deep copy sharing no mutable state with this instance."""
        return self.model_copy(deep=True)
