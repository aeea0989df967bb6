"""Registry module: tool definitions, schema validation and category discovery."""

from toolgate.kernel.registry.cancellation import CancellationToken, check_cancelled
from toolgate.kernel.registry.categories import (
    CategoryDiscoveryFilter,
    CategoryManager,
    CategoryMetadata,
    CategorySummary,
)
from toolgate.kernel.registry.discovery import (
    CategoryDiscoveryResult,
    ToolDiscoveryService,
    ToolRecommendation,
    ToolSearchCriteria,
    ToolSearchResult,
)
from toolgate.kernel.registry.errors import (
    DuplicateToolError,
    OperationCancelledError,
    SchemaValidationError,
    ToolNotFoundError,
    ToolRegistrationError,
    UnknownCategoryError,
    UnknownToolError,
    ValidationErrorCode,
)
from toolgate.kernel.registry.formats import build_format_checker
from toolgate.kernel.registry.schema_nodes import compile_schema
from toolgate.kernel.registry.schema_validator import SchemaValidator
from toolgate.kernel.registry.tool_contract import CategoryType, ToolDefinition, ToolExample
from toolgate.kernel.registry.tool_registry import ToolRegistry, create_tool_registry

__all__ = [
    "CancellationToken",
    "CategoryDiscoveryFilter",
    "CategoryDiscoveryResult",
    "CategoryManager",
    "CategoryMetadata",
    "CategorySummary",
    "CategoryType",
    "DuplicateToolError",
    "OperationCancelledError",
    "SchemaValidationError",
    "SchemaValidator",
    "ToolDefinition",
    "ToolDiscoveryService",
    "ToolExample",
    "ToolNotFoundError",
    "ToolRecommendation",
    "ToolRegistrationError",
    "ToolRegistry",
    "ToolSearchCriteria",
    "ToolSearchResult",
    "UnknownCategoryError",
    "UnknownToolError",
    "ValidationErrorCode",
    "build_format_checker",
    "check_cancelled",
    "compile_schema",
    "create_tool_registry",
]
