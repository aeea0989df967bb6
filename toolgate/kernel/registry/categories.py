"""CategoryManager: category metadata and discovery over a ToolRegistry."""

import logging
import re
from typing import Literal

from pydantic import BaseModel, Field

from toolgate.kernel.registry.cancellation import CancellationToken, check_cancelled
from toolgate.kernel.registry.errors import UnknownCategoryError
from toolgate.kernel.registry.tool_contract import CategoryType, ToolDefinition
from toolgate.kernel.registry.tool_registry import ToolRegistry

MAX_POPULAR_TOOLS = 3
_WORD_RE = re.compile(r"[a-z0-9]+")
_STOP_WORDS = frozenset(
    {"a", "an", "and", "the", "to", "for", "of", "in", "on", "my", "i", "me", "want", "need", "how", "do"}
)


class CategoryMetadata(BaseModel):
    name: str
    description: str
    keywords: list[str] = Field(default_factory=list)
    use_cases: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    related_categories: list[CategoryType] = Field(default_factory=list)
    priority: int


class CategoryDiscoveryFilter(BaseModel):
    """Criteria for category discovery.

    Keywords and use cases match case-insensitively as substrings. An empty
    filter matches every category.
    """

    keywords: list[str] = Field(default_factory=list)
    use_cases: list[str] = Field(default_factory=list)
    include_empty: bool = False
    max_results: int = 10
    sort_by: Literal["priority", "tool_count", "score"] = "priority"


class CategorySummary(BaseModel):
    category: CategoryType
    metadata: CategoryMetadata
    tool_count: int
    popular_tools: list[str] = Field(default_factory=list)
    recommendation_score: float


CATEGORY_METADATA: dict[CategoryType, CategoryMetadata] = {
    CategoryType.INVOICE_MANAGEMENT: CategoryMetadata(
        name="Invoice Management",
        description="Tools for creating, updating, and managing invoices throughout their lifecycle",
        keywords=["invoice", "create", "update", "manage", "billing", "payment", "due date", "client"],
        use_cases=[
            "Creating new invoices for clients",
            "Updating invoice details and metadata",
            "Managing invoice status and payments",
            "Setting due dates and payment terms",
        ],
        related_categories=[
            CategoryType.CLIENT_MANAGEMENT,
            CategoryType.DATA_EXPORT,
            CategoryType.REPORTING,
        ],
        priority=1,
    ),
    CategoryType.DATA_IMPORT: CategoryMetadata(
        name="Data Import",
        description="Tools for importing timesheet data, client information, and other external data",
        keywords=["import", "csv", "timesheet", "data", "upload", "file", "spreadsheet", "hours"],
        use_cases=[
            "Importing timesheet data from CSV files",
            "Loading client information from external sources",
            "Bulk importing work hours and billing data",
        ],
        prerequisites=["CSV files formatted correctly", "File paths accessible"],
        related_categories=[CategoryType.INVOICE_MANAGEMENT, CategoryType.CLIENT_MANAGEMENT],
        priority=2,
    ),
    CategoryType.DATA_EXPORT: CategoryMetadata(
        name="Data Export",
        description="Tools for generating and exporting invoice documents, reports, and data",
        keywords=["export", "generate", "html", "pdf", "report", "document", "download", "template"],
        use_cases=[
            "Generating HTML invoices for clients",
            "Exporting invoice data for accounting systems",
        ],
        related_categories=[CategoryType.INVOICE_MANAGEMENT, CategoryType.REPORTING],
        priority=2,
    ),
    CategoryType.CLIENT_MANAGEMENT: CategoryMetadata(
        name="Client Management",
        description="Tools for managing client information, contacts, and relationships",
        keywords=["client", "customer", "contact", "company", "address", "email", "phone"],
        use_cases=[
            "Adding new clients to the system",
            "Updating client contact information",
            "Managing client billing preferences",
        ],
        related_categories=[CategoryType.INVOICE_MANAGEMENT, CategoryType.DATA_IMPORT],
        priority=3,
    ),
    CategoryType.CONFIGURATION: CategoryMetadata(
        name="Configuration",
        description="Tools for system configuration, settings management, and validation",
        keywords=["config", "settings", "setup", "validate", "preferences", "options", "system"],
        use_cases=[
            "Setting up payment terms and tax rates",
            "Validating system configuration",
        ],
        prerequisites=["Administrative access"],
        related_categories=[CategoryType.INVOICE_MANAGEMENT],
        priority=4,
    ),
    CategoryType.REPORTING: CategoryMetadata(
        name="Reporting",
        description="Tools for analytics, reporting, and summaries of invoice data",
        keywords=["report", "analytics", "statistics", "summary", "analysis", "metrics", "revenue"],
        use_cases=[
            "Generating revenue reports and summaries",
            "Tracking payment status and overdue amounts",
        ],
        related_categories=[CategoryType.INVOICE_MANAGEMENT, CategoryType.DATA_EXPORT],
        priority=5,
    ),
}


class CategoryManager:
    """Category metadata, discovery and recommendations backed by a registry."""

    def __init__(self, registry: ToolRegistry, logger: logging.Logger) -> None:
        if registry is None:
            raise ValueError("registry cannot be None")
        if logger is None:
            raise ValueError("logger cannot be None")
        self._registry = registry
        self._logger = logger
        self._metadata = {category: meta.model_copy(deep=True) for category, meta in CATEGORY_METADATA.items()}

    def get_category_metadata(
        self,
        category: CategoryType | str,
        *,
        cancel: CancellationToken | None = None,
    ) -> CategoryMetadata | None:
        """Return a copy of the metadata for a category, or None if unknown."""
        check_cancelled(cancel, "get_category_metadata")

        metadata = self._metadata.get(CategoryType.parse(category))
        if metadata is None:
            self._logger.debug("category metadata not found", extra={"category": str(category)})
            return None
        return metadata.model_copy(deep=True)

    def discover_categories(
        self,
        criteria: CategoryDiscoveryFilter | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> list[CategorySummary]:
        """Find categories matching the discovery criteria.

        Args:
            criteria: Filter; defaults to non-empty categories, by priority
            cancel: Cancellation token checked before any work

        Returns:
            Matching summaries, sorted per ``criteria.sort_by`` and truncated to
            ``criteria.max_results`` when it is positive.
        """
        check_cancelled(cancel, "discover_categories")
        criteria = criteria or CategoryDiscoveryFilter()

        summaries: list[CategorySummary] = []
        for category, metadata in self._metadata.items():
            if criteria.keywords and not _matches_keywords(metadata, criteria.keywords):
                continue
            if criteria.use_cases and not _matches_use_cases(metadata, criteria.use_cases):
                continue

            tools = self._registry.list_tools(category, cancel=cancel)
            if not tools and not criteria.include_empty:
                continue

            summaries.append(
                CategorySummary(
                    category=category,
                    metadata=metadata.model_copy(deep=True),
                    tool_count=len(tools),
                    popular_tools=[tool.name for tool in tools[:MAX_POPULAR_TOOLS]],
                    recommendation_score=_recommendation_score(metadata, len(tools)),
                )
            )

        _sort_summaries(summaries, criteria.sort_by)
        if criteria.max_results > 0:
            summaries = summaries[: criteria.max_results]

        self._logger.debug(
            "category discovery completed",
            extra={"category_count": len(summaries), "keywords": criteria.keywords},
        )
        return summaries

    def describe_category(
        self,
        category: CategoryType | str,
        include_tools: bool = False,
        *,
        cancel: CancellationToken | None = None,
    ) -> str:
        """Render a conversational description of a category.

        Raises:
            UnknownCategoryError: If the category is not recognized
        """
        check_cancelled(cancel, "describe_category")

        metadata = self.get_category_metadata(category)
        if metadata is None:
            raise UnknownCategoryError(str(category))

        lines = [f"**{metadata.name}**: {metadata.description}"]
        if metadata.use_cases:
            lines.append("")
            lines.append("Common use cases include:")
            lines.extend(f"• {use_case}" for use_case in metadata.use_cases)
        if metadata.prerequisites:
            lines.append("")
            lines.append("Prerequisites:")
            lines.extend(f"• {prereq}" for prereq in metadata.prerequisites)

        if include_tools:
            tools = self._registry.list_tools(CategoryType.parse(category), cancel=cancel)
            if tools:
                lines.append("")
                lines.append("Available tools:")
                lines.extend(_tool_line(tool) for tool in tools[:MAX_POPULAR_TOOLS])
                if len(tools) > MAX_POPULAR_TOOLS:
                    lines.append(f"• ...and {len(tools) - MAX_POPULAR_TOOLS} more tools")

        related = [self._metadata[rel].name for rel in metadata.related_categories if rel in self._metadata]
        if related:
            lines.append("")
            lines.append(f"Related categories: {', '.join(related)}")

        return "\n".join(lines)

    def recommend_categories(
        self,
        query: str,
        max_recommendations: int = 3,
        *,
        cancel: CancellationToken | None = None,
    ) -> list[CategorySummary]:
        """Suggest non-empty categories relevant to a free-text query.

        Categories are ranked by query relevance; ties keep priority order.
        """
        check_cancelled(cancel, "recommend_categories")
        if max_recommendations <= 0:
            max_recommendations = 3

        keywords = extract_keywords(query)
        summaries = self.discover_categories(
            CategoryDiscoveryFilter(keywords=keywords, max_results=0),
            cancel=cancel,
        )
        for summary in summaries:
            summary.recommendation_score = _query_relevance(keywords, summary.metadata)

        summaries.sort(key=lambda summary: summary.recommendation_score, reverse=True)
        result = summaries[:max_recommendations]

        self._logger.debug(
            "category recommendations generated",
            extra={
                "category_count": len(result),
                "top_category": result[0].category.value if result else "none",
            },
        )
        return result


def extract_keywords(query: str) -> list[str]:
    """Split a query into lowercase words, dropping stop words and duplicates."""
    seen: list[str] = []
    for word in _WORD_RE.findall(query.lower()):
        if len(word) > 1 and word not in _STOP_WORDS and word not in seen:
            seen.append(word)
    return seen


def _tool_line(tool: ToolDefinition) -> str:
    return f"• **{tool.name}**: {tool.description}"


def _matches_keywords(metadata: CategoryMetadata, keywords: list[str]) -> bool:
    haystack = [metadata.name, metadata.description, *metadata.keywords, *metadata.use_cases]
    haystack = [text.lower() for text in haystack]
    return any(keyword.lower() in text for keyword in keywords for text in haystack)


def _matches_use_cases(metadata: CategoryMetadata, use_cases: list[str]) -> bool:
    wanted = [use_case.lower() for use_case in use_cases]
    return any(w in use_case.lower() for w in wanted for use_case in metadata.use_cases)


def _recommendation_score(metadata: CategoryMetadata, tool_count: int) -> float:
    # Priority 1 scores 9; tools add 0.5 each, capped at 5.
    return float(10 - metadata.priority) + min(tool_count * 0.5, 5.0)


def _query_relevance(keywords: list[str], metadata: CategoryMetadata) -> float:
    score = 0.0
    name = metadata.name.lower()
    description = metadata.description.lower()
    for keyword in keywords:
        if keyword in name:
            score += 10.0
        score += 5.0 * sum(1 for meta_keyword in metadata.keywords if keyword in meta_keyword.lower())
        if keyword in description:
            score += 2.0
        score += 1.0 * sum(1 for use_case in metadata.use_cases if keyword in use_case.lower())
    return score


def _sort_summaries(summaries: list[CategorySummary], sort_by: str) -> None:
    if sort_by == "tool_count":
        summaries.sort(key=lambda s: (-s.tool_count, s.metadata.priority, s.metadata.name))
    elif sort_by == "score":
        summaries.sort(key=lambda s: (-s.recommendation_score, s.metadata.name))
    else:
        summaries.sort(key=lambda s: (s.metadata.priority, s.metadata.name))
