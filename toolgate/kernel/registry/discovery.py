"""ToolDiscoveryService: tool search, category browsing and workflow recommendations.

Every call works on a fresh snapshot from ``ToolRegistry.list_tools``, so tools
registered after the service was built are found without reindexing.
"""

import logging
import re
from typing import Literal

from pydantic import BaseModel, Field

from toolgate.kernel.registry.cancellation import CancellationToken, check_cancelled
from toolgate.kernel.registry.categories import CATEGORY_METADATA
from toolgate.kernel.registry.errors import UnknownCategoryError
from toolgate.kernel.registry.tool_contract import CategoryType, ToolDefinition
from toolgate.kernel.registry.tool_registry import ToolRegistry

CATEGORY_MATCH_SCORE = 0.8
QUERY_MATCH_BOOST = 0.3
REPEAT_MATCH_BOOST = 0.2
FUZZY_MATCH_BOOST = 0.2
REPEAT_FUZZY_BOOST = 0.1
MAX_CATEGORY_RECOMMENDED = 3
MAX_OVERVIEW_RECOMMENDED = 5
DEFAULT_RECOMMENDATION_LIMIT = 5

_TOKEN_SPLIT_RE = re.compile(r"[\s_\-.,]+")

# Checked in order; the first keyword found in the context wins.
_WORKFLOW_KEYWORDS: tuple[tuple[tuple[str, ...], CategoryType], ...] = (
    (("invoice",), CategoryType.INVOICE_MANAGEMENT),
    (("client",), CategoryType.CLIENT_MANAGEMENT),
    (("import",), CategoryType.DATA_IMPORT),
    (("export", "generate"), CategoryType.DATA_EXPORT),
    (("config",), CategoryType.CONFIGURATION),
    (("report",), CategoryType.REPORTING),
)
_WORKFLOW_CONFIDENCE = {
    CategoryType.INVOICE_MANAGEMENT: 0.9,
    CategoryType.CLIENT_MANAGEMENT: 0.8,
}


class ToolSearchCriteria(BaseModel):
    """Search parameters.

    An empty query with categories lists those categories; an empty query
    without categories lists every tool. Categories and the minimum score are
    combined with AND.
    """

    query: str = ""
    categories: list[CategoryType] = Field(default_factory=list)
    include_examples: bool = False
    max_results: int = 0
    min_relevance_score: float = 0.0
    sort_by: Literal["relevance", "name", "category"] = "relevance"
    sort_order: Literal["asc", "desc"] | None = None


class ToolSearchResult(BaseModel):
    tool: ToolDefinition
    relevance_score: float
    match_context: str
    matched_fields: list[str] = Field(default_factory=list)
    category_match: bool = False


class CategoryDiscoveryResult(BaseModel):
    category: CategoryType | None = None
    tool_count: int
    tools: list[ToolDefinition] = Field(default_factory=list)
    related_categories: list[CategoryType] = Field(default_factory=list)
    recommended_tools: list[ToolDefinition] = Field(default_factory=list)


class ToolRecommendation(BaseModel):
    tool: ToolDefinition
    confidence: float
    rationale: str
    use_case: str


class ToolDiscoveryService:
    """Search and recommendation layer over a ToolRegistry."""

    def __init__(self, registry: ToolRegistry, logger: logging.Logger) -> None:
        """Initialize the discovery service.

        Args:
            registry: Registry whose tools are searched
            logger: Logger for discovery events

        Raises:
            ValueError: If registry or logger is None
        """
        if registry is None:
            raise ValueError("registry cannot be None")
        if logger is None:
            raise ValueError("logger cannot be None")
        self._registry = registry
        self._logger = logger

    def search_tools(
        self,
        criteria: ToolSearchCriteria | None,
        *,
        cancel: CancellationToken | None = None,
    ) -> list[ToolSearchResult]:
        """Search registered tools.

        Query tokens match tool names, descriptions and help text exactly or
        fuzzily (substring, or a shared three-letter prefix for longer words).
        Each result's score starts from the tool's base relevance and grows
        with every additional matching token.

        Args:
            criteria: Search parameters
            cancel: Cancellation token checked before any work

        Returns:
            Results sorted per ``criteria.sort_by``, truncated to
            ``criteria.max_results`` when it is positive.

        Raises:
            OperationCancelledError: If cancel is already cancelled
            ValueError: If criteria is None
        """
        check_cancelled(cancel, "search_tools")
        if criteria is None:
            raise ValueError("search criteria cannot be None")

        tools = self._registry.list_tools(cancel=cancel)
        if criteria.query:
            results = _search_by_query(tools, criteria)
        elif criteria.categories:
            results = _search_by_category(tools, criteria.categories)
        else:
            results = [
                ToolSearchResult(tool=tool, relevance_score=base_relevance(tool), match_context="All tools")
                for tool in tools
            ]

        results = _filter_results(results, criteria)
        _sort_results(results, criteria)
        if criteria.max_results > 0:
            results = results[: criteria.max_results]

        self._logger.debug(
            "tool search completed",
            extra={"query": criteria.query, "result_count": len(results)},
        )
        return results

    def discover_tools_by_category(
        self,
        category: CategoryType | str | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> CategoryDiscoveryResult:
        """Browse one category, or every category when none is given.

        Raises:
            OperationCancelledError: If cancel is already cancelled
            UnknownCategoryError: If category is not recognized
        """
        check_cancelled(cancel, "discover_tools_by_category")

        if not category:
            tools = self._registry.list_tools(cancel=cancel)
            return CategoryDiscoveryResult(
                tool_count=len(tools),
                tools=tools,
                related_categories=self._registry.get_categories(cancel=cancel),
                recommended_tools=_ranked(tools)[:MAX_OVERVIEW_RECOMMENDED],
            )

        parsed = CategoryType.parse(category)
        if parsed is None:
            raise UnknownCategoryError(str(category))

        tools = self._registry.list_tools(parsed, cancel=cancel)
        result = CategoryDiscoveryResult(
            category=parsed,
            tool_count=len(tools),
            tools=tools,
            related_categories=list(CATEGORY_METADATA[parsed].related_categories),
            recommended_tools=_ranked(tools)[:MAX_CATEGORY_RECOMMENDED],
        )
        self._logger.debug(
            "category discovery completed",
            extra={"category": parsed.value, "tool_count": len(tools)},
        )
        return result

    def get_tool_recommendations(
        self,
        context: str,
        limit: int = DEFAULT_RECOMMENDATION_LIMIT,
        *,
        cancel: CancellationToken | None = None,
    ) -> list[ToolRecommendation]:
        """Recommend tools for a free-text description of what the user is doing.

        The context is mapped to a workflow category by keyword; tools of that
        category are recommended, best documented first. A context that names
        no workflow yields no recommendations.
        """
        check_cancelled(cancel, "get_tool_recommendations")
        if limit <= 0:
            limit = DEFAULT_RECOMMENDATION_LIMIT

        workflow = analyze_workflow(context)
        recommendations: list[ToolRecommendation] = []
        if workflow is not None:
            metadata = CATEGORY_METADATA[workflow]
            confidence = _WORKFLOW_CONFIDENCE.get(workflow, 0.7)
            for tool in _ranked(self._registry.list_tools(workflow, cancel=cancel))[:limit]:
                recommendations.append(
                    ToolRecommendation(
                        tool=tool,
                        confidence=confidence,
                        rationale=f"Essential for {metadata.name.lower()} workflow",
                        use_case=_use_case(tool, metadata.use_cases),
                    )
                )

        self._logger.debug(
            "tool recommendations generated",
            extra={
                "workflow": workflow.value if workflow else "general",
                "result_count": len(recommendations),
            },
        )
        return recommendations


def tokenize(text: str) -> list[str]:
    """Lowercase words longer than two characters, split on spaces and ``_-.,``."""
    return [token for token in _TOKEN_SPLIT_RE.split(text.lower()) if len(token) > 2]


def is_fuzzy_match(left: str, right: str) -> bool:
    if len(left) < 3 or len(right) < 3:
        return False
    if left in right or right in left:
        return True
    return len(left) > 4 and len(right) > 4 and left[:3] == right[:3]


def base_relevance(tool: ToolDefinition) -> float:
    """Score how well documented a tool is, from 0.5 up to 0.8."""
    score = 0.5
    if tool.examples:
        score += 0.1
    if tool.help_text:
        score += 0.1
    if len(tool.description) > 50:
        score += 0.1
    return score


def analyze_workflow(context: str) -> CategoryType | None:
    lowered = context.lower()
    for keywords, category in _WORKFLOW_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


def _searchable_fields(tool: ToolDefinition, include_examples: bool) -> dict[str, set[str]]:
    fields = {
        "name": set(tokenize(tool.name)),
        "description": set(tokenize(tool.description)),
        "help_text": set(tokenize(tool.help_text)),
    }
    if include_examples:
        fields["examples"] = {
            token
            for example in tool.examples
            for token in tokenize(f"{example.description} {example.use_case}")
        }
    return fields


def _search_by_query(tools: list[ToolDefinition], criteria: ToolSearchCriteria) -> list[ToolSearchResult]:
    matches: dict[str, ToolSearchResult] = {}
    for tool in tools:
        fields = _searchable_fields(tool, criteria.include_examples)
        all_tokens = set().union(*fields.values())
        for token in tokenize(criteria.query):
            if token in all_tokens:
                matched = [name for name, tokens in fields.items() if token in tokens]
                _record(matches, tool, QUERY_MATCH_BOOST, REPEAT_MATCH_BOOST, f"Matched on: {token}", matched)
                continue
            fuzzy = sorted(candidate for candidate in all_tokens if is_fuzzy_match(token, candidate))
            if fuzzy:
                matched = [name for name, tokens in fields.items() if tokens.intersection(fuzzy)]
                context = f"Fuzzy match: {token} ≈ {fuzzy[0]}"
                _record(matches, tool, FUZZY_MATCH_BOOST, REPEAT_FUZZY_BOOST, context, matched)
    return list(matches.values())


def _record(
    matches: dict[str, ToolSearchResult],
    tool: ToolDefinition,
    first_boost: float,
    repeat_boost: float,
    context: str,
    matched_fields: list[str],
) -> None:
    existing = matches.get(tool.name)
    if existing is None:
        matches[tool.name] = ToolSearchResult(
            tool=tool,
            relevance_score=base_relevance(tool) + first_boost,
            match_context=context,
            matched_fields=matched_fields,
        )
        return
    existing.relevance_score += repeat_boost
    existing.matched_fields.extend(name for name in matched_fields if name not in existing.matched_fields)


def _search_by_category(
    tools: list[ToolDefinition], categories: list[CategoryType]
) -> list[ToolSearchResult]:
    return [
        ToolSearchResult(
            tool=tool,
            relevance_score=CATEGORY_MATCH_SCORE,
            match_context=f"Category match: {tool.category.value}",
            matched_fields=["category"],
            category_match=True,
        )
        for tool in tools
        if tool.category in categories
    ]


def _filter_results(results: list[ToolSearchResult], criteria: ToolSearchCriteria) -> list[ToolSearchResult]:
    return [
        result
        for result in results
        if result.relevance_score >= criteria.min_relevance_score
        and (result.category_match or not criteria.categories or result.tool.category in criteria.categories)
    ]


def _sort_results(results: list[ToolSearchResult], criteria: ToolSearchCriteria) -> None:
    if criteria.sort_by == "name":
        results.sort(key=lambda r: r.tool.name, reverse=criteria.sort_order == "desc")
    elif criteria.sort_by == "category":
        results.sort(key=lambda r: r.tool.name)
        results.sort(key=lambda r: r.tool.category.value, reverse=criteria.sort_order == "desc")
    else:
        # Highest score first unless asc was asked for; names break ties.
        results.sort(key=lambda r: r.tool.name)
        results.sort(key=lambda r: r.relevance_score, reverse=criteria.sort_order != "asc")


def _ranked(tools: list[ToolDefinition]) -> list[ToolDefinition]:
    return sorted(tools, key=lambda tool: (-base_relevance(tool), tool.name))


def _use_case(tool: ToolDefinition, category_use_cases: list[str]) -> str:
    for example in tool.examples:
        if example.use_case:
            return example.use_case
    return category_use_cases[0] if category_use_cases else ""
