"""Shared fixtures for toolgate tests."""

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any

import pytest

from toolgate.kernel.registry import (
    CategoryType,
    SchemaValidator,
    ToolDefinition,
    ToolExample,
    ToolRegistry,
)


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("toolgate.tests")


@pytest.fixture
def validator(logger: logging.Logger) -> SchemaValidator:
    return SchemaValidator(logger)


@pytest.fixture
def registry(validator: SchemaValidator, logger: logging.Logger) -> ToolRegistry:
    return ToolRegistry(validator, logger)


@pytest.fixture
def make_tool() -> Callable[..., ToolDefinition]:
    """Factory for valid tool definitions; keyword arguments override fields."""

    def _make(name: str = "invoice_create", **overrides: Any) -> ToolDefinition:
        fields: dict[str, Any] = {
            "name": name,
            "description": f"Run {name}",
            "help_text": f"Help for {name}",
            "input_schema": {
                "type": "object",
                "properties": {
                    "client_name": {"type": "string", "minLength": 1},
                    "amount": {"type": "number", "minimum": 0},
                },
                "required": ["client_name"],
            },
            "category": CategoryType.INVOICE_MANAGEMENT,
            "cli_command": "go-invoice",
            "cli_args": ["invoice", "create"],
            "version": "1.0.0",
            "timeout": timedelta(seconds=30),
            "examples": [
                ToolExample(
                    description="Create a basic invoice",
                    use_case="Monthly billing",
                    input={"client_name": "Acme Corp"},
                    expected_output="Invoice created",
                )
            ],
        }
        fields.update(overrides)
        return ToolDefinition(**fields)

    return _make
