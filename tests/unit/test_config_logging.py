"""Settings and logging setup tests."""

import json
import logging

import pytest

from toolgate.config import Settings, get_config
from toolgate.logging_config import JSONFormatter, KeyValueFormatter, configure_logging, get_logger
from toolgate.kernel.registry import (
    CategoryDiscoveryFilter,
    CategoryManager,
    ToolRegistry,
    create_tool_registry,
)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="toolgate.registry",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="tool registered successfully",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def clean_config():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.mark.unit
@pytest.mark.deterministic
class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("TOOLGATE_LOG_LEVEL", "TOOLGATE_LOG_JSON", "TOOLGATE_LOGGER_NAME"):
            monkeypatch.delenv(var, raising=False)

        settings = Settings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.log_json is False
        assert settings.logger_name == "toolgate"

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOLGATE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("TOOLGATE_LOG_JSON", "true")

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.log_json is True

    def test_invalid_level_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOLGATE_LOG_LEVEL", "CHATTY")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_get_config_is_cached(self, clean_config) -> None:
        assert get_config() is get_config()


@pytest.mark.unit
class TestFormatters:
    def test_json_formatter_includes_structured_fields(self) -> None:
        payload = json.loads(JSONFormatter().format(_record(tool_name="invoice_create", tool_count=3)))

        assert payload["message"] == "tool registered successfully"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "toolgate.registry"
        assert payload["tool_name"] == "invoice_create"
        assert payload["tool_count"] == 3

    def test_key_value_formatter(self) -> None:
        text = KeyValueFormatter().format(_record(tool_name="invoice_create", category="reporting"))

        assert "INFO toolgate.registry: tool registered successfully" in text
        assert text.endswith("tool_name=invoice_create category=reporting")

    def test_discovery_fields_rendered(self) -> None:
        record = _record(keywords=["csv"], top_category="data_import", query="invoice", result_count=2, workflow="general")

        payload = json.loads(JSONFormatter().format(record))

        assert payload["keywords"] == ["csv"]
        assert payload["top_category"] == "data_import"
        assert payload["query"] == "invoice"
        assert payload["result_count"] == 2
        assert payload["workflow"] == "general"

    def test_category_discovery_log_keeps_keywords(
        self, registry: ToolRegistry, logger: logging.Logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        manager = CategoryManager(registry, logger)

        with caplog.at_level(logging.DEBUG, logger=logger.name):
            manager.discover_categories(CategoryDiscoveryFilter(keywords=["csv"]))

        record = next(r for r in caplog.records if r.getMessage() == "category discovery completed")
        assert "keywords=['csv']" in KeyValueFormatter().format(record)

    def test_unstructured_record(self) -> None:
        text = KeyValueFormatter().format(_record())

        assert text.endswith("tool registered successfully")


@pytest.mark.unit
class TestConfigureLogging:
    def test_no_duplicate_handlers(self) -> None:
        settings = Settings(_env_file=None, logger_name="toolgate.configure_test", log_level="DEBUG")

        logger = configure_logging(settings)
        configure_logging(settings.model_copy(update={"log_json": True}))

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.DEBUG

    def test_get_logger_is_child(self, clean_config) -> None:
        assert get_logger("registry").name == f"{get_config().logger_name}.registry"

    def test_create_tool_registry_without_logger(self, clean_config) -> None:
        assert isinstance(create_tool_registry(), ToolRegistry)
