"""Format Checker tests: built-in formats, lenient unknown formats, extension."""

import logging

import pytest

from toolgate.kernel.registry import SchemaValidationError, SchemaValidator, build_format_checker
from toolgate.kernel.registry.formats import format_example


def _rejects(validator: SchemaValidator, value, fmt: str) -> SchemaValidationError:
    with pytest.raises(SchemaValidationError) as exc_info:
        validator.validate_format("field", value, fmt)
    return exc_info.value


@pytest.mark.unit
@pytest.mark.P0
@pytest.mark.deterministic
class TestBuiltinFormats:
    @pytest.mark.parametrize("value", ["2024-02-29", "2023-12-25", "2000-01-01"])
    def test_valid_dates(self, validator: SchemaValidator, value: str) -> None:
        validator.validate_format("due_date", value, "date")

    @pytest.mark.parametrize(
        "value",
        ["2023-02-29", "2023-13-01", "2023-04-31", "2023-1-5", "2023-12-25T10:00:00Z", "12/25/2023", ""],
    )
    def test_invalid_dates(self, validator: SchemaValidator, value: str) -> None:
        error = _rejects(validator, value, "date")

        assert error.message.startswith("invalid date format")
        assert error.suggestions == ["example: 2025-08-03"]

    @pytest.mark.parametrize(
        "value",
        [
            "2025-08-03T10:30:00Z",
            "2025-08-03T10:30:00+02:00",
            "2025-08-03T10:30:00-05:30",
            "2025-08-03T10:30:00.123456789Z",
            "2025-08-03T10:30:00.1+01:00",
        ],
    )
    def test_valid_date_times(self, validator: SchemaValidator, value: str) -> None:
        validator.validate_format("created_at", value, "date-time")

    @pytest.mark.parametrize(
        "value",
        [
            "2025-08-03T10:30:00",
            "2025-08-03 10:30:00Z",
            "2025-08-03",
            "2025-02-30T10:30:00Z",
            "2025-08-03T25:30:00Z",
            "2025-08-03T10:30:00+24:00",
        ],
    )
    def test_invalid_date_times(self, validator: SchemaValidator, value: str) -> None:
        error = _rejects(validator, value, "date-time")

        assert error.message.startswith("invalid date-time format")

    @pytest.mark.parametrize(
        "value",
        [
            "user@example.com",
            "user+billing@example.com",
            "jane.doe@mail.example.co.uk",
            "Jane Doe <jane@example.com>",
            "user@localhost",
            "a.b@example.test",
            "ops@mailhost",
        ],
    )
    def test_valid_emails(self, validator: SchemaValidator, value: str) -> None:
        validator.validate_format("email", value, "email")

    @pytest.mark.parametrize(
        "value", ["not-an-email", "user@", "@example.com", "a b@example.com", "user@-bad-.com"]
    )
    def test_invalid_emails(self, validator: SchemaValidator, value: str) -> None:
        error = _rejects(validator, value, "email")

        assert error.message.startswith("invalid email format")

    @pytest.mark.parametrize(
        "value",
        ["123e4567-e89b-12d3-a456-426614174000", "123E4567-E89B-12D3-A456-426614174000"],
    )
    def test_valid_uuids(self, validator: SchemaValidator, value: str) -> None:
        validator.validate_format("id", value, "uuid")

    @pytest.mark.parametrize(
        "value",
        [
            "123e4567e89b12d3a456426614174000",
            "123e4567-e89b-12d3-a456-42661417400",
            "g23e4567-e89b-12d3-a456-426614174000",
            "{123e4567-e89b-12d3-a456-426614174000}",
        ],
    )
    def test_invalid_uuids(self, validator: SchemaValidator, value: str) -> None:
        error = _rejects(validator, value, "uuid")

        assert error.message.startswith("invalid uuid format")

    @pytest.mark.parametrize(
        "value",
        [
            "https://example.com/path?q=1",
            "https://example.com/path#section",
            "http://localhost:8080",
            "mailto:billing@example.com",
            "file:///tmp/invoice.html",
        ],
    )
    def test_valid_uris(self, validator: SchemaValidator, value: str) -> None:
        validator.validate_format("link", value, "uri")

    @pytest.mark.parametrize(
        "value",
        [
            "/relative/path",
            "relative/path",
            "example.com/path",
            "https://exa mple.com",
            "",
            "example.com:8080",
            "localhost:3000",
            "localhost:3000/api",
        ],
    )
    def test_invalid_uris(self, validator: SchemaValidator, value: str) -> None:
        error = _rejects(validator, value, "uri")

        assert error.message.startswith("invalid uri format")


@pytest.mark.unit
@pytest.mark.P0
class TestFormatPolicy:
    @pytest.mark.parametrize("fmt", ["date", "date-time", "email", "uuid", "uri"])
    def test_non_string_value_rejected(self, validator: SchemaValidator, fmt: str) -> None:
        error = _rejects(validator, 20240229, fmt)

        assert error.field == "field"
        assert error.message == f"invalid {fmt} format: expected string value"

    def test_unknown_format_accepted(self, validator: SchemaValidator, caplog) -> None:
        caplog.set_level(logging.WARNING, logger="toolgate.tests")

        validator.validate_format("color", 42, "hex-color")
        validator.validate_format("color", "not a color", "hex-color")

        assert any(r.getMessage() == "unknown format validator" for r in caplog.records)

    def test_extra_formats_extend_builtins(self, logger: logging.Logger) -> None:
        checker = build_format_checker({"currency": lambda value: value in {"USD", "EUR"}})
        validator = SchemaValidator(logger, format_checker=checker)

        validator.validate_format("currency", "USD", "currency")
        validator.validate_format("due", "2024-02-29", "date")
        with pytest.raises(SchemaValidationError) as exc_info:
            validator.validate_format("currency", "XYZ", "currency")

        assert exc_info.value.message.startswith("invalid currency format")
        assert exc_info.value.suggestions == ["check format requirements"]

    def test_built_checkers_are_independent(self) -> None:
        extended = build_format_checker({"currency": lambda value: True})
        plain = build_format_checker()

        assert "currency" in extended.checkers
        assert "currency" not in plain.checkers
        assert set(plain.checkers) == {"date", "date-time", "email", "uuid", "uri"}

    @pytest.mark.parametrize(
        ("fmt", "expected"),
        [
            ("date", "example: 2025-08-03"),
            ("email", "example: user@example.com"),
            ("uri", "example: https://example.com/path"),
            ("currency", "check format requirements"),
        ],
    )
    def test_format_example(self, fmt: str, expected: str) -> None:
        assert format_example(fmt) == expected
