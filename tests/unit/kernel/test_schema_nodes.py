"""Schema compilation tests: raw fragments to schema nodes."""

import dataclasses

import pytest

from toolgate.kernel.registry.schema_nodes import (
    AnySchema,
    ArraySchema,
    BooleanSchema,
    InvalidSchema,
    NullSchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
    UnsupportedTypeSchema,
    compile_schema,
    type_name,
)


@pytest.mark.unit
@pytest.mark.deterministic
class TestCompileSchema:
    def test_object_with_nested_properties(self) -> None:
        node = compile_schema(
            {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "minLength": 1, "maxLength": 80, "pattern": "^[A-Z]"},
                    "hours": {"type": "number", "minimum": 0, "maximum": 24},
                    "paid": {"type": "boolean"},
                },
                "required": ["name", 7, "hours"],
                "additionalProperties": False,
            }
        )

        assert isinstance(node, ObjectSchema)
        assert list(node.properties) == ["name", "hours", "paid"]
        assert node.required == ("name", "hours")
        assert node.additional_properties is False
        assert node.properties["name"] == StringSchema(min_length=1, max_length=80, pattern="^[A-Z]")
        assert node.properties["hours"] == NumberSchema(minimum=0, maximum=24)
        assert node.properties["paid"] == BooleanSchema()

    def test_additional_properties_only_false_closes_object(self) -> None:
        assert compile_schema({"type": "object"}).additional_properties is True
        assert compile_schema({"type": "object", "additionalProperties": {}}).additional_properties is True

    @pytest.mark.parametrize("raw", [None, {}, {"description": "anything"}])
    def test_untyped_fragments(self, raw) -> None:
        assert compile_schema(raw) == AnySchema()

    def test_untyped_fragment_keeps_format(self) -> None:
        assert compile_schema({"format": "email"}) == AnySchema(format="email")

    def test_untyped_fragment_keeps_value_constraints(self) -> None:
        raw = {"minLength": 2, "maxLength": 5, "pattern": "^a", "minimum": 0, "maximum": 9}

        assert compile_schema(raw) == AnySchema(min_length=2, max_length=5, pattern="^a", minimum=0, maximum=9)

    def test_format_kept_on_every_type(self) -> None:
        assert compile_schema({"type": "integer", "format": "date"}) == NumberSchema(integer=True, format="date")
        assert compile_schema({"type": "boolean", "format": "uuid"}) == BooleanSchema(format="uuid")
        assert compile_schema({"type": "object", "format": "uri"}).format == "uri"

    def test_integer_and_null(self) -> None:
        assert compile_schema({"type": "integer", "minimum": 1}) == NumberSchema(minimum=1, integer=True)
        assert compile_schema({"type": "null"}) == NullSchema()

    def test_array_items(self) -> None:
        node = compile_schema({"type": "array", "items": {"type": "string", "format": "uuid"}})

        assert node == ArraySchema(items=StringSchema(format="uuid"))
        assert compile_schema({"type": "array"}) == ArraySchema()

    def test_non_numeric_constraints_ignored(self) -> None:
        node = compile_schema({"type": "number", "minimum": "0", "maximum": True})

        assert node == NumberSchema()

    def test_malformed_fragments(self) -> None:
        assert isinstance(compile_schema("string"), InvalidSchema)
        assert compile_schema("string").message == "invalid field schema definition"
        assert compile_schema({"type": 5}).message == "invalid type definition in schema"
        assert compile_schema({"type": "money"}) == UnsupportedTypeSchema(declared="money")

    def test_compiled_nodes_pass_through(self) -> None:
        node = StringSchema(min_length=2)

        assert compile_schema(node) is node

    def test_nodes_are_immutable(self) -> None:
        node = compile_schema({"type": "object", "properties": {"a": {"type": "string"}}})

        with pytest.raises(dataclasses.FrozenInstanceError):
            node.required = ("a",)  # type: ignore[misc]
        with pytest.raises(TypeError):
            node.properties["b"] = StringSchema()  # type: ignore[index]

    def test_compiled_tree_is_detached_from_raw(self) -> None:
        raw = {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a"]}
        node = compile_schema(raw)

        raw["required"].append("b")
        raw["properties"]["a"]["type"] = "number"

        assert node.required == ("a",)
        assert node.properties["a"] == StringSchema()

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ({"type": "string"}, "string"),
            ({"type": "integer"}, "integer"),
            ({"type": "number"}, "number"),
            ({"type": "object"}, "object"),
            ({"type": "money"}, "money"),
            ({}, None),
        ],
    )
    def test_type_name(self, raw, expected) -> None:
        assert type_name(compile_schema(raw)) == expected
