from typing import Any

import pytest

from schema_compiler import (
    ExtensionValue,
    ValidationMode,
    Validator,
    VocabularyCompiler,
)
from schema_compiler.exceptions import ExtensionValidationError, ValidationFailure
from schema_compiler.validation.keywords import is_type, json_equal

from .conftest import compile_schema


@pytest.mark.parametrize(
    "schema,valid,invalid",
    [
        ({"type": "integer"}, [1, 1.0, -3], [1.5, True, "1"]),
        ({"type": ["string", "null"]}, ["a", None], [0, False]),
        ({"enum": [1, "a", None]}, [1.0, "a", None], [True, "b"]),
        ({"const": {"a": [1, 2]}}, [{"a": [1, 2.0]}], [{"a": [2, 1]}, {"a": [1, 2], "b": 0}]),
        ({"multipleOf": 0.1}, [0.3, 2, "x"], [0.35]),
        ({"maximum": 5, "exclusiveMinimum": 0}, [5, 0.5], [5.5, 0, -1]),
        ({"minLength": 2, "maxLength": 3}, ["ab", "abc", 7], ["a", "abcd"]),
        ({"pattern": "^a+$"}, ["aaa", 1], ["ab", ""]),
        ({"minItems": 1, "maxItems": 2, "uniqueItems": True}, [[1], [1, True]], [[], [1, 2, 3], [1, 1.0]]),
        ({"minProperties": 1, "maxProperties": 1}, [{"a": 1}], [{}, {"a": 1, "b": 2}]),
        ({"required": ["a"], "dependentRequired": {"a": ["b"]}}, [{"a": 1, "b": 2}, []], [{}, {"a": 1}]),
        (
            {"properties": {"a": {"type": "string"}}, "patternProperties": {"^x-": {}}, "additionalProperties": False},
            [{"a": "s", "x-y": 1}, {}],
            [{"a": 1}, {"b": 1}],
        ),
        ({"propertyNames": {"maxLength": 3}}, [{"abc": 1}], [{"abcd": 1}]),
        (
            {"prefixItems": [{"type": "integer"}], "items": {"type": "string"}},
            [[1], [1, "a", "b"], []],
            [["a"], [1, 2]],
        ),
        ({"contains": {"type": "integer"}, "minContains": 2, "maxContains": 3}, [[1, 2, "a"]], [[1, "a"], [1, 2, 3, 4]]),
        ({"allOf": [{"type": "integer"}, {"minimum": 0}]}, [3], [-1, "a"]),
        ({"anyOf": [{"type": "integer"}, {"type": "string"}]}, [1, "a"], [None]),
        ({"oneOf": [{"type": "integer"}, {"minimum": 0}]}, [-1, 0.5], [1, -0.5]),
        ({"not": {"type": "string"}}, [1], ["a"]),
        (
            {"if": {"type": "integer"}, "then": {"minimum": 0}, "else": {"type": "string"}},
            [3, "s"],
            [-1, None],
        ),
        ({"dependentSchemas": {"a": {"required": ["b"]}}}, [{"a": 1, "b": 1}, {"c": 1}], [{"a": 1}]),
    ],
)
def test_keywords(compiler, schema, valid, invalid):
    compiled = compile_schema(compiler, schema)
    for value in valid:
        assert compiled.validate(value).valid, value
    for value in invalid:
        assert not compiled.validate(value).valid, value


def test_json_value_semantics():
    assert json_equal(1, 1.0)
    assert not json_equal(1, True)
    assert not json_equal(0, False)
    assert json_equal({"a": [1]}, {"a": [1.0]})
    assert is_type(2.0, "integer")
    assert not is_type(True, "number")


def test_nullable_in_openapi_30(compiler):
    compiler.add_resource(
        "spec.json",
        {"openapi": "3.0.3", "components": {"schemas": {"Name": {"type": "string", "nullable": True}}}},
    )
    schema = compiler.compile("spec.json#/components/schemas/Name")
    assert schema.dialect == "openapi-3.0"
    assert schema.validate(None).valid
    assert schema.validate("a").valid
    assert not schema.validate(1).valid


def test_error_tree_is_located(compiler):
    schema = compile_schema(
        compiler,
        {"properties": {"items": {"type": "array", "items": {"properties": {"id": {"type": "integer"}}}}}},
    )
    result = schema.validate({"items": [{"id": 1}, {"id": "2"}]})
    assert not result.valid
    [error] = result.errors
    assert error.keyword == "properties"
    assert error.instance_pointer == "/items"
    [leaf] = result.leaves()
    assert leaf.instance_pointer == "/items/1/id"
    assert leaf.keyword == "type"
    assert str(leaf.location) == "schema.json#/properties/items/items/properties/id"


def test_collect_all_and_fail_fast(compiler):
    schema = compile_schema(compiler, {"properties": {"a": {"type": "string"}, "b": {"type": "string"}}})
    value = {"a": 1, "b": 2}

    collected = Validator(ValidationMode.COLLECT_ALL).validate(schema, value)
    assert sorted(collected.by_instance_pointer()) == ["/a", "/b"]

    first = Validator(ValidationMode.FAIL_FAST).validate(schema, value)
    assert first.mode is ValidationMode.FAIL_FAST
    assert [leaf.instance_pointer for leaf in first.leaves()] == ["/a"]
    assert schema.validate(value, ValidationMode.FAIL_FAST).leaves() == first.leaves()


def test_raise_for_errors(compiler):
    schema = compile_schema(compiler, {"type": "string"})
    schema.validate("ok").raise_for_errors()
    with pytest.raises(ValidationFailure) as excinfo:
        schema.validate(1).raise_for_errors()
    assert excinfo.value.result.leaves()[0].keyword == "type"
    assert "is not of type string" in str(excinfo.value)


class Recorder(ExtensionValue):
    def __init__(self, visits, forbidden):
        self.visits = visits
        self.forbidden = forbidden

    def validate(self, context, value: Any) -> None:
        self.visits.append((context.instance_pointer, str(context.location)))
        if value == self.forbidden:
            raise ExtensionValidationError(f"{value!r} is reserved")


class RecorderCompiler(VocabularyCompiler):
    def __init__(self, forbidden):
        self.visits = []
        self.forbidden = forbidden

    def compile(self, context, raw):
        return Recorder(self.visits, self.forbidden)


class LinkedCompiler(VocabularyCompiler):
    """Checks instances against the schema named by ``x-link`` as well."""

    def compile(self, context, raw):
        if "x-link" not in raw:
            return None
        return Linked(context.compile(raw["x-link"]))


class Linked(ExtensionValue):
    def __init__(self, target):
        self.target = target

    def validate(self, context, value: Any) -> None:
        result = context.evaluate(self.target, value)
        if not result.valid:
            raise ExtensionValidationError(f"does not match linked schema: {result.leaves()[0].message}")


@pytest.fixture
def object_meta(compiler):
    return compile_schema(compiler, {"type": ["object", "boolean"]}, identifier="https://example.com/meta")


def test_extension_failures_are_reported(compiler, object_meta):
    vocabulary = RecorderCompiler(forbidden="admin")
    compiler.register_extension("reserved", object_meta, vocabulary, [("/properties/*", "")])
    schema = compile_schema(compiler, {"properties": {"user": {"type": "string"}}})

    result = schema.validate({"user": "admin"})
    [leaf] = result.leaves()
    assert leaf.keyword == "extension:reserved"
    assert leaf.instance_pointer == "/user"
    assert leaf.message == "'admin' is reserved"
    assert schema.validate({"user": "guest"}).valid


def test_modes_visit_the_same_locations(compiler, object_meta):
    vocabulary = RecorderCompiler(forbidden=None)
    compiler.register_extension("recorder", object_meta, vocabulary, [("/properties/*", "")])
    schema = compile_schema(
        compiler, {"properties": {"a": {"type": "string"}, "b": {"type": "string"}, "c": {}}},
    )
    value = {"a": 1, "b": 2, "c": 3}

    schema.validate(value, ValidationMode.COLLECT_ALL)
    collected = list(vocabulary.visits)
    vocabulary.visits.clear()
    schema.validate(value, ValidationMode.FAIL_FAST)
    assert vocabulary.visits == collected
    assert len(collected) == 3


def test_extension_compiles_related_schemas(compiler, object_meta):
    compiler.register_extension("linked", object_meta, LinkedCompiler(), [("", "")])
    schema = compile_schema(
        compiler, {"x-link": "#/$defs/positive", "type": "number", "$defs": {"positive": {"minimum": 0}}},
    )
    assert schema.extension_vocabularies == ("linked",)
    assert schema.extensions[0].target is compiler.compile("schema.json#/$defs/positive")
    assert schema.validate(3).valid
    [leaf] = schema.validate(-1).leaves()
    assert leaf.keyword == "extension:linked"
