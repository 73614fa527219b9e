from typing import Any

import pytest

from schema_compiler import (
    ApplicabilityRule,
    Compiler,
    CompilerConfig,
    ExtensionValue,
    Location,
    PointerRule,
    VocabularyCompiler,
    requires_root_key,
)
from schema_compiler.exceptions import (
    DuplicateVocabulary,
    ExtensionCompileError,
    MetaSchemaViolation,
    SchemaCompilerError,
    UnresolvableReference,
)

META_ID = "https://example.com/meta"


class Marker(ExtensionValue):
    def __init__(self, raw):
        self.raw = raw

    def validate(self, context, value: Any) -> None:
        pass


class MarkerCompiler(VocabularyCompiler):
    def __init__(self):
        self.seen = []

    def compile(self, context, raw):
        self.seen.append(context.location)
        return Marker(raw)


class FailingCompiler(VocabularyCompiler):
    def compile(self, context, raw):
        raise ValueError("boom")


class NotAnExtensionCompiler(VocabularyCompiler):
    def compile(self, context, raw):
        return object()


class MutatingCompiler(VocabularyCompiler):
    def compile(self, context, raw):
        raw["type"] = "integer"
        return Marker(raw)


@pytest.fixture
def meta(compiler):
    compiler.add_resource(
        META_ID,
        {"type": "object", "required": ["x-kind"], "$defs": {"schema": {"type": ["object", "boolean"]}}},
    )
    return compiler.compile(META_ID)


def test_pointer_rule():
    rule = PointerRule("/components/schemas/*", "/$defs/schema")
    assert rule.matches("/components/schemas/Foo")
    assert not rule.matches("/components/schemas/Foo/properties/a")
    with pytest.raises(UnresolvableReference):
        PointerRule("components", "")


def test_applicability_rule_accepts_pairs():
    rules = ApplicabilityRule((("", ""), ("/$defs/*", "/$defs/schema")))
    assert all(isinstance(rule, PointerRule) for rule in rules.rules)
    assert rules.match("/$defs/a").meta_schema_pointer == "/$defs/schema"
    assert rules.match("") == PointerRule("", "")
    assert rules.match("/properties/a") is None


def test_requires_root_key():
    condition = requires_root_key("openapi")
    assert condition({"openapi": "3.1.0"})
    assert not condition({"swagger": "2.0"})
    assert not condition(True)


def test_nested_location_is_checked_against_its_fragment(compiler, meta):
    vocabulary = MarkerCompiler()
    compiler.register_extension("marker", meta, vocabulary, [("", ""), ("/$defs/*", "/$defs/schema")])

    compiler.add_resource("doc.json", {"x-kind": "root", "$defs": {"item": {"type": "string"}}})
    root = compiler.compile("doc.json")
    item = compiler.compile("doc.json#/$defs/item")
    assert len(root.extensions) == 1
    assert root.extension_vocabularies == ("marker",)
    # the item lacks "x-kind", which only the meta-schema root requires
    assert len(item.extensions) == 1
    assert vocabulary.seen == [Location("doc.json", ""), Location("doc.json", "/$defs/item")]


def test_location_checked_against_the_meta_schema_root_fails(compiler, meta):
    compiler.register_extension("marker", meta, MarkerCompiler(), [("/$defs/*", "")])
    compiler.add_resource("doc.json", {"$defs": {"item": {"type": "string"}}})
    with pytest.raises(MetaSchemaViolation) as excinfo:
        compiler.compile("doc.json#/$defs/item")
    assert excinfo.value.vocabulary == "marker"
    assert excinfo.value.location == Location("doc.json", "/$defs/item")
    assert excinfo.value.meta_schema_pointer == ""
    assert not excinfo.value.result.valid


def test_extensions_are_not_inherited_from_the_root(compiler, meta):
    compiler.register_extension("marker", meta, MarkerCompiler(), [("", "")])
    compiler.add_resource("doc.json", {"x-kind": "root", "properties": {"a": {"type": "string"}}})
    root = compiler.compile("doc.json")
    assert len(root.extensions) == 1
    assert root.child("properties/a").extensions == ()


def test_root_condition_gates_the_vocabulary(compiler, meta):
    vocabulary = MarkerCompiler()
    compiler.register_extension(
        "marker", meta, vocabulary, [("", "")], root_condition=requires_root_key("x-kind"),
    )
    compiler.add_resource("plain.json", {"type": "object"})
    assert compiler.compile("plain.json").extensions == ()
    assert vocabulary.seen == []


def test_registration_does_not_touch_compiled_schemas(compiler, meta):
    compiler.add_resource("doc.json", {"x-kind": "root", "$defs": {"a": {"x-kind": "a"}}})
    before = compiler.compile("doc.json")
    compiler.register_extension("marker", meta, MarkerCompiler(), [("", ""), ("/$defs/*", "")])

    assert compiler.compile("doc.json") is before
    assert before.extensions == ()
    assert len(compiler.compile("doc.json#/$defs/a").extensions) == 1


def test_registration_clears_cached_failures(compiler, meta):
    compiler.add_resource("doc.json", {"properties": {"a": {"$ref": "#/$defs/missing"}}})
    with pytest.raises(SchemaCompilerError):
        compiler.compile("doc.json")
    assert compiler.cache_info().failures == 2
    compiler.register_extension("marker", meta, MarkerCompiler(), [("", "")])
    assert compiler.cache_info().failures == 0


def test_duplicate_vocabulary(compiler, meta):
    compiler.register_extension("marker", meta, MarkerCompiler(), [("", "")])
    with pytest.raises(DuplicateVocabulary):
        compiler.register_extension("marker", meta, MarkerCompiler(), [("", "")])


def test_meta_schema_must_come_from_the_same_compiler(meta):
    other = Compiler(config=CompilerConfig())
    with pytest.raises(SchemaCompilerError):
        other.register_extension("marker", meta, MarkerCompiler(), [("", "")])


def test_unknown_meta_schema_pointer(compiler, meta):
    with pytest.raises(UnresolvableReference):
        compiler.register_extension("marker", meta, MarkerCompiler(), [("", "/$defs/missing")])
    assert "marker" not in compiler.vocabularies


def test_vocabulary_compiler_errors_are_wrapped(compiler, meta):
    compiler.register_extension("failing", meta, FailingCompiler(), [("", "")])
    compiler.add_resource("doc.json", {"x-kind": "root"})
    with pytest.raises(ExtensionCompileError) as excinfo:
        compiler.compile("doc.json")
    assert excinfo.value.vocabulary == "failing"
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_extension_must_have_validate(compiler, meta):
    compiler.register_extension("odd", meta, NotAnExtensionCompiler(), [("", "")])
    compiler.add_resource("doc.json", {"x-kind": "root"})
    with pytest.raises(ExtensionCompileError):
        compiler.compile("doc.json")


def test_root_condition_errors_are_wrapped(compiler, meta):
    def broken(root):
        raise KeyError("x-kind")

    compiler.register_extension("marker", meta, MarkerCompiler(), [("", "")], root_condition=broken)
    compiler.add_resource("doc.json", {"x-kind": "root"})
    with pytest.raises(ExtensionCompileError):
        compiler.compile("doc.json")


def test_vocabulary_compiler_gets_a_copy(compiler, meta):
    compiler.register_extension("mutating", meta, MutatingCompiler(), [("", "")])
    compiler.add_resource("doc.json", {"x-kind": "root", "type": "object"})
    schema = compiler.compile("doc.json")
    assert schema.keyword_constraints["type"] == "object"
    assert compiler.store.get("doc.json").root_value["type"] == "object"
