from pathlib import Path
from typing import Any

import pytest

from schema_compiler import (
    ApplicabilityRule,
    Compiler,
    CompilerConfig,
    ExtensionValue,
    PointerRule,
    VocabularyCompiler,
    requires_root_key,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"
OPENAPI_DIR = FIXTURES_DIR / "openapi"

OAS31_SCHEMA_ID = "https://spec.openapis.org/oas/3.1/schema/2022-10-07"


class OpenAPISchema(ExtensionValue):
    """Extension value attached to schema objects of an OpenAPI description."""

    def __init__(self, location):
        self.location = location

    def validate(self, context, value: Any) -> None:
        pass


class OpenAPISchemaCompiler(VocabularyCompiler):
    """Applies to every matching location of a document carrying an ``openapi`` key."""

    def __init__(self):
        self.calls = []

    def compile(self, context, raw):
        self.calls.append(context.location)
        if "openapi" in context.document_root:
            return OpenAPISchema(context.location)
        return None


def openapi_applicability() -> ApplicabilityRule:
    return ApplicabilityRule(
        (
            PointerRule("", ""),
            PointerRule("/components/schemas/*", "/$defs/schema"),
        ),
        root_condition=requires_root_key("openapi"),
    )


@pytest.fixture
def compiler():
    return Compiler(config=CompilerConfig())


@pytest.fixture
def openapi_vocabulary():
    return OpenAPISchemaCompiler()


@pytest.fixture
def openapi_compiler(compiler, openapi_vocabulary):
    """Compiler with the OpenAPI 3.1 meta-schema registered and both spec documents loaded."""
    compiler.load_resource(OAS31_SCHEMA_ID, OPENAPI_DIR / "openapi_3.1.schema.json")
    meta_schema = compiler.compile(OAS31_SCHEMA_ID)
    compiler.register_extension("openapi_3.1", meta_schema, openapi_vocabulary, openapi_applicability())

    compiler.load_resource("valid-spec.json", OPENAPI_DIR / "valid-spec.json")
    compiler.load_resource("invalid-spec.json", OPENAPI_DIR / "invalid-spec.json")
    return compiler


def compile_schema(compiler: Compiler, schema: Any, identifier: str = "schema.json"):
    """Add ``schema`` as a resource and compile its root."""
    compiler.add_resource(identifier, schema)
    return compiler.compile(identifier)
