import pytest

from schema_compiler.exceptions import MalformedDocument
from schema_compiler.file_io import document_loader


def test_load_json(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text('{"type": "string"}', encoding="utf-8")
    assert document_loader.load(path) == {"type": "string"}


def test_load_yaml(tmp_path):
    path = tmp_path / "spec.yaml"
    path.write_text("openapi: 3.1.0\ninfo:\n  title: Pets\n  version: '1'\n", encoding="utf-8")
    assert document_loader.load(path) == {"openapi": "3.1.0", "info": {"title": "Pets", "version": "1"}}


def test_missing_file(tmp_path):
    with pytest.raises(MalformedDocument, match="not found"):
        document_loader.load(tmp_path / "missing.json")


def test_directory_is_not_a_document(tmp_path):
    with pytest.raises(MalformedDocument, match="not a file"):
        document_loader.load(tmp_path)


def test_invalid_json():
    with pytest.raises(MalformedDocument, match="Failed to parse JSON"):
        document_loader.loads('{"type": ', source="broken.json")


def test_invalid_yaml():
    with pytest.raises(MalformedDocument, match="Failed to parse YAML"):
        document_loader.loads("a: [1, 2", yaml_format=True)
