import pytest

from schema_compiler.schema import check_keywords
from schema_compiler.schema import keyword_schema_loader
from schema_compiler.schema.keyword_schema_loader import clear_cache, get_schema_path, load_keyword_schema


def test_keyword_schemas_ship_with_the_package():
    assert get_schema_path("2020-12").is_file()
    assert get_schema_path("draft-07").is_file()


def test_loader_caches_per_family():
    clear_cache()
    first = load_keyword_schema("openapi-3.1")
    assert load_keyword_schema("2020-12") is first
    assert load_keyword_schema("draft-07") is not first


def test_cleared_keyword_schema_is_reloaded_by_checks(monkeypatch):
    check_keywords({"type": "string"}, "2020-12")
    clear_cache()
    monkeypatch.setitem(keyword_schema_loader._loaded, "2020-12", {"type": "object", "maxProperties": 0})
    try:
        assert len(check_keywords({"type": "string"}, "2020-12")) == 1
    finally:
        clear_cache()
    assert check_keywords({"type": "string"}, "2020-12") == []


def test_valid_schema_object():
    raw = {
        "type": ["object", "null"],
        "required": ["name"],
        "properties": {"name": {"type": "string"}},
        "patternProperties": {"^x-": True},
        "x-vendor": {"anything": "goes"},
    }
    assert check_keywords(raw, "2020-12") == []
    assert check_keywords(False, "2020-12") == []


def test_invalid_keyword_shapes_are_located():
    issues = check_keywords({"type": "nope", "required": "name", "minLength": -1}, "2020-12")
    assert [issue.keyword_path for issue in issues] == ["/minLength", "/required", "/type"]


def test_only_the_object_itself_is_checked():
    # the nested subschema is checked when its own location is compiled
    assert check_keywords({"properties": {"a": {"type": "nope"}}}, "2020-12") == []
    assert check_keywords({"properties": {"a": 1}}, "2020-12") != []


def test_invalid_regex():
    issues = check_keywords({"pattern": "("}, "2020-12")
    assert [issue.keyword_path for issue in issues] == ["/pattern"]


def test_non_schema_value():
    issues = check_keywords(["type"], "2020-12")
    assert len(issues) == 1
    assert "object or boolean" in issues[0].message


@pytest.mark.parametrize(
    "raw,draft07_ok,latest_ok",
    [
        ({"items": [{"type": "string"}]}, True, False),
        ({"maximum": 5, "exclusiveMaximum": True}, True, False),
        ({"nullable": True}, True, True),
    ],
)
def test_dialect_specific_shapes(raw, draft07_ok, latest_ok):
    assert (check_keywords(raw, "draft-07") == []) is draft07_ok
    assert (check_keywords(raw, "2020-12") == []) is latest_ok
