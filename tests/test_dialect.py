import pytest

from schema_compiler.utils.dialect import SemanticVersion, detect_dialect, keyword_family, parse_version


@pytest.mark.parametrize(
    "document,expected",
    [
        ({"$schema": "https://json-schema.org/draft/2020-12/schema"}, "2020-12"),
        ({"$schema": "https://json-schema.org/draft/2019-09/schema"}, "2019-09"),
        ({"$schema": "http://json-schema.org/draft-07/schema#"}, "draft-07"),
        ({"$schema": "https://json-schema.org/draft-07/schema"}, "draft-07"),
        ({"$schema": "http://json-schema.org/draft-04/schema#"}, "draft-04"),
        ({"openapi": "3.1.0"}, "openapi-3.1"),
        ({"openapi": "3.0.3"}, "openapi-3.0"),
        ({"type": "object"}, "2020-12"),
        (True, "2020-12"),
    ],
)
def test_detect_dialect(document, expected):
    assert detect_dialect(document) == expected


def test_unknown_or_unparseable_declarations_use_default():
    assert detect_dialect({"$schema": "https://example.com/custom"}, default="draft-07") == "draft-07"
    assert detect_dialect({"openapi": "three"}, default="draft-07") == "draft-07"
    assert detect_dialect({"openapi": "2.0.0"}) == "2020-12"


def test_parse_version():
    assert parse_version("3.1.0") == SemanticVersion(3, 1, 0)
    assert parse_version("v3.0.2") == SemanticVersion(3, 0, 2)
    assert str(parse_version("3.1.0-rc1")) == "3.1.0"
    assert parse_version("3.1") is None
    assert parse_version(3.1) is None


def test_keyword_family():
    assert keyword_family("openapi-3.1") == "2020-12"
    assert keyword_family("openapi-3.0") == "draft-07"
    assert keyword_family("draft-04") == "draft-07"
    assert keyword_family("unknown") == "2020-12"
