# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""Keyword tables shared by the compiler and the validator."""

from typing import Any, Dict, Iterator, List, Tuple

from ..utils import json_pointer

# Keywords whose values are kept as plain constraint values
ASSERTION_KEYWORDS = frozenset({
    "type", "enum", "const", "nullable",
    "multipleOf", "maximum", "exclusiveMaximum", "minimum", "exclusiveMinimum",
    "maxLength", "minLength", "pattern",
    "maxItems", "minItems", "uniqueItems", "maxContains", "minContains",
    "maxProperties", "minProperties", "required", "dependentRequired",
})

# Keywords holding one subschema
SINGLE_SUBSCHEMA_KEYWORDS = (
    "not", "if", "then", "else", "contains", "propertyNames",
    "additionalProperties", "additionalItems",
)

# Keywords holding an array of subschemas
LIST_SUBSCHEMA_KEYWORDS = ("allOf", "anyOf", "oneOf", "prefixItems")

# Keywords holding a name -> subschema map
MAP_SUBSCHEMA_KEYWORDS = ("properties", "patternProperties", "dependentSchemas")

REFERENCE_KEYWORDS = ("$ref", "$dynamicRef")

# Applicators evaluated against the same instance (no descent into children)
IN_PLACE_KEYWORDS = frozenset({
    "allOf", "anyOf", "oneOf", "not", "if", "then", "else",
    "dependentSchemas", "dependencies", "$ref", "$dynamicRef",
})


def keyword_path(*tokens) -> str:
    """Relative pointer of a child, without the leading '/': ``properties/name``."""
    return json_pointer.from_tokens(tokens)[1:]


def subschema_children(raw: Dict[str, Any]) -> Iterator[Tuple[str, Any, List[str]]]:
    """Yield ``(keyword, structure, child_tokens)`` for every applicator in a raw schema object.

    ``structure`` is what the validator needs to find the children again: a
    keyword path, a tuple of keyword paths, or a name -> keyword path map.
    ``child_tokens`` lists the relative token paths to compile.
    """
    for keyword in SINGLE_SUBSCHEMA_KEYWORDS:
        if keyword in raw:
            yield keyword, keyword_path(keyword), [[keyword]]

    if "items" in raw:
        items = raw["items"]
        if isinstance(items, list):
            tokens = [["items", idx] for idx in range(len(items))]
            yield "items", tuple(keyword_path(*t) for t in tokens), tokens
        else:
            yield "items", (keyword_path("items"),), [["items"]]

    for keyword in LIST_SUBSCHEMA_KEYWORDS:
        if keyword in raw:
            tokens = [[keyword, idx] for idx in range(len(raw[keyword]))]
            yield keyword, tuple(keyword_path(*t) for t in tokens), tokens

    for keyword in MAP_SUBSCHEMA_KEYWORDS:
        if keyword in raw:
            tokens = [[keyword, name] for name in raw[keyword]]
            yield keyword, {t[1]: keyword_path(*t) for t in tokens}, tokens

    # draft-07: name -> required names, or name -> subschema
    if isinstance(raw.get("dependencies"), dict):
        structure: Dict[str, Any] = {}
        tokens = []
        for name, dependency in raw["dependencies"].items():
            if isinstance(dependency, list):
                structure[name] = tuple(dependency)
            else:
                structure[name] = keyword_path("dependencies", name)
                tokens.append(["dependencies", name])
        yield "dependencies", structure, tokens


def is_in_place(path: str) -> bool:
    return path.split("/", 1)[0] in IN_PLACE_KEYWORDS
