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


"""Keyword checks used by the validator.

Every check has the signature ``check(validator, schema, constraint, value, pointer)``
and returns the list of issues it found; ``constraint`` is the keyword's entry in
``schema.keyword_constraints``.
"""

import re
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Callable, Dict, List, Mapping

from ..utils import json_pointer
from .result import ValidationIssue


# ---- JSON value semantics ---------------------------------------------------


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_type(value: Any, type_name: str) -> bool:
    if type_name == "null":
        return value is None
    if type_name == "boolean":
        return isinstance(value, bool)
    if type_name == "integer":
        return is_number(value) and (isinstance(value, int) or float(value).is_integer())
    if type_name == "number":
        return is_number(value)
    if type_name == "string":
        return isinstance(value, str)
    if type_name == "array":
        return isinstance(value, list)
    if type_name == "object":
        return isinstance(value, dict)
    return False


def json_equal(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return left == right
    # compiled constraints hold tuples and read-only mappings
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)
    return type(left) is type(right) and left == right


@lru_cache(maxsize=256)
def compiled_pattern(pattern: str):
    return re.compile(pattern)


def _issue(schema, keyword: str, pointer: str, message: str, children=()) -> ValidationIssue:
    return ValidationIssue(pointer, keyword, schema.location, message, tuple(children))


# ---- assertions -------------------------------------------------------------


def check_type(validator, schema, constraint, value, pointer):
    types = [constraint] if isinstance(constraint, str) else list(constraint)
    if schema.keyword_constraints.get("nullable") is True:
        types.append("null")
    if any(is_type(value, t) for t in types):
        return []
    return [_issue(schema, "type", pointer, f"{value!r} is not of type {' | '.join(types)}")]


def check_enum(validator, schema, constraint, value, pointer):
    if any(json_equal(value, option) for option in constraint):
        return []
    return [_issue(schema, "enum", pointer, f"{value!r} is not one of {constraint!r}")]


def check_const(validator, schema, constraint, value, pointer):
    if json_equal(value, constraint):
        return []
    return [_issue(schema, "const", pointer, f"{constraint!r} was expected")]


def check_multiple_of(validator, schema, constraint, value, pointer):
    if not is_number(value):
        return []
    if isinstance(value, int) and isinstance(constraint, int):
        remainder_zero = value % constraint == 0
    else:
        try:
            remainder_zero = Decimal(str(value)) % Decimal(str(constraint)) == 0
        except InvalidOperation:
            remainder_zero = False
    if remainder_zero:
        return []
    return [_issue(schema, "multipleOf", pointer, f"{value!r} is not a multiple of {constraint!r}")]


def _bound(keyword: str, compare: Callable[[Any, Any], bool], relation: str):
    def check(validator, schema, constraint, value, pointer):
        if not is_number(value) or isinstance(constraint, bool):
            return []
        if compare(value, constraint):
            return []
        return [_issue(schema, keyword, pointer, f"{value!r} is {relation} {constraint!r}")]
    return check


def _draft4_exclusive(keyword: str, bound_keyword: str, compare, relation: str):
    """Number form (2019+) or boolean modifier of ``maximum``/``minimum`` (draft-04)."""
    numeric = _bound(keyword, compare, relation)

    def check(validator, schema, constraint, value, pointer):
        if isinstance(constraint, bool):
            bound = schema.keyword_constraints.get(bound_keyword)
            if not constraint or bound is None or not is_number(value) or compare(value, bound):
                return []
            return [_issue(schema, keyword, pointer, f"{value!r} is {relation} {bound!r}")]
        return numeric(validator, schema, constraint, value, pointer)
    return check


def _length(keyword: str, applies: Callable[[Any], bool], compare, relation: str, noun: str):
    def check(validator, schema, constraint, value, pointer):
        if not applies(value) or compare(len(value), constraint):
            return []
        return [_issue(schema, keyword, pointer, f"{noun} count {len(value)} is {relation} {constraint}")]
    return check


def check_pattern(validator, schema, constraint, value, pointer):
    if not isinstance(value, str) or compiled_pattern(constraint).search(value):
        return []
    return [_issue(schema, "pattern", pointer, f"{value!r} does not match {constraint!r}")]


def check_unique_items(validator, schema, constraint, value, pointer):
    if not constraint or not isinstance(value, list):
        return []
    for i, left in enumerate(value):
        for j in range(i + 1, len(value)):
            if json_equal(left, value[j]):
                return [_issue(schema, "uniqueItems", pointer, f"items {i} and {j} are equal")]
    return []


def check_required(validator, schema, constraint, value, pointer):
    if not isinstance(value, dict):
        return []
    return [
        _issue(schema, "required", pointer, f"'{name}' is a required property")
        for name in constraint if name not in value
    ]


def check_dependent_required(validator, schema, constraint, value, pointer):
    if not isinstance(value, dict):
        return []
    issues = []
    for name, required in constraint.items():
        if name not in value:
            continue
        for dependency in required:
            if dependency not in value:
                issues.append(_issue(
                    schema, "dependentRequired", pointer,
                    f"'{dependency}' is required when '{name}' is present",
                ))
    return issues


# ---- applicators ------------------------------------------------------------


def _child(schema, path):
    return schema.child_schemas[path]


def check_ref(validator, schema, constraint, value, pointer):
    return validator.evaluate(_child(schema, constraint), value, pointer)


def check_all_of(validator, schema, constraint, value, pointer):
    issues = []
    for path in constraint:
        child_issues = validator.evaluate(_child(schema, path), value, pointer)
        if child_issues:
            issues.append(_issue(schema, path, pointer, f"does not match {path}", child_issues))
    return issues


def check_any_of(validator, schema, constraint, value, pointer):
    branch_issues = [validator.evaluate(_child(schema, path), value, pointer) for path in constraint]
    if any(not issues for issues in branch_issues):
        return []
    children = [_issue(schema, path, pointer, f"does not match {path}", issues)
                for path, issues in zip(constraint, branch_issues)]
    return [_issue(schema, "anyOf", pointer, f"does not match any of {len(constraint)} alternatives", children)]


def check_one_of(validator, schema, constraint, value, pointer):
    branch_issues = [validator.evaluate(_child(schema, path), value, pointer) for path in constraint]
    matched = [path for path, issues in zip(constraint, branch_issues) if not issues]
    if len(matched) == 1:
        return []
    if matched:
        return [_issue(schema, "oneOf", pointer, f"matches more than one alternative: {', '.join(matched)}")]
    children = [_issue(schema, path, pointer, f"does not match {path}", issues)
                for path, issues in zip(constraint, branch_issues)]
    return [_issue(schema, "oneOf", pointer, f"does not match any of {len(constraint)} alternatives", children)]


def check_not(validator, schema, constraint, value, pointer):
    if validator.evaluate(_child(schema, constraint), value, pointer):
        return []
    return [_issue(schema, "not", pointer, f"{value!r} must not match the 'not' schema")]


def check_if(validator, schema, constraint, value, pointer):
    condition_issues = validator.evaluate(_child(schema, constraint), value, pointer)
    branch = "else" if condition_issues else "then"
    branch_path = schema.keyword_constraints.get(branch)
    if branch_path is None:
        return []
    issues = validator.evaluate(_child(schema, branch_path), value, pointer)
    if not issues:
        return []
    return [_issue(schema, branch, pointer, f"does not match the '{branch}' schema", issues)]


def check_dependent_schemas(validator, schema, constraint, value, pointer):
    if not isinstance(value, dict):
        return []
    issues = []
    for name, path in constraint.items():
        if name not in value:
            continue
        child_issues = validator.evaluate(_child(schema, path), value, pointer)
        if child_issues:
            issues.append(_issue(schema, path, pointer, f"'{name}' is present but its dependent schema fails",
                                 child_issues))
    return issues


def check_dependencies(validator, schema, constraint, value, pointer):
    if not isinstance(value, dict):
        return []
    issues = []
    for name, dependency in constraint.items():
        if name not in value:
            continue
        if isinstance(dependency, tuple):
            issues.extend(
                _issue(schema, "dependencies", pointer, f"'{required}' is required when '{name}' is present")
                for required in dependency if required not in value
            )
            continue
        child_issues = validator.evaluate(_child(schema, dependency), value, pointer)
        if child_issues:
            issues.append(_issue(schema, dependency, pointer, f"'{name}' is present but its dependency fails",
                                 child_issues))
    return issues


def _property_issues(validator, schema, keyword, path, value, name, pointer):
    child_pointer = json_pointer.join(pointer, name)
    child_issues = validator.evaluate(_child(schema, path), value[name], child_pointer)
    if not child_issues:
        return []
    return [_issue(schema, keyword, child_pointer, f"property '{name}' is invalid", child_issues)]


def check_properties(validator, schema, constraint, value, pointer):
    if not isinstance(value, dict):
        return []
    issues = []
    for name, path in constraint.items():
        if name in value:
            issues.extend(_property_issues(validator, schema, "properties", path, value, name, pointer))
    return issues


def check_pattern_properties(validator, schema, constraint, value, pointer):
    if not isinstance(value, dict):
        return []
    issues = []
    for pattern, path in constraint.items():
        regex = compiled_pattern(pattern)
        for name in value:
            if regex.search(name):
                issues.extend(_property_issues(validator, schema, "patternProperties", path, value, name, pointer))
    return issues


def check_additional_properties(validator, schema, constraint, value, pointer):
    if not isinstance(value, dict):
        return []
    declared = schema.keyword_constraints.get("properties", {})
    patterns = [compiled_pattern(p) for p in schema.keyword_constraints.get("patternProperties", {})]
    issues = []
    for name in value:
        if name in declared or any(regex.search(name) for regex in patterns):
            continue
        issues.extend(_property_issues(validator, schema, "additionalProperties", constraint, value, name, pointer))
    return issues


def check_property_names(validator, schema, constraint, value, pointer):
    if not isinstance(value, dict):
        return []
    issues = []
    for name in value:
        child_issues = validator.evaluate(_child(schema, constraint), name, pointer)
        if child_issues:
            issues.append(_issue(schema, "propertyNames", pointer, f"property name {name!r} is invalid",
                                 child_issues))
    return issues


def _item_issues(validator, schema, keyword, path, value, index, pointer):
    child_pointer = json_pointer.join(pointer, index)
    child_issues = validator.evaluate(_child(schema, path), value[index], child_pointer)
    if not child_issues:
        return []
    return [_issue(schema, keyword, child_pointer, f"item {index} is invalid", child_issues)]


def check_prefix_items(validator, schema, constraint, value, pointer):
    if not isinstance(value, list):
        return []
    issues = []
    for index, path in enumerate(constraint[:len(value)]):
        issues.extend(_item_issues(validator, schema, "prefixItems", path, value, index, pointer))
    return issues


def check_items(validator, schema, constraint, value, pointer):
    if not isinstance(value, list):
        return []
    issues = []
    if constraint == ("items",):
        start = len(schema.keyword_constraints.get("prefixItems", ()))
        for index in range(start, len(value)):
            issues.extend(_item_issues(validator, schema, "items", "items", value, index, pointer))
        return issues

    # draft-07 array form: positional schemas, then additionalItems
    for index, path in enumerate(constraint[:len(value)]):
        issues.extend(_item_issues(validator, schema, "items", path, value, index, pointer))
    additional = schema.keyword_constraints.get("additionalItems")
    if additional is not None:
        for index in range(len(constraint), len(value)):
            issues.extend(_item_issues(validator, schema, "additionalItems", additional, value, index, pointer))
    return issues


def check_contains(validator, schema, constraint, value, pointer):
    if not isinstance(value, list):
        return []
    minimum = schema.keyword_constraints.get("minContains", 1)
    maximum = schema.keyword_constraints.get("maxContains")
    matches = sum(
        1 for index, item in enumerate(value)
        if not validator.evaluate(_child(schema, constraint), item, json_pointer.join(pointer, index))
    )
    if matches < minimum:
        return [_issue(schema, "contains", pointer,
                       f"contains {matches} matching item(s), at least {minimum} required")]
    if maximum is not None and matches > maximum:
        return [_issue(schema, "maxContains", pointer,
                       f"contains {matches} matching item(s), at most {maximum} allowed")]
    return []


KEYWORD_CHECKS: Dict[str, Callable[..., List[ValidationIssue]]] = {
    "$ref": check_ref,
    "$dynamicRef": check_ref,
    "type": check_type,
    "enum": check_enum,
    "const": check_const,
    "multipleOf": check_multiple_of,
    "maximum": _bound("maximum", lambda v, b: v <= b, "greater than the maximum of"),
    "minimum": _bound("minimum", lambda v, b: v >= b, "less than the minimum of"),
    "exclusiveMaximum": _draft4_exclusive("exclusiveMaximum", "maximum", lambda v, b: v < b,
                                          "greater than or equal to the exclusive maximum of"),
    "exclusiveMinimum": _draft4_exclusive("exclusiveMinimum", "minimum", lambda v, b: v > b,
                                          "less than or equal to the exclusive minimum of"),
    "maxLength": _length("maxLength", lambda v: isinstance(v, str), lambda n, b: n <= b, "above", "character"),
    "minLength": _length("minLength", lambda v: isinstance(v, str), lambda n, b: n >= b, "below", "character"),
    "maxItems": _length("maxItems", lambda v: isinstance(v, list), lambda n, b: n <= b, "above", "item"),
    "minItems": _length("minItems", lambda v: isinstance(v, list), lambda n, b: n >= b, "below", "item"),
    "maxProperties": _length("maxProperties", lambda v: isinstance(v, dict), lambda n, b: n <= b, "above", "property"),
    "minProperties": _length("minProperties", lambda v: isinstance(v, dict), lambda n, b: n >= b, "below", "property"),
    "pattern": check_pattern,
    "uniqueItems": check_unique_items,
    "required": check_required,
    "dependentRequired": check_dependent_required,
    "allOf": check_all_of,
    "anyOf": check_any_of,
    "oneOf": check_one_of,
    "not": check_not,
    "if": check_if,
    "dependentSchemas": check_dependent_schemas,
    "dependencies": check_dependencies,
    "properties": check_properties,
    "patternProperties": check_pattern_properties,
    "additionalProperties": check_additional_properties,
    "propertyNames": check_property_names,
    "prefixItems": check_prefix_items,
    "items": check_items,
    "contains": check_contains,
}
