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


from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import jsonschema

from ..utils import json_pointer
from ..utils.dialect import keyword_family
from .keyword_schema_loader import load_keyword_schema


@dataclass(frozen=True)
class KeywordIssue:
    message: str
    keyword_path: str = ""


_VALIDATORS: Dict[str, Any] = {}


def _validator_for(dialect: str):
    family = keyword_family(dialect)
    schema = load_keyword_schema(dialect)
    validator = _VALIDATORS.get(family)
    # rebuilt whenever the loader cache was cleared
    if validator is None or validator.schema is not schema:
        validator = jsonschema.Draft202012Validator(schema, format_checker=jsonschema.FormatChecker())
        _VALIDATORS[family] = validator
    return validator


def check_keywords(raw: Any, dialect: str) -> List[KeywordIssue]:
    """Check the keywords of a single schema object against its dialect's keyword schema.

    Only the object itself is checked: subschema values must merely be objects or
    booleans, and are checked when (and if) their own location is compiled.

    Args:
        raw: Raw schema value at one location
        dialect: Dialect of the document holding it

    Returns:
        List of KeywordIssue objects, empty when the shape is valid
    """
    if isinstance(raw, bool):
        return []
    if not isinstance(raw, dict):
        return [KeywordIssue(message=f"Schema must be an object or boolean, got {type(raw).__name__}")]

    issues: List[KeywordIssue] = []
    errors = sorted(
        _validator_for(dialect).iter_errors(raw),
        key=lambda e: [str(p) for p in e.absolute_path],
    )
    for error in errors:
        path = json_pointer.from_tokens(error.absolute_path)
        issues.append(KeywordIssue(message=error.message, keyword_path=path))
    return issues
