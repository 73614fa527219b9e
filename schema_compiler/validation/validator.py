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


"""Instance validation against compiled schema graphs.

The validator only reads frozen :class:`CompiledSchema` nodes, so one compiled
graph can be validated from any number of threads without locking.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from ..exceptions import ExtensionValidationError
from ..models.compiled_schema import CompiledSchema
from ..models.location import Location
from .keywords import KEYWORD_CHECKS
from .result import ValidationIssue, ValidationMode, ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationContext:
    """What an extension knows about the value it validates."""
    instance_pointer: str
    location: Location
    vocabulary: str
    validator: "Validator"

    def evaluate(self, schema: CompiledSchema, value: Any) -> ValidationResult:
        """Validate ``value`` against another compiled schema at the same instance position."""
        issues = self.validator.evaluate(schema, value, self.instance_pointer)
        return ValidationResult(tuple(issues), ValidationMode.COLLECT_ALL)


class Validator:
    """Walks a compiled schema against an instance value."""

    def __init__(self, mode: Optional[ValidationMode] = None):
        self.mode = mode or ValidationMode.COLLECT_ALL

    def validate(self, schema: CompiledSchema, value: Any) -> ValidationResult:
        """Validate ``value`` and build the located error tree.

        Both modes evaluate the same keywords; fail-fast only trims the
        report to the first failure chain.
        """
        issues = self.evaluate(schema, value, "")
        if self.mode is ValidationMode.FAIL_FAST and issues:
            issues = [issues[0].first_chain()]
        return ValidationResult(tuple(issues), self.mode)

    def evaluate(self, schema: CompiledSchema, value: Any, pointer: str) -> List[ValidationIssue]:
        if schema.boolean is not None:
            if schema.boolean:
                return []
            return [ValidationIssue(pointer, "false", schema.location, "no value is allowed by a false schema")]

        issues: List[ValidationIssue] = []
        for keyword, constraint in schema.keyword_constraints.items():
            check = KEYWORD_CHECKS.get(keyword)
            if check is not None:
                issues.extend(check(self, schema, constraint, value, pointer))

        for vocabulary, extension in zip(schema.extension_vocabularies, schema.extensions):
            context = ValidationContext(pointer, schema.location, vocabulary, self)
            try:
                extension.validate(context, value)
            except ExtensionValidationError as exc:
                logger.debug(f"Extension '{vocabulary}' rejected {pointer or '/'} at {schema.location}: {exc}")
                issues.append(ValidationIssue(pointer, f"extension:{vocabulary}", schema.location, str(exc)))
        return issues
