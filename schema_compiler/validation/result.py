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


"""Located validation results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from ..exceptions import ValidationFailure
from ..models.location import Location


class ValidationMode(Enum):
    FAIL_FAST = "fail-fast"
    COLLECT_ALL = "collect-all"


@dataclass(frozen=True)
class ValidationIssue:
    """One failure in the error tree.

    ``instance_pointer`` locates the offending part of the instance,
    ``location`` and ``keyword`` the schema keyword that rejected it.
    """
    instance_pointer: str
    keyword: str
    location: Optional[Location]
    message: str
    children: Tuple["ValidationIssue", ...] = ()

    def leaves(self) -> Iterator["ValidationIssue"]:
        if not self.children:
            yield self
            return
        for child in self.children:
            yield from child.leaves()

    def first_chain(self) -> "ValidationIssue":
        if not self.children:
            return self
        return ValidationIssue(
            self.instance_pointer, self.keyword, self.location, self.message,
            (self.children[0].first_chain(),),
        )

    def __str__(self) -> str:
        return f"{self.instance_pointer or '/'}: {self.message} (keyword= {self.keyword} schema= {self.location})"


class ValidationResult:
    """Container for the outcome of validating one instance."""

    def __init__(self, errors: Tuple[ValidationIssue, ...] = (), mode: ValidationMode = ValidationMode.COLLECT_ALL):
        self.errors = tuple(errors)
        self.mode = mode

    @property
    def valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.valid

    def leaves(self) -> List[ValidationIssue]:
        """All leaf failures, in evaluation order."""
        return [leaf for error in self.errors for leaf in error.leaves()]

    def by_instance_pointer(self) -> Dict[str, List[ValidationIssue]]:
        grouped: Dict[str, List[ValidationIssue]] = {}
        for leaf in self.leaves():
            grouped.setdefault(leaf.instance_pointer, []).append(leaf)
        return grouped

    def summary(self, limit: int = 5) -> str:
        leaves = self.leaves()
        lines = [f"  - {leaf}" for leaf in leaves[:limit]]
        if len(leaves) > limit:
            lines.append(f"  ... and {len(leaves) - limit} more")
        return "\n".join(lines)

    def raise_for_errors(self) -> None:
        """Raise :class:`ValidationFailure` carrying this result if validation failed."""
        if self.valid:
            return
        leaves = self.leaves()
        raise ValidationFailure(
            f"Validation failed with {len(leaves)} error(s):\n{self.summary()}",
            result=self,
            location=self.errors[0].location,
        )

    def __repr__(self) -> str:
        return f"<ValidationResult valid={self.valid} errors={len(self.leaves())} mode={self.mode.value}>"
