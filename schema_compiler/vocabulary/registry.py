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


import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from ..exceptions import DuplicateVocabulary, ExtensionCompileError, SchemaCompilerError
from ..models.compiled_schema import CompiledSchema
from ..models.location import Location
from ..utils import json_pointer
from .base import VocabularyCompiler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointerRule:
    """Maps document locations matching ``pattern`` to a meta-schema fragment.

    ``pattern`` is a JSON pointer whose ``*`` segments match exactly one
    segment, e.g. ``/components/schemas/*``; ``""`` matches the document root.
    """
    pattern: str
    meta_schema_pointer: str

    def __post_init__(self):
        # validates both pointers
        json_pointer.split(self.pattern)
        json_pointer.split(self.meta_schema_pointer)

    def matches(self, pointer: str) -> bool:
        return json_pointer.matches(self.pattern, pointer)


@dataclass(frozen=True)
class ApplicabilityRule:
    """Structural rules plus an optional condition evaluated once against the document root."""
    rules: Tuple[PointerRule, ...]
    root_condition: Optional[Callable[[Any], bool]] = None

    def __post_init__(self):
        rules = tuple(
            rule if isinstance(rule, PointerRule) else PointerRule(*rule) for rule in self.rules
        )
        object.__setattr__(self, "rules", rules)

    def match(self, pointer: str) -> Optional[PointerRule]:
        for rule in self.rules:
            if rule.matches(pointer):
                return rule
        return None


def requires_root_key(key: str) -> Callable[[Any], bool]:
    """Root condition: the document root is an object carrying ``key``."""

    def condition(root: Any) -> bool:
        return isinstance(root, dict) and key in root

    condition.__name__ = f"requires_root_key({key!r})"
    return condition


@dataclass
class Vocabulary:
    name: str
    meta_schema: CompiledSchema
    compiler: VocabularyCompiler
    applicability: ApplicabilityRule
    # meta_schema_pointer -> compiled meta-schema fragment
    fragments: Dict[str, CompiledSchema] = field(default_factory=dict)


class VocabularyRegistry:
    """Registered vocabularies, kept in registration order."""

    def __init__(self):
        self._vocabularies: Dict[str, Vocabulary] = {}
        self._root_checks: Dict[Tuple[str, str], bool] = {}

    def __len__(self) -> int:
        return len(self._vocabularies)

    def __contains__(self, name: str) -> bool:
        return name in self._vocabularies

    def register(
        self,
        name: str,
        meta_schema: CompiledSchema,
        compiler: VocabularyCompiler,
        applicability: ApplicabilityRule,
        fragments: Dict[str, CompiledSchema],
    ) -> Vocabulary:
        if not name or not isinstance(name, str):
            raise SchemaCompilerError(f"Vocabulary name must be a non-empty string, got: {name!r}")
        if name in self._vocabularies:
            raise DuplicateVocabulary(f"Vocabulary '{name}' is already registered", vocabulary=name)
        missing = [rule.meta_schema_pointer for rule in applicability.rules if rule.meta_schema_pointer not in fragments]
        if missing:
            raise SchemaCompilerError(f"Missing compiled meta-schema fragments {missing}", vocabulary=name)

        vocabulary = Vocabulary(name, meta_schema, compiler, applicability, dict(fragments))
        self._vocabularies[name] = vocabulary
        logger.debug(f"Registered vocabulary '{name}' with {len(applicability.rules)} rule(s)")
        return vocabulary

    def get(self, name: str) -> Vocabulary:
        return self._vocabularies[name]

    def applicable(
        self, location: Location, document_root: Any
    ) -> Iterator[Tuple[Vocabulary, PointerRule, CompiledSchema]]:
        """Yield vocabularies whose rules match ``location``, in registration order."""
        for vocabulary in self._vocabularies.values():
            rule = vocabulary.applicability.match(location.pointer)
            if rule is None:
                continue
            if not self._root_condition_holds(vocabulary, location.identifier, document_root):
                continue
            yield vocabulary, rule, vocabulary.fragments[rule.meta_schema_pointer]

    def _root_condition_holds(self, vocabulary: Vocabulary, identifier: str, document_root: Any) -> bool:
        condition = vocabulary.applicability.root_condition
        if condition is None:
            return True
        key = (vocabulary.name, identifier)
        if key not in self._root_checks:
            try:
                self._root_checks[key] = bool(condition(document_root))
            except Exception as exc:
                raise ExtensionCompileError(
                    f"Root condition of vocabulary '{vocabulary.name}' failed: {exc}",
                    location=Location(identifier, ""),
                    vocabulary=vocabulary.name,
                ) from exc
            logger.debug(
                f"Vocabulary '{vocabulary.name}' root condition for {identifier}: {self._root_checks[key]}"
            )
        return self._root_checks[key]
