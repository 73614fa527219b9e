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


"""Compiler: resolves references and builds the cached compiled-schema graph."""

import copy
import logging
import threading
from collections import namedtuple
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from ..config import CompilerConfig, compiler_config
from ..exceptions import (
    CyclicSchemaWithoutBase,
    DanglingRef,
    DuplicateVocabulary,
    ExtensionCompileError,
    InvalidKeyword,
    MetaSchemaViolation,
    ResourceLimitExceeded,
    SchemaCompilerError,
)
from ..models.compiled_schema import CompiledSchema
from ..models.location import Location
from ..models.resource import Resource
from ..resolvers.reference_resolver import Resolver
from ..schema.keyword_check import check_keywords
from ..store.resource_store import ResourceStore
from ..utils.dialect import keyword_family
from ..validation.result import ValidationMode
from ..validation.validator import Validator
from ..vocabulary.base import CompilerContext, VocabularyCompiler
from ..vocabulary.registry import ApplicabilityRule, PointerRule, VocabularyRegistry
from .keywords import ASSERTION_KEYWORDS, REFERENCE_KEYWORDS, is_in_place, subschema_children

logger = logging.getLogger(__name__)


class LocationState(Enum):
    UNVISITED = "unvisited"
    COMPILING = "compiling"
    COMPILED = "compiled"
    FAILED = "failed"


CacheInfo = namedtuple("CacheInfo", ["hits", "misses", "failures", "currsize"])


def _freeze_structure(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze_structure(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze_structure(item) for item in value)
    return value


class Compiler:
    """Compiles references into shared, cycle-safe :class:`CompiledSchema` graphs.

    A compiler owns its resource store, compile cache and vocabulary registry.
    Build-time calls (``add_resource``, ``compile``, ``register_extension``) are
    serialized by one reentrant lock; validation of returned schemas needs none.
    """

    def __init__(self, config: Optional[CompilerConfig] = None, store: Optional[ResourceStore] = None):
        self.config = config or compiler_config
        self.store = store or ResourceStore(default_dialect=self.config.default_dialect)
        self.resolver = Resolver(self.store, max_ref_hops=self.config.max_ref_hops)
        self.vocabularies = VocabularyRegistry()

        self._cache: Dict[Location, CompiledSchema] = {}
        self._failures: Dict[Location, SchemaCompilerError] = {}
        self._lock = threading.RLock()

        # per compile call
        self._pending: List[Location] = []
        self._scope: List[str] = []
        self._depth = 0

        self._hits = 0
        self._misses = 0

    # ---- resources ---------------------------------------------------------

    def add_resource(self, identifier: str, document: Any) -> Resource:
        """Store a parsed document; nothing is compiled."""
        with self._lock:
            resource = self.store.add_resource(identifier, document)
            # a new document may satisfy references that were dangling
            self._failures.clear()
            return resource

    def load_resource(self, identifier: str, file_path: Union[str, Path]) -> Resource:
        """Read a JSON/YAML document from disk and store it under ``identifier``."""
        with self._lock:
            resource = self.store.load_resource(identifier, file_path)
            self._failures.clear()
            return resource

    # ---- compilation -------------------------------------------------------

    def compile(self, ref: Union[str, Location]) -> CompiledSchema:
        """Compile ``identifier[#pointer]`` and everything reachable from it.

        Compilation is atomic per call: either the whole reachable closure
        compiles, or the call raises and no node it created stays cached.

        Raises:
            SchemaCompilerError: Any resolution, keyword, meta-schema or extension error
                found in the reachable closure
        """
        with self._lock:
            if self._depth:
                # reentrant call from a vocabulary compiler: same closure
                return self._compile_ref(ref, None)
            return self._compile_top(ref)

    def state_of(self, ref: Union[str, Location]) -> LocationState:
        with self._lock:
            location = ref if isinstance(ref, Location) else self.resolver.resolve(ref)
            if location in self._failures:
                return LocationState.FAILED
            node = self._cache.get(location)
            if node is None:
                return LocationState.UNVISITED
            return LocationState.COMPILED if node.complete else LocationState.COMPILING

    def cache_info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(self._hits, self._misses, len(self._failures), len(self._cache))

    def _resolve_location(self, ref: Union[str, Location], base_uri: Optional[str]) -> Location:
        if isinstance(ref, Location):
            return self.resolver.follow(self.resolver.locate_location(ref), self._scope)
        return self.resolver.resolve(ref, base_uri=base_uri, dynamic_scope=self._scope)

    def _compile_top(self, ref: Union[str, Location]) -> CompiledSchema:
        # resolution errors of the request itself are not cached against any location
        requested = self._resolve_location(ref, None)
        try:
            node = self._compile_location(requested)
            self._check_in_place_cycles()
        except SchemaCompilerError as exc:
            self._rollback(exc, requested)
            raise
        except BaseException:
            self._rollback(None, None)
            raise

        created = len(self._pending)
        self._commit()
        if created:
            logger.info(f"Compiled {requested}: {created} new location(s)")
        return node

    def _compile_ref(self, ref: Union[str, Location], base_uri: Optional[str]) -> CompiledSchema:
        return self._compile_location(self._resolve_location(ref, base_uri))

    def _compile_location(self, location: Location) -> CompiledSchema:
        node = self._cache.get(location)
        if node is not None:
            self._hits += 1
            logger.debug(f"Cache hit {location}" + ("" if node.complete else " (in progress)"))
            return node

        failure = self._failures.get(location)
        if failure is not None:
            logger.debug(f"Cached failure for {location}: {failure.message}")
            raise failure

        if self._depth >= self.config.max_depth:
            raise ResourceLimitExceeded(
                f"Schema nesting deeper than {self.config.max_depth} levels", location=location
            )
        if len(self._pending) >= self.config.max_closure_size:
            raise ResourceLimitExceeded(
                f"More than {self.config.max_closure_size} locations in one compile call", location=location
            )

        self._misses += 1
        node = CompiledSchema(location)
        self._cache[location] = node
        self._pending.append(location)

        base_uri = self.resolver.base_uri(location)
        pushed = not self._scope or self._scope[-1] != base_uri
        if pushed:
            self._scope.append(base_uri)
        self._depth += 1
        try:
            resource = self.store.get(location.identifier)
            raw = self.resolver.raw(location)

            issues = check_keywords(raw, resource.detected_dialect)
            if issues:
                details = "; ".join(
                    f"{issue.keyword_path or '/'}: {issue.message}" for issue in issues[:5]
                )
                raise InvalidKeyword(
                    f"Invalid schema keywords: {details}",
                    location=location,
                    vocabulary="core",
                    meta_schema_pointer=f"{keyword_family(resource.detected_dialect)}/keywords.json",
                    result=issues,
                )

            keywords, children = self._compile_keywords(location, raw, base_uri)
            extensions, vocabularies = self._compile_extensions(location, raw, base_uri, resource)
            node._fill(
                dialect=resource.detected_dialect,
                boolean=raw if isinstance(raw, bool) else None,
                keywords=keywords,
                children=children,
                extensions=extensions,
                vocabularies=vocabularies,
            )
        finally:
            self._depth -= 1
            if pushed:
                self._scope.pop()
        return node

    def _compile_keywords(
        self, location: Location, raw: Any, base_uri: str
    ) -> Tuple[Dict[str, Any], Dict[str, CompiledSchema]]:
        keywords: Dict[str, Any] = {}
        children: Dict[str, CompiledSchema] = {}
        if isinstance(raw, bool):
            return keywords, children

        for keyword, value in raw.items():
            if keyword in ASSERTION_KEYWORDS:
                keywords[keyword] = _freeze_structure(value)

        for keyword, structure, child_tokens in subschema_children(raw):
            for tokens in child_tokens:
                child_location = location.child(*tokens)
                path = child_location.pointer[len(location.pointer) + 1:]
                target = self.resolver.follow(child_location, self._scope)
                children[path] = self._compile_location(target)
            keywords[keyword] = _freeze_structure(structure)

        for keyword in REFERENCE_KEYWORDS:
            if keyword in raw:
                target = self.resolver.target(location, keyword, raw[keyword], self._scope)
                target = self.resolver.follow(target, self._scope)
                if target == location:
                    # a schema referencing itself adds no constraint
                    logger.debug(f"{keyword} at {location} refers to itself")
                    continue
                children[keyword] = self._compile_location(target)
                keywords[keyword] = keyword

        return keywords, children

    def _compile_extensions(
        self, location: Location, raw: Any, base_uri: str, resource: Resource
    ) -> Tuple[List[Any], List[str]]:
        extensions: List[Any] = []
        names: List[str] = []
        for vocabulary, rule, fragment in self.vocabularies.applicable(location, resource.root_value):
            logger.debug(
                f"Applying vocabulary '{vocabulary.name}' at {location} "
                f"(rule {rule.pattern!r} -> {fragment.location})"
            )
            result = Validator(ValidationMode.COLLECT_ALL).validate(fragment, raw)
            if not result.valid:
                raise MetaSchemaViolation(
                    f"Schema object does not satisfy meta-schema {fragment.location}:\n{result.summary()}",
                    location=location,
                    vocabulary=vocabulary.name,
                    meta_schema_pointer=rule.meta_schema_pointer,
                    result=result,
                )

            context = CompilerContext(
                location=location,
                vocabulary=vocabulary.name,
                rule=rule,
                document_root=resource.root_value,
                raw=raw,
                base_uri=base_uri,
                meta_fragment=fragment,
                _compile=self._relative_compiler(base_uri),
            )
            try:
                value = vocabulary.compiler.compile(context, copy.deepcopy(raw))
            except SchemaCompilerError:
                raise
            except Exception as exc:
                raise ExtensionCompileError(
                    f"Vocabulary compiler failed: {exc}", location=location, vocabulary=vocabulary.name
                ) from exc

            if value is None:
                logger.debug(f"Vocabulary '{vocabulary.name}' does not apply at {location}")
                continue
            if not callable(getattr(value, "validate", None)):
                raise ExtensionCompileError(
                    f"Vocabulary compiler returned {type(value).__name__} without a validate method",
                    location=location,
                    vocabulary=vocabulary.name,
                )
            extensions.append(value)
            names.append(vocabulary.name)
        return extensions, names

    def _relative_compiler(self, base_uri: str) -> Callable[[str], CompiledSchema]:
        def compile_relative(ref: str) -> CompiledSchema:
            return self._compile_ref(ref, base_uri)
        return compile_relative

    def _check_in_place_cycles(self) -> None:
        """Reject cycles made only of applicators that never descend into the instance."""
        pending = set(self._pending)
        visiting, done = set(), set()
        for start in self._pending:
            if start in done:
                continue
            path: List[Location] = [start]
            stack = [iter(self._in_place_children(start))]
            visiting.add(start)
            while stack:
                child = next(stack[-1], None)
                if child is None:
                    stack.pop()
                    finished = path.pop()
                    visiting.discard(finished)
                    done.add(finished)
                    continue
                if child in visiting:
                    cycle = path[path.index(child):] + [child]
                    raise CyclicSchemaWithoutBase(
                        "Schema cycle never consumes the instance: " + " -> ".join(str(loc) for loc in cycle),
                        location=child,
                    )
                if child in done or child not in pending:
                    continue
                visiting.add(child)
                path.append(child)
                stack.append(iter(self._in_place_children(child)))

    def _in_place_children(self, location: Location) -> Iterable[Location]:
        node = self._cache[location]
        return [child.location for path, child in node.child_schemas.items() if is_in_place(path)]

    def _commit(self) -> None:
        for location in self._pending:
            self._cache[location]._freeze()
        self._pending = []

    def _rollback(self, exc: Optional[SchemaCompilerError], requested: Optional[Location]) -> None:
        attempted = set(self._pending)
        for location in self._pending:
            self._cache.pop(location, None)
        evicted = len(self._pending)
        self._pending = []
        self._scope = []
        self._depth = 0
        if exc is None:
            return
        # a failure belongs to a location this call compiled, or to the reference
        # that could not be followed; limits depend on the path, not the location
        owned = exc.location in attempted or isinstance(exc, (DanglingRef, CyclicSchemaWithoutBase))
        if owned and not isinstance(exc, ResourceLimitExceeded):
            self._failures[exc.location] = exc
        if requested is not None:
            self._failures[requested] = exc
        logger.debug(f"Compile of {requested} failed, evicted {evicted} location(s): {exc}")

    # ---- vocabularies ------------------------------------------------------

    def register_extension(
        self,
        name: str,
        meta_schema: CompiledSchema,
        compiler: VocabularyCompiler,
        applicability: Union[ApplicabilityRule, Iterable[Union[PointerRule, Tuple[str, str]]]],
        root_condition: Optional[Callable[[Any], bool]] = None,
    ) -> None:
        """Register a vocabulary bound to (fragments of) a compiled meta-schema.

        Every rule's meta-schema fragment is compiled now, so a bad
        ``meta_schema_pointer`` fails here rather than mid-compile. Schemas
        compiled earlier keep their extensions.

        Args:
            name: Vocabulary name, unique per compiler
            meta_schema: Meta-schema compiled by this compiler
            compiler: Produces extension values for matching locations
            applicability: ApplicabilityRule, or (pattern, meta_schema_pointer) pairs
            root_condition: Root condition when ``applicability`` is given as pairs
        """
        with self._lock:
            if not isinstance(applicability, ApplicabilityRule):
                applicability = ApplicabilityRule(tuple(applicability), root_condition)
            if not isinstance(meta_schema, CompiledSchema) or self._cache.get(meta_schema.location) is not meta_schema:
                raise SchemaCompilerError(
                    "Meta-schema must be a CompiledSchema returned by this compiler", vocabulary=name
                )
            if name in self.vocabularies:
                raise DuplicateVocabulary(f"Vocabulary '{name}' is already registered", vocabulary=name)

            fragments: Dict[str, CompiledSchema] = {}
            for rule in applicability.rules:
                fragment_location = Location(
                    meta_schema.location.identifier,
                    meta_schema.location.pointer + rule.meta_schema_pointer,
                )
                fragments[rule.meta_schema_pointer] = self._compile_top(fragment_location)

            self.vocabularies.register(name, meta_schema, compiler, applicability, fragments)
            self._failures.clear()
            logger.info(f"Registered vocabulary '{name}' bound to {meta_schema.location}")
