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


"""Reference resolution: ``identifier#fragment`` to a concrete, ref-free location."""

import logging
from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import urldefrag

from ..exceptions import (
    CyclicSchemaWithoutBase,
    DanglingRef,
    ResourceLimitExceeded,
    ResourceNotFound,
    UnresolvableReference,
)
from ..models.location import Location, join_uri, split_ref
from ..store.resource_store import ResourceStore
from ..utils import json_pointer

logger = logging.getLogger(__name__)

# Keys that may sit next to a $ref without turning it into an applicator
ANNOTATION_KEYWORDS = frozenset({
    "$comment", "$schema", "title", "description", "examples", "default",
    "deprecated", "readOnly", "writeOnly",
})

REFERENCE_KEYWORDS = ("$ref", "$dynamicRef")


def pure_reference(raw: Any) -> Optional[Tuple[str, str]]:
    """Return ``(keyword, target)`` if ``raw`` is nothing but a reference, else ``None``."""
    if not isinstance(raw, dict):
        return None
    keys = [key for key in raw if key not in ANNOTATION_KEYWORDS]
    if len(keys) != 1 or keys[0] not in REFERENCE_KEYWORDS:
        return None
    target = raw[keys[0]]
    if not isinstance(target, str):
        return None
    return keys[0], target


def _array_index(token: str, size: int) -> Optional[int]:
    if not token.isdigit() or (len(token) > 1 and token.startswith("0")):
        return None
    index = int(token)
    return index if index < size else None


class Resolver:
    """Turns references into canonical locations inside stored documents."""

    def __init__(self, store: ResourceStore, max_ref_hops: int = 64):
        self.store = store
        self.max_ref_hops = max_ref_hops

    def raw(self, location: Location) -> Any:
        """Return the raw JSON value at a canonical location."""
        node = self.store.get(location.identifier).root_value
        walked = ""
        for token in location.tokens:
            if isinstance(node, dict) and token in node:
                node = node[token]
            elif isinstance(node, list) and _array_index(token, len(node)) is not None:
                node = node[int(token)]
            else:
                raise UnresolvableReference(
                    f"Pointer segment '{token}' not found",
                    location=Location(location.identifier, walked),
                )
            walked = json_pointer.join(walked, token)
        return node

    def base_uri(self, location: Location) -> str:
        """Base URI in effect at a location: the identifier adjusted by every ``$id`` on the path."""
        base = location.identifier
        node = self.store.get(location.identifier).root_value
        tokens = location.tokens
        for index in range(len(tokens) + 1):
            if isinstance(node, dict) and isinstance(node.get("$id"), str):
                base = urldefrag(join_uri(base, node["$id"]))[0]
            if index == len(tokens):
                break
            token = tokens[index]
            if isinstance(node, dict):
                node = node.get(token)
            elif isinstance(node, list) and _array_index(token, len(node)) is not None:
                node = node[int(token)]
            else:
                node = None
        return base

    def resolve(self, ref: str, base_uri: Optional[str] = None, dynamic_scope: Sequence[str] = ()) -> Location:
        """Resolve a reference to a concrete, ref-free location.

        Args:
            ref: ``identifier`` optionally suffixed with ``#pointer`` or ``#anchor``
            base_uri: Base the reference is relative to
            dynamic_scope: Base URIs of the resources being compiled, outermost first

        Raises:
            ResourceNotFound: If the base resource is not stored
            UnresolvableReference: If a pointer segment or anchor does not exist
            DanglingRef: If a followed ``$ref`` points nowhere
            CyclicSchemaWithoutBase: If pure references loop through two or more locations
        """
        uri = join_uri(base_uri, ref)
        location = self.locate(uri)
        return self.follow(location, dynamic_scope)

    def locate(self, uri: str) -> Location:
        """Locate ``uri`` without following a reference found at the final target."""
        identifier, fragment = split_ref(uri)
        root = self.store.locate(identifier)
        if fragment == "":
            return root
        if fragment.startswith("/"):
            return self._walk(root, json_pointer.split(fragment))

        resource = self.store.get(root.identifier)
        pointer = resource.anchors.get((urldefrag(identifier)[0], fragment))
        if pointer is None:
            raise UnresolvableReference(f"Anchor '{fragment}' not found", location=root)
        return Location(root.identifier, pointer)

    def locate_location(self, location: Location) -> Location:
        """Canonicalize a location whose pointer may pass through references."""
        return self._walk(self.store.locate(location.identifier), location.tokens)

    def follow(self, location: Location, dynamic_scope: Sequence[str] = ()) -> Location:
        """Follow pure references starting at ``location`` until a concrete schema is reached."""
        seen: List[Location] = []
        while True:
            reference = pure_reference(self.raw(location))
            if reference is None:
                return location
            if location in seen:
                chain = " -> ".join(str(loc) for loc in seen + [location])
                raise CyclicSchemaWithoutBase(f"Reference cycle without a base case: {chain}", location=location)
            seen.append(location)
            if len(seen) > self.max_ref_hops:
                raise ResourceLimitExceeded(
                    f"Reference chain longer than {self.max_ref_hops} hops", location=seen[0]
                )
            keyword, target = reference
            next_location = self.target(location, keyword, target, dynamic_scope)
            if next_location == location:
                # {"$ref": "#"}: the location is its own target
                return location
            logger.debug(f"Following {keyword} {location} -> {next_location}")
            location = next_location

    def target(
        self, location: Location, keyword: str, value: str, dynamic_scope: Sequence[str] = ()
    ) -> Location:
        """Locate the target of a ``$ref``/``$dynamicRef`` declared at ``location``."""
        uri = join_uri(self.base_uri(location), value)
        try:
            target = self.locate(uri)
        except (ResourceNotFound, UnresolvableReference) as exc:
            raise DanglingRef(
                f"{keyword} '{value}' points to missing target {uri}: {exc.message}",
                location=location,
            ) from exc
        if keyword == "$dynamicRef":
            return self._dynamic_target(uri, target, dynamic_scope)
        return target

    def _walk(self, root: Location, tokens: List[str]) -> Location:
        identifier = root.identifier
        pointer = root.pointer
        node = self.raw(root)
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if isinstance(node, dict) and token in node:
                node = node[token]
            elif isinstance(node, list) and _array_index(token, len(node)) is not None:
                node = node[int(token)]
            elif pure_reference(node) is not None:
                # indirection at an intermediate hop, then retry the same segment
                current = Location(identifier, pointer)
                followed = self.follow(current)
                if followed == current:
                    raise UnresolvableReference(f"Pointer segment '{token}' not found", location=current)
                identifier, pointer = followed.identifier, followed.pointer
                node = self.raw(followed)
                continue
            else:
                raise UnresolvableReference(
                    f"Pointer segment '{token}' not found", location=Location(identifier, pointer)
                )
            pointer = json_pointer.join(pointer, token)
            index += 1
        return Location(identifier, pointer)

    def _dynamic_target(self, uri: str, target: Location, dynamic_scope: Sequence[str]) -> Location:
        _, name = split_ref(uri)
        raw = self.raw(target)
        if not name or name.startswith("/") or not isinstance(raw, dict) or raw.get("$dynamicAnchor") != name:
            return target
        for base in dynamic_scope:
            try:
                scope_root = self.store.locate(base)
            except ResourceNotFound:
                continue
            resource = self.store.get(scope_root.identifier)
            pointer = resource.dynamic_anchors.get((base, name))
            if pointer is not None:
                return Location(resource.identifier, pointer)
        return target
