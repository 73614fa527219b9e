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
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urldefrag

from ..exceptions import DuplicateResource, MalformedDocument, ResourceNotFound
from ..file_io.document_loader import document_loader
from ..models.location import Location, join_uri
from ..models.resource import Resource
from ..utils import json_pointer
from ..utils.dialect import detect_dialect

logger = logging.getLogger(__name__)

# Keywords whose values are plain data, never subschemas
DATA_KEYWORDS = frozenset({"enum", "const", "examples", "default"})


def normalize_identifier(identifier: str) -> str:
    if not isinstance(identifier, str) or not identifier.strip():
        raise MalformedDocument(f"Resource identifier must be a non-empty string, got: {identifier!r}")
    base, fragment = urldefrag(identifier.strip())
    if fragment:
        raise MalformedDocument(f"Resource identifier must not carry a fragment: '{identifier}'")
    return base


def _copy_json(value: Any, location: Location) -> Any:
    """Deep-copy a parsed JSON tree, rejecting anything that is not JSON."""
    if isinstance(value, dict):
        copied = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise MalformedDocument(f"Object key {key!r} is not a string", location=location)
            copied[key] = _copy_json(item, location.child(key))
        return copied
    if isinstance(value, list):
        return [_copy_json(item, location.child(idx)) for idx, item in enumerate(value)]
    if isinstance(value, float):
        if not math.isfinite(value):
            raise MalformedDocument(f"Non-finite number {value!r} is not valid JSON", location=location)
        return value
    if value is None or isinstance(value, (str, int, bool)):
        return value
    raise MalformedDocument(
        f"Value of type {type(value).__name__} is not valid JSON", location=location
    )


class ResourceStore:
    """Parsed documents keyed by identifier, plus the identifiers they embed."""

    def __init__(self, default_dialect: str = "2020-12"):
        self.default_dialect = default_dialect
        self._resources: Dict[str, Resource] = {}
        # embedded $id -> location inside the stored resource that declares it
        self._aliases: Dict[str, Location] = {}

    def __contains__(self, identifier: str) -> bool:
        try:
            self.locate(identifier)
        except (ResourceNotFound, MalformedDocument):
            return False
        return True

    def __len__(self) -> int:
        return len(self._resources)

    def add_resource(self, identifier: str, document: Any) -> Resource:
        """Store a parsed document under ``identifier``.

        Args:
            identifier: Absolute or logical identifier, without fragment
            document: Parsed JSON value (object or boolean at the root)

        Returns:
            The stored :class:`Resource`

        Raises:
            DuplicateResource: If the identifier or an embedded ``$id`` is already known
            MalformedDocument: If the document is not a JSON tree with an object/boolean root
        """
        identifier = normalize_identifier(identifier)
        if identifier in self._resources or identifier in self._aliases:
            existing = self._aliases.get(identifier)
            detail = f" (embedded in {existing})" if existing is not None else ""
            raise DuplicateResource(f"Duplicate resource '{identifier}'{detail}")

        if not isinstance(document, (dict, bool)):
            raise MalformedDocument(
                f"Document root must be an object or boolean, got {type(document).__name__}",
                location=Location(identifier, ""),
            )
        root_value = _copy_json(document, Location(identifier, ""))

        embedded, anchors, dynamic_anchors = self._index(identifier, root_value)
        for uri, pointer in embedded.items():
            if uri in self._resources or uri in self._aliases:
                raise DuplicateResource(
                    f"Embedded resource '{uri}' declared at {identifier}#{pointer} is already registered"
                )

        resource = Resource(
            identifier=identifier,
            root_value=root_value,
            detected_dialect=detect_dialect(root_value, self.default_dialect),
            embedded=embedded,
            anchors=anchors,
            dynamic_anchors=dynamic_anchors,
        )
        self._resources[identifier] = resource
        for uri, pointer in embedded.items():
            self._aliases[uri] = Location(identifier, pointer)

        logger.debug(
            f"Added resource {identifier} (dialect={resource.detected_dialect}, "
            f"embedded={len(embedded)}, anchors={len(anchors)})"
        )
        return resource

    def load_resource(self, identifier: str, file_path: Union[str, Path]) -> Resource:
        """Read a JSON/YAML file and store it under ``identifier``."""
        return self.add_resource(identifier, document_loader.load(file_path))

    def get(self, identifier: str) -> Resource:
        """Get the stored resource for an identifier (embedded ``$id`` resolves to its container)."""
        location = self.locate(identifier)
        return self._resources[location.identifier]

    def locate(self, identifier: str) -> Location:
        """Map an identifier to the canonical location of its resource root."""
        if not isinstance(identifier, str) or not identifier.strip():
            raise ResourceNotFound(f"No resource identifier in reference: {identifier!r}")
        identifier = normalize_identifier(identifier)
        if identifier in self._resources:
            return Location(identifier, "")
        alias = self._aliases.get(identifier)
        if alias is not None:
            return alias
        raise ResourceNotFound(f"Resource '{identifier}' not found", location=Location(identifier, ""))

    @staticmethod
    def _index(identifier: str, root: Any) -> Tuple[Dict[str, str], Dict[tuple, str], Dict[tuple, str]]:
        embedded: Dict[str, str] = {}
        anchors: Dict[tuple, str] = {}
        dynamic_anchors: Dict[tuple, str] = {}

        stack: List[Tuple[Any, str, str]] = [(root, "", identifier)]
        while stack:
            node, pointer, base = stack.pop()
            if isinstance(node, dict):
                node_id: Optional[str] = node.get("$id") if isinstance(node.get("$id"), str) else None
                if node_id is not None:
                    uri, _ = urldefrag(join_uri(base, node_id))
                    if uri and uri != identifier:
                        if uri in embedded:
                            raise DuplicateResource(
                                f"Embedded resource '{uri}' declared twice in {identifier} "
                                f"({embedded[uri]} and {pointer})"
                            )
                        embedded[uri] = pointer
                        base = uri
                anchor = node.get("$anchor")
                if isinstance(anchor, str):
                    anchors[(base, anchor)] = pointer
                dynamic = node.get("$dynamicAnchor")
                if isinstance(dynamic, str):
                    dynamic_anchors[(base, dynamic)] = pointer
                    anchors.setdefault((base, dynamic), pointer)
                for key, value in node.items():
                    if key in DATA_KEYWORDS:
                        continue
                    if isinstance(value, (dict, list)):
                        stack.append((value, json_pointer.join(pointer, key), base))
            elif isinstance(node, list):
                for idx, value in enumerate(node):
                    if isinstance(value, (dict, list)):
                        stack.append((value, json_pointer.join(pointer, idx), base))

        return embedded, anchors, dynamic_anchors
