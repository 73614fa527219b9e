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
from typing import Tuple
from urllib.parse import unquote, urldefrag, urljoin

from ..utils import json_pointer


def split_ref(ref: str) -> Tuple[str, str]:
    """Split ``identifier#fragment`` into its parts; the fragment is percent-decoded."""
    identifier, _, fragment = ref.partition("#")
    return identifier, unquote(fragment)


def join_uri(base: str, ref: str) -> str:
    """Resolve ``ref`` against ``base``; fragment-only refs work under any scheme (``urn:`` included)."""
    if not base:
        return ref
    if ref == "" or ref.startswith("#"):
        return urldefrag(base)[0] + ref
    return urljoin(base, ref)


@dataclass(frozen=True)
class Location:
    """Canonical position inside a stored document.

    Two locations are equal iff identifier and canonical pointer are equal;
    this is the compile cache key.
    """
    identifier: str
    pointer: str = ""

    @classmethod
    def parse(cls, ref: str) -> "Location":
        identifier, fragment = split_ref(ref)
        # validates the pointer syntax
        json_pointer.split(fragment)
        return cls(identifier, fragment)

    def child(self, *tokens) -> "Location":
        return Location(self.identifier, json_pointer.join(self.pointer, *tokens))

    @property
    def tokens(self):
        return json_pointer.split(self.pointer)

    def __str__(self) -> str:
        return f"{self.identifier}#{self.pointer}"
