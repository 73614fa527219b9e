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


"""RFC 6901 JSON pointer helpers."""

from typing import Iterable, List

from ..exceptions import UnresolvableReference

JsonPointer = str

WILDCARD = "*"


def escape(token: str) -> str:
    # JSON Pointer escaping: "~" -> "~0", "/" -> "~1"
    return token.replace("~", "~0").replace("/", "~1")


def unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def split(pointer: JsonPointer) -> List[str]:
    """Split a pointer into unescaped reference tokens.

    Raises:
        UnresolvableReference: If the pointer is non-empty and does not start with '/'.
    """
    if pointer == "":
        return []
    if not pointer.startswith("/"):
        raise UnresolvableReference(f"Invalid JSON pointer '{pointer}': must be empty or start with '/'")
    return [unescape(token) for token in pointer[1:].split("/")]


def join(base: JsonPointer, *tokens) -> JsonPointer:
    """Append unescaped tokens to a pointer."""
    return base + "".join(f"/{escape(str(token))}" for token in tokens)


def from_tokens(tokens: Iterable) -> JsonPointer:
    return join("", *tokens)


def matches(pattern: JsonPointer, pointer: JsonPointer) -> bool:
    """Check a pointer against a pattern whose ``*`` segments match exactly one segment."""
    pattern_tokens = split(pattern)
    pointer_tokens = split(pointer)
    if len(pattern_tokens) != len(pointer_tokens):
        return False
    return all(p == WILDCARD or p == t for p, t in zip(pattern_tokens, pointer_tokens))
