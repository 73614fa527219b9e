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


"""Capability interfaces implemented by custom vocabularies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from ..models.compiled_schema import CompiledSchema
    from ..models.location import Location
    from .registry import PointerRule


class ExtensionValue(ABC):
    """Compiled output of a vocabulary for one schema location."""

    @abstractmethod
    def validate(self, context, value: Any) -> None:
        """Validate an instance value.

        Raise :class:`~schema_compiler.exceptions.ExtensionValidationError` to
        report a failure; returning normally means the value passed.
        """
        pass


class VocabularyCompiler(ABC):
    """Produces an :class:`ExtensionValue` from a raw schema object."""

    @abstractmethod
    def compile(self, context: "CompilerContext", raw: Any) -> Optional[ExtensionValue]:
        """Compile the raw schema object at ``context.location``.

        Returns:
            An ExtensionValue, or ``None`` when the vocabulary does not apply here
        """
        pass


@dataclass
class CompilerContext:
    """What a vocabulary compiler knows about the location being compiled."""
    location: "Location"
    vocabulary: str
    rule: "PointerRule"
    document_root: Any
    raw: Any
    base_uri: str
    meta_fragment: "CompiledSchema"
    _compile: Callable[[str], "CompiledSchema"] = field(repr=False, default=None)

    def compile(self, ref: str) -> "CompiledSchema":
        """Compile ``ref`` (relative to this location) as part of the same compile call."""
        return self._compile(ref)
