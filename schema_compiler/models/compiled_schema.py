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


"""Compiled schema graph nodes."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence

from .location import Location


class CompiledSchema:
    """A compiled, ref-free schema location.

    The compiler installs an empty instance as a placeholder before compiling
    children, so recursive references point at the same object. The node is
    filled once its keywords, children and extensions are compiled, and frozen
    when the compile call that created it succeeds.
    """

    def __init__(self, location: Location):
        object.__setattr__(self, "_frozen", False)
        self.location = location
        self.dialect: Optional[str] = None
        self.boolean: Optional[bool] = None
        self.keyword_constraints: Mapping[str, Any] = MappingProxyType({})
        self.child_schemas: Mapping[str, "CompiledSchema"] = MappingProxyType({})
        self.extensions: tuple = ()
        self.extension_vocabularies: tuple = ()
        self.complete = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self._frozen:
            raise AttributeError(f"CompiledSchema at {self.location} is frozen; cannot set '{name}'")
        object.__setattr__(self, name, value)

    def _fill(
        self,
        *,
        dialect: str,
        boolean: Optional[bool],
        keywords: Dict[str, Any],
        children: Dict[str, "CompiledSchema"],
        extensions: Sequence[Any],
        vocabularies: Sequence[str],
    ) -> None:
        self.dialect = dialect
        self.boolean = boolean
        self.keyword_constraints = MappingProxyType(dict(keywords))
        self.child_schemas = MappingProxyType(dict(children))
        self.extensions = tuple(extensions)
        self.extension_vocabularies = tuple(vocabularies)
        self.complete = True

    def _freeze(self) -> None:
        object.__setattr__(self, "_frozen", True)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def child(self, keyword_path: str) -> Optional["CompiledSchema"]:
        return self.child_schemas.get(keyword_path)

    def validate(self, value: Any, mode=None):
        """Validate ``value`` against this schema.

        Args:
            value: Parsed JSON value
            mode: :class:`~schema_compiler.validation.ValidationMode`, collect-all by default

        Returns:
            A :class:`~schema_compiler.validation.ValidationResult`
        """
        from ..validation.validator import Validator

        return Validator(mode).validate(self, value)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else ("complete" if self.complete else "placeholder")
        return f"<CompiledSchema {self.location} {state} extensions={len(self.extensions)}>"
