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

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Resource:
    """A parsed document owned by the resource store.

    ``embedded`` maps absolute ``$id`` URIs declared inside the document to the
    pointer of the object declaring them; ``anchors`` maps ``(base_uri, name)``
    to the pointer of the object declaring ``$anchor``/``$dynamicAnchor``.
    """
    identifier: str
    root_value: Any
    detected_dialect: str
    embedded: Dict[str, str] = field(default_factory=dict, compare=False, repr=False)
    anchors: Dict[tuple, str] = field(default_factory=dict, compare=False, repr=False)
    dynamic_anchors: Dict[tuple, str] = field(default_factory=dict, compare=False, repr=False)
