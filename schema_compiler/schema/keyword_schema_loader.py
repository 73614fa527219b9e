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



"""Keyword-shape schemas shipped with the package, one per dialect family."""

import json
from pathlib import Path
from typing import Dict

from ..utils.dialect import keyword_family

SCHEMA_DIR = Path(__file__).parent

# family -> parsed keywords.json
_loaded: Dict[str, dict] = {}


def get_schema_path(family: str) -> Path:
    """``schema/<family>/keywords.json`` inside the installed package."""
    return SCHEMA_DIR / family / "keywords.json"


def load_keyword_schema(dialect: str) -> dict:
    """Return the keyword schema for schema objects written in ``dialect``.

    Dialects share a file per family (``openapi-3.1`` uses ``2020-12``,
    ``openapi-3.0`` uses ``draft-07``); each file is parsed once.

    Raises:
        FileNotFoundError: If the package was installed without its schema data
        ValueError: If a shipped schema file is not valid JSON
    """
    family = keyword_family(dialect)
    cached = _loaded.get(family)
    if cached is not None:
        return cached

    path = get_schema_path(family)
    if not path.is_file():
        raise FileNotFoundError(f"No keyword schema for dialect {dialect} (family {family}) at {path}")
    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Keyword schema {path} is not valid JSON: {exc.msg} at line {exc.lineno}") from exc

    _loaded[family] = loaded
    return loaded


def clear_cache() -> None:
    _loaded.clear()
