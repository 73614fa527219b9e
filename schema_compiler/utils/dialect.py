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


"""Dialect detection for schema documents.

A document declares its dialect either through a ``$schema`` URI or, for
OpenAPI descriptions, through the top-level ``openapi`` version field
(e.g. ``3.1.0``).

Mapping rules:
  * Known ``$schema`` URIs map to their draft name (``2020-12``, ``draft-07``...).
  * ``openapi`` **major.minor** selects ``openapi-3.1`` or ``openapi-3.0``;
    the patch is ignored.
  * Anything else uses the configured default dialect.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


# ---- version string → tuple ------------------------------------------------

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:-[0-9A-Za-z.-]+)?$")


@dataclass(frozen=True)
class SemanticVersion:
    """A parsed semantic version (major, minor, patch)."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_version(raw: Any) -> Optional[SemanticVersion]:
    """Parse a version string like ``3.1.0`` (with or without 'v' prefix).

    Returns:
        A :class:`SemanticVersion`, or ``None`` if the value cannot be parsed.
    """
    if not isinstance(raw, str):
        return None
    m = _VERSION_RE.match(raw.strip())
    if m is None:
        return None
    return SemanticVersion(int(m.group(1)), int(m.group(2)), int(m.group(3)))


# ---- $schema URI → dialect --------------------------------------------------

_SCHEMA_URIS = {
    "https://json-schema.org/draft/2020-12/schema": "2020-12",
    "https://json-schema.org/draft/2019-09/schema": "2019-09",
    "http://json-schema.org/draft-07/schema": "draft-07",
    "http://json-schema.org/draft-06/schema": "draft-06",
    "http://json-schema.org/draft-04/schema": "draft-04",
}

# Dialect → directory under schema/ holding its keyword schema
_KEYWORD_FAMILIES = {
    "2020-12": "2020-12",
    "2019-09": "2020-12",
    "openapi-3.1": "2020-12",
    "draft-07": "draft-07",
    "draft-06": "draft-07",
    "draft-04": "draft-07",
    "openapi-3.0": "draft-07",
}

DEFAULT_KEYWORD_FAMILY = "2020-12"


def _normalize_schema_uri(uri: str) -> str:
    uri = uri.strip()
    if uri.endswith("#"):
        uri = uri[:-1]
    if uri.startswith("https://json-schema.org/draft-0"):
        uri = "http://" + uri[len("https://"):]
    return uri


def detect_dialect(document: Any, default: str = "2020-12") -> str:
    """Detect the dialect a document is written in."""
    if not isinstance(document, dict):
        return default

    schema_uri = document.get("$schema")
    if isinstance(schema_uri, str):
        dialect = _SCHEMA_URIS.get(_normalize_schema_uri(schema_uri))
        if dialect is not None:
            return dialect
        logger.debug(f"Unknown $schema '{schema_uri}', using default dialect {default}")
        return default

    if "openapi" in document:
        version = parse_version(document["openapi"])
        if version is None:
            logger.warning(
                f"Invalid openapi version {document['openapi']!r}. "
                f"Expected 'MAJOR.MINOR.PATCH' (e.g. '3.1.0'); using default dialect {default}"
            )
            return default
        if version.major == 3 and version.minor >= 1:
            return "openapi-3.1"
        if version.major == 3:
            return "openapi-3.0"
        logger.warning(f"Unsupported openapi version {version}; using default dialect {default}")
        return default

    return default


def keyword_family(dialect: str) -> str:
    """Return the keyword-schema family for a dialect, falling back to the newest family."""
    return _KEYWORD_FAMILIES.get(dialect, DEFAULT_KEYWORD_FAMILY)
