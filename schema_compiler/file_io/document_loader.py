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


"""Document loader for JSON and YAML schema files."""

import json
import yaml
import logging
from pathlib import Path
from typing import Any, Union

from ..exceptions import MalformedDocument

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class DocumentLoader:
    """Read schema documents from disk or strings into parsed JSON values."""

    def load(self, file_path: Union[str, Path]) -> Any:
        """Load a document file.

        ``.yaml``/``.yml`` files are parsed with PyYAML's safe loader, anything
        else as JSON.

        Raises:
            MalformedDocument: If the file is missing or cannot be parsed
        """
        path = Path(file_path)

        if not path.exists():
            raise MalformedDocument(f"Document file not found: {path}")

        if not path.is_file():
            raise MalformedDocument(f"Path is not a file: {path}")

        try:
            logger.debug(f"Loading document file: {path}")
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise MalformedDocument(f"Failed to read document file {path}: {exc}") from exc

        return self.loads(content, yaml_format=path.suffix.lower() in YAML_SUFFIXES, source=str(path))

    def loads(self, content: str, yaml_format: bool = False, source: str = "<string>") -> Any:
        """Parse document content from a string."""
        if yaml_format:
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError as exc:
                raise MalformedDocument(f"Failed to parse YAML document {source}: {exc}") from exc
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            raise MalformedDocument(f"Failed to parse JSON document {source}: {exc.msg} at line {exc.lineno}") from exc


document_loader = DocumentLoader()
