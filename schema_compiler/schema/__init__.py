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


"""Keyword schemas and per-location keyword-shape checks.

Nothing here imports the compiler; checks see one schema object at a time.
"""

from .keyword_check import KeywordIssue, check_keywords
from .keyword_schema_loader import load_keyword_schema

__all__ = ["KeywordIssue", "check_keywords", "load_keyword_schema"]
