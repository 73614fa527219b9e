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


"""Schema compiler: references to cached, cycle-safe validator graphs with
location-scoped custom vocabularies."""

__version__ = "0.1.0"

from .config import CompilerConfig, compiler_config
from .exceptions import (
    CyclicSchemaWithoutBase,
    DanglingRef,
    DuplicateResource,
    DuplicateVocabulary,
    ExtensionCompileError,
    ExtensionValidationError,
    InvalidKeyword,
    MalformedDocument,
    MetaSchemaViolation,
    ReferenceResolutionError,
    ResourceError,
    ResourceLimitExceeded,
    ResourceNotFound,
    SchemaCompilerError,
    UnresolvableReference,
    ValidationFailure,
)
from .models import CompiledSchema, Location, Resource
from .store import ResourceStore
from .resolvers import Resolver
from .vocabulary import (
    ApplicabilityRule,
    CompilerContext,
    ExtensionValue,
    PointerRule,
    Vocabulary,
    VocabularyCompiler,
    VocabularyRegistry,
    requires_root_key,
)
from .validation import ValidationContext, ValidationIssue, ValidationMode, ValidationResult, Validator
from .compiler import CacheInfo, Compiler, LocationState
