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


"""Custom exceptions for the schema compiler."""

from typing import Optional


class SchemaCompilerError(Exception):
    """Base exception for schema-compiler related errors.

    Every error carries the offending location (``identifier#pointer``) and,
    for vocabulary failures, the vocabulary name, so callers can attribute a
    failure without re-deriving context.
    """

    def __init__(self, message: str, location=None, vocabulary: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location
        self.vocabulary = vocabulary

    def __str__(self) -> str:
        parts = []
        if self.location is not None:
            parts.append(f"location= {self.location}")
        if self.vocabulary:
            parts.append(f"vocabulary= {self.vocabulary}")
        if not parts:
            return self.message
        return f"{self.message} (" + " ".join(parts) + ")"


class ResourceError(SchemaCompilerError):
    """Exception raised for resource store errors."""
    pass


class DuplicateResource(ResourceError):
    """Exception raised when a resource identifier is registered twice."""
    pass


class MalformedDocument(ResourceError):
    """Exception raised when a document cannot be parsed or is not a JSON tree."""
    pass


class ResourceNotFound(ResourceError):
    """Exception raised when no resource is stored under an identifier."""
    pass


class ReferenceResolutionError(SchemaCompilerError):
    """Exception raised for reference resolution errors."""
    pass


class UnresolvableReference(ReferenceResolutionError):
    """Exception raised when a pointer segment or anchor does not exist."""
    pass


class DanglingRef(ReferenceResolutionError):
    """Exception raised when the target of a ``$ref`` cannot be found."""
    pass


class CyclicSchemaWithoutBase(ReferenceResolutionError):
    """Exception raised for a reference cycle that never consumes the instance."""
    pass


class MetaSchemaViolation(SchemaCompilerError):
    """Exception raised when a raw schema object violates a meta-schema fragment."""

    def __init__(
        self,
        message: str,
        location=None,
        vocabulary: Optional[str] = None,
        meta_schema_pointer: Optional[str] = None,
        result=None,
    ):
        super().__init__(message, location=location, vocabulary=vocabulary)
        self.meta_schema_pointer = meta_schema_pointer
        self.result = result


class InvalidKeyword(MetaSchemaViolation):
    """Exception raised when a core keyword has an invalid shape."""
    pass


class ExtensionCompileError(SchemaCompilerError):
    """Exception raised when a vocabulary compiler fails."""
    pass


class DuplicateVocabulary(SchemaCompilerError):
    """Exception raised when a vocabulary name is registered twice."""
    pass


class ResourceLimitExceeded(SchemaCompilerError):
    """Exception raised when a reference graph exceeds the configured bounds."""
    pass


class ValidationFailure(SchemaCompilerError):
    """Exception raised for an instance that fails validation.

    Carries the full located error tree in ``result``.
    """

    def __init__(self, message: str, result=None, location=None):
        super().__init__(message, location=location)
        self.result = result


class ExtensionValidationError(Exception):
    """Raised by an extension's ``validate`` to report an instance failure."""
    pass
