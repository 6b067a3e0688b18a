"""
Errors raised while resolving JSON:API documents.

Every failure carries an ErrorKind so callers can branch on the cause
without parsing messages. Three families mirror the three phases:

- SchemaError: the registry itself is wrong, or a lookup missed it
- SelectionError: the caller's fields/include selection is invalid
- DataError: the document does not agree with the schema

Schema and selection errors are raised before any assembly starts, so a
failed resolution never produces partial output.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification of resolution failures."""

    # Schema errors
    UNKNOWN_TYPE = "unknown_type"
    UNKNOWN_TARGET_TYPE = "unknown_target_type"
    INVALID_DEFINITION = "invalid_definition"

    # Selection errors
    UNKNOWN_FIELD = "unknown_field"
    INVALID_INCLUDE_PATH = "invalid_include_path"

    # Data errors
    DUPLICATE_RESOURCE = "duplicate_resource"
    DANGLING_REFERENCE = "dangling_reference"
    CARDINALITY_MISMATCH = "cardinality_mismatch"
    TARGET_TYPE_MISMATCH = "target_type_mismatch"
    MALFORMED_RESOURCE = "malformed_resource"


class ShapeError(Exception):
    """
    Base class for all resolution errors.

    Attributes:
        kind: Classification of the error
        message: Human-readable description
        details: Offending type/field/path/identifier, for logging
    """

    def __init__(self, kind: ErrorKind, message: str, **details: Any):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for logging."""
        return {
            "error": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            "details": dict(self.details),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.kind.value}: {self.message})"


class SchemaError(ShapeError):
    """The schema registry is invalid or does not know a type."""

    pass


class SelectionError(ShapeError):
    """An explicit fields/include selection does not fit the schema."""

    pass


class DataError(ShapeError):
    """Document data disagrees with the schema or references missing resources."""

    pass
