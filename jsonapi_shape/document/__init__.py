"""
Document Layer.

JSON:API document models, the per-document resource index, and the
assembler that produces resolved trees.
"""

from .assembler import DocumentAssembler
from .index import DocumentIndex
from .models import (
    CompoundDocument,
    RelationshipData,
    ResourceIdentifier,
    ResourceObject,
)

__all__ = [
    "CompoundDocument",
    "DocumentAssembler",
    "DocumentIndex",
    "RelationshipData",
    "ResourceIdentifier",
    "ResourceObject",
]
