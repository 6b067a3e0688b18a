"""
Schema Layer.

Resource type definitions and the immutable registry built from them.
"""

from .definitions import AttributeSpec, RelationshipSpec, ResourceTypeSchema
from .registry import SchemaRegistry

__all__ = [
    "AttributeSpec",
    "RelationshipSpec",
    "ResourceTypeSchema",
    "SchemaRegistry",
]
