"""
jsonapi-shape - Resolve JSON:API compound documents against a typed schema.

Given a schema that declares, per resource type, which attributes render
by default and which relationships are included by default, and an
optional explicit `fields` / `include` selection, jsonapi-shape computes
the resolved shape of a compound document:

- **Sparse fieldsets**: attributes pruned to the selected (or default) set
- **Includes**: related resources inlined in place of their identifiers
- **Cycle-safe**: default include walks stop at types already on the path
- **Strict by default**: unknown fields, bad include paths and dangling
  references fail before any partial output is produced

Quick Start:
    >>> from jsonapi_shape import SchemaRegistry, DocumentResolver, SelectionSpec
    >>>
    >>> registry = SchemaRegistry.register(definitions)
    >>> resolver = DocumentResolver(registry)
    >>> resolved = resolver.resolve(
    ...     response_body,
    ...     SelectionSpec.from_query(fields={"article": "title"}),
    ... )
"""

__version__ = "0.1.0"
__license__ = "MIT"

from jsonapi_shape.config import DanglingPolicy, ResolverSettings, get_settings
from jsonapi_shape.document import (
    CompoundDocument,
    DocumentAssembler,
    DocumentIndex,
    ResourceIdentifier,
    ResourceObject,
)
from jsonapi_shape.errors import DataError, ErrorKind, SchemaError, SelectionError, ShapeError
from jsonapi_shape.loaders import FileSchemaLoader, MemorySchemaLoader
from jsonapi_shape.resolver import DocumentResolver, create_resolver
from jsonapi_shape.schema import AttributeSpec, RelationshipSpec, ResourceTypeSchema, SchemaRegistry
from jsonapi_shape.selection import EffectiveSelection, IncludeNode, SelectionResolver, SelectionSpec

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Schema
    "AttributeSpec",
    "RelationshipSpec",
    "ResourceTypeSchema",
    "SchemaRegistry",
    "FileSchemaLoader",
    "MemorySchemaLoader",
    # Selection
    "EffectiveSelection",
    "IncludeNode",
    "SelectionResolver",
    "SelectionSpec",
    # Documents
    "CompoundDocument",
    "DocumentAssembler",
    "DocumentIndex",
    "ResourceIdentifier",
    "ResourceObject",
    # Resolution
    "DocumentResolver",
    "create_resolver",
    # Configuration
    "DanglingPolicy",
    "ResolverSettings",
    "get_settings",
    # Errors
    "ErrorKind",
    "ShapeError",
    "SchemaError",
    "SelectionError",
    "DataError",
]
