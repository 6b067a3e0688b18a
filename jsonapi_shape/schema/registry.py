"""
Schema Registry.

The registry maps resource type names to their ResourceTypeSchema and
guarantees that every relationship targets a registered type. The type
graph may be cyclic: article -> author (user) -> articles -> article.

Design Principle:
    Types are registered once at startup and immutable afterwards.
    `SchemaRegistry.register()` validates the whole batch and returns a
    new registry; nothing mutates an existing one, so a registry can be
    shared by concurrent resolvers without coordination.

Usage:
    registry = SchemaRegistry.register({
        "article": {
            "attributes": {"title": True, "body": True},
            "relationships": {
                "author": {"cardinality": "one", "target": "user", "default": True},
            },
        },
        "user": {
            "attributes": {"email": True, "name": False},
            "relationships": {
                "articles": {"cardinality": "many", "target": "article"},
            },
        },
    })

    registry.get("user")                # ResourceTypeSchema
    registry.default_fields("user")     # frozenset({"email"})
    registry.default_includes("article")  # frozenset({"author"})
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from jsonapi_shape.errors import ErrorKind, SchemaError

from .definitions import RelationshipSpec, ResourceTypeSchema

logger = logging.getLogger(__name__)

TypeDefinitions = Mapping[str, Mapping[str, Any] | ResourceTypeSchema] | Iterable[ResourceTypeSchema]


class SchemaRegistry:
    """
    Immutable registry of resource type schemas.

    Build with `SchemaRegistry.register(type_defs)`; the constructor takes
    already-validated schemas and is used by `register()` itself.
    """

    def __init__(self, types: Mapping[str, ResourceTypeSchema] | None = None) -> None:
        self._types: Mapping[str, ResourceTypeSchema] = MappingProxyType(dict(types or {}))

    @classmethod
    def register(cls, type_defs: TypeDefinitions) -> SchemaRegistry:
        """
        Build a registry from type definitions.

        Args:
            type_defs: Mapping of type name -> definition dict (or schema),
                or an iterable of ResourceTypeSchema

        Returns:
            New SchemaRegistry

        Raises:
            SchemaError(INVALID_DEFINITION): If a definition is malformed
            SchemaError(UNKNOWN_TARGET_TYPE): If a relationship targets a
                type absent from the batch
        """
        types = cls._parse_definitions(type_defs)

        for schema in types.values():
            for rel_name, rel in schema.relationships.items():
                if rel.target_type not in types:
                    raise SchemaError(
                        ErrorKind.UNKNOWN_TARGET_TYPE,
                        f"Relationship '{schema.name}.{rel_name}' targets unknown type "
                        f"'{rel.target_type}'. Registered types: {sorted(types)}",
                        type=schema.name,
                        relationship=rel_name,
                        target_type=rel.target_type,
                    )

        logger.info(f"[schema_registry] Registered {len(types)} types: {sorted(types)}")
        return cls(types)

    @staticmethod
    def _parse_definitions(type_defs: TypeDefinitions) -> dict[str, ResourceTypeSchema]:
        types: dict[str, ResourceTypeSchema] = {}

        if isinstance(type_defs, Mapping):
            items: Iterable[tuple[str | None, Any]] = type_defs.items()
        else:
            items = ((None, schema) for schema in type_defs)

        for name, definition in items:
            if isinstance(definition, ResourceTypeSchema):
                schema = definition
            else:
                try:
                    schema = ResourceTypeSchema.model_validate({"name": name, **definition})
                except (ValidationError, TypeError) as e:
                    raise SchemaError(
                        ErrorKind.INVALID_DEFINITION,
                        f"Invalid definition for type '{name}': {e}",
                        type=name,
                    ) from e

            if name is not None and schema.name != name:
                raise SchemaError(
                    ErrorKind.INVALID_DEFINITION,
                    f"Type registered as '{name}' is named '{schema.name}'",
                    type=name,
                )
            if schema.name in types:
                raise SchemaError(
                    ErrorKind.INVALID_DEFINITION,
                    f"Type '{schema.name}' defined more than once",
                    type=schema.name,
                )
            types[schema.name] = schema

        return types

    def get(self, type_name: str) -> ResourceTypeSchema:
        """
        Get a type schema by name.

        Raises:
            SchemaError(UNKNOWN_TYPE): If the type is not registered
        """
        schema = self._types.get(type_name)
        if schema is None:
            raise SchemaError(
                ErrorKind.UNKNOWN_TYPE,
                f"Type '{type_name}' not registered. Registered types: {self.list_types()}",
                type=type_name,
            )
        return schema

    def relationship(self, type_name: str, name: str) -> RelationshipSpec | None:
        """Get a relationship declaration, or None if the type lacks it."""
        return self.get(type_name).relationships.get(name)

    def default_fields(self, type_name: str) -> frozenset[str]:
        """Attribute names of `type_name` rendered by default."""
        return self.get(type_name).default_fields()

    def default_includes(self, type_name: str) -> frozenset[str]:
        """Relationship names of `type_name` included by default."""
        return self.get(type_name).default_includes()

    def list_types(self) -> list[str]:
        return sorted(self._types)

    def to_definitions(self) -> dict[str, dict[str, Any]]:
        """Export all types in the input definition format."""
        return {name: schema.to_definition() for name, schema in sorted(self._types.items())}

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._types

    def __repr__(self) -> str:
        return f"<SchemaRegistry types={self.list_types()}>"
