"""
Resource Type Definitions.

JSON-serializable schema describing JSON:API resource types: which
attributes render by default and which relationships are included by
default. Definitions are produced elsewhere (typically derived from an
OpenAPI document's `x-default` extension) and consumed here.

Usage:
    # From JSON (file or database)
    article = ResourceTypeSchema.model_validate({
        "name": "article",
        "attributes": {
            "title": {"default": True},
            "body": True,
        },
        "relationships": {
            "author": {"cardinality": "one", "target": "user", "default": True},
        },
    })

    article.default_fields()    # frozenset({"title", "body"})
    article.default_includes()  # frozenset({"author"})
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

# JSON:API forbids fields named after the identification members
RESERVED_FIELD_NAMES = frozenset({"type", "id"})

Cardinality = Literal["one", "many"]


class AttributeSpec(BaseModel):
    """
    Single attribute declaration.

    Accepts a bare boolean as shorthand for the default-render flag.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rendered_by_default: bool = Field(
        default=False,
        validation_alias=AliasChoices("rendered_by_default", "default", "x-default"),
        description="Render when the caller selects no fields for this type",
    )

    @model_validator(mode="before")
    @classmethod
    def _from_shorthand(cls, data: Any) -> Any:
        if isinstance(data, bool):
            return {"rendered_by_default": data}
        return data


class RelationshipSpec(BaseModel):
    """
    Single relationship declaration.

    Attributes:
        cardinality: "one" (to-one) or "many" (to-many)
        target_type: Name of the related resource type
        included_by_default: Inline when the caller supplies no include
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cardinality: Cardinality = Field(..., description="to-one or to-many")
    target_type: str = Field(
        ...,
        validation_alias=AliasChoices("target_type", "target", "type"),
        description="Related resource type",
    )
    included_by_default: bool = Field(
        default=False,
        validation_alias=AliasChoices("included_by_default", "default", "x-default"),
        description="Include when the caller selects no include paths",
    )

    @property
    def is_many(self) -> bool:
        return self.cardinality == "many"


class ResourceTypeSchema(BaseModel):
    """
    Complete definition of one resource type.

    Attribute and relationship names share a single namespace, and
    neither may be "type" or "id". Both mappings are read-only once
    validated.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique type name")
    attributes: Mapping[str, AttributeSpec] = Field(default_factory=dict)
    relationships: Mapping[str, RelationshipSpec] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_field_names(self) -> ResourceTypeSchema:
        clash = set(self.attributes) & set(self.relationships)
        if clash:
            raise ValueError(
                f"Type '{self.name}' declares {sorted(clash)} as both attribute and relationship"
            )
        reserved = (set(self.attributes) | set(self.relationships)) & RESERVED_FIELD_NAMES
        if reserved:
            raise ValueError(f"Type '{self.name}' uses reserved field names {sorted(reserved)}")

        # frozen=True only blocks attribute assignment, not item assignment
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "relationships", MappingProxyType(dict(self.relationships)))
        return self

    @property
    def field_names(self) -> frozenset[str]:
        """All declared attribute and relationship names."""
        return frozenset(self.attributes) | frozenset(self.relationships)

    def default_fields(self) -> frozenset[str]:
        """Attribute names rendered by default."""
        return frozenset(
            name for name, spec in self.attributes.items() if spec.rendered_by_default
        )

    def default_includes(self) -> frozenset[str]:
        """Relationship names included by default."""
        return frozenset(
            name for name, spec in self.relationships.items() if spec.included_by_default
        )

    def to_definition(self) -> dict[str, Any]:
        """Export in the input definition format (without the name)."""
        return {
            "attributes": {
                name: {"default": spec.rendered_by_default}
                for name, spec in self.attributes.items()
            },
            "relationships": {
                name: {
                    "cardinality": spec.cardinality,
                    "target": spec.target_type,
                    "default": spec.included_by_default,
                }
                for name, spec in self.relationships.items()
            },
        }
