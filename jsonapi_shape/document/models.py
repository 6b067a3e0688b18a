"""
Document models.

Immutable representations of the JSON:API pieces the assembler works on:
resource identifiers, resource objects and compound documents.

Parsing accepts relationship linkage both wrapped and bare:

    {"author": {"data": {"type": "user", "id": "1"}}}
    {"author": {"type": "user", "id": "1"}}

A relationship object without linkage (links/meta only) is skipped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from jsonapi_shape.errors import DataError, ErrorKind


def _frozen(mapping: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


def _malformed(message: str, **details: Any) -> DataError:
    return DataError(ErrorKind.MALFORMED_RESOURCE, message, **details)


@dataclass(frozen=True, slots=True)
class ResourceIdentifier:
    """The (type, id) pair naming a resource within a document."""

    type: str
    id: str

    @classmethod
    def from_dict(cls, data: Any) -> ResourceIdentifier:
        if not isinstance(data, Mapping):
            raise _malformed(f"Resource identifier must be an object, got {type(data).__name__}")
        type_name = data.get("type")
        resource_id = data.get("id")
        if not isinstance(type_name, str) or not type_name:
            raise _malformed(f"Resource identifier has no valid 'type': {dict(data)}")
        if not isinstance(resource_id, str):
            raise _malformed(
                f"Resource identifier '{type_name}' has no string 'id': {dict(data)}",
                type=type_name,
            )
        return cls(type=type_name, id=resource_id)

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "id": self.id}

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


# Linkage of one relationship: to-one (or empty to-one), or ordered to-many
RelationshipData = Union[ResourceIdentifier, None, tuple[ResourceIdentifier, ...]]


def parse_linkage(value: Any) -> RelationshipData:
    """Parse relationship linkage (the value of a relationship's `data` member)."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(ResourceIdentifier.from_dict(item) for item in value)
    return ResourceIdentifier.from_dict(value)


def linkage_to_dict(data: RelationshipData) -> Any:
    """Render linkage back to plain JSON values."""
    if data is None:
        return None
    if isinstance(data, tuple):
        return [identifier.to_dict() for identifier in data]
    return data.to_dict()


@dataclass(frozen=True, slots=True)
class ResourceObject:
    """
    A JSON:API resource object.

    Attributes:
        type: Resource type name
        id: Resource id
        attributes: attribute name -> value
        relationships: relationship name -> linkage
    """

    type: str
    id: str
    attributes: Mapping[str, Any] = field(default_factory=_frozen)
    relationships: Mapping[str, RelationshipData] = field(default_factory=_frozen)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", _frozen(self.attributes))
        object.__setattr__(self, "relationships", _frozen(self.relationships))

    @property
    def identifier(self) -> ResourceIdentifier:
        return ResourceIdentifier(self.type, self.id)

    @classmethod
    def from_dict(cls, data: Any) -> ResourceObject:
        """
        Parse a resource object.

        Raises:
            DataError(MALFORMED_RESOURCE): If type/id are missing or any
                member has the wrong shape
        """
        identifier = ResourceIdentifier.from_dict(data)

        attributes = data.get("attributes") or {}
        if not isinstance(attributes, Mapping):
            raise _malformed(
                f"Resource {identifier} has non-object 'attributes'", resource=str(identifier)
            )

        raw_relationships = data.get("relationships") or {}
        if not isinstance(raw_relationships, Mapping):
            raise _malformed(
                f"Resource {identifier} has non-object 'relationships'", resource=str(identifier)
            )

        relationships: dict[str, RelationshipData] = {}
        for name, value in raw_relationships.items():
            if isinstance(value, Mapping) and "data" in value:
                relationships[name] = parse_linkage(value["data"])
            elif isinstance(value, Mapping) and "type" not in value and "id" not in value:
                # links/meta only, no linkage
                continue
            else:
                relationships[name] = parse_linkage(value)

        return cls(
            type=identifier.type,
            id=identifier.id,
            attributes=attributes,
            relationships=relationships,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "id": self.id,
            "attributes": dict(self.attributes),
            "relationships": {
                name: {"data": linkage_to_dict(data)} for name, data in self.relationships.items()
            },
        }

    def __repr__(self) -> str:
        return f"ResourceObject({self.identifier})"


PrimaryData = Union[ResourceObject, None, tuple[ResourceObject, ...]]


@dataclass(frozen=True, slots=True)
class CompoundDocument:
    """
    A JSON:API compound document: primary data plus included resources.

    Attributes:
        primary_data: Single resource, None, or ordered collection
        included: Related resources referenced by identifier
    """

    primary_data: PrimaryData
    included: tuple[ResourceObject, ...] = ()

    @property
    def is_collection(self) -> bool:
        return isinstance(self.primary_data, tuple)

    @property
    def primary_resources(self) -> tuple[ResourceObject, ...]:
        if self.primary_data is None:
            return ()
        if isinstance(self.primary_data, tuple):
            return self.primary_data
        return (self.primary_data,)

    @property
    def primary_types(self) -> list[str]:
        """Distinct primary resource types, in first-seen order."""
        return list(dict.fromkeys(resource.type for resource in self.primary_resources))

    def resources(self) -> tuple[ResourceObject, ...]:
        """Every resource in the document: primary data first, then included."""
        return self.primary_resources + self.included

    @classmethod
    def from_dict(cls, document: Any) -> CompoundDocument:
        """
        Parse a `{data, included?}` document.

        Raises:
            DataError(MALFORMED_RESOURCE): If `data` is missing or any
                resource is malformed
        """
        if not isinstance(document, Mapping) or "data" not in document:
            raise _malformed("Document must be an object with a 'data' member")

        data = document["data"]
        if data is None:
            primary: PrimaryData = None
        elif isinstance(data, (list, tuple)):
            primary = tuple(ResourceObject.from_dict(item) for item in data)
        else:
            primary = ResourceObject.from_dict(data)

        included = document.get("included") or []
        if not isinstance(included, (list, tuple)):
            raise _malformed("Document 'included' must be an array")

        return cls(
            primary_data=primary,
            included=tuple(ResourceObject.from_dict(item) for item in included),
        )

    def to_dict(self) -> dict[str, Any]:
        if self.primary_data is None:
            data: Any = None
        elif isinstance(self.primary_data, tuple):
            data = [resource.to_dict() for resource in self.primary_data]
        else:
            data = self.primary_data.to_dict()

        result: dict[str, Any] = {"data": data}
        if self.included:
            result["included"] = [resource.to_dict() for resource in self.included]
        return result
