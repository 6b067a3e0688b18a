"""
Document Assembler.

Walks the primary data with an EffectiveSelection and a DocumentIndex and
produces the resolved tree:

- attributes reduced to the type's field set (dropped, never nulled)
- relationships the include tree expands replaced in place by the
  resolved related resources, assembled recursively
- other rendered relationships left as bare identifiers

Recursion follows the include tree, never the data, so relationship
cycles in the data (article 42 -> user 1 -> articles [42]) stop where the
tree stops.

Output is plain JSON values: dicts and lists only. Attribute values are
deep-copied, so the output shares no mutable state with the input
document. For the same schema, document and selection the output is
identical on every call.

Cardinality is checked for every declared relationship present on a
resource, whether or not the selection renders it.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from jsonapi_shape.config import DanglingPolicy
from jsonapi_shape.errors import DataError, ErrorKind
from jsonapi_shape.schema import RelationshipSpec, SchemaRegistry
from jsonapi_shape.selection import EffectiveSelection, IncludeNode

from .index import DocumentIndex
from .models import (
    PrimaryData,
    RelationshipData,
    ResourceIdentifier,
    ResourceObject,
    linkage_to_dict,
)

logger = logging.getLogger(__name__)


class DocumentAssembler:
    """
    Assembles resolved documents.

    Example:
        assembler = DocumentAssembler(registry, dangling_policy=DanglingPolicy.NULL)
        data = assembler.assemble(document.primary_data, index, plan)
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        *,
        dangling_policy: DanglingPolicy = DanglingPolicy.RAISE,
        check_cardinality: bool = True,
    ):
        """
        Initialize assembler.

        Args:
            registry: Schema registry
            dangling_policy: Handling of references missing from the index
            check_cardinality: Reject linkage whose shape disagrees with
                the declared cardinality
        """
        self._registry = registry
        self._dangling_policy = DanglingPolicy(dangling_policy)
        self._check_cardinality = check_cardinality

    def assemble(
        self,
        primary_data: PrimaryData,
        index: DocumentIndex,
        selection: EffectiveSelection,
    ) -> dict[str, Any] | list[dict[str, Any]] | None:
        """
        Assemble primary data into a resolved tree.

        Args:
            primary_data: Single resource, None, or ordered collection
            index: Lookup of the document's resources
            selection: Resolved selection plan

        Returns:
            Resolved resource, list of resolved resources (input order),
            or None for empty to-one primary data

        Raises:
            DataError: Dangling reference (RAISE policy), cardinality or
                target type mismatch
        """
        if primary_data is None:
            return None

        if isinstance(primary_data, tuple):
            result = [
                self.assemble_resource(
                    resource, selection.include_tree(resource.type), index, selection
                )
                for resource in primary_data
            ]
            logger.debug(f"[assembler] Assembled collection of {len(result)} resources")
            return result

        return self.assemble_resource(
            primary_data, selection.include_tree(primary_data.type), index, selection
        )

    def assemble_resource(
        self,
        resource: ResourceObject,
        node: IncludeNode,
        index: DocumentIndex,
        selection: EffectiveSelection,
    ) -> dict[str, Any]:
        """Assemble one resource at the given include tree node."""
        schema = self._registry.get(resource.type)

        if self._check_cardinality:
            # every declared relationship, rendered or not
            for name, spec in schema.relationships.items():
                if name in resource.relationships:
                    self._validate_cardinality(resource, name, spec, resource.relationships[name])

        rendered_attributes = selection.rendered_attributes(schema)
        attributes = {
            name: copy.deepcopy(value)
            for name, value in resource.attributes.items()
            if name in rendered_attributes
        }

        rendered_relationships = selection.rendered_relationships(schema, node)
        relationships: dict[str, Any] = {}

        # Declared order keeps output stable regardless of input key order
        for name in schema.relationships:
            if name not in rendered_relationships or name not in resource.relationships:
                continue

            data = resource.relationships[name]
            child = node.child(name)
            if child is None:
                relationships[name] = linkage_to_dict(data)
            else:
                relationships[name] = self._expand(resource, name, data, child, index, selection)

        return {
            "type": resource.type,
            "id": resource.id,
            "attributes": attributes,
            "relationships": relationships,
        }

    def _expand(
        self,
        owner: ResourceObject,
        name: str,
        data: RelationshipData,
        child: IncludeNode,
        index: DocumentIndex,
        selection: EffectiveSelection,
    ) -> Any:
        if data is None:
            return None

        if isinstance(data, tuple):
            resolved = [
                self._resolve(owner, name, identifier, child, index, selection)
                for identifier in data
            ]
            return [item for item in resolved if item is not None]

        return self._resolve(owner, name, data, child, index, selection)

    def _resolve(
        self,
        owner: ResourceObject,
        name: str,
        identifier: ResourceIdentifier,
        child: IncludeNode,
        index: DocumentIndex,
        selection: EffectiveSelection,
    ) -> dict[str, Any] | None:
        if identifier.type != child.type_name:
            raise DataError(
                ErrorKind.TARGET_TYPE_MISMATCH,
                f"Relationship {owner.identifier}.{name} references {identifier}, "
                f"but '{name}' targets type '{child.type_name}'",
                resource=str(owner.identifier),
                relationship=name,
                identifier=str(identifier),
            )

        related = index.lookup(identifier)
        if related is not None:
            return self.assemble_resource(related, child, index, selection)

        if self._dangling_policy == DanglingPolicy.RAISE:
            raise DataError(
                ErrorKind.DANGLING_REFERENCE,
                f"Relationship {owner.identifier}.{name} references {identifier}, "
                "which is not in the document",
                resource=str(owner.identifier),
                relationship=name,
                identifier=str(identifier),
            )

        logger.warning(
            f"[assembler] Dangling reference {owner.identifier}.{name} -> {identifier} | "
            f"policy={self._dangling_policy.value}"
        )
        if self._dangling_policy == DanglingPolicy.IDENTIFIER:
            return identifier.to_dict()
        return None

    @staticmethod
    def _validate_cardinality(
        resource: ResourceObject,
        name: str,
        spec: RelationshipSpec,
        data: RelationshipData,
    ) -> None:
        # null linkage counts as to-one
        if spec.is_many == isinstance(data, tuple):
            return
        shape = "array" if isinstance(data, tuple) else "null" if data is None else "object"
        raise DataError(
            ErrorKind.CARDINALITY_MISMATCH,
            f"Relationship {resource.identifier}.{name} is declared '{spec.cardinality}' "
            f"but its data is {shape}",
            resource=str(resource.identifier),
            relationship=name,
            cardinality=spec.cardinality,
        )
