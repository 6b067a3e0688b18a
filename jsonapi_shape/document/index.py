"""
Document Index.

Flat lookup of a document's resources keyed by ResourceIdentifier.

A missing identifier is not an error here: a document may legitimately
omit resources nobody asked to include. The assembler decides what a
miss means (see DanglingPolicy).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from jsonapi_shape.errors import DataError, ErrorKind

from .models import ResourceIdentifier, ResourceObject

logger = logging.getLogger(__name__)


class DocumentIndex:
    """
    Resources of one document, keyed by (type, id).

    Example:
        index = DocumentIndex.build(document.resources())
        author = index.lookup(ResourceIdentifier("user", "1"))
    """

    def __init__(self) -> None:
        self._resources: dict[ResourceIdentifier, ResourceObject] = {}

    @classmethod
    def build(cls, resources: Iterable[ResourceObject]) -> DocumentIndex:
        """
        Index resources by identifier.

        Args:
            resources: Resource objects (primary data and included)

        Returns:
            DocumentIndex

        Raises:
            DataError(DUPLICATE_RESOURCE): If two entries share an
                identifier but differ in content
        """
        index = cls()
        for resource in resources:
            index.add(resource)
        logger.debug(f"[document_index] Indexed {len(index)} resources")
        return index

    def add(self, resource: ResourceObject) -> None:
        """Add a resource; exact duplicates are ignored."""
        identifier = resource.identifier
        existing = self._resources.get(identifier)

        if existing is None:
            self._resources[identifier] = resource
            return

        if existing != resource:
            raise DataError(
                ErrorKind.DUPLICATE_RESOURCE,
                f"Resource {identifier} appears more than once with different content",
                type=identifier.type,
                id=identifier.id,
            )
        logger.debug(f"[document_index] Ignoring exact duplicate of {identifier}")

    def lookup(self, identifier: ResourceIdentifier) -> ResourceObject | None:
        """
        Get a resource by identifier.

        Returns:
            The stored ResourceObject, or None if absent
        """
        return self._resources.get(identifier)

    def identifiers(self) -> list[ResourceIdentifier]:
        return list(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._resources

    def __iter__(self) -> Iterator[ResourceObject]:
        return iter(self._resources.values())

    def __repr__(self) -> str:
        return f"<DocumentIndex resources={len(self._resources)}>"
