"""
Document Resolver.

Single entry point combining the three phases for one document:

    1. SelectionResolver computes the plan (schema-only, validates the selection)
    2. DocumentIndex indexes the document's resources
    3. DocumentAssembler combines plan + index + primary data

Flow:
    Schema and selection errors surface in phase 1, before the document
    is indexed, so a bad request never yields partial output.

Usage:
    # At application startup
    resolver = create_resolver(path="schemas/")

    # Per request
    resolved = resolver.resolve(
        response_body,
        SelectionSpec.from_query(fields={"article": "title"}, include="author"),
    )
    resolved["data"]["relationships"]["author"]  # inlined user
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .config import ResolverSettings, get_settings
from .document import CompoundDocument, DocumentAssembler, DocumentIndex
from .schema import SchemaRegistry
from .selection import EffectiveSelection, SelectionResolver, SelectionSpec

logger = logging.getLogger(__name__)


class DocumentResolver:
    """
    Resolves JSON:API compound documents against a schema registry.

    The resolver holds only the immutable registry and settings, so one
    instance can be shared across threads and requests.

    Example:
        resolver = DocumentResolver(registry)
        resolved = resolver.resolve(
            {"data": {...}, "included": [...]},
            SelectionSpec.from_query(include="author,author.articles"),
        )
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        *,
        settings: ResolverSettings | None = None,
    ):
        """
        Initialize resolver.

        Args:
            registry: Schema registry (built once at startup)
            settings: Resolver settings (environment defaults if None)
        """
        self._registry = registry
        self._settings = settings if settings is not None else get_settings()
        self._selection_resolver = SelectionResolver(
            registry, max_include_depth=self._settings.max_include_depth
        )
        self._assembler = DocumentAssembler(
            registry,
            dangling_policy=self._settings.dangling_policy,
            check_cardinality=self._settings.check_cardinality,
        )

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    @property
    def settings(self) -> ResolverSettings:
        return self._settings

    def plan(
        self,
        selection: SelectionSpec | None,
        primary_types: Iterable[str],
    ) -> EffectiveSelection:
        """Compute the selection plan alone (no document needed)."""
        return self._selection_resolver.resolve(selection, primary_types)

    def resolve(
        self,
        document: CompoundDocument | Mapping[str, Any],
        selection: SelectionSpec | None = None,
    ) -> dict[str, Any]:
        """
        Resolve a compound document.

        Args:
            document: Parsed CompoundDocument or raw `{data, included?}` dict
            selection: Explicit selection, or None for schema defaults

        Returns:
            `{"data": ...}` with attributes pruned and included
            relationships inlined

        Raises:
            SchemaError: Unknown types
            SelectionError: Invalid fields or include paths
            DataError: Malformed, duplicate, dangling or mismatched data
        """
        if not isinstance(document, CompoundDocument):
            document = CompoundDocument.from_dict(document)

        plan = self.plan(selection, document.primary_types)
        index = DocumentIndex.build(document.resources())
        data = self._assembler.assemble(document.primary_data, index, plan)

        logger.debug(
            f"[resolver] Resolved document | "
            f"primary={len(document.primary_resources)} | "
            f"included={len(document.included)} | "
            f"collection={document.is_collection}"
        )
        return {"data": data}

    def __repr__(self) -> str:
        return f"<DocumentResolver types={self._registry.list_types()}>"


# =============================================================================
# Convenience: Create resolver with common setup
# =============================================================================


def create_resolver(
    *,
    definitions: Mapping[str, Any] | None = None,
    path: str | Path | None = None,
    settings: ResolverSettings | None = None,
) -> DocumentResolver:
    """
    Create a DocumentResolver from definitions or schema files.

    Args:
        definitions: In-memory type definitions
        path: JSON schema file or directory (used if definitions is None)
        settings: Resolver settings

    Returns:
        Configured DocumentResolver
    """
    from .loaders import FileSchemaLoader, MemorySchemaLoader

    if definitions is not None:
        loader: MemorySchemaLoader | FileSchemaLoader = MemorySchemaLoader(definitions)
    elif path is not None:
        loader = FileSchemaLoader(path)
    else:
        raise ValueError("Either 'definitions' or 'path' must be provided")

    return DocumentResolver(loader.load(), settings=settings)
