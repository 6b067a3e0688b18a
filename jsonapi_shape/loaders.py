"""
Schema Loaders.

Load resource type definitions and build a SchemaRegistry.

Design Principle:
    The registry does not care where definitions come from.
    - Testing: MemorySchemaLoader (in-memory)
    - Deployment: FileSchemaLoader (JSON files exported from the API's
      OpenAPI document)

File Format (*.json):
    {
        "article": {
            "attributes": {"title": {"default": true}, "body": {"default": true}},
            "relationships": {
                "author": {"cardinality": "one", "target": "user", "default": true}
            }
        },
        "user": {...}
    }

Usage:
    registry = FileSchemaLoader("schemas/").load()
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .errors import ErrorKind, SchemaError
from .schema import SchemaRegistry

logger = logging.getLogger(__name__)


class MemorySchemaLoader:
    """
    Loads definitions held in memory.

    Useful for testing and for definitions built programmatically.
    """

    def __init__(self, definitions: Mapping[str, Any] | None = None):
        self._definitions: dict[str, Any] = dict(definitions or {})

    def add_type(self, name: str, definition: Mapping[str, Any]) -> None:
        """Add or replace one type definition before loading."""
        self._definitions[name] = definition

    def load(self) -> SchemaRegistry:
        return SchemaRegistry.register(self._definitions)


class FileSchemaLoader:
    """
    Loads definitions from a JSON file or a directory of JSON files.

    In a directory, every `*.json` file holds a mapping of type name ->
    definition; files are read in name order and a type may only be
    defined once across all of them.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def load(self) -> SchemaRegistry:
        """
        Read definitions and build the registry.

        Raises:
            FileNotFoundError: If the path does not exist
            SchemaError(INVALID_DEFINITION): Bad JSON or duplicate types
        """
        if not self._path.exists():
            raise FileNotFoundError(f"Schema path not found: {self._path}")

        files = sorted(self._path.glob("*.json")) if self._path.is_dir() else [self._path]
        if not files:
            logger.warning(f"[schema_loader] No schema files in {self._path}")

        definitions: dict[str, Any] = {}
        for file in files:
            for name, definition in self._load_json(file).items():
                if name in definitions:
                    raise SchemaError(
                        ErrorKind.INVALID_DEFINITION,
                        f"Type '{name}' defined more than once (again in {file})",
                        type=name,
                        file=str(file),
                    )
                definitions[name] = definition

        logger.info(f"[schema_loader] Loaded {len(definitions)} types from {len(files)} files")
        return SchemaRegistry.register(definitions)

    def _load_json(self, path: Path) -> dict[str, Any]:
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SchemaError(
                ErrorKind.INVALID_DEFINITION,
                f"Invalid JSON in {path}: {e}",
                file=str(path),
            ) from e

        if not isinstance(data, dict):
            raise SchemaError(
                ErrorKind.INVALID_DEFINITION,
                f"Schema file {path} must contain an object of type definitions",
                file=str(path),
            )
        return data
