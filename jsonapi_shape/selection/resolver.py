"""
Selection Resolver.

Turns a SchemaRegistry and an optional SelectionSpec into an
EffectiveSelection: the field set to render per type, plus one include
tree per primary type.

Two rules are easy to get wrong, so they are stated here once:

1. Explicit selections REPLACE defaults, they never merge with them.
   `fields[user]=name` renders `name` only, even though `email` is
   rendered by default. `fields[user]=` renders nothing.

2. Without an explicit include, the tree is a depth-first walk over
   `included_by_default` relationships. A relationship whose target type
   already appears on the current path is not expanded, which bounds the
   walk on cyclic schemas (article -> author -> articles -> article).
   With an explicit include, only the listed paths are expanded, and every
   path's parent must be listed too (`author.articles` needs `author`).

All validation happens here, before any document is touched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from jsonapi_shape.errors import ErrorKind, SchemaError, SelectionError
from jsonapi_shape.schema import ResourceTypeSchema, SchemaRegistry

from .spec import SelectionSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IncludeNode:
    """
    One node of an include tree.

    Attributes:
        type_name: Resource type reached at this node
        children: relationship name -> subtree for the related type
    """

    type_name: str
    children: Mapping[str, IncludeNode] = field(default_factory=lambda: MappingProxyType({}))

    def expands(self, relationship: str) -> bool:
        return relationship in self.children

    def child(self, relationship: str) -> IncludeNode | None:
        return self.children.get(relationship)

    @property
    def depth(self) -> int:
        """Length of the longest path below this node."""
        if not self.children:
            return 0
        return 1 + max(child.depth for child in self.children.values())

    def paths(self) -> list[str]:
        """All dot-delimited include paths below this node, sorted."""
        result: list[str] = []
        for name, child in self.children.items():
            result.append(name)
            result.extend(f"{name}.{sub}" for sub in child.paths())
        return sorted(result)

    def to_dict(self) -> dict[str, Any]:
        return {name: child.to_dict() for name, child in sorted(self.children.items())}


@dataclass(frozen=True, slots=True)
class EffectiveSelection:
    """
    Resolved selection plan for one request.

    Field sets are resolved for every registered type, since nested
    resolution may reach any of them. Include trees exist for the
    primary types the plan was resolved for.
    """

    fields: Mapping[str, frozenset[str]]
    explicit_types: frozenset[str]
    include_trees: Mapping[str, IncludeNode]
    explicit_include: bool = False

    def fields_for(self, type_name: str) -> frozenset[str]:
        """
        Rendered field names for a type.

        Raises:
            SchemaError(UNKNOWN_TYPE): If the type is not registered
        """
        try:
            return self.fields[type_name]
        except KeyError:
            raise SchemaError(
                ErrorKind.UNKNOWN_TYPE,
                f"Type '{type_name}' not registered",
                type=type_name,
            ) from None

    def has_explicit_fields(self, type_name: str) -> bool:
        return type_name in self.explicit_types

    def include_tree(self, primary_type: str) -> IncludeNode:
        tree = self.include_trees.get(primary_type)
        if tree is None:
            raise KeyError(
                f"No include tree for primary type '{primary_type}'. "
                f"Planned types: {sorted(self.include_trees)}"
            )
        return tree

    def rendered_attributes(self, schema: ResourceTypeSchema) -> frozenset[str]:
        return self.fields_for(schema.name) & frozenset(schema.attributes)

    def rendered_relationships(
        self, schema: ResourceTypeSchema, node: IncludeNode
    ) -> frozenset[str]:
        """
        Relationship names to render for a resource at `node`.

        An explicit field set names its relationships directly. Otherwise
        default-included relationships render, plus whatever the include
        tree expands at this node.
        """
        if self.has_explicit_fields(schema.name):
            return self.fields_for(schema.name) & frozenset(schema.relationships)
        return schema.default_includes() | frozenset(node.children)


class SelectionResolver:
    """
    Computes EffectiveSelection plans against a registry.

    Stateless apart from the registry and depth bound, so one instance
    can serve any number of concurrent callers.

    Example:
        resolver = SelectionResolver(registry)
        plan = resolver.resolve(
            SelectionSpec.from_query(include="author,author.articles"),
            primary_types=["article"],
        )
        plan.include_tree("article").paths()  # ["author", "author.articles"]
    """

    def __init__(self, registry: SchemaRegistry, *, max_include_depth: int | None = None):
        self._registry = registry
        self._max_depth = max_include_depth

    def resolve(
        self,
        selection: SelectionSpec | None,
        primary_types: Iterable[str],
    ) -> EffectiveSelection:
        """
        Resolve a selection for the given primary resource types.

        Args:
            selection: Explicit selection, or None for schema defaults
            primary_types: Types of the document's primary data

        Returns:
            EffectiveSelection

        Raises:
            SchemaError(UNKNOWN_TYPE): Unknown primary type or fields key
            SelectionError(UNKNOWN_FIELD): Field not declared on its type
            SelectionError(INVALID_INCLUDE_PATH): Bad include path
        """
        if selection is None:
            selection = SelectionSpec()
        roots = sorted(set(primary_types))
        for type_name in roots:
            self._registry.get(type_name)

        fields = self.resolve_fields(selection)

        if selection.include is None:
            trees = {root: self._walk_defaults(root, (root,)) for root in roots}
        else:
            trees = {root: self._build_explicit(root, selection.include) for root in roots}

        plan = EffectiveSelection(
            fields=MappingProxyType(fields),
            explicit_types=frozenset(selection.fields),
            include_trees=MappingProxyType(trees),
            explicit_include=selection.include is not None,
        )

        include_paths = {root: tree.paths() for root, tree in trees.items()}
        logger.debug(
            f"[selection] Resolved plan | "
            f"roots={roots} | "
            f"explicit_fields={sorted(plan.explicit_types)} | "
            f"include={include_paths}"
        )
        return plan

    def resolve_fields(self, selection: SelectionSpec) -> dict[str, frozenset[str]]:
        """Field set per registered type: explicit set if given, else defaults."""
        for type_name, names in selection.fields.items():
            schema = self._registry.get(type_name)
            unknown = names - schema.field_names
            if unknown:
                raise SelectionError(
                    ErrorKind.UNKNOWN_FIELD,
                    f"Unknown fields {sorted(unknown)} for type '{type_name}'. "
                    f"Declared fields: {sorted(schema.field_names)}",
                    type=type_name,
                    fields=sorted(unknown),
                )

        return {
            type_name: selection.fields.get(type_name, self._registry.default_fields(type_name))
            for type_name in self._registry.list_types()
        }

    def _within_depth(self, depth: int) -> bool:
        return self._max_depth is None or depth <= self._max_depth

    def _walk_defaults(self, type_name: str, path: tuple[str, ...]) -> IncludeNode:
        # `path` holds the types from the root down to this node, in order
        schema = self._registry.get(type_name)
        children: dict[str, IncludeNode] = {}

        if self._within_depth(len(path)):
            for rel_name in sorted(schema.default_includes()):
                target = schema.relationships[rel_name].target_type
                if target in path:
                    logger.debug(
                        f"[selection] Not expanding {type_name}.{rel_name}: "
                        f"'{target}' already on path {list(path)}"
                    )
                    continue
                children[rel_name] = self._walk_defaults(target, (*path, target))

        return IncludeNode(type_name, MappingProxyType(children))

    def _build_explicit(self, root: str, paths: frozenset[str]) -> IncludeNode:
        # Parents sort before children, so each prerequisite is built first
        ordered = sorted(paths, key=lambda p: (p.count("."), p))
        tree: dict[str, Any] = {"type": root, "children": {}}

        for path in ordered:
            segments = path.split(".")
            if not all(segments):
                raise self._invalid_path(path, root, "empty path segment")
            if not self._within_depth(len(segments)):
                raise self._invalid_path(
                    path, root, f"deeper than the maximum include depth {self._max_depth}"
                )

            parent = ".".join(segments[:-1])
            if parent and parent not in paths:
                raise self._invalid_path(path, root, f"prerequisite path '{parent}' not included")

            node = tree
            for segment in segments[:-1]:
                node = node["children"][segment]

            last = segments[-1]
            rel = self._registry.relationship(node["type"], last)
            if rel is None:
                raise self._invalid_path(
                    path, root, f"type '{node['type']}' has no relationship '{last}'"
                )
            node["children"][last] = {"type": rel.target_type, "children": {}}

        return self._freeze(tree)

    def _freeze(self, node: dict[str, Any]) -> IncludeNode:
        children = {name: self._freeze(child) for name, child in node["children"].items()}
        return IncludeNode(node["type"], MappingProxyType(children))

    @staticmethod
    def _invalid_path(path: str, root: str, reason: str) -> SelectionError:
        return SelectionError(
            ErrorKind.INVALID_INCLUDE_PATH,
            f"Invalid include path '{path}' from type '{root}': {reason}",
            path=path,
            type=root,
        )
