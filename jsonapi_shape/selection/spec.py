"""
Selection Spec.

Caller-supplied sparse fieldsets and include paths, mirroring the JSON:API
query convention:

    ?fields[article]=title,author&fields[user]=name&include=author,author.articles

Parsing the raw query string belongs to the HTTP layer; this model takes
the already-extracted values.

Usage:
    selection = SelectionSpec.from_query(
        fields={"article": "title,author", "user": "name,articles"},
        include="author,author.articles",
    )

    # Equivalent structured form
    selection = SelectionSpec(
        fields={"article": {"title", "author"}, "user": {"name", "articles"}},
        include={"author", "author.articles"},
    )

An absent `include` (None) means "use the schema defaults"; an empty
include ("" or set()) means "include nothing". The same holds per type
for `fields`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def split_list(value: str | Iterable[str]) -> frozenset[str]:
    """
    Split a comma-delimited list, dropping blanks and surrounding whitespace.

    Raises:
        ValueError: If value is neither a string nor an iterable of strings
    """
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, Iterable):
        raise ValueError(
            f"Expected a comma-delimited string or list of names, got {type(value).__name__}"
        )
    items = list(value)
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"Expected names as strings, got {type(item).__name__}")
    return frozenset(item.strip() for item in items if item.strip())


class SelectionSpec(BaseModel):
    """
    Explicit fields/include selection for one request.

    Attributes:
        fields: type name -> selected field names (attributes and relationships)
        include: dot-delimited relationship paths, or None for defaults
    """

    model_config = ConfigDict(frozen=True)

    fields: dict[str, frozenset[str]] = Field(default_factory=dict)
    include: frozenset[str] | None = Field(default=None)

    @field_validator("fields", mode="before")
    @classmethod
    def _split_fields(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {type_name: split_list(names) for type_name, names in value.items()}
        return value

    @field_validator("include", mode="before")
    @classmethod
    def _split_include(cls, value: Any) -> Any:
        if value is None:
            return None
        return split_list(value)

    @classmethod
    def from_query(
        cls,
        fields: Mapping[str, str] | None = None,
        include: str | None = None,
    ) -> SelectionSpec:
        """
        Create from JSON:API query parameter values.

        Args:
            fields: type name -> comma-delimited field list (fields[type]=...)
            include: comma-delimited include paths, or None if absent

        Returns:
            SelectionSpec
        """
        return cls(fields=dict(fields or {}), include=include)

    @property
    def has_explicit_include(self) -> bool:
        return self.include is not None

    def to_query(self) -> dict[str, str]:
        """Render back to query parameter values (sorted, for stable output)."""
        params = {
            f"fields[{type_name}]": ",".join(sorted(names))
            for type_name, names in sorted(self.fields.items())
        }
        if self.include is not None:
            params["include"] = ",".join(sorted(self.include))
        return params
