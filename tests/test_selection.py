"""
Tests for the Selection Layer.

Tests cover:
- SelectionSpec parsing of the JSON:API query convention
- Field resolution (explicit replaces default)
- Default include walk (bounded on cyclic schemas)
- Explicit include paths (validation, no implicit closure)
"""

import pytest
from pydantic import ValidationError

from jsonapi_shape.errors import ErrorKind, SchemaError, SelectionError
from jsonapi_shape.schema import SchemaRegistry
from jsonapi_shape.selection import SelectionResolver, SelectionSpec


@pytest.fixture
def selection_resolver(registry):
    return SelectionResolver(registry)


@pytest.fixture
def cyclic_registry():
    """article -> author -> articles -> article, every relationship default-included."""
    return SchemaRegistry.register(
        {
            "article": {
                "attributes": {"title": True},
                "relationships": {
                    "author": {"cardinality": "one", "target": "user", "default": True},
                    "comments": {"cardinality": "many", "target": "comment", "default": True},
                },
            },
            "user": {
                "attributes": {"email": True},
                "relationships": {
                    "articles": {"cardinality": "many", "target": "article", "default": True},
                },
            },
            "comment": {
                "attributes": {"body": True},
                "relationships": {
                    "author": {"cardinality": "one", "target": "user", "default": True},
                    "replies": {"cardinality": "many", "target": "comment", "default": True},
                },
            },
        }
    )


# =============================================================================
# Test SelectionSpec
# =============================================================================


class TestSelectionSpec:
    """Tests for SelectionSpec."""

    def test_from_query_splits_lists(self):
        spec = SelectionSpec.from_query(
            fields={"article": "title, author", "user": "name"},
            include="author,author.articles",
        )

        assert spec.fields == {"article": {"title", "author"}, "user": {"name"}}
        assert spec.include == {"author", "author.articles"}
        assert spec.has_explicit_include is True

    def test_absent_include_is_none(self):
        spec = SelectionSpec.from_query(fields={"article": "title"})

        assert spec.include is None
        assert spec.has_explicit_include is False

    def test_empty_values_are_explicit_empty_sets(self):
        spec = SelectionSpec.from_query(fields={"user": ""}, include="")

        assert spec.fields == {"user": frozenset()}
        assert spec.include == frozenset()

    def test_accepts_iterables(self):
        spec = SelectionSpec(fields={"user": ["name"]}, include={"author"})

        assert spec.fields["user"] == {"name"}
        assert spec.include == {"author"}

    def test_null_field_list_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            SelectionSpec(fields={"article": None})

        assert "got NoneType" in str(exc_info.value)

    def test_non_iterable_include_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            SelectionSpec(include=5)

        assert "got int" in str(exc_info.value)

    def test_non_string_names_rejected(self):
        with pytest.raises(ValidationError):
            SelectionSpec(fields={"user": ["name", 3]})

    def test_to_query(self):
        spec = SelectionSpec.from_query(fields={"user": "name,email"}, include="author")

        assert spec.to_query() == {"fields[user]": "email,name", "include": "author"}


# =============================================================================
# Test Field Resolution
# =============================================================================


class TestFieldResolution:
    """Explicit field sets replace defaults; they never merge."""

    def test_defaults_without_selection(self, selection_resolver):
        plan = selection_resolver.resolve(None, ["article"])

        assert plan.fields_for("article") == {"title", "body"}
        assert plan.fields_for("user") == {"email"}
        assert not plan.has_explicit_fields("user")

    def test_explicit_replaces_default(self, selection_resolver):
        plan = selection_resolver.resolve(
            SelectionSpec.from_query(fields={"article": "title"}), ["article"]
        )

        assert plan.fields_for("article") == {"title"}
        assert "body" not in plan.fields_for("article")
        # Other types keep their defaults
        assert plan.fields_for("user") == {"email"}

    def test_explicit_non_default_field(self, selection_resolver):
        plan = selection_resolver.resolve(
            SelectionSpec.from_query(fields={"user": "name"}), ["article"]
        )

        assert plan.fields_for("user") == {"name"}

    def test_explicit_empty_set_renders_nothing(self, selection_resolver):
        selection = SelectionSpec.from_query(fields={"user": ""})
        plan = selection_resolver.resolve(selection, ["article"])

        assert plan.fields_for("user") == frozenset()
        assert plan.has_explicit_fields("user")

    def test_relationship_names_are_valid_fields(self, selection_resolver):
        plan = selection_resolver.resolve(
            SelectionSpec.from_query(fields={"article": "title,author"}), ["article"]
        )

        assert plan.fields_for("article") == {"title", "author"}

    def test_unknown_field(self, selection_resolver):
        with pytest.raises(SelectionError) as exc_info:
            selection_resolver.resolve(
                SelectionSpec.from_query(fields={"user": "email,password"}), ["article"]
            )

        assert exc_info.value.kind == ErrorKind.UNKNOWN_FIELD
        assert exc_info.value.details == {"type": "user", "fields": ["password"]}

    def test_unknown_type_in_fields(self, selection_resolver):
        with pytest.raises(SchemaError) as exc_info:
            selection_resolver.resolve(
                SelectionSpec.from_query(fields={"comment": "body"}), ["article"]
            )

        assert exc_info.value.kind == ErrorKind.UNKNOWN_TYPE

    def test_unknown_primary_type(self, selection_resolver):
        with pytest.raises(SchemaError) as exc_info:
            selection_resolver.resolve(None, ["comment"])

        assert exc_info.value.kind == ErrorKind.UNKNOWN_TYPE


# =============================================================================
# Test Default Include Walk
# =============================================================================


class TestDefaultIncludeWalk:
    """Default walk expands default-included relationships, bounded by the path."""

    def test_expands_author_only(self, selection_resolver):
        plan = selection_resolver.resolve(None, ["article"])
        tree = plan.include_tree("article")

        assert tree.paths() == ["author"]
        assert tree.child("author").type_name == "user"
        # user.articles is not included by default
        assert not tree.child("author").expands("articles")
        assert plan.explicit_include is False

    def test_user_root_expands_nothing(self, selection_resolver):
        plan = selection_resolver.resolve(None, ["user"])

        assert plan.include_tree("user").paths() == []

    def test_cyclic_schema_terminates(self, cyclic_registry):
        plan = SelectionResolver(cyclic_registry).resolve(None, ["article"])
        tree = plan.include_tree("article")

        assert tree.paths() == [
            "author",
            "comments",
            "comments.author",
        ]
        # author -> articles would revisit article; comments.replies would revisit comment;
        # comments.author.articles would revisit article
        assert not tree.child("author").expands("articles")
        assert not tree.child("comments").expands("replies")
        assert not tree.child("comments").child("author").expands("articles")

    def test_never_revisits_type_on_path(self, cyclic_registry):
        plan = SelectionResolver(cyclic_registry).resolve(None, ["article", "user", "comment"])

        def check(node, path):
            assert node.type_name not in path
            for child in node.children.values():
                check(child, (*path, node.type_name))

        for root in ("article", "user", "comment"):
            check(plan.include_tree(root), ())

    def test_self_reference_not_expanded(self):
        registry = SchemaRegistry.register(
            {
                "category": {
                    "relationships": {
                        "parent": {"cardinality": "one", "target": "category", "default": True},
                    },
                },
            }
        )

        plan = SelectionResolver(registry).resolve(None, ["category"])

        assert plan.include_tree("category").paths() == []

    def test_max_include_depth(self, cyclic_registry):
        plan = SelectionResolver(cyclic_registry, max_include_depth=1).resolve(None, ["article"])

        assert plan.include_tree("article").paths() == ["author", "comments"]
        assert plan.include_tree("article").depth == 1


# =============================================================================
# Test Explicit Include
# =============================================================================


class TestExplicitInclude:
    """Explicit include paths replace the default walk."""

    def test_expands_listed_paths(self, selection_resolver):
        plan = selection_resolver.resolve(
            SelectionSpec.from_query(include="author,author.articles"), ["article"]
        )
        tree = plan.include_tree("article")

        assert tree.paths() == ["author", "author.articles"]
        assert tree.child("author").child("articles").type_name == "article"
        assert plan.explicit_include is True

    def test_empty_include_expands_nothing(self, selection_resolver):
        plan = selection_resolver.resolve(SelectionSpec.from_query(include=""), ["article"])

        assert plan.include_tree("article").paths() == []

    def test_ignores_default_flags(self, selection_resolver):
        # author is default-included but not listed
        plan = selection_resolver.resolve(SelectionSpec(include=set()), ["user"])
        assert plan.include_tree("user").paths() == []

        plan = selection_resolver.resolve(SelectionSpec(include={"articles"}), ["user"])
        assert plan.include_tree("user").paths() == ["articles"]

    def test_cycle_bounded_by_path_length(self, selection_resolver):
        plan = selection_resolver.resolve(
            SelectionSpec.from_query(include="author,author.articles,author.articles.author"),
            ["article"],
        )

        assert plan.include_tree("article").depth == 3

    def test_unknown_segment(self, selection_resolver):
        with pytest.raises(SelectionError) as exc_info:
            selection_resolver.resolve(
                SelectionSpec.from_query(include="author,author.comments"), ["article"]
            )

        assert exc_info.value.kind == ErrorKind.INVALID_INCLUDE_PATH
        assert exc_info.value.details["path"] == "author.comments"
        assert "has no relationship 'comments'" in exc_info.value.message

    def test_attribute_is_not_a_relationship(self, selection_resolver):
        with pytest.raises(SelectionError) as exc_info:
            selection_resolver.resolve(SelectionSpec.from_query(include="title"), ["article"])

        assert exc_info.value.kind == ErrorKind.INVALID_INCLUDE_PATH

    def test_missing_prerequisite(self, selection_resolver):
        with pytest.raises(SelectionError) as exc_info:
            selection_resolver.resolve(
                SelectionSpec.from_query(include="author.articles"), ["article"]
            )

        assert exc_info.value.kind == ErrorKind.INVALID_INCLUDE_PATH
        assert "prerequisite path 'author'" in exc_info.value.message

    def test_empty_segment(self, selection_resolver):
        with pytest.raises(SelectionError) as exc_info:
            selection_resolver.resolve(
                SelectionSpec.from_query(include="author,author..articles"), ["article"]
            )

        assert exc_info.value.kind == ErrorKind.INVALID_INCLUDE_PATH

    def test_deeper_than_max_depth(self, registry):
        resolver = SelectionResolver(registry, max_include_depth=1)

        with pytest.raises(SelectionError) as exc_info:
            resolver.resolve(
                SelectionSpec.from_query(include="author,author.articles"), ["article"]
            )

        assert "maximum include depth" in exc_info.value.message

    def test_validated_per_primary_type(self, selection_resolver):
        # `author` exists on article but not on user
        with pytest.raises(SelectionError):
            selection_resolver.resolve(
                SelectionSpec.from_query(include="author"), ["article", "user"]
            )


# =============================================================================
# Test EffectiveSelection
# =============================================================================


class TestEffectiveSelection:
    """Tests for the relationship rendering rule."""

    def test_default_fields_render_default_includes(self, registry, selection_resolver):
        plan = selection_resolver.resolve(None, ["article"])
        tree = plan.include_tree("article")

        assert plan.rendered_relationships(registry.get("article"), tree) == {"author"}
        assert plan.rendered_relationships(registry.get("user"), tree.child("author")) == set()

    def test_default_fields_render_expanded(self, registry, selection_resolver):
        plan = selection_resolver.resolve(
            SelectionSpec.from_query(include="author,author.articles"), ["article"]
        )
        author = plan.include_tree("article").child("author")

        assert plan.rendered_relationships(registry.get("user"), author) == {"articles"}

    def test_explicit_fields_name_relationships(self, registry, selection_resolver):
        plan = selection_resolver.resolve(
            SelectionSpec.from_query(fields={"article": "title"}), ["article"]
        )
        tree = plan.include_tree("article")

        assert plan.rendered_relationships(registry.get("article"), tree) == set()
        assert plan.rendered_attributes(registry.get("article")) == {"title"}

    def test_missing_include_tree(self, selection_resolver):
        plan = selection_resolver.resolve(None, ["article"])

        with pytest.raises(KeyError):
            plan.include_tree("user")
