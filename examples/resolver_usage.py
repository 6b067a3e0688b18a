"""
DocumentResolver Usage Examples.

This module demonstrates resolving a JSON:API response for
GET /articles/{id} with default and explicit selections.

Architecture:
    ┌─────────────────┐      ┌───────────────────┐      ┌─────────────────┐
    │ Response body   │ ──▶  │ DocumentResolver  │ ──▶  │ Resolved tree   │
    │ {data,included} │      │ (Plan + Assemble) │      │ (inlined)       │
    └─────────────────┘      └───────────────────┘      └─────────────────┘
                                      │
                                      ▼
                             ┌──────────────────┐
                             │ SchemaRegistry   │
                             │ (schemas/*.json) │
                             └──────────────────┘

Schema (schemas/blog.json):
    article: title, body rendered by default; author (one, user) included by default
    user: email rendered by default, name not; articles (many, article) not included
"""

import json
from pathlib import Path

from jsonapi_shape import DanglingPolicy, ResolverSettings, SelectionSpec, create_resolver

SCHEMA_DIR = Path(__file__).parent / "schemas"

RESPONSE_BODY = {
    "data": {
        "type": "article",
        "id": "42",
        "attributes": {"title": "JSON:API paints my bikeshed!", "body": "The shortest article."},
        "relationships": {"author": {"data": {"type": "user", "id": "1"}}},
    },
    "included": [
        {
            "type": "user",
            "id": "1",
            "attributes": {"email": "dan@example.com", "name": "Dan Gebhardt"},
            "relationships": {"articles": {"data": [{"type": "article", "id": "42"}]}},
        }
    ],
}


# =============================================================================
# Example 1: Defaults
# =============================================================================


def example_defaults():
    """
    No selection: default fields for every type, default includes.

    author is inlined with only `email`; author.articles is not expanded.
    """
    resolver = create_resolver(path=SCHEMA_DIR)
    return resolver.resolve(RESPONSE_BODY)


# =============================================================================
# Example 2: Sparse Fieldset
# =============================================================================


def example_sparse_fieldset():
    """
    fields[article]=title

    Only `title` renders. The author relationship is not part of the
    fieldset, so it is not rendered (and not included).
    """
    resolver = create_resolver(path=SCHEMA_DIR)
    return resolver.resolve(
        RESPONSE_BODY,
        SelectionSpec.from_query(fields={"article": "title"}),
    )


# =============================================================================
# Example 3: Explicit Include Chain
# =============================================================================


def example_include_chain():
    """
    fields[article]=title,author&fields[user]=name,articles&include=author,author.articles

    article -> author -> articles, with each type reduced to its fieldset.
    """
    resolver = create_resolver(path=SCHEMA_DIR)
    return resolver.resolve(
        RESPONSE_BODY,
        SelectionSpec.from_query(
            fields={"article": "title,author", "user": "name,articles"},
            include="author,author.articles",
        ),
    )


# =============================================================================
# Example 4: Lenient Dangling References
# =============================================================================


def example_dangling_identifier():
    """
    An `included` array missing the author.

    With DanglingPolicy.IDENTIFIER the author stays a bare identifier
    instead of failing the whole resolution.
    """
    resolver = create_resolver(
        path=SCHEMA_DIR,
        settings=ResolverSettings(dangling_policy=DanglingPolicy.IDENTIFIER),
    )
    return resolver.resolve({"data": RESPONSE_BODY["data"], "included": []})


# =============================================================================
# Main: Run Examples
# =============================================================================


def main():
    """Run examples."""
    examples = [
        ("Example 1: Defaults", example_defaults),
        ("Example 2: Sparse Fieldset", example_sparse_fieldset),
        ("Example 3: Explicit Include Chain", example_include_chain),
        ("Example 4: Lenient Dangling References", example_dangling_identifier),
    ]
    for title, example in examples:
        print("=" * 60)
        print(title)
        print("=" * 60)
        print(json.dumps(example(), indent=2))
        print()


if __name__ == "__main__":
    main()
