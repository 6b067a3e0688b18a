"""
Pytest configuration and fixtures for jsonapi-shape tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from jsonapi_shape import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from jsonapi_shape import DocumentResolver, ResolverSettings, SchemaRegistry  # noqa: E402


@pytest.fixture
def blog_definitions():
    """article/user schema: article.author included by default, user.articles not."""
    return {
        "article": {
            "attributes": {
                "title": {"default": True},
                "body": {"default": True},
            },
            "relationships": {
                "author": {"cardinality": "one", "target": "user", "default": True},
            },
        },
        "user": {
            "attributes": {
                "email": {"default": True},
                "name": {"default": False},
            },
            "relationships": {
                "articles": {"cardinality": "many", "target": "article", "default": False},
            },
        },
    }


@pytest.fixture
def registry(blog_definitions):
    return SchemaRegistry.register(blog_definitions)


@pytest.fixture
def article_document():
    """Article 42 written by user 1, who links back to article 42."""
    return {
        "data": {
            "type": "article",
            "id": "42",
            "attributes": {"title": "T", "body": "B"},
            "relationships": {"author": {"type": "user", "id": "1"}},
        },
        "included": [
            {
                "type": "user",
                "id": "1",
                "attributes": {"email": "e", "name": "n"},
                "relationships": {"articles": []},
            }
        ],
    }


@pytest.fixture
def cyclic_document():
    """Same article, but the author's articles relationship points back at it."""
    return {
        "data": {
            "type": "article",
            "id": "42",
            "attributes": {"title": "T", "body": "B"},
            "relationships": {"author": {"data": {"type": "user", "id": "1"}}},
        },
        "included": [
            {
                "type": "user",
                "id": "1",
                "attributes": {"email": "e", "name": "n"},
                "relationships": {"articles": {"data": [{"type": "article", "id": "42"}]}},
            }
        ],
    }


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return ResolverSettings()


@pytest.fixture
def resolver(registry, settings):
    return DocumentResolver(registry, settings=settings)
