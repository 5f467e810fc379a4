"""Pytest configuration and shared fixtures.

The fixtures model a small blog:

    article --author--> author --articles--> article   (two-model cycle)
    article --tags--> tag
    article --seo--> shared.seo (component) --image--> media
    article --blocks--> [blocks.text | blocks.quote --author--> author]
    article --cover--> media
    article --createdBy--> admin::user                  (never exported)
"""

import pytest

from contentexport import ModelRegistry
from contentexport.testing import InMemoryDataSource

ARTICLE = "api::article.article"
AUTHOR = "api::author.author"
TAG = "api::tag.tag"
SEO = "shared.seo"
TEXT_BLOCK = "blocks.text"
QUOTE_BLOCK = "blocks.quote"
MEDIA = "plugin::upload.file"
ADMIN = "admin::user"


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long-running export tests")


BLOG_SCHEMAS = [
    {
        "uid": ARTICLE,
        "kind": "collectionType",
        "pluginOptions": {"i18n": {"localized": True}},
        "attributes": {
            "title": {"type": "string"},
            "author": {"type": "relation", "relation": "manyToOne", "target": AUTHOR},
            "tags": {"type": "relation", "relation": "manyToMany", "target": TAG},
            "seo": {"type": "component", "component": SEO},
            "blocks": {"type": "dynamiczone", "components": [TEXT_BLOCK, QUOTE_BLOCK]},
            "cover": {"type": "media"},
            "createdBy": {"type": "relation", "relation": "oneToOne", "target": ADMIN},
        },
    },
    {
        "uid": AUTHOR,
        "kind": "collectionType",
        "attributes": {
            "name": {"type": "string"},
            "articles": {"type": "relation", "relation": "oneToMany", "target": ARTICLE},
        },
    },
    {
        "uid": TAG,
        "kind": "collectionType",
        "attributes": {"label": {"type": "string"}},
    },
    {
        "uid": SEO,
        "kind": "component",
        "attributes": {
            "metaTitle": {"type": "string"},
            "image": {"type": "media"},
        },
    },
    {
        "uid": TEXT_BLOCK,
        "kind": "component",
        "attributes": {"body": {"type": "text"}},
    },
    {
        "uid": QUOTE_BLOCK,
        "kind": "component",
        "attributes": {
            "text": {"type": "string"},
            "author": {"type": "relation", "relation": "oneToOne", "target": AUTHOR},
        },
    },
    {
        "uid": MEDIA,
        "kind": "collectionType",
        "attributes": {
            "name": {"type": "string"},
            "url": {"type": "string"},
            "related": {"type": "relation", "relation": "morphToMany", "target": ARTICLE},
        },
    },
    {
        "uid": ADMIN,
        "kind": "collectionType",
        "attributes": {"username": {"type": "string"}},
    },
]


@pytest.fixture
def registry():
    """Registry of the blog models."""
    return ModelRegistry.from_schemas(BLOG_SCHEMAS, extension_model_ids=[MEDIA])


@pytest.fixture
def source(registry):
    """Blog content: two articles (one with a French translation), two authors."""
    source = InMemoryDataSource(registry)
    source.add_many(AUTHOR, [
        {"id": 1, "name": "Ada", "articles": [10, 11]},
        {"id": 2, "name": "Grace", "articles": []},
    ])
    source.add_many(TAG, [
        {"id": 100, "label": "python"},
        {"id": 101, "label": "graphs"},
    ])
    source.add_many(SEO, [
        {"id": 30, "metaTitle": "Hello SEO", "image": 50},
    ])
    source.add_many(TEXT_BLOCK, [
        {"id": 40, "body": "First paragraph"},
        {"id": 41, "body": "Second paragraph"},
    ])
    source.add_many(QUOTE_BLOCK, [
        {"id": 40, "text": "Quote", "author": 2},
    ])
    source.add_many(MEDIA, [
        {"id": 50, "name": "seo.png", "url": "/uploads/seo.png", "related": [10]},
        {"id": 51, "name": "cover.png", "url": "/uploads/cover.png", "related": [10]},
    ])
    source.add_many(ADMIN, [
        {"id": 900, "username": "root"},
    ])
    source.add_many(ARTICLE, [
        {
            "id": 10,
            "title": "Hello",
            "author": 1,
            "tags": [100, 101],
            "seo": 30,
            "blocks": [
                {"__component": TEXT_BLOCK, "id": 40},
                {"__component": QUOTE_BLOCK, "id": 40},
                {"__component": TEXT_BLOCK, "id": 41},
            ],
            "cover": 51,
            "createdBy": 900,
            "localizations": [12],
        },
        {
            "id": 11,
            "title": "Second",
            "author": 1,
            "tags": [],
            "seo": None,
            "blocks": [],
            "cover": None,
            "createdBy": 900,
        },
        {
            "id": 12,
            "title": "Bonjour",
            "author": 1,
            "tags": [100],
            "seo": None,
            "blocks": [],
            "cover": None,
            "createdBy": 900,
            "localizations": [10],
        },
    ])
    return source


def make_articles(count, start=1):
    """Plain articles without references, for pagination tests."""
    return [{"id": i, "title": f"Article {i}"} for i in range(start, start + count)]
