# tests/conftest.py
"""
pytest fixtures for the migration tests

The target is a file-backed SQLite database whose Strapi-style schema is
created here with SQLAlchemy Core. The source is an in-memory implementation
of the SourceStore interface holding the schema registry and the documents.
"""

import copy
import json
from datetime import datetime
from typing import Any, Dict, Iterator, List

import pytest
from sqlalchemy import (
    MetaData, Table, Column, Integer, String, Text, Boolean, DateTime,
)

from docmigrate.core.logging import MigrateLogger
from docmigrate.database.connection import DatabaseManager
from docmigrate.database.target import TargetStore
from docmigrate.registry.model_registry import ModelRegistry
from docmigrate.source.interfaces import SourceStore
from docmigrate.types import DatabaseConfig, FixupConfig


class InMemorySourceStore(SourceStore):
    """Source store backed by plain lists; definitions are stored as JSON text like core_store does."""

    def __init__(self, definitions: List[Dict[str, Any]], collections: Dict[str, List[Dict[str, Any]]]):
        self.definitions = [json.dumps(definition) for definition in definitions]
        self.collections = collections
        self.closed = False

    def model_definitions(self) -> Iterator[Any]:
        return iter(list(self.definitions))

    def count(self, collection: str) -> int:
        return len(self.collections.get(collection, []))

    def iterate(self, collection: str) -> Iterator[Dict[str, Any]]:
        for document in self.collections.get(collection, []):
            yield copy.deepcopy(document)

    def close(self) -> None:
        self.closed = True


# === Schema definitions ===

ADMIN_DEFINITION = {
    "uid": "strapi::user",
    "collectionName": "strapi_administrator",
    "kind": "collectionType",
    "attributes": {
        "username": {"type": "string"},
    },
}

POST_DEFINITION = {
    "uid": "application::post.post",
    "collectionName": "posts",
    "kind": "collectionType",
    "options": {"timestamps": ["createdAt", "updatedAt"]},
    "attributes": {
        "title": {"type": "string", "required": True},
        "meta": {"type": "json"},
        "status": {"type": "string", "default": "draft"},
        "author": {"model": "author", "via": "posts"},
        "tags": {"collection": "tag", "via": "posts", "dominant": True},
        "related": {"collection": "post"},
        "cover": {"model": "file", "plugin": "upload"},
        "gallery": {"collection": "file", "plugin": "upload"},
        "seo": {"type": "component", "component": "shared.seo", "repeatable": False},
        "blocks": {"type": "dynamiczone", "components": ["shared.seo", "shared.quote"]},
        "kicker": {"model": "kicker"},
    },
}

AUTHOR_DEFINITION = {
    "uid": "application::author.author",
    "collectionName": "authors",
    "kind": "collectionType",
    "attributes": {
        "name": {"type": "string"},
        "posts": {"collection": "post", "via": "author"},
    },
}

TAG_DEFINITION = {
    "uid": "application::tag.tag",
    "collectionName": "tags",
    "kind": "collectionType",
    "options": {"timestamps": False},
    "attributes": {
        "label": {"type": "string"},
        "posts": {"collection": "post", "via": "tags"},
    },
}

FILE_DEFINITION = {
    "uid": "plugins::upload.file",
    "collectionName": "upload_file",
    "kind": "collectionType",
    "attributes": {
        "name": {"type": "string"},
        "related": {"collection": "*", "filter": "field", "configurable": False},
    },
}

SEO_DEFINITION = {
    "uid": "shared.seo",
    "collectionName": "components_shared_seos",
    "options": {"timestamps": False},
    "attributes": {
        "title": {"type": "string"},
    },
}

QUOTE_DEFINITION = {
    "uid": "shared.quote",
    "collectionName": "components_shared_quotes",
    "options": {"timestamps": False},
    "attributes": {
        "body": {"type": "text"},
    },
}

KICKER_DEFINITION = {
    "uid": "application::kicker.kicker",
    "collectionName": "kickers",
    "kind": "collectionType",
    "attributes": {
        "label": {"type": "string"},
    },
}


@pytest.fixture
def definitions() -> List[Dict[str, Any]]:
    """Raw definitions in source order; the admin model is deliberately not first"""
    return copy.deepcopy([
        POST_DEFINITION,
        AUTHOR_DEFINITION,
        TAG_DEFINITION,
        FILE_DEFINITION,
        ADMIN_DEFINITION,
        SEO_DEFINITION,
        QUOTE_DEFINITION,
        KICKER_DEFINITION,
    ])


@pytest.fixture
def fixups() -> FixupConfig:
    return FixupConfig(models_to_drop=['application::kicker.kicker'])


@pytest.fixture
def registry(definitions, fixups) -> ModelRegistry:
    return ModelRegistry.build(definitions, fixups)


# === Documents ===

@pytest.fixture
def documents() -> Dict[str, List[Dict[str, Any]]]:
    created = datetime(2023, 3, 24, 9, 30)
    updated = datetime(2023, 3, 25, 12, 0)

    return {
        "strapi_administrator": [
            {"_id": "admin-1", "username": "ra.sewell"},
        ],
        "authors": [
            {"_id": "author-1", "name": "Ada", "createdAt": created, "updatedAt": updated},
            {"_id": "author-2", "name": "Grace", "createdAt": created, "updatedAt": updated},
        ],
        "tags": [
            {"_id": "tag-1", "label": "python"},
            {"_id": "tag-2", "label": "sql"},
        ],
        "upload_file": [
            {"_id": "file-1", "name": "cover.png",
             "related": [{"ref": "post-1", "kind": "Post", "field": "cover"}]},
            {"_id": "file-2", "name": "one.png"},
            {"_id": "file-3", "name": "two.png"},
        ],
        "components_shared_seos": [
            {"_id": "seo-1", "title": "First post"},
            {"_id": "seo-2", "title": "Inline block"},
        ],
        "components_shared_quotes": [
            {"_id": "quote-1", "body": "Premature optimization"},
        ],
        "posts": [
            {
                "_id": "post-1",
                "title": "First post",
                "meta": {"keywords": ["mongo", "sql"], "weight": 2},
                "author": "author-1",
                "tags": ["tag-1", "tag-2"],
                "related": ["post-2"],
                "cover": "file-1",
                "gallery": ["file-2", "file-3"],
                "seo": [{"_id": "link-1", "ref": "seo-1", "kind": "ComponentSharedSeo"}],
                "blocks": [
                    {"_id": "link-2", "ref": "quote-1", "kind": "ComponentSharedQuote"},
                    {"_id": "link-3", "ref": "seo-2", "kind": "ComponentSharedSeo"},
                ],
                "kicker": "kicker-1",
                "createdAt": created,
                "updatedAt": updated,
            },
            {
                "_id": "post-2",
                "title": "Second post",
                "author": None,
                "createdAt": created,
                "updatedAt": updated,
            },
        ],
        "kickers": [
            {"_id": "kicker-1", "label": "dropped"},
        ],
    }


@pytest.fixture
def source(definitions, documents) -> InMemorySourceStore:
    return InMemorySourceStore(definitions, documents)


# === Target database ===

def build_target_schema(metadata: MetaData) -> None:
    Table('strapi_administrator', metadata,
          Column('id', Integer, primary_key=True),
          Column('username', String(255)),
          Column('created_at', DateTime),
          Column('updated_at', DateTime))

    Table('authors', metadata,
          Column('id', Integer, primary_key=True),
          Column('name', String(255)),
          Column('created_at', DateTime),
          Column('updated_at', DateTime))

    Table('tags', metadata,
          Column('id', Integer, primary_key=True),
          Column('label', String(255)))

    Table('posts', metadata,
          Column('id', Integer, primary_key=True),
          Column('title', String(255), nullable=False),
          Column('meta', Text),
          Column('status', String(32)),
          Column('author', Integer),
          Column('uuid', String(64)),
          Column('deleted', Boolean),
          Column('created_by', Integer),
          Column('updated_by', Integer),
          Column('created_at', DateTime),
          Column('updated_at', DateTime))

    Table('upload_file', metadata,
          Column('id', Integer, primary_key=True),
          Column('name', String(255)),
          Column('created_at', DateTime),
          Column('updated_at', DateTime))

    Table('upload_file_morph', metadata,
          Column('id', Integer, primary_key=True),
          Column('upload_file_id', Integer),
          Column('related_id', Integer),
          Column('related_type', String(255)),
          Column('field', String(255)),
          Column('order', Integer))

    Table('components_shared_seos', metadata,
          Column('id', Integer, primary_key=True),
          Column('title', String(255)))

    Table('components_shared_quotes', metadata,
          Column('id', Integer, primary_key=True),
          Column('body', Text))

    Table('posts_components', metadata,
          Column('id', Integer, primary_key=True),
          Column('field', String(255)),
          Column('order', Integer),
          Column('component_type', String(255)),
          Column('component_id', Integer),
          Column('post_id', Integer))

    Table('posts__related', metadata,
          Column('id', Integer, primary_key=True),
          Column('post_id', Integer),
          Column('related_post_id', Integer))

    Table('posts_tags__tags_posts', metadata,
          Column('id', Integer, primary_key=True),
          Column('post_id', Integer),
          Column('tag_id', Integer))


@pytest.fixture
def db_manager(tmp_path):
    """File-backed SQLite target with the schema already created"""
    manager = DatabaseManager(DatabaseConfig(url=f"sqlite:///{tmp_path / 'target.db'}"))
    manager.initialize()

    metadata = MetaData()
    build_target_schema(metadata)
    metadata.create_all(manager.engine)

    yield manager
    manager.shutdown()


@pytest.fixture
def target(db_manager):
    store = TargetStore(db_manager)
    yield store
    store.close()


def fetch_all(db_manager: DatabaseManager, table_name: str, order_by: str = 'id') -> List[Dict[str, Any]]:
    """Rows of a target table as dicts, for assertions"""
    metadata = MetaData()
    table = Table(table_name, metadata, autoload_with=db_manager.engine)
    with db_manager.engine.connect() as conn:
        result = conn.execute(table.select().order_by(table.c[order_by]))
        return [dict(row._mapping) for row in result]


@pytest.fixture
def logger():
    """Get test logger"""
    return MigrateLogger.get_logger('tests')
