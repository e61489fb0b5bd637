# tests/test_pipeline.py

import json

import pytest
from sqlalchemy import text

from docmigrate.core.errors import ConfigurationError, DanglingReferenceError
from docmigrate.pipeline.migration_pipeline import MigrationPipeline
from docmigrate.types import FixupConfig

from conftest import InMemorySourceStore, fetch_all


@pytest.fixture
def pipeline(source, target, fixups):
    return MigrationPipeline(source=source, target=target, fixups=fixups)


def test_full_migration(pipeline, source, db_manager):
    summary = pipeline.run()

    assert source.closed
    assert summary.dropped_models == ["application::kicker.kicker"]
    assert "application::kicker.kicker" not in summary.models

    posts = summary.models["application::post.post"]
    assert (posts.documents, posts.rows_inserted, posts.fields_skipped) == (2, 2, 1)
    assert summary.total_rows == 13

    stored = fetch_all(db_manager, "posts")
    assert [(p["id"], p["title"], p["status"]) for p in stored] == [(1, "First post", "draft"), (2, "Second post", "draft")]
    assert json.loads(stored[0]["meta"]) == {"keywords": ["mongo", "sql"], "weight": 2}


def test_one_to_many_scenario(pipeline, db_manager):
    pipeline.run()

    posts = fetch_all(db_manager, "posts")
    # Only the owning side carries the foreign key
    assert {p["id"]: p["author"] for p in posts} == {1: 1, 2: None}
    assert "posts" not in fetch_all(db_manager, "authors")[0]


def test_many_to_many_scenario(pipeline, db_manager):
    pipeline.run()

    links = fetch_all(db_manager, "posts_tags__tags_posts")
    # Written once, from the dominant side only
    assert sorted((link["post_id"], link["tag_id"]) for link in links) == [(1, 1), (1, 2)]


def test_dropped_model_scenario(pipeline, db_manager):
    summary = pipeline.run()

    # No kickers table exists in the target; reaching it would have failed the run
    assert summary.models["application::post.post"].fields_skipped == 1
    assert len(fetch_all(db_manager, "posts")) == 2


def test_audit_remap_scenario(definitions, documents, target, db_manager):
    documents["posts"][0]["created_by"] = "admin-1"
    documents["posts"][0]["updated_by"] = "admin-1"
    fixups = FixupConfig(
        models_to_drop=["application::kicker.kicker"],
        models_with_created_by_updated_by=["application::post.post"],
        models_with_uuid_and_deleted=["application::post.post"],
    )

    pipeline = MigrationPipeline(InMemorySourceStore(definitions, documents), target, fixups)
    pipeline.run()

    posts = fetch_all(db_manager, "posts")
    assert (posts[0]["created_by"], posts[0]["updated_by"]) == (1, 1)
    assert (posts[1]["created_by"], posts[1]["updated_by"]) == (None, None)
    assert [p["uuid"] for p in posts] == ["post-1", "post-2"]
    assert [p["deleted"] for p in posts] == [False, False]


def test_every_row_exists_before_links(pipeline, source):
    """Posts reference authors that come later in processing order"""
    seen = []
    source_iterate = source.iterate

    def recording_iterate(collection):
        seen.append(collection)
        return source_iterate(collection)

    source.iterate = recording_iterate
    pipeline.run()

    row_pass = seen[:len(seen) // 2]
    link_pass = seen[len(seen) // 2:]
    assert row_pass == link_pass
    assert row_pass[0] == "strapi_administrator"
    assert row_pass.index("posts") < row_pass.index("authors")


def test_target_is_emptied_first(pipeline, db_manager):
    with db_manager.engine.begin() as conn:
        conn.execute(text("INSERT INTO tags (id, label) VALUES (99, 'stale')"))

    pipeline.run()

    assert [tag["id"] for tag in fetch_all(db_manager, "tags")] == [1, 2]


def test_failure_propagates_and_closes_stores(definitions, documents, target, fixups):
    documents["posts"][0]["author"] = "author-404"
    source = InMemorySourceStore(definitions, documents)

    with pytest.raises(DanglingReferenceError):
        MigrationPipeline(source, target, fixups).run()

    assert source.closed


def test_missing_dominant_side_fails_before_writing(definitions, documents, target, fixups, db_manager):
    post_definition = next(d for d in definitions if d["uid"] == "application::post.post")
    del post_definition["attributes"]["tags"]["dominant"]
    with db_manager.engine.begin() as conn:
        conn.execute(text("INSERT INTO tags (id, label) VALUES (99, 'kept')"))

    source = InMemorySourceStore(definitions, documents)
    with pytest.raises(ConfigurationError):
        MigrationPipeline(source, target, fixups).run()

    assert source.closed
    assert [tag["id"] for tag in fetch_all(db_manager, "tags")] == [99]
    assert fetch_all(db_manager, "posts_tags__tags_posts") == []


def test_create_pipeline_from_environment(tmp_path):
    from docmigrate import create_pipeline
    from docmigrate.source.mongo import MongoSourceStore

    pipeline = create_pipeline(env_vars={
        "DOCMIGRATE_MONGO_DB": "strapi",
        "DOCMIGRATE_DATABASE_URL": f"sqlite:///{tmp_path / 'target.db'}",
    })

    assert isinstance(pipeline.source, MongoSourceStore)
    assert pipeline.source.config.database == "strapi"
    assert pipeline.target.dialect_name == "sqlite"
    pipeline.target.db_manager.shutdown()
