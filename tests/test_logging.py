# tests/test_logging.py

import pytest

from docmigrate.core.logging import MigrateLogger, log_with_context, INFO, ERROR


@pytest.fixture
def log_dir(tmp_path):
    MigrateLogger.reset()
    MigrateLogger.configure(log_dir=tmp_path, log_level="INFO", console_enabled=False, file_enabled=True)
    yield tmp_path
    MigrateLogger.reset()


def test_context_is_rendered_and_errors_are_split_out(log_dir):
    logger = MigrateLogger.get_logger('tests.logging')

    log_with_context(logger, INFO, "Inserted 2/2", model_uid="application::post.post", collection="posts")
    log_with_context(logger, ERROR, "Failed to insert row", table="posts", error="NOT NULL constraint failed")

    main_log = (log_dir / "migration.log").read_text()
    error_log = (log_dir / "migration_errors.log").read_text()

    assert "docmigrate.tests.logging - INFO - Inserted 2/2" in main_log
    assert "model_uid=application::post.post collection=posts" in main_log
    assert "Failed to insert row" in error_log
    assert "Inserted 2/2" not in error_log


def test_logger_names_are_prefixed():
    assert MigrateLogger.get_logger('pipeline').name == 'docmigrate.pipeline'
    assert MigrateLogger.get_logger('docmigrate.cli').name == 'docmigrate.cli'
