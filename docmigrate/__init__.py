# docmigrate/__init__.py

import logging
from pathlib import Path
from typing import Mapping, Optional

from .core.config import load_settings
from .core.logging import MigrateLogger, log_with_context
from .database.connection import DatabaseManager
from .database.target import TargetStore
from .pipeline.migration_pipeline import MigrationPipeline
from .source.mongo import MongoSourceStore
from .types import LoggingConfig, MigrationSettings


def create_pipeline(settings: Optional[MigrationSettings] = None,
                    env_vars: Optional[Mapping[str, str]] = None) -> MigrationPipeline:
    """Wire a MigrationPipeline from settings (read from the environment when omitted)."""
    if settings is None:
        settings = load_settings(env_vars)
    _configure_logging_early(settings.logging)

    logger = MigrateLogger.get_logger('core.init')

    db_manager = DatabaseManager(settings.database)
    db_manager.initialize()

    pipeline = MigrationPipeline(
        source=MongoSourceStore(settings.source),
        target=TargetStore(db_manager),
        fixups=settings.fixups,
    )

    log_with_context(logger, logging.INFO, "Migration pipeline created",
                     database=settings.source.database,
                     dialect=db_manager.dialect_name)
    return pipeline


def _configure_logging_early(config: LoggingConfig) -> None:
    log_dir = Path(config.log_dir) if config.log_dir else None
    MigrateLogger.configure(
        log_dir=log_dir,
        log_level=config.log_level,
        console_enabled=True,
        file_enabled=log_dir is not None,
        structured_format=False,
    )
