# docmigrate/cli/context.py

"""
CLI Context

Single place the commands get their collaborators from:
- Settings (environment, .env and the fixup file)
- Source and target stores
- The migration pipeline wired over them
"""

import logging
from typing import Optional

from ..core.config import load_settings
from ..core.logging import MigrateLogger, log_with_context
from ..database.connection import DatabaseManager
from ..database.target import TargetStore
from ..pipeline.migration_pipeline import MigrationPipeline
from ..registry.model_registry import ModelRegistry
from ..source.mongo import MongoSourceStore
from ..types import MigrationSettings


class CLIContext:
    """
    Lazily builds settings and stores so that commands which never touch the
    target (plan, models) never open a database connection.
    """

    def __init__(self, fixups_path: Optional[str] = None):
        self.logger = MigrateLogger.get_logger('cli.context')
        self.fixups_path = fixups_path
        self._settings: Optional[MigrationSettings] = None
        self._db_manager: Optional[DatabaseManager] = None
        self._source: Optional[MongoSourceStore] = None

    @property
    def settings(self) -> MigrationSettings:
        if self._settings is None:
            self._settings = load_settings(fixups_path=self.fixups_path)
        return self._settings

    @property
    def source(self) -> MongoSourceStore:
        if self._source is None:
            self._source = MongoSourceStore(self.settings.source)
        return self._source

    @property
    def db_manager(self) -> DatabaseManager:
        if self._db_manager is None:
            log_with_context(self.logger, logging.INFO, "Creating target database manager")
            self._db_manager = DatabaseManager(self.settings.database)
            self._db_manager.initialize()
        return self._db_manager

    def load_registry(self) -> ModelRegistry:
        return ModelRegistry.build(self.source.model_definitions(), self.settings.fixups)

    def create_pipeline(self) -> MigrationPipeline:
        return MigrationPipeline(
            source=self.source,
            target=TargetStore(self.db_manager),
            fixups=self.settings.fixups,
        )

    def shutdown(self) -> None:
        if self._source is not None:
            self._source.close()
            self._source = None
        if self._db_manager is not None:
            self._db_manager.shutdown()
            self._db_manager = None
