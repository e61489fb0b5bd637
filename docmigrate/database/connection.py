# docmigrate/database/connection.py

from sqlalchemy import create_engine, Engine, Connection, text
from sqlalchemy.engine import make_url
from sqlalchemy.pool import QueuePool

from ..core.logging import MigrateLogger, log_with_context, INFO, ERROR
from ..types import DatabaseConfig


class DatabaseManager:
    def __init__(self, config: DatabaseConfig):
        if not config:
            raise ValueError("DatabaseConfig is required")

        self.config = config
        self.logger = MigrateLogger.get_logger(f'database.{self.__class__.__name__.lower()}')
        self._engine = None

        log_with_context(self.logger, INFO, "DatabaseManager initialized",
                         db_url_host=self._extract_host_from_url(config.url))

    def _extract_host_from_url(self, url: str) -> str:
        try:
            return make_url(url).host or "local"
        except Exception:
            return "unknown"

    def initialize(self) -> None:
        if self._engine is not None:
            self.logger.warning("Database already initialized")
            return

        try:
            self.logger.info("Initializing database engine")

            engine_options = {'echo': False}
            if make_url(self.config.url).get_backend_name() != 'sqlite':
                engine_options.update(
                    poolclass=QueuePool,
                    pool_size=self.config.pool_size,
                    max_overflow=self.config.max_overflow,
                    pool_timeout=30,
                    pool_recycle=3600,
                )

            self._engine = create_engine(self.config.url, **engine_options)

            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            log_with_context(self.logger, INFO, "Database initialized successfully",
                             dialect=self._engine.dialect.name)

        except Exception as e:
            log_with_context(self.logger, ERROR, "Failed to initialize database",
                             error=str(e),
                             exception_type=type(e).__name__)
            raise

    def shutdown(self) -> None:
        self.logger.info("Shutting down database connections")

        try:
            if self._engine:
                self._engine.dispose()
                self._engine = None

            self.logger.info("Database shutdown completed")

        except Exception as e:
            log_with_context(self.logger, ERROR, "Error during database shutdown",
                             error=str(e),
                             exception_type=type(e).__name__)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def connect(self) -> Connection:
        return self.engine.connect()
