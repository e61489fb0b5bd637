# docmigrate/database/dialects.py
"""
Dialect-specific setup around a migration run.

Ids are inserted explicitly and rows arrive out of foreign-key order, so each
dialect gets a chance to relax constraints before the run and to restore
them (and any identity sequences) afterwards. drop_all_tables empties every
table of the target schema; the tables themselves stay in place.
"""

from typing import Dict, Type

from sqlalchemy import delete

from ..core.errors import ConfigurationError
from ..core.logging import MigrateLogger, log_with_context, INFO
from .target import TargetStore


class Dialect:
    name = 'generic'

    def __init__(self, target: TargetStore):
        self.target = target
        self.logger = MigrateLogger.get_logger(f'database.dialects.{self.name}')

    def drop_all_tables(self) -> None:
        tables = self.target.table_names()
        for name in tables:
            self.target.connection.execute(delete(self.target.table(name)))
        self.target.commit()
        log_with_context(self.logger, INFO, "Emptied target tables", row_count=len(tables))

    def before_migration(self) -> None:
        pass

    def after_migration(self) -> None:
        pass

    def quote(self, name: str) -> str:
        return self.target.connection.dialect.identifier_preparer.quote(name)


class SQLiteDialect(Dialect):
    name = 'sqlite'

    def drop_all_tables(self) -> None:
        self.target.execute("PRAGMA foreign_keys = OFF")
        super().drop_all_tables()

    def before_migration(self) -> None:
        self.target.execute("PRAGMA foreign_keys = OFF")
        self.target.commit()

    def after_migration(self) -> None:
        self.target.commit()
        self.target.execute("PRAGMA foreign_keys = ON")


class PostgresDialect(Dialect):
    name = 'postgresql'

    def drop_all_tables(self) -> None:
        tables = self.target.table_names()
        if tables:
            names = ', '.join(self.quote(name) for name in tables)
            self.target.execute(f"TRUNCATE TABLE {names} RESTART IDENTITY CASCADE")
        self.target.commit()
        log_with_context(self.logger, INFO, "Truncated target tables", row_count=len(tables))

    def after_migration(self) -> None:
        # Explicit ids leave serial sequences behind the data
        reset = 0
        for name in self.target.table_names():
            if 'id' not in self.target.table(name).c:
                continue
            sequence = self.target.execute(
                "SELECT pg_get_serial_sequence(:table, 'id')", table=self.quote(name)
            ).scalar()
            if not sequence:
                continue
            self.target.execute(
                f"SELECT setval(:sequence, COALESCE((SELECT MAX(id) FROM {self.quote(name)}), 0) + 1, false)",
                sequence=sequence,
            )
            reset += 1
        self.target.commit()
        log_with_context(self.logger, INFO, "Reset id sequences", row_count=reset)


class MySQLDialect(Dialect):
    name = 'mysql'

    def drop_all_tables(self) -> None:
        self.target.execute("SET FOREIGN_KEY_CHECKS = 0")
        tables = self.target.table_names()
        for name in tables:
            self.target.execute(f"TRUNCATE TABLE {self.quote(name)}")
        self.target.execute("SET FOREIGN_KEY_CHECKS = 1")
        self.target.commit()
        log_with_context(self.logger, INFO, "Truncated target tables", row_count=len(tables))

    def before_migration(self) -> None:
        self.target.execute("SET FOREIGN_KEY_CHECKS = 0")

    def after_migration(self) -> None:
        self.target.commit()
        self.target.execute("SET FOREIGN_KEY_CHECKS = 1")


DIALECTS: Dict[str, Type[Dialect]] = {
    'sqlite': SQLiteDialect,
    'postgresql': PostgresDialect,
    'mysql': MySQLDialect,
    'mariadb': MySQLDialect,
}


def get_dialect(target: TargetStore) -> Dialect:
    name = target.dialect_name
    if name not in DIALECTS:
        raise ConfigurationError("Unsupported target dialect", dialect=name)
    return DIALECTS[name](target)
