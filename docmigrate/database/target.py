# docmigrate/database/target.py

import json
from typing import Any, Dict, List, Optional

from sqlalchemy import Connection, MetaData, Table, inspect, insert, update, text
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from ..core.errors import WriteError
from ..core.logging import MigrateLogger, log_with_context, DEBUG, ERROR
from .connection import DatabaseManager


def dump_payload(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str, sort_keys=True)


class TargetStore:
    """
    Table-qualified writes against the relational target.

    Tables are reflected on first use and cached; the schema itself is
    created elsewhere. Every write goes through one connection so the
    pipeline decides when to commit.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager
        self.logger = MigrateLogger.get_logger('database.target')
        self.metadata = MetaData()
        self._tables: Dict[str, Table] = {}
        self._connection: Optional[Connection] = None

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            self._connection = self.db_manager.connect()
        return self._connection

    @property
    def dialect_name(self) -> str:
        return self.db_manager.dialect_name

    def table(self, name: str) -> Table:
        if name not in self._tables:
            try:
                self._tables[name] = Table(name, self.metadata, autoload_with=self.connection)
            except NoSuchTableError as e:
                raise WriteError("Target table does not exist", table=name) from e
        return self._tables[name]

    def table_names(self) -> List[str]:
        return inspect(self.connection).get_table_names()

    def insert(self, table_name: str, row: Dict[str, Any]) -> None:
        table = self.table(table_name)
        try:
            self.connection.execute(insert(table), row)
        except SQLAlchemyError as e:
            self._log_failure("Failed to insert row", table_name, row, e)
            raise WriteError(f"Insert rejected: {e}", table=table_name) from e

    def bulk_insert(self, table_name: str, rows: List[Dict[str, Any]]) -> int:
        if not rows:
            return 0

        table = self.table(table_name)
        try:
            self.connection.execute(insert(table), rows)
        except SQLAlchemyError as e:
            self._log_failure("Failed to bulk insert rows", table_name, rows, e)
            raise WriteError(f"Bulk insert rejected: {e}", table=table_name) from e

        log_with_context(self.logger, DEBUG, "Bulk inserted rows", table=table_name, row_count=len(rows))
        return len(rows)

    def update_by_id(self, table_name: str, row_id: int, values: Dict[str, Any]) -> None:
        if not values:
            return

        table = self.table(table_name)
        try:
            self.connection.execute(update(table).where(table.c.id == row_id).values(**values))
        except SQLAlchemyError as e:
            self._log_failure("Failed to update row", table_name, {'id': row_id, **values}, e)
            raise WriteError(f"Update rejected: {e}", table=table_name, row_id=row_id) from e

    def execute(self, statement: str, **params) -> Any:
        return self.connection.execute(text(statement), params)

    def commit(self) -> None:
        if self._connection is not None:
            self._connection.commit()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        self._tables.clear()
        self.metadata.clear()

    def _log_failure(self, message: str, table_name: str, payload: Any, error: Exception) -> None:
        log_with_context(self.logger, ERROR, f"{message}:\n{dump_payload(payload)}",
                         table=table_name,
                         error=str(error),
                         exception_type=type(error).__name__)
