# docmigrate/core/logging.py
"""
Centralized logging system for the migration tool.

Provides:
- MigrateLogger: Global logging configuration
- Utility functions: Context logging helpers
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime

from logging import DEBUG, INFO, WARNING, ERROR, CRITICAL


CONTEXT_ATTRS = [
    'model_uid', 'collection', 'document_id', 'table', 'field',
    'relation', 'row_count', 'error', 'exception_type',
]


class MigrateFormatter(logging.Formatter):
    def __init__(self, include_context: bool = False):
        self.include_context = include_context
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        base_msg = f"{timestamp} - {record.name} - {record.levelname} - {record.getMessage()}"

        if record.exc_info:
            base_msg = f"{base_msg}\n{self.formatException(record.exc_info)}"

        if not self.include_context:
            return base_msg

        context_parts = []
        for attr in CONTEXT_ATTRS:
            if hasattr(record, attr):
                context_parts.append(f"{attr}={getattr(record, attr)}")

        if context_parts:
            return f"{base_msg} | {' '.join(context_parts)}"

        return base_msg


class MigrateLogger:
    """Global logging configuration and management"""

    _configured = False
    _log_dir: Optional[Path] = None
    _log_level = logging.INFO

    @classmethod
    def configure(cls,
                  log_dir: Optional[Path] = None,
                  log_level: str = "INFO",
                  console_enabled: bool = True,
                  file_enabled: bool = True,
                  structured_format: bool = True) -> None:

        if cls._configured:
            return

        cls._log_dir = log_dir
        cls._log_level = getattr(logging, log_level.upper())

        if file_enabled and log_dir:
            log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger('docmigrate')
        root_logger.setLevel(cls._log_level)

        root_logger.handlers.clear()

        if console_enabled:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(cls._log_level)

            if structured_format:
                console_formatter = MigrateFormatter(include_context=True)
            else:
                console_formatter = logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
                )
            console_handler.setFormatter(console_formatter)
            root_logger.addHandler(console_handler)

        if file_enabled and log_dir:
            file_formatter = MigrateFormatter(include_context=True)

            file_handler = logging.FileHandler(log_dir / 'migration.log')
            file_handler.setLevel(cls._log_level)
            file_handler.setFormatter(file_formatter)
            root_logger.addHandler(file_handler)

            # Offending documents and rows end up here verbatim
            error_handler = logging.FileHandler(log_dir / 'migration_errors.log')
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(file_formatter)
            root_logger.addHandler(error_handler)

        cls._configured = True

    @classmethod
    def reset(cls) -> None:
        logging.getLogger('docmigrate').handlers.clear()
        cls._configured = False

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._configured:
            cls.configure(file_enabled=False)

        if not name.startswith('docmigrate'):
            name = f'docmigrate.{name}'

        return logging.getLogger(name)


# === Utility Functions ===

def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    if logger.isEnabledFor(level):
        record = logger.makeRecord(
            logger.name, level, "", 0, message, (), None
        )
        for key, value in context.items():
            setattr(record, key, value)
        logger.handle(record)
