# docmigrate/core/config.py

import os
import logging
from pathlib import Path
from typing import Mapping, Optional, Union

import msgspec
import yaml
from dotenv import load_dotenv

from ..types import (
    DatabaseConfig,
    SourceConfig,
    FixupConfig,
    LoggingConfig,
    MigrationSettings,
)
from .errors import ConfigurationError
from .logging import MigrateLogger, log_with_context


DEFAULT_MONGO_URL = "mongodb://localhost:27017"
DEFAULT_BATCH_SIZE = 500


def load_fixups(path: Optional[Union[str, Path]]) -> FixupConfig:
    """Load the declarative fixup lists from a YAML file.

    No path means no fixups: every list empty, admin model ``strapi::user``.
    """
    logger = MigrateLogger.get_logger('core.config')

    if path is None:
        return FixupConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError("Fixup config file not found", path=str(config_path))

    with open(config_path, 'r') as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse fixup config: {e}", path=str(config_path)) from e

    try:
        fixups = msgspec.convert(data, type=FixupConfig)
    except msgspec.ValidationError as e:
        raise ConfigurationError(f"Invalid fixup config: {e}", path=str(config_path)) from e

    log_with_context(logger, logging.INFO, "Fixup configuration loaded",
                     path=str(config_path),
                     models_to_drop=len(fixups.models_to_drop),
                     deprecated_attributes=len(fixups.deprecated_attributes))
    return fixups


def load_settings(env_vars: Optional[Mapping[str, str]] = None,
                  fixups_path: Optional[Union[str, Path]] = None) -> MigrationSettings:
    """Build run settings from DOCMIGRATE_* environment variables (and .env)."""
    if env_vars is None:
        load_dotenv()
        env_vars = os.environ
    env = env_vars

    mongo_db = env.get("DOCMIGRATE_MONGO_DB")
    if not mongo_db:
        raise ConfigurationError("DOCMIGRATE_MONGO_DB must be set")

    database_url = env.get("DOCMIGRATE_DATABASE_URL")
    if not database_url:
        raise ConfigurationError("DOCMIGRATE_DATABASE_URL must be set")

    try:
        batch_size = int(env.get("DOCMIGRATE_BATCH_SIZE", DEFAULT_BATCH_SIZE))
    except ValueError as e:
        raise ConfigurationError("DOCMIGRATE_BATCH_SIZE must be an integer") from e

    source = SourceConfig(
        url=env.get("DOCMIGRATE_MONGO_URL", DEFAULT_MONGO_URL),
        database=mongo_db,
        batch_size=batch_size,
    )
    database = DatabaseConfig(url=database_url)
    logging_config = LoggingConfig(
        log_level=env.get("DOCMIGRATE_LOG_LEVEL", "INFO"),
        log_dir=env.get("DOCMIGRATE_LOG_DIR"),
    )

    fixups = load_fixups(fixups_path or env.get("DOCMIGRATE_FIXUPS"))

    return MigrationSettings(
        source=source,
        database=database,
        fixups=fixups,
        logging=logging_config,
    )
