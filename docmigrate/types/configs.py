# docmigrate/types/configs.py

from typing import Dict, List, Optional

from msgspec import Struct, field


class DatabaseConfig(Struct):
    url: str
    pool_size: int = 5
    max_overflow: int = 10


class SourceConfig(Struct):
    url: str
    database: str
    batch_size: int = 500
    registry_collection: str = 'core_store'
    registry_key_prefix: str = 'model_def'


class FileModelRef(Struct, frozen=True):
    model: str = 'file'
    plugin: str = 'upload'
    morph_table: str = 'upload_file_morph'


class FixupConfig(Struct, forbid_unknown_fields=True):
    """Declarative corrections applied to the registry and the row pass.

    Every list here is deployment data, not migration logic.
    """
    admin_model_uid: str = 'strapi::user'
    file_model: FileModelRef = field(default_factory=FileModelRef)
    audit_fields: List[str] = field(default_factory=lambda: ['created_by', 'updated_by'])
    models_to_drop: List[str] = field(default_factory=list)
    models_with_uuid_and_deleted: List[str] = field(default_factory=list)
    models_with_created_by_updated_by: List[str] = field(default_factory=list)
    deprecated_attributes: List[str] = field(default_factory=list)
    attributes_to_drop: Dict[str, List[str]] = field(default_factory=dict)
    empty_string_null_fields: Dict[str, List[str]] = field(default_factory=dict)
    dominant_attributes: Dict[str, List[str]] = field(default_factory=dict)
    tolerate_missing_audit_users: bool = False


class LoggingConfig(Struct):
    log_level: str = 'INFO'
    log_dir: Optional[str] = None


class MigrationSettings(Struct):
    source: SourceConfig
    database: DatabaseConfig
    fixups: FixupConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
