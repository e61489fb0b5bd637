# docmigrate/types/__init__.py

# Schema Types
from .schema import (
    WILDCARD,
    AttributeShape,
    AttributeDefinition,
    ModelOptions,
    ModelDefinition,
    decode_model_definition,
)

# Relation Types
from .relations import RelationKind, JoinTable

# Configuration Types
from .configs import (
    DatabaseConfig,
    SourceConfig,
    FileModelRef,
    FixupConfig,
    LoggingConfig,
    MigrationSettings,
)

# Reporting Types
from .summary import ModelSummary, MigrationSummary
