# docmigrate/core/__init__.py

from .logging import MigrateLogger, log_with_context
from .errors import (
    MigrationError,
    ConfigurationError,
    UnknownGlobalTypeError,
    AmbiguousRelationTargetError,
    UnclassifiableRelationError,
    DataIntegrityError,
    MissingRequiredAttributeError,
    DanglingReferenceError,
    DuplicateIdentifierError,
    WriteError,
)
