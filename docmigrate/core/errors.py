# docmigrate/core/errors.py

from typing import Any, Dict


class MigrationError(Exception):
    """Base class for every fatal migration failure.

    Carries the stage it was raised from and a context dict (model uid,
    collection, document id, ...) that the logging helpers render.
    """

    stage = "migration"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


# === Configuration errors ===

class ConfigurationError(MigrationError):
    stage = "configuration"


class UnknownGlobalTypeError(ConfigurationError):
    pass


class AmbiguousRelationTargetError(ConfigurationError):
    pass


class UnclassifiableRelationError(ConfigurationError):
    pass


# === Data integrity errors ===

class DataIntegrityError(MigrationError):
    stage = "data"


class MissingRequiredAttributeError(DataIntegrityError):
    pass


class DanglingReferenceError(DataIntegrityError):
    pass


class DuplicateIdentifierError(DataIntegrityError):
    pass


# === Target store errors ===

class WriteError(MigrationError):
    stage = "storage"
