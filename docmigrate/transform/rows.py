# docmigrate/transform/rows.py
"""
First pass: one target row per source document.

Scalar attributes are copied (json ones encoded to text), absent fields fall
back to their declared default, the configured fixups run, and the row gets
its sequential id from the translator before it is inserted. No relation
columns are written here; the link pass fills them once every id exists.
"""

import json
from typing import Any, Dict, List, Optional

from ..core.errors import (
    ConfigurationError,
    DanglingReferenceError,
    DuplicateIdentifierError,
    MissingRequiredAttributeError,
)
from ..core.logging import MigrateLogger, log_with_context, DEBUG, WARNING, ERROR
from ..database.target import TargetStore, dump_payload
from ..registry.id_map import IdTranslator, source_key
from ..registry.model_registry import ModelRegistry
from ..types import ModelDefinition, FixupConfig


DEFAULT_TIMESTAMPS = ['createdAt', 'updatedAt']


def timestamp_keys(model: ModelDefinition) -> List[str]:
    """Source keys holding (created, updated) timestamps; empty when disabled."""
    option = model.options.timestamps

    if option is None or option is True:
        return list(DEFAULT_TIMESTAMPS)
    if option is False:
        return []
    if isinstance(option, list) and len(option) == 2 and all(isinstance(key, str) for key in option):
        return list(option)

    raise ConfigurationError("options.timestamps must be true, false or a list of two keys",
                             model_uid=model.uid,
                             timestamps=option)


def encode_json(value: Any) -> str:
    return json.dumps(value, default=str)


class RowMaterializer:
    def __init__(self, target: TargetStore, translator: IdTranslator,
                 registry: ModelRegistry, fixups: Optional[FixupConfig] = None):
        self.target = target
        self.translator = translator
        self.registry = registry
        self.fixups = fixups or registry.fixups
        self.logger = MigrateLogger.get_logger('transform.rows')

    def materialize(self, model: ModelDefinition, document: Dict[str, Any]) -> Dict[str, Any]:
        """Build the row for ``document`` without an id."""
        row: Dict[str, Any] = {}

        keys = timestamp_keys(model)
        if keys:
            created_key, updated_key = keys
            if created_key in document:
                row['created_at'] = document[created_key]
            if updated_key in document:
                row['updated_at'] = document[updated_key]

        for name, attribute in model.scalar_attributes().items():
            if name in document:
                value = document[name]
                row[name] = encode_json(value) if attribute.type == 'json' else value
                continue

            if attribute.has_default:
                row[name] = encode_json(attribute.default) if attribute.type == 'json' else attribute.default
            elif attribute.required and not self._filled_by_fixup(model, name):
                self._log_document("Document is missing a required attribute", model, document, name)
                raise MissingRequiredAttributeError("Required attribute absent and has no default",
                                                    model_uid=model.uid,
                                                    document_id=source_key(document.get('_id')),
                                                    field=name)

        self._apply_fixups(model, document, row)
        return row

    def write(self, model: ModelDefinition, document: Dict[str, Any]) -> int:
        """Materialize, assign the target id and insert; returns the new id."""
        row = self.materialize(model, document)
        try:
            row['id'] = self.translator.assign(model.collection_name, document['_id'])
        except DuplicateIdentifierError:
            self._log_document("Document identifier seen twice", model, document, '_id')
            raise

        self.target.insert(model.collection_name, row)
        log_with_context(self.logger, DEBUG, "Inserted row",
                         model_uid=model.uid,
                         document_id=source_key(document['_id']),
                         row_id=row['id'])
        return row['id']

    # === Fixups ===

    def _filled_by_fixup(self, model: ModelDefinition, name: str) -> bool:
        if model.uid in self.fixups.models_with_uuid_and_deleted and name in ('uuid', 'deleted'):
            return True
        return name in self.fixups.audit_fields and model.uid in self.fixups.models_with_created_by_updated_by

    def _apply_fixups(self, model: ModelDefinition, document: Dict[str, Any], row: Dict[str, Any]) -> None:
        uid = model.uid

        if uid in self.fixups.models_with_uuid_and_deleted:
            row['uuid'] = document.get('uuid') or source_key(document['_id'])
            row['deleted'] = document.get('deleted') or False

        if uid in self.fixups.models_with_created_by_updated_by:
            for name in self.fixups.audit_fields:
                row[name] = self._remap_audit_user(model, document, name)

        for name in self.fixups.empty_string_null_fields.get(uid, []):
            if row.get(name) == '':
                row[name] = None

    def _remap_audit_user(self, model: ModelDefinition, document: Dict[str, Any], name: str) -> Optional[int]:
        value = document.get(name)
        if value is None:
            return None

        admin = self.registry.admin_model
        try:
            if admin is None:
                raise DanglingReferenceError("Audit field set but the administrative model is missing",
                                             model_uid=model.uid,
                                             field=name)
            return self.translator.resolve_in(admin.collection_name, value)
        except DanglingReferenceError:
            if not self.fixups.tolerate_missing_audit_users:
                self._log_document("Audit field references an unknown administrative user", model, document, name)
                raise
            log_with_context(self.logger, WARNING, "Unknown administrative user, audit field set to NULL",
                             model_uid=model.uid,
                             document_id=source_key(document['_id']),
                             field=name)
            return None

    def _log_document(self, message: str, model: ModelDefinition, document: Dict[str, Any], field: str) -> None:
        log_with_context(self.logger, ERROR, f"{message}:\n{dump_payload(document)}",
                         model_uid=model.uid,
                         collection=model.collection_name,
                         field=field)
