# docmigrate/registry/fixups.py
"""
Declarative field-set corrections applied once per model before migrating.

Each correction is driven by a list in FixupConfig; nothing here compares
against a specific model uid.
"""

from ..core.logging import MigrateLogger, log_with_context, INFO, DEBUG
from ..types import AttributeDefinition, ModelDefinition, FixupConfig


def apply_fixups(model: ModelDefinition, fixups: FixupConfig) -> ModelDefinition:
    logger = MigrateLogger.get_logger('registry.fixups')
    uid = model.uid

    if uid in fixups.models_with_uuid_and_deleted:
        model.attributes['uuid'] = AttributeDefinition(type='uid')
        model.attributes['deleted'] = AttributeDefinition(type='boolean', default=False)
        log_with_context(logger, DEBUG, "Injected uuid/deleted attributes", model_uid=uid)

    if uid in fixups.models_with_created_by_updated_by:
        for name in fixups.audit_fields:
            model.attributes[name] = AttributeDefinition(type='integer')
        log_with_context(logger, DEBUG, "Injected audit attributes", model_uid=uid)

    removals = list(fixups.deprecated_attributes) + list(fixups.attributes_to_drop.get(uid, []))
    for name in removals:
        if name in model.attributes:
            del model.attributes[name]
            log_with_context(logger, INFO, "Removed attribute", model_uid=uid, field=name)

    for name in fixups.dominant_attributes.get(uid, []):
        attribute = model.attributes.get(name)
        if attribute is not None:
            attribute.dominant = True

    return model
