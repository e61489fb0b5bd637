# docmigrate/registry/model_registry.py

from typing import Any, Dict, Iterable, List, Optional

from ..core.errors import (
    ConfigurationError,
    UnknownGlobalTypeError,
    AmbiguousRelationTargetError,
)
from ..core.logging import MigrateLogger, log_with_context, INFO, DEBUG, WARNING
from ..types import AttributeDefinition, ModelDefinition, FixupConfig, decode_model_definition
from ..utils.naming import pascal_case
from .fixups import apply_fixups


ADMIN_NAMESPACE = 'strapi'
PLUGIN_NAMESPACE = 'plugins'
API_NAMESPACE = 'application'


def parse_uid(model: ModelDefinition) -> ModelDefinition:
    """Fill model_name / plugin / api_name / global_id from the uid.

    uid forms:
        strapi::<name>                  administrative models (plugin 'admin')
        plugins::<plugin>.<name>        plugin models
        application::<api>.<name>       api models
        <category>.<name>               components
    """
    uid = model.uid

    if '::' not in uid:
        if '.' not in uid:
            raise ConfigurationError("Component uid must be '<category>.<name>'", model_uid=uid)
        model.model_name = uid.split('.', 1)[1]
        # Always prefixed, a component 'seo' must not collide with a content type 'seo'
        model.global_id = pascal_case(f"component_{uid}")
        return model

    namespace, rest = uid.split('::', 1)
    if namespace == ADMIN_NAMESPACE:
        model.plugin = 'admin'
        model.model_name = rest
    elif '.' in rest:
        group, name = rest.split('.', 1)
        model.model_name = name
        if namespace == PLUGIN_NAMESPACE:
            model.plugin = group
        else:
            model.api_name = group
    else:
        raise ConfigurationError("Unrecognised model uid", model_uid=uid)

    if not model.global_id:
        prefix = f"{model.plugin}-" if model.plugin else ''
        model.global_id = pascal_case(f"{prefix}{model.model_name}")
    return model


class ModelRegistry:
    """
    Reconciled view of every model definition found in the source store.

    Owns the processing order (administrative model first) and the lookups
    the two migration passes need: by uid, by global type name and by
    relation target.
    """

    def __init__(self, fixups: Optional[FixupConfig] = None):
        self.fixups = fixups or FixupConfig()
        self.logger = MigrateLogger.get_logger('registry.model_registry')
        self._models: List[ModelDefinition] = []
        self._by_uid: Dict[str, ModelDefinition] = {}
        self._by_global_id: Dict[str, ModelDefinition] = {}
        self._dropped: List[ModelDefinition] = []

    # === Building ===

    @classmethod
    def build(cls, raw_definitions: Iterable[Any], fixups: Optional[FixupConfig] = None) -> 'ModelRegistry':
        registry = cls(fixups)
        models = registry.load(raw_definitions)
        models = registry.merge(models)
        models = registry.order(models)
        registry.register(models)
        return registry

    def load(self, raw_definitions: Iterable[Any]) -> List[ModelDefinition]:
        models = []
        for raw in raw_definitions:
            try:
                model = decode_model_definition(raw)
            except Exception as e:
                raise ConfigurationError(f"Unreadable model definition: {e}") from e
            models.append(parse_uid(model))

        log_with_context(self.logger, DEBUG, "Loaded raw model definitions", row_count=len(models))
        return models

    def merge(self, models: List[ModelDefinition]) -> List[ModelDefinition]:
        merged: Dict[str, ModelDefinition] = {}
        dropped: Dict[str, ModelDefinition] = {}

        for model in models:
            if model.uid in self.fixups.models_to_drop:
                if model.uid not in dropped:
                    log_with_context(self.logger, INFO, "Dropping model", model_uid=model.uid)
                    dropped[model.uid] = model
                else:
                    dropped[model.uid] = dropped[model.uid].merge(model)
                continue

            existing = merged.get(model.uid)
            if existing is None:
                merged[model.uid] = model
                continue

            added = sorted(set(model.attributes) - set(existing.attributes))
            if added:
                log_with_context(self.logger, INFO, "Merging divergent model definitions",
                                 model_uid=model.uid,
                                 field=', '.join(added))
            merged[model.uid] = existing.merge(model)

        self._dropped = list(dropped.values())
        return list(merged.values())

    def order(self, models: List[ModelDefinition]) -> List[ModelDefinition]:
        admin_uid = self.fixups.admin_model_uid
        admin = [m for m in models if m.uid == admin_uid]
        if not admin:
            log_with_context(self.logger, WARNING, "Administrative model not found, audit fields cannot be remapped",
                             model_uid=admin_uid)
            return list(models)
        return admin + [m for m in models if m.uid != admin_uid]

    def register(self, models: List[ModelDefinition]) -> None:
        self._models = []
        self._by_uid = {}
        self._by_global_id = {}

        for model in models:
            apply_fixups(model, self.fixups)
            if not model.collection_name:
                raise ConfigurationError("Model has no collection name", model_uid=model.uid)
            if model.global_id in self._by_global_id:
                raise ConfigurationError("Global type name collision",
                                         model_uid=model.uid,
                                         other=self._by_global_id[model.global_id].uid,
                                         global_id=model.global_id)
            self._models.append(model)
            self._by_uid[model.uid] = model
            self._by_global_id[model.global_id] = model

        log_with_context(self.logger, INFO, "Model registry ready",
                         row_count=len(self._models),
                         dropped=len(self._dropped))

    # === Lookups ===

    @property
    def models(self) -> List[ModelDefinition]:
        return list(self._models)

    @property
    def dropped_models(self) -> List[ModelDefinition]:
        return list(self._dropped)

    @property
    def admin_model(self) -> Optional[ModelDefinition]:
        return self._by_uid.get(self.fixups.admin_model_uid)

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self):
        return iter(self._models)

    def __contains__(self, uid: str) -> bool:
        return uid in self._by_uid

    def get(self, uid: str) -> ModelDefinition:
        if uid not in self._by_uid:
            raise ConfigurationError("Unknown model uid", model_uid=uid)
        return self._by_uid[uid]

    def by_global_id(self, global_id: str) -> ModelDefinition:
        if global_id not in self._by_global_id:
            raise UnknownGlobalTypeError("Reference to a type missing from the model registry",
                                         global_id=global_id)
        return self._by_global_id[global_id]

    def is_dropped_target(self, attribute: AttributeDefinition) -> bool:
        return bool(self._match(self._dropped, attribute))

    def find_target(self, attribute: AttributeDefinition) -> Optional[ModelDefinition]:
        """Model an attribute's model/collection points at, None if it was dropped."""
        candidates = self._match(self._models, attribute)

        if len(candidates) > 1:
            raise AmbiguousRelationTargetError("Relation target matches several models",
                                               target=attribute.target,
                                               plugin=attribute.plugin,
                                               candidates=[m.uid for m in candidates])
        if candidates:
            return candidates[0]
        if self.is_dropped_target(attribute):
            return None

        raise ConfigurationError("Relation target is not a known model",
                                 target=attribute.target,
                                 plugin=attribute.plugin)

    def inverse_of(self, attribute: AttributeDefinition,
                   target: Optional[ModelDefinition] = None) -> Optional[AttributeDefinition]:
        if not attribute.via:
            return None
        if target is None:
            target = self.find_target(attribute)
        if target is None:
            return None
        return target.attributes.get(attribute.via)

    @staticmethod
    def _match(models: List[ModelDefinition], attribute: AttributeDefinition) -> List[ModelDefinition]:
        name = attribute.target
        named = [m for m in models if m.model_name == name and not m.is_component]

        if attribute.plugin:
            return [m for m in named if m.plugin == attribute.plugin]

        # Without a plugin qualifier api models win over plugin models of the same name
        api_models = [m for m in named if m.plugin is None]
        return api_models or named
