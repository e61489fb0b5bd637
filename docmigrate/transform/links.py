# docmigrate/transform/links.py
"""
Second pass: relations, components and attachments.

Runs only after every row exists, so each reference resolves through the
identifier translator. Each document yields at most one update of its own
row (all inline foreign keys together) plus the join, component and morph
rows its attributes call for.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.errors import DataIntegrityError
from ..core.logging import MigrateLogger, log_with_context, DEBUG, WARNING, ERROR
from ..database.target import TargetStore, dump_payload
from ..registry.id_map import IdTranslator, source_key
from ..registry.model_registry import ModelRegistry
from ..types import AttributeDefinition, ModelDefinition, RelationKind
from ..utils.naming import singularize
from .relations import Relation, resolve_relation, dominant_pair, many_way_join, many_to_many_join


@dataclass
class LinkResult:
    links_written: int = 0
    fields_skipped: int = 0


def is_absent(value: Any) -> bool:
    """Unset reference; an empty string counts as unset."""
    return value is None or value == ''


def as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class LinkMaterializer:
    def __init__(self, target: TargetStore, translator: IdTranslator, registry: ModelRegistry):
        self.target = target
        self.translator = translator
        self.registry = registry
        self.file_model = registry.fixups.file_model
        self.logger = MigrateLogger.get_logger('transform.links')
        self._relations: Dict[str, Dict[str, Optional[Relation]]] = {}

    def relations_for(self, model: ModelDefinition) -> Dict[str, Optional[Relation]]:
        """Classified relations of a model by field; None marks a relation to a dropped model."""
        if model.uid not in self._relations:
            relations = {}
            for name, attribute in model.attributes.items():
                if attribute.is_scalar:
                    continue
                relation = resolve_relation(self.registry, name, attribute, self.file_model)
                if relation is not None and relation.kind is RelationKind.MANY_TO_MANY:
                    # Neither side would write the join rows without a dominant one
                    dominant_pair(relation.attribute, relation.inverse)
                if relation is None:
                    log_with_context(self.logger, WARNING, "Relation targets a dropped model, skipping",
                                     model_uid=model.uid,
                                     field=name,
                                     relation=attribute.target)
                relations[name] = relation
            self._relations[model.uid] = relations
        return self._relations[model.uid]

    def write(self, model: ModelDefinition, document: Dict[str, Any]) -> LinkResult:
        result = LinkResult()
        try:
            owner_id = self.translator.resolve_in(model.collection_name, document['_id'])
        except DataIntegrityError:
            self._log_document("Document has no row to link from", model, document, '_id')
            raise
        inline: Dict[str, int] = {}

        for name, relation in self.relations_for(model).items():
            value = document.get(name)
            if is_absent(value):
                continue
            if relation is None:
                result.fields_skipped += 1
                continue

            try:
                result.links_written += self._write_field(model, owner_id, relation, value, document, inline)
            except DataIntegrityError:
                self._log_document("Document references missing data", model, document, name)
                raise

        if inline:
            self.target.update_by_id(model.collection_name, owner_id, inline)
            result.links_written += len(inline)

        return result

    def _write_field(self, model: ModelDefinition, owner_id: int, relation: Relation, value: Any,
                     document: Dict[str, Any], inline: Dict[str, int]) -> int:
        """Write one relation field; inline foreign keys are collected into ``inline`` instead."""
        kind = relation.kind
        name = relation.field

        if kind in (RelationKind.COMPONENT, RelationKind.DYNAMIC_ZONE):
            return self._write_components(model, owner_id, relation, value, document)
        if kind in (RelationKind.SINGLE_ATTACHMENT, RelationKind.MULTIPLE_ATTACHMENT):
            return self._write_attachments(model, owner_id, name, value)
        if kind.is_inline:
            inline[name] = self._resolve(relation, value)
            return 0
        if kind is RelationKind.ONE_TO_MANY:
            # Stored on the other side as its inline foreign key
            return 0
        if kind is RelationKind.MANY_WAY:
            join = many_way_join(model, name, relation.attribute)
            return self._write_join(join, owner_id, relation, value)
        if kind is RelationKind.MANY_TO_MANY:
            if not relation.attribute.dominant:
                return 0
            join = many_to_many_join(relation.attribute, relation.inverse)
            return self._write_join(join, owner_id, relation, value)
        if kind is RelationKind.MORPH:
            return self._write_morph(model, owner_id, name, value)
        return 0

    # === Reference resolution ===

    def _resolve(self, relation: Relation, value: Any) -> int:
        if relation.target is not None:
            return self.translator.resolve_in(relation.target.collection_name, value)
        return self.translator.resolve(value)

    def _is_file_model(self, model: ModelDefinition) -> bool:
        return model.model_name == self.file_model.model and model.plugin == self.file_model.plugin

    # === Writers ===

    def _write_components(self, model: ModelDefinition, owner_id: int, relation: Relation,
                          value: Any, document: Dict[str, Any]) -> int:
        link_table = f"{model.collection_name}_components"
        owner_column = f"{singularize(model.collection_name)}_id"

        rows = []
        for order, link in enumerate(as_list(value), start=1):
            component = self._component_model(relation.attribute, link)
            link_key = link.get('_id')
            if link_key is None:
                link_key = f"{link_table}:{source_key(document['_id'])}:{relation.field}:{order}"

            rows.append({
                'id': self.translator.assign(link_table, link_key),
                'field': relation.field,
                'order': order,
                'component_type': component.collection_name,
                'component_id': self.translator.resolve_in(component.collection_name, link['ref']),
                owner_column: owner_id,
            })

        return self.target.bulk_insert(link_table, rows)

    def _component_model(self, attribute: AttributeDefinition, link: Dict[str, Any]) -> ModelDefinition:
        if attribute.type == 'dynamiczone':
            return self.registry.by_global_id(link.get('kind'))
        return self.registry.get(attribute.component)

    def _write_attachments(self, model: ModelDefinition, owner_id: int, field: str, value: Any) -> int:
        rows = [
            {
                'upload_file_id': self.translator.resolve(file_key),
                'related_id': owner_id,
                'related_type': model.collection_name,
                'field': field,
                'order': order,
            }
            for order, file_key in enumerate(as_list(value), start=1)
        ]
        return self.target.bulk_insert(self.file_model.morph_table, rows)

    def _write_join(self, join, owner_id: int, relation: Relation, value: Any) -> int:
        rows = [
            {join.owner_column: owner_id, join.target_column: self._resolve(relation, key)}
            for key in as_list(value)
        ]
        count = self.target.bulk_insert(join.name, rows)
        log_with_context(self.logger, DEBUG, "Wrote join rows",
                         table=join.name,
                         field=relation.field,
                         row_count=count)
        return count

    def _write_morph(self, model: ModelDefinition, owner_id: int, field: str, value: Any) -> int:
        if self._is_file_model(model):
            # Written from the referencing side as attachments
            return 0

        owner_column = f"{singularize(model.collection_name)}_id"
        rows = []
        for order, item in enumerate(as_list(value), start=1):
            related = self.registry.by_global_id(item.get('kind'))
            rows.append({
                owner_column: owner_id,
                'related_id': self.translator.resolve_in(related.collection_name, item['ref']),
                'related_type': related.collection_name,
                'field': item.get('field', field),
                'order': order,
            })

        return self.target.bulk_insert(f"{model.collection_name}_morph", rows)

    def _log_document(self, message: str, model: ModelDefinition, document: Dict[str, Any], field: str) -> None:
        log_with_context(self.logger, ERROR, f"{message}:\n{dump_payload(document)}",
                         model_uid=model.uid,
                         collection=model.collection_name,
                         field=field)
