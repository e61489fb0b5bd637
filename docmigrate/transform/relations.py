# docmigrate/transform/relations.py
"""
Relation cardinality classification and join-table naming.

classify() is a pure decision table over an attribute and its inverse.
Checks run from the most specific shape to the least specific one and the
first match wins:

    1. component / dynamic zone
    2. file attachment (single / multiple)
    3. one-way          model, no via
    4. one-to-one       model, via -> model
    5. many-to-one      model, via -> collection
    6. one-to-many      collection, via -> model
    7. many-way         collection, no via
    8. many-to-many     collection, via -> collection
    9. morph            model or collection is '*'

An attribute that matches none of them is a configuration error.
"""

from dataclasses import dataclass
from typing import Optional

from ..core.errors import ConfigurationError, UnclassifiableRelationError
from ..types import (
    WILDCARD,
    AttributeShape,
    AttributeDefinition,
    ModelDefinition,
    FileModelRef,
    RelationKind,
    JoinTable,
)
from ..utils.naming import snake_case, pluralize, singularize


def _concrete(value: Optional[str]) -> bool:
    return bool(value) and value != WILDCARD


def is_attachment(attribute: AttributeDefinition, file_model: FileModelRef) -> bool:
    return attribute.plugin == file_model.plugin and file_model.model in (attribute.model, attribute.collection)


def classify(attribute: AttributeDefinition,
             inverse: Optional[AttributeDefinition] = None,
             file_model: FileModelRef = FileModelRef()) -> RelationKind:
    shape = attribute.shape

    if shape is AttributeShape.COMPONENT:
        return RelationKind.COMPONENT
    if shape is AttributeShape.DYNAMIC_ZONE:
        return RelationKind.DYNAMIC_ZONE
    if shape is None or shape is AttributeShape.SCALAR:
        raise UnclassifiableRelationError("Attribute has no relation shape",
                                          attribute_type=attribute.type,
                                          target=attribute.target)

    model, collection, via = attribute.model, attribute.collection, attribute.via

    if attribute.plugin == file_model.plugin:
        if model == file_model.model:
            return RelationKind.SINGLE_ATTACHMENT
        if collection == file_model.model:
            return RelationKind.MULTIPLE_ATTACHMENT

    inverse_model = inverse.model if inverse is not None else None
    inverse_collection = inverse.collection if inverse is not None else None

    if model and not via and model != WILDCARD:
        return RelationKind.ONE_WAY
    if model and via and _concrete(inverse_model):
        return RelationKind.ONE_TO_ONE
    if model and via and _concrete(inverse_collection):
        return RelationKind.MANY_TO_ONE
    if collection and via and _concrete(inverse_model):
        return RelationKind.ONE_TO_MANY
    if collection and not via and collection != WILDCARD:
        return RelationKind.MANY_WAY
    if collection and via and _concrete(inverse_collection):
        return RelationKind.MANY_TO_MANY
    if model == WILDCARD or collection == WILDCARD:
        return RelationKind.MORPH

    raise UnclassifiableRelationError("Relation matches no cardinality rule",
                                      target=attribute.target,
                                      via=via,
                                      inverse_found=inverse is not None)


# === Join tables ===

def many_way_join(model: ModelDefinition, field: str, attribute: AttributeDefinition) -> JoinTable:
    name = attribute.collection_name or f"{model.collection_name}__{snake_case(field)}"

    owner_column = f"{singularize(model.collection_name)}_id"
    target_column = f"{singularize(attribute.collection)}_id"
    if target_column == owner_column:
        target_column = f"related_{target_column}"

    return JoinTable(name=name, owner_column=owner_column, target_column=target_column)


def dominant_pair(attribute: AttributeDefinition, inverse: AttributeDefinition):
    """(dominant, other) sides of a many-to-many relation; exactly one side may be dominant."""
    if bool(attribute.dominant) == bool(inverse.dominant):
        raise ConfigurationError("Many-to-many relation needs exactly one dominant side",
                                 target=attribute.target,
                                 via=attribute.via,
                                 dominant=attribute.dominant)
    if attribute.dominant:
        return attribute, inverse
    return inverse, attribute


def many_to_many_table_name(attribute: AttributeDefinition, inverse: AttributeDefinition) -> str:
    dominant, _ = dominant_pair(attribute, inverse)
    if dominant.collection_name:
        return dominant.collection_name

    sides = sorted([attribute, inverse], key=lambda side: (side.collection, side.dominant, side.via or ''))
    return '__'.join(
        snake_case(f"{pluralize(side.collection)}_{pluralize(side.via)}") for side in sides
    )


def many_to_many_join(attribute: AttributeDefinition, inverse: AttributeDefinition) -> JoinTable:
    """Join table of a symmetric relation, seen from ``attribute``'s side.

    Names are derived from the dominant side only, so both ends agree on the
    table and on which column holds which model's ids.
    """
    dominant, other = dominant_pair(attribute, inverse)
    name = many_to_many_table_name(attribute, inverse)

    # other.collection is the model that owns the dominant attribute
    dominant_owner = f"{singularize(other.collection)}_id"
    dominant_target = f"{singularize(dominant.collection)}_id"
    if dominant_owner == dominant_target:
        dominant_owner = f"{singularize(dominant.via)}_id"

    if attribute is dominant:
        return JoinTable(name=name, owner_column=dominant_owner, target_column=dominant_target)
    return JoinTable(name=name, owner_column=dominant_target, target_column=dominant_owner)


# === Resolution against the registry ===

@dataclass
class Relation:
    field: str
    attribute: AttributeDefinition
    kind: RelationKind
    target: Optional[ModelDefinition] = None
    inverse: Optional[AttributeDefinition] = None


def resolve_relation(registry, field: str, attribute: AttributeDefinition,
                     file_model: FileModelRef) -> Optional[Relation]:
    """Classify a non-scalar attribute with its target and inverse looked up.

    Returns None when the relation points at a dropped model.
    """
    shape = attribute.shape
    if shape not in (AttributeShape.MODEL_REF, AttributeShape.COLLECTION_REF) \
            or is_attachment(attribute, file_model):
        return Relation(field=field, attribute=attribute, kind=classify(attribute, None, file_model))

    target = registry.find_target(attribute)
    if target is None:
        return None

    inverse = registry.inverse_of(attribute, target)
    kind = classify(attribute, inverse, file_model)
    return Relation(field=field, attribute=attribute, kind=kind, target=target, inverse=inverse)
