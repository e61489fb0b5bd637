# docmigrate/types/schema.py

from enum import Enum
from typing import Any, Dict, List, Optional

import msgspec
from msgspec import Struct, field


WILDCARD = '*'


class AttributeShape(Enum):
    SCALAR = "scalar"
    MODEL_REF = "model_ref"
    COLLECTION_REF = "collection_ref"
    COMPONENT = "component"
    DYNAMIC_ZONE = "dynamiczone"
    MORPH = "morph"


class AttributeDefinition(Struct, rename="camel"):
    type: Optional[str] = None
    model: Optional[str] = None
    collection: Optional[str] = None
    via: Optional[str] = None
    plugin: Optional[str] = None
    dominant: bool = False
    collection_name: Optional[str] = None
    component: Optional[str] = None
    components: Optional[List[str]] = None
    repeatable: bool = False
    default: Any = None
    required: bool = False

    @property
    def shape(self) -> Optional[AttributeShape]:
        """Structural kind of the attribute, None when it cannot be told apart."""
        if self.type == 'component':
            return AttributeShape.COMPONENT
        if self.type == 'dynamiczone':
            return AttributeShape.DYNAMIC_ZONE
        if self.model is not None and self.collection is not None:
            return None
        if self.model == WILDCARD or self.collection == WILDCARD:
            return AttributeShape.MORPH
        if self.model is not None:
            return AttributeShape.MODEL_REF
        if self.collection is not None:
            return AttributeShape.COLLECTION_REF
        if self.type is not None:
            return AttributeShape.SCALAR
        return None

    @property
    def is_scalar(self) -> bool:
        return self.shape is AttributeShape.SCALAR

    @property
    def target(self) -> Optional[str]:
        return self.model if self.model is not None else self.collection

    @property
    def has_default(self) -> bool:
        return self.default is not None


class ModelOptions(Struct, rename="camel"):
    timestamps: Any = None

    def merge(self, other: 'ModelOptions') -> 'ModelOptions':
        return ModelOptions(
            timestamps=other.timestamps if other.timestamps is not None else self.timestamps
        )


class ModelDefinition(Struct, rename="camel"):
    uid: str
    collection_name: Optional[str] = None
    kind: Optional[str] = None
    global_id: Optional[str] = None
    model_name: Optional[str] = None
    plugin: Optional[str] = None
    api_name: Optional[str] = None
    attributes: Dict[str, AttributeDefinition] = field(default_factory=dict)
    options: ModelOptions = field(default_factory=ModelOptions)

    @property
    def is_component(self) -> bool:
        return '::' not in self.uid

    def scalar_attributes(self) -> Dict[str, AttributeDefinition]:
        return {name: attr for name, attr in self.attributes.items() if attr.is_scalar}

    def merge(self, other: 'ModelDefinition') -> 'ModelDefinition':
        """Union of two definitions of the same uid; ``other`` wins on conflicts."""
        if other.uid != self.uid:
            raise ValueError(f"Cannot merge '{other.uid}' into '{self.uid}'")

        values = {}
        for name in self.__struct_fields__:
            if name in ('attributes', 'options'):
                continue
            theirs = getattr(other, name)
            values[name] = theirs if theirs is not None else getattr(self, name)

        return ModelDefinition(
            attributes={**self.attributes, **other.attributes},
            options=self.options.merge(other.options),
            **values,
        )


def decode_model_definition(raw: Any) -> ModelDefinition:
    """Decode one raw schema record (JSON text, bytes or an already parsed dict)."""
    if isinstance(raw, (str, bytes)):
        return msgspec.json.decode(raw, type=ModelDefinition)
    return msgspec.convert(raw, type=ModelDefinition)
