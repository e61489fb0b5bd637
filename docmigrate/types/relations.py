# docmigrate/types/relations.py

from enum import Enum

from msgspec import Struct


class RelationKind(Enum):
    COMPONENT = "component"
    DYNAMIC_ZONE = "dynamiczone"
    SINGLE_ATTACHMENT = "single_attachment"
    MULTIPLE_ATTACHMENT = "multiple_attachment"
    ONE_WAY = "oneWay"
    ONE_TO_ONE = "oneToOne"
    MANY_TO_ONE = "manyToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_WAY = "manyWay"
    MANY_TO_MANY = "manyToMany"
    MORPH = "morph"

    @property
    def is_inline(self) -> bool:
        return self in (RelationKind.ONE_WAY, RelationKind.ONE_TO_ONE, RelationKind.MANY_TO_ONE)


class JoinTable(Struct, frozen=True):
    name: str
    owner_column: str    # holds the id of the document being processed
    target_column: str   # holds the id of the referenced document
