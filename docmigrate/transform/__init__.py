# docmigrate/transform/__init__.py

from .relations import (
    Relation,
    classify,
    is_attachment,
    many_way_join,
    many_to_many_join,
    many_to_many_table_name,
    resolve_relation,
)
from .rows import RowMaterializer, timestamp_keys
from .links import LinkMaterializer, LinkResult
