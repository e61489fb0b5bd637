# docmigrate/registry/__init__.py

from .model_registry import ModelRegistry, parse_uid
from .id_map import IdTranslator, source_key
from .fixups import apply_fixups
