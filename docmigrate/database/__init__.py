# docmigrate/database/__init__.py

from .connection import DatabaseManager
from .target import TargetStore
from .dialects import Dialect, get_dialect
