# docmigrate/source/__init__.py

from .interfaces import SourceStore
from .mongo import MongoSourceStore
