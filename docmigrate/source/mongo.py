# docmigrate/source/mongo.py

import re
from typing import Any, Dict, Iterator, Optional

from pymongo import MongoClient
from pymongo.database import Database

from ..core.logging import MigrateLogger, log_with_context, INFO, DEBUG
from ..types import SourceConfig
from .interfaces import SourceStore


class MongoSourceStore(SourceStore):
    """
    MongoDB-backed source.

    Model definitions live as JSON strings in the registry collection under
    keys starting with the configured prefix. They are read newest first
    (reverse natural order), which keeps merge results stable for a source
    that does not change during the run.
    """

    def __init__(self, config: SourceConfig, client: Optional[MongoClient] = None):
        self.config = config
        self.logger = MigrateLogger.get_logger('source.mongo')
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            log_with_context(self.logger, INFO, "Connecting to MongoDB", database=self.config.database)
            self._client = MongoClient(self.config.url)
        return self._client

    @property
    def db(self) -> Database:
        return self.client[self.config.database]

    def model_definitions(self) -> Iterator[Any]:
        registry = self.db[self.config.registry_collection]
        prefix = re.escape(self.config.registry_key_prefix)
        cursor = registry.find({'key': {'$regex': f'^{prefix}'}}).sort('$natural', -1)
        try:
            for item in cursor:
                yield item['value']
        finally:
            cursor.close()

    def count(self, collection: str) -> int:
        return self.db[collection].count_documents({})

    def iterate(self, collection: str) -> Iterator[Dict[str, Any]]:
        cursor = self.db[collection].find(batch_size=self.config.batch_size)
        log_with_context(self.logger, DEBUG, "Opened cursor", collection=collection)
        try:
            for document in cursor:
                yield document
        finally:
            cursor.close()

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self.logger.info("MongoDB connection closed")
        self._client = None
