# docmigrate/types/summary.py

from typing import Dict, List

from msgspec import Struct, field


class ModelSummary(Struct):
    uid: str
    collection: str
    documents: int = 0
    rows_inserted: int = 0
    links_written: int = 0
    fields_skipped: int = 0


class MigrationSummary(Struct):
    models: Dict[str, ModelSummary] = field(default_factory=dict)
    dropped_models: List[str] = field(default_factory=list)

    def for_model(self, uid: str, collection: str) -> ModelSummary:
        if uid not in self.models:
            self.models[uid] = ModelSummary(uid=uid, collection=collection)
        return self.models[uid]

    @property
    def total_rows(self) -> int:
        return sum(m.rows_inserted for m in self.models.values())

    @property
    def total_links(self) -> int:
        return sum(m.links_written for m in self.models.values())
