# docmigrate/registry/id_map.py

from collections import defaultdict
from typing import Any, Dict, Tuple

from ..core.errors import DanglingReferenceError, DuplicateIdentifierError


def source_key(value: Any) -> str:
    """Normalise a source key; an ObjectId and its hex string are the same key."""
    return str(value)


class IdTranslator:
    """
    Maps (container, source key) to sequential integer ids.

    Counters are kept per container and start at 1. Source keys are unique
    across the whole source store, so lookups need only the key.
    Not thread-safe: a single control thread assigns during the row pass
    and only reads afterwards.
    """

    def __init__(self):
        self._counters: Dict[str, int] = defaultdict(int)
        self._ids: Dict[str, Tuple[str, int]] = {}

    def assign(self, container: str, key: Any) -> int:
        key = source_key(key)
        if key in self._ids:
            existing_container, existing_id = self._ids[key]
            raise DuplicateIdentifierError("Source key assigned twice",
                                           document_id=key,
                                           collection=container,
                                           first_collection=existing_container,
                                           first_id=existing_id)

        self._counters[container] += 1
        target_id = self._counters[container]
        self._ids[key] = (container, target_id)
        return target_id

    def resolve(self, key: Any) -> int:
        normalized = source_key(key)
        if normalized not in self._ids:
            raise DanglingReferenceError("Reference to a document that was never materialized",
                                         document_id=normalized)
        return self._ids[normalized][1]

    def resolve_in(self, container: str, key: Any) -> int:
        normalized = source_key(key)
        entry = self._ids.get(normalized)
        if entry is None or entry[0] != container:
            raise DanglingReferenceError("Reference to a document missing from its collection",
                                         document_id=normalized,
                                         collection=container)
        return entry[1]

    def contains(self, key: Any) -> bool:
        return source_key(key) in self._ids

    def count(self, container: str) -> int:
        return self._counters.get(container, 0)

    def __len__(self) -> int:
        return len(self._ids)
