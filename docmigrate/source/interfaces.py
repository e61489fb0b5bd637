# docmigrate/source/interfaces.py
"""
Interface for the document store being migrated.

This module defines what the pipeline needs from the source: the raw
schema records and a streaming scan over each model's container.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator


class SourceStore(ABC):
    """Interface for read-only access to the source document store."""

    @abstractmethod
    def model_definitions(self) -> Iterator[Any]:
        """
        Yield the serialized model definitions held by the schema registry.

        The order must be stable across calls for an unchanged source, since
        it decides which of two divergent definitions wins a merge.
        """
        pass

    @abstractmethod
    def count(self, collection: str) -> int:
        """
        Number of documents in a container.

        Args:
            collection: Source container name
        """
        pass

    @abstractmethod
    def iterate(self, collection: str) -> Iterator[Dict[str, Any]]:
        """
        Stream every document of a container.

        Args:
            collection: Source container name

        Returns:
            Iterator over documents; each has a source-unique '_id'
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        pass
