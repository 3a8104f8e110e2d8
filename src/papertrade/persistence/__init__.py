"""Collection persistence."""

from papertrade.persistence.collection_store import CollectionStore, empty_value

__all__ = ["CollectionStore", "empty_value"]
