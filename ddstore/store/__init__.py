"""Storage backends for column profiles."""

from ddstore.store.base import Store
from ddstore.store.elastic_store import ElasticStore

__all__ = ["Store", "ElasticStore"]
