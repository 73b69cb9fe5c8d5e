"""
ddstore — document-store adapter for the data-discovery profiler.

Receives finished column profiles and sampled column values and writes
them into the ``profile`` and ``text`` Elasticsearch indices.

Quick start::

    from ddstore import ElasticStore, StoreConfig
    store = ElasticStore(StoreConfig.from_env())
    store.init_store()
    store.index_data(7, "employees.csv", "name", ["alice", "bob"])
    store.tear_down_store()
"""

from ddstore.config import StoreConfig
from ddstore.errors import StoreError, StoreNotInitializedError
from ddstore.models import ProfileResult, TextRecord, WriteResult
from ddstore.store import ElasticStore, Store

__all__ = [
    "ElasticStore",
    "ProfileResult",
    "Store",
    "StoreConfig",
    "StoreError",
    "StoreNotInitializedError",
    "TextRecord",
    "WriteResult",
]
__version__ = "0.1.0"
