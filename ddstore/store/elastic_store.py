"""
Elasticsearch store — provisioning + writes for column profiles.

Maintains two indices:

* **``text``** — one doc per column with the sampled values joined into a
  single English-analyzed field (keyword search, highlighting).
* **``profile``** — one doc per column with its statistics, keyed by the
  column id so re-profiling a column overwrites the previous document.

A single :class:`~elasticsearch.Elasticsearch` client serves both the one-time
schema setup and the per-document writes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from elasticsearch import ApiError, Elasticsearch, TransportError
from elasticsearch.helpers import bulk

from ddstore.errors import StoreNotInitializedError
from ddstore.models.profile_result import TextRecord
from ddstore.models.write_result import WriteResult

if TYPE_CHECKING:
    from ddstore.config import StoreConfig
    from ddstore.models.profile_result import ProfileResult

__all__ = [
    "ElasticStore",
    "build_profile_document",
    "build_text_document",
    "concat_values",
    "document_id",
    "format_entities",
    "profile_mapping",
    "text_mapping",
]

logger = logging.getLogger(__name__)

# Client-side failures that are logged and reported, never raised to callers.
_STORE_ERRORS = (ApiError, TransportError)


# ---------------------------------------------------------------------------
# Index mappings
# ---------------------------------------------------------------------------

_TEXT_PROPERTIES: dict[str, Any] = {
    "id":         {"type": "integer", "store": True},
    "sourceName": {"type": "keyword"},
    "columnName": {"type": "keyword", "ignore_above": 512},
    "text":       {"type": "text", "store": False, "analyzer": "english",
                   "term_vector": "yes"},
}

_PROFILE_PROPERTIES: dict[str, Any] = {
    "id":           {"type": "integer"},
    "sourceName":   {"type": "keyword"},
    "columnName":   {"type": "text", "analyzer": "english"},
    "dataType":     {"type": "keyword"},
    "totalValues":  {"type": "integer"},
    "uniqueValues": {"type": "integer"},
    "entities":     {"type": "text"},
    "minValue":     {"type": "float"},
    "maxValue":     {"type": "float"},
    "avgValue":     {"type": "float"},
    "median":       {"type": "long"},
    "iqr":          {"type": "long"},
}


def text_mapping(doc_type: str = "column") -> dict[str, Any]:
    """Mapping for the ``text`` index."""
    return {"_meta": {"docType": doc_type}, "properties": dict(_TEXT_PROPERTIES)}


def profile_mapping(doc_type: str = "column") -> dict[str, Any]:
    """Mapping for the ``profile`` index."""
    return {"_meta": {"docType": doc_type}, "properties": dict(_PROFILE_PROPERTIES)}


# ---------------------------------------------------------------------------
# Document builders
# ---------------------------------------------------------------------------

def document_id(id: int) -> str:
    """Plain decimal string of a column id, e.g. ``7 -> "7"``."""
    return str(int(id))


def concat_values(values: Iterable[str]) -> str:
    """Join *values* with a single space, keeping a trailing separator.

    >>> concat_values(["a", "b", "c"])
    'a b c '
    """
    return "".join(f"{v} " for v in values)


def format_entities(entities: Iterable[str]) -> str:
    """Render an entity list as one string, e.g. ``"[PERSON, LOCATION]"``."""
    return "[" + ", ".join(str(e) for e in entities) + "]"


def build_text_document(record: TextRecord) -> dict[str, Any]:
    return {
        "id":         document_id(record.id),
        "sourceName": record.source_name,
        "columnName": record.column_name,
        "text":       concat_values(record.values),
    }


def build_profile_document(result: ProfileResult) -> dict[str, Any]:
    """Translate a :class:`ProfileResult` into a ``profile`` document.

    ``minValue`` carries the real minimum.  Older profilers wrote the entity
    string there, which a ``float`` field rejects.
    """
    return {
        "id":           int(result.id),
        "sourceName":   result.source_name,
        "columnName":   result.column_name,
        "dataType":     result.data_type,
        "totalValues":  result.total_values,
        "uniqueValues": result.unique_values,
        "entities":     format_entities(result.entities),
        "minValue":     result.min_value,
        "maxValue":     result.max_value,
        "avgValue":     result.avg_value,
        "median":       result.median,
        "iqr":          result.iqr,
    }


# ---------------------------------------------------------------------------
# ElasticStore
# ---------------------------------------------------------------------------

class ElasticStore:
    """Elasticsearch implementation of the :class:`~ddstore.store.base.Store` protocol.

    Parameters
    ----------
    config : StoreConfig
        Connection target and index names.

    The client is opened by :meth:`init_store` and released by
    :meth:`tear_down_store`.  Writes outside that window raise
    :class:`~ddstore.errors.StoreNotInitializedError`.  No locking is done:
    tearing down while writes are in flight is unsafe.
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._client: Elasticsearch | None = None

    @property
    def initialized(self) -> bool:
        return self._client is not None

    # ==================================================================
    # Lifecycle
    # ==================================================================

    def init_store(self, *, recreate: bool = False) -> dict[str, bool]:
        """Open the client and make sure both indices carry their mappings.

        Missing indices are created with their mapping; existing ones get the
        mapping re-applied.  If *recreate* is True, existing indices are
        deleted first.  Administrative failures are logged and swallowed.

        Returns
        -------
        dict[str, bool]
            ``{index_name: ready}`` for the text and profile indices.
        """
        cfg = self._config
        if cfg.quiet_transport_logs:
            logging.getLogger("elastic_transport").setLevel(logging.WARNING)

        if self._client is None:
            self._client = Elasticsearch(
                cfg.server_url, request_timeout=cfg.request_timeout,
            )
            logger.info("Connected store client to %s", cfg.server_url)

        ready: dict[str, bool] = {}
        for name, mapping in [(cfg.text_index, text_mapping(cfg.doc_type)),
                              (cfg.profile_index, profile_mapping(cfg.doc_type))]:
            ready[name] = self._ensure_index(name, mapping, recreate=recreate)
        return ready

    def _ensure_index(self, name: str, mapping: dict[str, Any], *, recreate: bool) -> bool:
        client = self._require_client()
        try:
            if recreate and client.indices.exists(index=name):
                client.indices.delete(index=name)
                logger.info("Deleted existing index '%s'", name)
            if not client.indices.exists(index=name):
                client.indices.create(index=name, mappings=mapping)
                logger.info("Created index '%s'", name)
            else:
                client.indices.put_mapping(
                    index=name,
                    properties=mapping["properties"],
                    meta=mapping["_meta"],
                )
                logger.info("Applied mapping to existing index '%s'", name)
        except _STORE_ERRORS:
            logger.exception("Could not provision index '%s'", name)
            return False
        return True

    def tear_down_store(self) -> None:
        """Close the client and forget it.  Calling twice is harmless."""
        if self._client is None:
            return
        client, self._client = self._client, None
        client.close()
        logger.info("Store client closed")

    # ==================================================================
    # Writes
    # ==================================================================

    def index_data(
        self, id: int, source_name: str, column_name: str, values: list[str],
    ) -> WriteResult:
        """Write one text document with an auto-generated document id."""
        record = TextRecord(id=id, source_name=source_name,
                            column_name=column_name, values=list(values))
        return self._write(self._config.text_index, None, build_text_document(record))

    def store_document(self, result: ProfileResult) -> WriteResult:
        """Write one profile document under ``document_id(result.id)``.

        Writing the same id again replaces the previous document.
        """
        doc_id = document_id(result.id)
        return self._write(self._config.profile_index, doc_id,
                           build_profile_document(result))

    def store_documents(self, results: Iterable[ProfileResult]) -> int:
        """Bulk-index profile documents.

        Uses ``elasticsearch.helpers.bulk`` with ``raise_on_error=False``;
        per-document errors are counted and logged, never retried.

        Returns
        -------
        int
            Number of documents successfully indexed.
        """
        client = self._require_client()
        index = self._config.profile_index
        actions = [
            {
                "_index": index,
                "_id": document_id(r.id),
                "_source": build_profile_document(r),
            }
            for r in results
        ]
        if not actions:
            return 0

        try:
            success, errors = bulk(client, actions, raise_on_error=False)
        except _STORE_ERRORS:
            logger.exception("Bulk write of %d profiles failed", len(actions))
            return 0
        if errors:
            logger.warning("Bulk write to '%s' had %d errors", index, len(errors))
        return success

    def _write(self, index: str, doc_id: str | None, document: dict[str, Any]) -> WriteResult:
        client = self._require_client()
        try:
            if doc_id is None:
                resp = client.index(index=index, document=document)
            else:
                resp = client.index(index=index, id=doc_id, document=document)
        except _STORE_ERRORS as e:
            logger.exception("Write to '%s' (id=%s) failed", index, doc_id)
            return WriteResult.failure(index, doc_id, e)
        return WriteResult.success(index, resp["_id"], resp["result"])

    # ==================================================================
    # Introspection
    # ==================================================================

    def index_stats(self) -> dict[str, int | None]:
        """Document count per managed index; ``None`` if it can't be read."""
        client = self._require_client()
        stats: dict[str, int | None] = {}
        for name in (self._config.text_index, self._config.profile_index):
            try:
                stats[name] = int(client.count(index=name)["count"])
            except _STORE_ERRORS as e:
                logger.warning("Could not count '%s': %s", name, e)
                stats[name] = None
        return stats

    # ==================================================================
    # Internals
    # ==================================================================

    def _require_client(self) -> Elasticsearch:
        if self._client is None:
            raise StoreNotInitializedError(
                "ElasticStore used before init_store() or after tear_down_store()"
            )
        return self._client
