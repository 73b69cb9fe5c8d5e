"""Tests for ddstore.store.elastic_store.ElasticStore (client mocked)."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest
from elasticsearch import ConnectionError as ESConnectionError

from ddstore.config import StoreConfig
from ddstore.errors import StoreError, StoreNotInitializedError
from ddstore.models.profile_result import ProfileResult
from ddstore.store.elastic_store import ElasticStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _profile(id: int = 7, **kw) -> ProfileResult:
    return ProfileResult(id=id, source_name="t.csv", column_name="c", data_type="T", **kw)


def _fake_index(docs: dict):
    """Emulate ``Elasticsearch.index``: explicit ids overwrite, others are generated."""
    def index(*, index, document, id=None):
        key = id if id is not None else f"auto-{len(docs)}"
        result = "updated" if (index, key) in docs else "created"
        docs[(index, key)] = document
        return {"_id": key, "result": result}
    return index


@pytest.fixture
def client():
    c = MagicMock()
    c.indices.exists.return_value = False
    c.index.return_value = {"_id": "x", "result": "created"}
    return c


@pytest.fixture
def store(client):
    with patch("ddstore.store.elastic_store.Elasticsearch", return_value=client) as cls:
        s = ElasticStore(StoreConfig(store_server="es", store_port=9201))
        s.init_store()
        s._es_class = cls
        yield s


# ======================================================================
# Lifecycle
# ======================================================================


class TestInitStore:
    def test_connects_to_configured_server(self, store):
        store._es_class.assert_called_once_with("http://es:9201", request_timeout=10.0)

    def test_creates_missing_indices_with_mappings(self, store, client):
        created = {c.kwargs["index"]: c.kwargs["mappings"]
                   for c in client.indices.create.call_args_list}
        assert set(created) == {"text", "profile"}
        assert created["text"]["properties"]["text"]["analyzer"] == "english"
        assert created["profile"]["properties"]["id"]["type"] == "integer"
        client.indices.put_mapping.assert_not_called()

    def test_existing_indices_get_mapping_applied(self, client):
        client.indices.exists.return_value = True
        with patch("ddstore.store.elastic_store.Elasticsearch", return_value=client):
            ready = ElasticStore(StoreConfig()).init_store()
        assert ready == {"text": True, "profile": True}
        client.indices.create.assert_not_called()
        indices = {c.kwargs["index"] for c in client.indices.put_mapping.call_args_list}
        assert indices == {"text", "profile"}
        assert client.indices.put_mapping.call_args.kwargs["meta"] == {"docType": "column"}

    def test_recreate_deletes_first(self, client):
        client.indices.exists.side_effect = [True, False, True, False]
        with patch("ddstore.store.elastic_store.Elasticsearch", return_value=client):
            ElasticStore(StoreConfig()).init_store(recreate=True)
        assert client.indices.delete.call_count == 2
        assert client.indices.create.call_count == 2

    def test_idempotent(self, store, client):
        client.indices.exists.return_value = True
        assert store.init_store() == {"text": True, "profile": True}
        # The client is reused, not reopened
        store._es_class.assert_called_once()

    def test_admin_failure_is_logged_and_swallowed(self, client, caplog):
        client.indices.create.side_effect = [ESConnectionError("refused"), None]
        with patch("ddstore.store.elastic_store.Elasticsearch", return_value=client):
            s = ElasticStore(StoreConfig())
            with caplog.at_level(logging.ERROR, logger="ddstore.store.elastic_store"):
                ready = s.init_store()
        assert ready == {"text": False, "profile": True}
        assert s.initialized
        assert "Could not provision index 'text'" in caplog.text

    def test_quiets_transport_logger(self, store):
        assert logging.getLogger("elastic_transport").level == logging.WARNING

    def test_mappings_applied_before_any_write(self, store, client):
        store.index_data(1, "t.csv", "c", ["a"])
        names = [c[0] for c in client.mock_calls]
        assert names.index("indices.create") < names.index("index")


class TestTearDown:
    def test_closes_client(self, store, client):
        store.tear_down_store()
        client.close.assert_called_once()
        assert not store.initialized

    def test_twice_is_harmless(self, store, client):
        store.tear_down_store()
        store.tear_down_store()
        client.close.assert_called_once()

    def test_write_after_teardown_raises(self, store):
        store.tear_down_store()
        with pytest.raises(StoreNotInitializedError):
            store.store_document(_profile())


class TestNotInitialized:
    def test_index_data_before_init(self):
        s = ElasticStore(StoreConfig())
        with pytest.raises(StoreNotInitializedError):
            s.index_data(1, "t.csv", "c", ["a"])

    def test_store_document_before_init(self):
        with pytest.raises(StoreError):
            ElasticStore(StoreConfig()).store_document(_profile())


# ======================================================================
# Writes
# ======================================================================


class TestIndexData:
    def test_writes_text_document_with_generated_id(self, store, client):
        result = store.index_data(3, "people.csv", "name", ["a", "b", "c"])
        client.index.assert_called_once_with(
            index="text",
            document={"id": "3", "sourceName": "people.csv",
                      "columnName": "name", "text": "a b c "},
        )
        assert result.ok
        assert result.index == "text"

    def test_failure_is_reported_with_cause(self, store, client):
        err = ESConnectionError("connection refused")
        client.index.side_effect = err
        result = store.index_data(3, "people.csv", "name", ["a"])
        assert not result
        assert result.error is err


class TestStoreDocument:
    def test_targets_profile_index_with_string_id(self, store, client):
        result = store.store_document(_profile(id=7))
        kwargs = client.index.call_args.kwargs
        assert kwargs["index"] == "profile"
        assert kwargs["id"] == "7"
        assert kwargs["document"]["id"] == 7
        assert result.ok

    def test_same_id_overwrites(self, store, client):
        docs: dict = {}
        client.index.side_effect = _fake_index(docs)
        first = store.store_document(_profile(id=7, total_values=1))
        second = store.store_document(_profile(id=7, total_values=2))
        assert first.result == "created"
        assert second.result == "updated"
        assert len(docs) == 1
        assert docs[("profile", "7")]["totalValues"] == 2

    def test_text_writes_never_overwrite(self, store, client):
        docs: dict = {}
        client.index.side_effect = _fake_index(docs)
        store.index_data(7, "t.csv", "c", ["a"])
        store.index_data(7, "t.csv", "c", ["a"])
        assert len(docs) == 2

    def test_failure_is_logged(self, store, client, caplog):
        client.index.side_effect = ESConnectionError("refused")
        with caplog.at_level(logging.ERROR, logger="ddstore.store.elastic_store"):
            result = store.store_document(_profile(id=9))
        assert not result.ok
        assert result.doc_id == "9"
        assert "Write to 'profile' (id=9) failed" in caplog.text

    def test_no_retry(self, store, client):
        client.index.side_effect = ESConnectionError("refused")
        store.store_document(_profile())
        assert client.index.call_count == 1


class TestStoreDocuments:
    def test_bulk_actions(self, store, client):
        with patch("ddstore.store.elastic_store.bulk", return_value=(2, [])) as bulk:
            n = store.store_documents([_profile(id=1), _profile(id=2)])
        assert n == 2
        actions = bulk.call_args.args[1]
        assert [a["_id"] for a in actions] == ["1", "2"]
        assert all(a["_index"] == "profile" for a in actions)
        assert bulk.call_args.kwargs["raise_on_error"] is False

    def test_empty_input_skips_request(self, store):
        with patch("ddstore.store.elastic_store.bulk") as bulk:
            assert store.store_documents([]) == 0
        bulk.assert_not_called()

    def test_partial_errors(self, store, caplog):
        with patch("ddstore.store.elastic_store.bulk", return_value=(1, [{"index": {}}])):
            with caplog.at_level(logging.WARNING, logger="ddstore.store.elastic_store"):
                assert store.store_documents([_profile(id=1), _profile(id=2)]) == 1
        assert "had 1 errors" in caplog.text

    def test_transport_failure(self, store):
        with patch("ddstore.store.elastic_store.bulk", side_effect=ESConnectionError("down")):
            assert store.store_documents([_profile(id=1)]) == 0


class TestIndexStats:
    def test_counts(self, store, client):
        client.count.side_effect = [{"count": 4}, ESConnectionError("down")]
        assert store.index_stats() == {"text": 4, "profile": None}


class TestStoreProtocol:
    def test_elastic_store_satisfies_protocol(self):
        from ddstore.store.base import Store

        assert isinstance(ElasticStore(StoreConfig()), Store)
