from __future__ import annotations

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from notion_importer.infrastructure.sources.mongo_source import (
    MongoSource,
    collect_headers,
    rename_id_field,
)
from notion_importer.shared.exceptions.domain import SourceReadError


class _FakeCollection:
    def __init__(self, docs: list[dict]) -> None:
        self._docs = docs

    def find(self):
        return iter([dict(d) for d in self._docs])


class _FakeDatabase:
    def __init__(self, collections: dict[str, list[dict]]) -> None:
        self._collections = collections

    def list_collection_names(self) -> list[str]:
        return list(self._collections)

    def __getitem__(self, name: str) -> _FakeCollection:
        return _FakeCollection(self._collections[name])


class _FakeMongoClient:
    def __init__(self, data: dict[str, dict[str, list[dict]]]) -> None:
        self._data = data
        self.closed = False

    def list_database_names(self) -> list[str]:
        return list(self._data)

    def __getitem__(self, name: str) -> _FakeDatabase:
        return _FakeDatabase(self._data[name])

    def close(self) -> None:
        self.closed = True


class _DownMongoClient(_FakeMongoClient):
    def list_database_names(self) -> list[str]:
        raise ServerSelectionTimeoutError("localhost:27017: connection refused")


DATA = {
    "crm": {
        "contactos": [
            {"_id": "65a1", "name": "Alice", "email": "a@x.com"},
            {"_id": "65a2", "name": "Bob", "tags": ["a", "b"]},
        ],
        "empresas": [],
    }
}


def test_list_databases_and_collections() -> None:
    source = MongoSource("mongodb://fake", client=_FakeMongoClient(DATA))
    assert source.list_databases() == ["crm"]
    assert source.list_collections("crm") == ["contactos", "empresas"]


def test_read_returns_header_union_in_first_seen_order() -> None:
    source = MongoSource("mongodb://fake", client=_FakeMongoClient(DATA))

    headers, docs = source.read("crm", "contactos")

    assert headers == ["_id", "name", "email", "tags"]
    assert len(docs) == 2


def test_collect_headers_empty() -> None:
    assert collect_headers([]) == []


def test_rename_id_field() -> None:
    docs = [{"_id": "65a1", "name": "Alice"}, {"name": "Sin id"}]

    headers = rename_id_field(["_id", "name"], docs, "mongo_id")

    assert headers == ["name", "mongo_id"]
    assert docs == [{"name": "Alice", "mongo_id": "65a1"}, {"name": "Sin id"}]


def test_rename_id_field_noop_without_id() -> None:
    docs = [{"name": "Alice"}]
    assert rename_id_field(["name"], docs, "mongo_id") == ["name"]
    assert docs == [{"name": "Alice"}]


def test_context_manager_closes_client() -> None:
    client = _FakeMongoClient(DATA)
    with MongoSource("mongodb://fake", client=client) as source:
        source.read_documents("crm", "empresas")
    assert client.closed


def test_server_errors_become_source_read_error() -> None:
    source = MongoSource("mongodb://fake", client=_DownMongoClient(DATA))
    with pytest.raises(SourceReadError) as exc:
        source.list_databases()
    assert isinstance(exc.value.__cause__, ServerSelectionTimeoutError)
