import json
from unittest import mock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from config import Settings
from errors import RepositoryError
from orders import validate_order
from repository import FileOrderStore, MemoryOrderStore, MongoOrderStore, create_store


def make_order(name="Ada Lovelace", order_id="ORD-1-abc"):
    return validate_order(
        {"customerName": name, "customerEmail": "ada@example.com", "designType": "premade"},
        make_id=lambda: order_id,
    )


def test_missing_file_is_initialized(tmp_path):
    path = tmp_path / "nested" / "orders.json"
    store = FileOrderStore(str(path))
    assert store.list_orders() == []
    assert json.loads(path.read_text()) == {"orders": []}


@pytest.mark.parametrize("content", [
    b"",
    b"not json",
    b"[]",
    b'{"orders": {}}',
    b'{"other": []}',
    b'{"orders": [\xff]}',
])
def test_malformed_file_is_repaired(tmp_path, content):
    path = tmp_path / "orders.json"
    path.write_bytes(content)
    store = FileOrderStore(str(path))
    assert store.list_orders() == []
    assert json.loads(path.read_text()) == {"orders": []}


def test_append_then_list_round_trip(store):
    order = make_order()
    doc = store.append(order)
    assert store.list_orders() == [doc]
    assert doc == order.to_document()


def test_orders_kept_in_insertion_order(store):
    for i in range(3):
        store.append(make_order(name=f"Customer {i}", order_id=f"ORD-{i}"))
    assert [o["id"] for o in store.list_orders()] == ["ORD-0", "ORD-1", "ORD-2"]


def test_existing_orders_preserved(tmp_path):
    path = tmp_path / "orders.json"
    path.write_text(json.dumps({"orders": [{"id": "ORD-old"}]}))
    store = FileOrderStore(str(path))
    store.append(make_order())
    assert [o["id"] for o in store.list_orders()] == ["ORD-old", "ORD-1-abc"]


def test_no_temp_files_left_behind(tmp_path, store):
    store.append(make_order())
    assert sorted(p.name for p in tmp_path.iterdir()) == ["orders.json"]


def test_write_failure_raises_repository_error(store):
    with mock.patch("repository.os.replace", side_effect=PermissionError("read-only")):
        with pytest.raises(RepositoryError):
            store.append(make_order())


def test_read_failure_raises_repository_error(tmp_path):
    # a directory where the file should be
    path = tmp_path / "orders.json"
    path.mkdir()
    with pytest.raises(RepositoryError):
        FileOrderStore(str(path)).list_orders()


def test_memory_store_round_trip():
    store = MemoryOrderStore()
    assert store.list_orders() == []
    doc = store.append(make_order())
    assert store.list_orders() == [doc]


class FakeCursor(list):
    def sort(self, *args, **kwargs):
        return self

    def limit(self, n):
        return FakeCursor(self[:n])


class FakeCollection:
    def __init__(self):
        self.docs = []

    def insert_one(self, doc):
        doc = dict(doc, _id=len(self.docs) + 1)
        self.docs.append(doc)
        return mock.Mock(inserted_id=doc["_id"])

    def find(self, filter_dict):
        return FakeCursor(dict(d) for d in self.docs)


def test_mongo_store_round_trip():
    collection = FakeCollection()
    store = MongoOrderStore({"order": collection})
    doc = store.append(make_order())
    assert "created_at" in collection.docs[0]
    assert store.list_orders() == [doc]


def test_mongo_errors_become_repository_errors():
    collection = mock.Mock()
    collection.find.side_effect = ServerSelectionTimeoutError("no server")
    store = MongoOrderStore({"order": collection})
    with pytest.raises(RepositoryError):
        store.list_orders()


def test_create_store_picks_backend(tmp_path):
    assert isinstance(create_store(Settings(orders_file=str(tmp_path / "o.json"))), FileOrderStore)
    assert isinstance(create_store(Settings(order_store="memory")), MemoryOrderStore)
    with pytest.raises(RuntimeError):
        create_store(Settings(order_store="mongo"))


def test_non_object_entries_skipped(tmp_path):
    path = tmp_path / "orders.json"
    path.write_text(json.dumps({"orders": [1, "x", None, {"id": "ORD-old"}]}))
    store = FileOrderStore(str(path))
    assert store.list_orders() == [{"id": "ORD-old"}]

    store.append(make_order())
    assert json.loads(path.read_text())["orders"][0] == {"id": "ORD-old"}
    assert len(json.loads(path.read_text())["orders"]) == 2
