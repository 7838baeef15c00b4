"""
Order storage backends.

Every backend exposes the same two operations: list_orders() returns all
orders as camelCase documents in insertion order, append() adds one.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, List

from pymongo.errors import PyMongoError

from config import Settings
from database import connect, create_document, get_documents
from errors import RepositoryError
from schemas import Order

logger = logging.getLogger(__name__)

ORDER_COLLECTION = "order"


class OrderStore:
    backend = "abstract"

    def list_orders(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def append(self, order: Order) -> Dict[str, Any]:
        raise NotImplementedError


class MemoryOrderStore(OrderStore):
    backend = "memory"

    def __init__(self):
        self._orders: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def list_orders(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(o) for o in self._orders]

    def append(self, order: Order) -> Dict[str, Any]:
        doc = order.to_document()
        with self._lock:
            self._orders.append(doc)
        return doc


class FileOrderStore(OrderStore):
    """Orders kept in one JSON document shaped {"orders": [...]}.

    A missing or malformed document is rewritten as an empty collection the
    first time it is touched. Writes go to a temp file in the same directory
    and are moved into place with os.replace, so readers never see a partial
    document. The lock only serializes writers inside this process.
    """

    backend = "file"

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            data = None
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError
            logger.warning("Order file %s is not valid JSON, resetting it", self.path)
            data = None

        if not isinstance(data, dict) or not isinstance(data.get("orders"), list):
            data = {"orders": []}
            self._write(data)

        orders = [o for o in data["orders"] if isinstance(o, dict)]
        if len(orders) != len(data["orders"]):
            logger.warning("Order file %s has %d non-object entries, skipping them",
                           self.path, len(data["orders"]) - len(orders))
            data["orders"] = orders
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".orders-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def list_orders(self) -> List[Dict[str, Any]]:
        try:
            with self._lock:
                return self._read()["orders"]
        except OSError as e:
            raise RepositoryError(f"Could not read orders: {e}") from e

    def append(self, order: Order) -> Dict[str, Any]:
        doc = order.to_document()
        try:
            with self._lock:
                data = self._read()
                data["orders"].append(doc)
                self._write(data)
        except OSError as e:
            raise RepositoryError(f"Could not save order: {e}") from e
        return doc


class MongoOrderStore(OrderStore):
    backend = "mongo"

    def __init__(self, db):
        self.db = db

    def list_orders(self) -> List[Dict[str, Any]]:
        try:
            return get_documents(self.db, ORDER_COLLECTION)
        except PyMongoError as e:
            raise RepositoryError(f"Database error: {e}") from e

    def append(self, order: Order) -> Dict[str, Any]:
        doc = order.to_document()
        try:
            create_document(self.db, ORDER_COLLECTION, dict(doc))
        except PyMongoError as e:
            raise RepositoryError(f"Database error: {e}") from e
        return doc


def create_store(settings: Settings) -> OrderStore:
    if settings.order_store == "mongo":
        if not (settings.database_url and settings.database_name):
            raise RuntimeError("ORDER_STORE=mongo needs DATABASE_URL and DATABASE_NAME")
        return MongoOrderStore(connect(settings.database_url, settings.database_name))
    if settings.order_store == "memory":
        return MemoryOrderStore()
    return FileOrderStore(settings.orders_file)
