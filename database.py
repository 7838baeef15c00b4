"""
MongoDB access helpers.

Used by the Mongo-backed order store. Documents get created_at/updated_at
stamps on insert; `_id` is stripped on read so documents match the JSON
store's shape.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database


def connect(database_url: str, database_name: str) -> Database:
    client = MongoClient(database_url)
    return client[database_name]


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    if isinstance(data, BaseModel):
        doc = data.model_dump(by_alias=True, exclude_none=True)
    else:
        doc = dict(data)
    now = datetime.now(timezone.utc)
    doc.setdefault("created_at", now)
    doc.setdefault("updated_at", now)
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {}).sort([("created_at", 1), ("_id", 1)])
    if limit:
        cursor = cursor.limit(limit)
    docs = []
    for d in cursor:
        d.pop("_id", None)
        d.pop("created_at", None)
        d.pop("updated_at", None)
        docs.append(d)
    return docs
