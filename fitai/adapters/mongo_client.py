from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Dict, List

from pymongo import MongoClient


@dataclass
class MongoClientFactory:
    uri: str
    db_name: str

    def get_collection(self, collection_name: str):
        client = MongoClient(self.uri)
        database = client[self.db_name]
        return database[collection_name]


class InMemoryCollection:
    """Process-local stand-in for a Mongo collection; only `insert_one` and `find` are used."""

    def __init__(self) -> None:
        self._documents: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def insert_one(self, payload: Dict[str, Any]):
        inserted_id = uuid.uuid4().hex
        with self._lock:
            self._documents.append({"_id": inserted_id, **payload})
        return SimpleNamespace(inserted_id=inserted_id)

    def find(self, query: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
        query = query or {}
        with self._lock:
            return [
                dict(document)
                for document in self._documents
                if all(document.get(key) == value for key, value in query.items())
            ]
