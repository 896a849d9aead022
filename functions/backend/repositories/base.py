"""
Shared helpers for loading and dumping collection documents.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Generic, List, Optional, Type, TypeVar

from dacite import Config, from_dict

from backend.db import DocumentNotFoundError, DocumentStore
from shared.errors import NotFoundError
from shared.json_utils import convert_keys
from shared.time_utils import utc_now

T = TypeVar("T")

DACITE_CONFIG = Config(check_types=False)


def load_document(data_class: Type[T], doc_id: str, data: dict) -> T:
    """Builds a dataclass from a camelCase document."""
    payload = convert_keys(data, "camel_to_snake")
    payload["id"] = doc_id
    return from_dict(data_class=data_class, data=payload, config=DACITE_CONFIG)


def dump_document(obj) -> dict:
    """Converts a dataclass to a camelCase dict for API responses."""
    data = convert_keys(asdict(obj), "snake_to_camel")
    if "distance" in data and data["distance"] is None:
        del data["distance"]
    return data


class Repository(Generic[T]):
    collection: str
    model: Type[T]
    resource_name: str = "Resource"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _load(self, doc_id: str, data: dict) -> T:
        return load_document(self.model, doc_id, data)

    def _load_all(self, records) -> List[T]:
        return [self._load(doc_id, data) for doc_id, data in records]

    def find(self, doc_id: str) -> Optional[T]:
        if not doc_id:
            return None
        data = self.store.get(self.collection, doc_id)
        return self._load(doc_id, data) if data is not None else None

    def get(self, doc_id: str) -> T:
        found = self.find(doc_id)
        if found is None:
            raise NotFoundError(self.resource_name)
        return found

    def update(self, doc_id: str, data: dict) -> T:
        try:
            self.store.update(
                self.collection, doc_id, {**data, "updatedAt": utc_now()}
            )
        except DocumentNotFoundError as e:
            raise NotFoundError(self.resource_name) from e
        return self.get(doc_id)

    def delete(self, doc_id: str) -> None:
        self.store.delete(self.collection, doc_id)
