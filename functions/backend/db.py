"""
Document store abstraction over Firestore, SQL (SQLAlchemy) and memory.

Every implementation stores camelCase dict documents in named collections
and supports the subset of Firestore the API relies on: point reads and
writes, equality/array-contains filters and field transforms.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy import JSON, Column, String, create_engine, delete, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared.time_utils import to_datetime

Filter = Tuple[str, str, Any]
DocumentRecord = Tuple[str, dict]

EQUALS = "=="
ARRAY_CONTAINS = "array_contains"
SUPPORTED_OPERATORS = (EQUALS, ARRAY_CONTAINS)


class DocumentNotFoundError(Exception):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} does not exist")
        self.collection = collection
        self.doc_id = doc_id


@dataclass(frozen=True)
class Increment:
    amount: int | float = 1


class ArrayUnion:
    """Adds values to an array field, skipping ones already present."""

    def __init__(self, values: Iterable[Any]):
        self.values = list(values)


class ArrayRemove:
    """Removes every occurrence of the values from an array field."""

    def __init__(self, values: Iterable[Any]):
        self.values = list(values)


class DocumentStore(Protocol):
    """Interface for document database access."""

    def add(self, collection: str, data: dict) -> str:
        ...

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        ...

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def get_many(self, collection: str, ids: Sequence[str]) -> List[DocumentRecord]:
        ...

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[DocumentRecord]:
        ...


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


def apply_update(document: dict, data: dict) -> dict:
    """Applies plain values and field transforms onto a copy of a document."""
    updated = copy.deepcopy(document)
    for key, value in data.items():
        if isinstance(value, Increment):
            current = updated.get(key)
            if not isinstance(current, (int, float)) or isinstance(current, bool):
                current = 0
            updated[key] = current + value.amount
        elif isinstance(value, ArrayUnion):
            current = list(updated.get(key) or [])
            for item in value.values:
                if item not in current:
                    current.append(item)
            updated[key] = current
        elif isinstance(value, ArrayRemove):
            current = list(updated.get(key) or [])
            updated[key] = [item for item in current if item not in value.values]
        else:
            updated[key] = copy.deepcopy(value)
    return updated


def resolve_new_document(data: dict) -> dict:
    """Turns transforms in a fresh document into the values they produce."""
    return apply_update({}, data)


def matches_filters(document: dict, filters: Sequence[Filter]) -> bool:
    for field_name, op, value in filters:
        if op not in SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported query operator: {op}")
        if field_name not in document:
            return False
        current = document[field_name]
        if op == EQUALS and current != value:
            return False
        if op == ARRAY_CONTAINS and (
            not isinstance(current, list) or value not in current
        ):
            return False
    return True


def _sort_value(value: Any) -> Any:
    if isinstance(value, (datetime, str)):
        parsed = to_datetime(value)
        if parsed is not None:
            return parsed.timestamp()
    return value


def order_and_limit(
    records: List[DocumentRecord],
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> List[DocumentRecord]:
    """Sorts records by a field (missing values last) and truncates."""
    if order_by:
        present = [r for r in records if r[1].get(order_by) is not None]
        missing = [r for r in records if r[1].get(order_by) is None]
        present.sort(key=lambda r: _sort_value(r[1][order_by]), reverse=descending)
        records = present + missing
    if limit is not None:
        records = records[:limit]
    return records


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _collection(self, name: str) -> Dict[str, dict]:
        return self.collections.setdefault(name, {})

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()

    def add(self, collection: str, data: dict) -> str:
        doc_id = new_document_id()
        self._collection(collection)[doc_id] = resolve_new_document(data)
        return doc_id

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        docs = self._collection(collection)
        if merge and doc_id in docs:
            docs[doc_id] = apply_update(docs[doc_id], data)
        else:
            docs[doc_id] = resolve_new_document(data)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def get_many(self, collection: str, ids: Sequence[str]) -> List[DocumentRecord]:
        docs = self._collection(collection)
        return [(doc_id, copy.deepcopy(docs[doc_id])) for doc_id in ids if doc_id in docs]

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(collection, doc_id)
        docs[doc_id] = apply_update(docs[doc_id], data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[DocumentRecord]:
        records = [
            (doc_id, copy.deepcopy(doc))
            for doc_id, doc in self._collection(collection).items()
            if matches_filters(doc, filters)
        ]
        return order_and_limit(records, order_by, descending, limit)


class FirestoreDocumentStore:
    """
    Cloud Firestore implementation backed by firebase_admin.

    Ordering is applied client-side so that filtered queries never need a
    composite index.
    """

    def __init__(self, client=None):
        if client is None:
            from firebase_admin import firestore

            client = firestore.client()
        self.client = client

    @staticmethod
    def _to_firestore(data: dict) -> dict:
        from firebase_admin import firestore

        converted = {}
        for key, value in data.items():
            if isinstance(value, Increment):
                converted[key] = firestore.Increment(value.amount)
            elif isinstance(value, ArrayUnion):
                converted[key] = firestore.ArrayUnion(value.values)
            elif isinstance(value, ArrayRemove):
                converted[key] = firestore.ArrayRemove(value.values)
            else:
                converted[key] = value
        return converted

    def add(self, collection: str, data: dict) -> str:
        _, doc_ref = self.client.collection(collection).add(self._to_firestore(data))
        return doc_ref.id

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        self.client.collection(collection).document(doc_id).set(
            self._to_firestore(data), merge=merge
        )

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        snapshot = self.client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def get_many(self, collection: str, ids: Sequence[str]) -> List[DocumentRecord]:
        if not ids:
            return []
        refs = [self.client.collection(collection).document(doc_id) for doc_id in ids]
        by_id = {
            snapshot.id: snapshot.to_dict()
            for snapshot in self.client.get_all(refs)
            if snapshot.exists
        }
        return [(doc_id, by_id[doc_id]) for doc_id in ids if doc_id in by_id]

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        from google.api_core import exceptions

        try:
            self.client.collection(collection).document(doc_id).update(
                self._to_firestore(data)
            )
        except exceptions.NotFound as e:
            raise DocumentNotFoundError(collection, doc_id) from e

    def delete(self, collection: str, doc_id: str) -> None:
        self.client.collection(collection).document(doc_id).delete()

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[DocumentRecord]:
        from google.cloud.firestore_v1.base_query import FieldFilter

        query = self.client.collection(collection)
        for field_name, op, value in filters:
            if op not in SUPPORTED_OPERATORS:
                raise ValueError(f"Unsupported query operator: {op}")
            query = query.where(filter=FieldFilter(field_name, op, value))
        if not order_by and limit is not None:
            query = query.limit(limit)
        records = [(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]
        return order_and_limit(records, order_by, descending, limit)


Base = declarative_base()

DATETIME_TAG = "__datetime__"


class DocumentRow(Base):
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    doc_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)


def encode_datetimes(value: Any) -> Any:
    """Tags datetimes so they survive a trip through a JSON column."""
    if isinstance(value, datetime):
        return {DATETIME_TAG: to_datetime(value).isoformat()}
    if isinstance(value, dict):
        return {k: encode_datetimes(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_datetimes(v) for v in value]
    return value


def decode_datetimes(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {DATETIME_TAG}:
            return to_datetime(value[DATETIME_TAG])
        return {k: decode_datetimes(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_datetimes(v) for v in value]
    return value


class SqlDocumentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _write(self, session: Session, collection: str, doc_id: str, doc: dict):
        row = session.get(DocumentRow, (collection, doc_id))
        encoded = encode_datetimes(doc)
        if row:
            row.data = encoded
        else:
            session.add(DocumentRow(collection=collection, doc_id=doc_id, data=encoded))

    def add(self, collection: str, data: dict) -> str:
        doc_id = new_document_id()
        with self.Session() as session:
            self._write(session, collection, doc_id, resolve_new_document(data))
            session.commit()
        return doc_id

    def set(
        self, collection: str, doc_id: str, data: dict, merge: bool = False
    ) -> None:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if merge and row:
                doc = apply_update(decode_datetimes(row.data), data)
            else:
                doc = resolve_new_document(data)
            self._write(session, collection, doc_id, doc)
            session.commit()

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            return decode_datetimes(row.data) if row else None

    def get_many(self, collection: str, ids: Sequence[str]) -> List[DocumentRecord]:
        if not ids:
            return []
        with self.Session() as session:
            stmt = select(DocumentRow).where(
                DocumentRow.collection == collection, DocumentRow.doc_id.in_(list(ids))
            )
            by_id = {
                row.doc_id: decode_datetimes(row.data)
                for row in session.execute(stmt).scalars()
            }
        return [(doc_id, by_id[doc_id]) for doc_id in ids if doc_id in by_id]

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if not row:
                raise DocumentNotFoundError(collection, doc_id)
            row.data = encode_datetimes(apply_update(decode_datetimes(row.data), data))
            session.commit()

    def delete(self, collection: str, doc_id: str) -> None:
        with self.Session() as session:
            session.execute(
                delete(DocumentRow).where(
                    DocumentRow.collection == collection, DocumentRow.doc_id == doc_id
                )
            )
            session.commit()

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[DocumentRecord]:
        with self.Session() as session:
            stmt = select(DocumentRow).where(DocumentRow.collection == collection)
            rows = [
                (row.doc_id, decode_datetimes(row.data))
                for row in session.execute(stmt).scalars()
            ]
        records = [r for r in rows if matches_filters(r[1], filters)]
        return order_and_limit(records, order_by, descending, limit)
