"""Document Store — collection-scoped CRUD over the documents table.

Invariants:
    - Every document write runs in its own DB session and commits on its own:
      a single-document write is atomic, a multi-call cascade is not
    - Reference fields are UUIDs in memory and id strings inside the JSON body
    - update_many returns the number of documents whose body actually changed
    - Each document write is a compare-and-swap on its version: concurrent
      $addToSet / $pull calls on one document never lose an update
    - Results are ordered by created_at, ties broken by id: stable across
      calls, not strict insertion order within one clock tick

Design Decisions:
    - _id part of a filter pushed down to the primary key; the rest evaluated by
      core/document_filters so semantics match on SQLite and PostgreSQL
    - Optimistic versioning (version_id_col) over SELECT ... FOR UPDATE: the
      same code path is atomic on SQLite, which ignores row locks
    - One session per document write: a conflict retries that document only
"""

import logging
import uuid
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm.exc import StaleDataError

from classroom.core.document_filters import (
    ID_FIELD, apply_update, id_candidates, matches,
)
from classroom.core.domain_types import Collection
from classroom.core.errors import DatabaseError
from classroom.infrastructure.database import DatabaseSessionManager
from classroom.models.document import Document

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 16

# Fields holding references to other documents, per collection
REFERENCE_FIELDS: dict[Collection, frozenset[str]] = {
    Collection.STUDENTS: frozenset({"enrolledCourses"}),
    Collection.TEACHERS: frozenset(),
    Collection.COURSES: frozenset({"teacherId", "studentIds"}),
}


def _encode_value(value):
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, list):
        return [_encode_value(v) for v in value]
    return value


def _decode_ref(value):
    if value is None:
        return None
    if isinstance(value, list):
        return [UUID(v) for v in value]
    return UUID(value)


class SqlDocumentCollection:
    """DocumentCollection backed by rows of the documents table."""

    def __init__(self, collection: Collection, manager: DatabaseSessionManager):
        self.name = collection.value
        self._collection = collection
        self._manager = manager
        self._refs = REFERENCE_FIELDS[collection]

    # ─── Codec ───────────────────────────────────────────────────

    def _encode(self, document: dict) -> dict:
        return {
            k: _encode_value(v) for k, v in document.items() if k != ID_FIELD
        }

    def _decode(self, row: Document) -> dict:
        doc = dict(row.body)
        for key in self._refs & doc.keys():
            doc[key] = _decode_ref(doc[key])
        doc[ID_FIELD] = row.id
        return doc

    def _select(self, filter_: dict | None):
        stmt = (
            select(Document)
            .where(Document.collection == self.name)
            .order_by(Document.created_at, Document.id)
        )
        ids = id_candidates(filter_)
        if ids is not None:
            stmt = stmt.where(Document.id.in_(ids))
        return stmt

    # ─── Contract ────────────────────────────────────────────────

    async def find(self, filter_: dict | None = None) -> list[dict]:
        async with self._manager.session() as db:
            result = await db.execute(self._select(filter_))
            docs = [self._decode(row) for row in result.scalars().all()]
        return [d for d in docs if matches(d, filter_)]

    async def find_one(self, filter_: dict) -> dict | None:
        docs = await self.find(filter_)
        return docs[0] if docs else None

    async def insert_one(self, document: dict) -> UUID:
        new_id = document.get(ID_FIELD) or uuid.uuid4()
        async with self._manager.session() as db:
            db.add(Document(
                id=new_id, collection=self.name, body=self._encode(document),
            ))
            await db.commit()
        logger.debug(
            f"Inserted {self.name} document",
            extra={"entity_id": str(new_id)},
        )
        return new_id

    async def update_many(self, filter_: dict, update: dict) -> int:
        modified = 0
        for doc_id in await self._matching_ids(filter_):
            if await self._write_one(doc_id, filter_, update):
                modified += 1
        return modified

    async def delete_many(self, filter_: dict) -> int:
        deleted = 0
        for doc_id in await self._matching_ids(filter_):
            if await self._write_one(doc_id, filter_, None):
                deleted += 1
        return deleted

    # ─── Compare-and-swap ────────────────────────────────────────

    async def _matching_ids(self, filter_: dict) -> list[UUID]:
        return [doc[ID_FIELD] for doc in await self.find(filter_)]

    async def _write_one(
        self, doc_id: UUID, filter_: dict, update: dict | None,
    ) -> bool:
        """Apply update to one document (delete it when update is None).

        Re-reads and re-applies when another writer committed first. Returns
        False when the document is gone, no longer matches, or is unchanged.
        """
        for attempt in range(MAX_WRITE_ATTEMPTS):
            async with self._manager.session() as db:
                row = await db.get(Document, doc_id)
                if row is None or row.collection != self.name:
                    return False
                current = self._decode(row)
                if not matches(current, filter_):
                    return False
                if update is None:
                    await db.delete(row)
                else:
                    updated = apply_update(current, update)
                    if updated == current:
                        return False
                    # Reassign (not mutate) so the JSON column is flagged dirty
                    row.body = self._encode(updated)
                try:
                    await db.commit()
                    return True
                except StaleDataError:
                    await db.rollback()
            logger.debug(
                f"Write conflict on {self.name} document, retrying",
                extra={"entity_id": str(doc_id), "attempt": attempt + 1},
            )
        raise DatabaseError(
            f"{self.name} document {doc_id} changed on every attempt", "commit",
        )


class DocumentStore:
    """The three collections, sharing one process-wide session manager."""

    def __init__(self, manager: DatabaseSessionManager):
        self.manager = manager
        self.students = SqlDocumentCollection(Collection.STUDENTS, manager)
        self.teachers = SqlDocumentCollection(Collection.TEACHERS, manager)
        self.courses = SqlDocumentCollection(Collection.COURSES, manager)
