"""Boundary Protocols — contracts between the relationship core and the document store.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - All store IO goes through DocumentCollection
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - Documents are plain dicts keyed by field name, with "_id" holding a UUID
"""

from typing import Protocol
from uuid import UUID


class DocumentCollection(Protocol):
    """Collection-scoped CRUD contract — implemented by infrastructure."""
    name: str

    async def find(self, filter_: dict | None = None) -> list[dict]: ...
    async def find_one(self, filter_: dict) -> dict | None: ...
    async def insert_one(self, document: dict) -> UUID: ...
    async def update_many(self, filter_: dict, update: dict) -> int: ...
    async def delete_many(self, filter_: dict) -> int: ...


class DocumentStoreLike(Protocol):
    """The three collections a request handler sees."""
    students: DocumentCollection
    teachers: DocumentCollection
    courses: DocumentCollection
