"""Entity Queries — list and singular lookups for the three collections.

Invariants:
    - Singular lookups return None when absent (never raise NotFound)
    - Malformed id strings raise InvalidArgumentError before any store call
"""

from classroom.core.document_filters import ID_FIELD
from classroom.core.domain_types import parse_id
from classroom.core.repository_protocols import DocumentStoreLike


class EntityQueries:
    """Read-side handlers."""

    def __init__(self, store: DocumentStoreLike):
        self.store = store

    async def students(self) -> list[dict]:
        return await self.store.students.find()

    async def student(self, student_id: str) -> dict | None:
        return await self.store.students.find_one(
            {ID_FIELD: parse_id(student_id)},
        )

    async def teachers(self) -> list[dict]:
        return await self.store.teachers.find()

    async def teacher(self, teacher_id: str) -> dict | None:
        return await self.store.teachers.find_one(
            {ID_FIELD: parse_id(teacher_id)},
        )

    async def courses(self) -> list[dict]:
        return await self.store.courses.find()

    async def course(self, course_id: str) -> dict | None:
        return await self.store.courses.find_one(
            {ID_FIELD: parse_id(course_id)},
        )
