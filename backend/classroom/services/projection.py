"""Entity Projection — resolves stored references into the documents an API consumer sees.

Invariants:
    - Pure reads: no function here writes to the store
    - One store round-trip per resolved field; callers resolve only requested fields
    - coursesTaught is computed from courses.teacherId, never from a stored list
    - A non-null teacherId that does not resolve raises DanglingReferenceError
    - List references keep stored order; ids that no longer resolve are skipped
      and logged (cascades remove them, a concurrent delete can race ahead)

Design Decisions:
    - Free functions over a class: every function takes the store explicitly so
      GraphQL field resolvers can call exactly one of them per field
"""

import logging

from classroom.core.document_filters import ID_FIELD
from classroom.core.domain_types import EntityType, format_id
from classroom.core.errors import DanglingReferenceError
from classroom.core.repository_protocols import (
    DocumentCollection, DocumentStoreLike,
)

logger = logging.getLogger(__name__)


async def _resolve_in_order(
    collection: DocumentCollection, ids: list, owner: dict, field: str,
) -> list[dict]:
    found = await collection.find({ID_FIELD: {"$in": list(ids)}})
    by_id = {doc[ID_FIELD]: doc for doc in found}
    missing = [i for i in ids if i not in by_id]
    if missing:
        logger.warning(
            f"Skipping {len(missing)} unresolved reference(s) in {field}",
            extra={"entity_id": format_id(owner[ID_FIELD])},
        )
    return [by_id[i] for i in ids if i in by_id]


async def student_courses(store: DocumentStoreLike, student: dict) -> list[dict]:
    """Courses the student is enrolled in, in enrollment order."""
    ids = student.get("enrolledCourses") or []
    if not ids:
        return []
    return await _resolve_in_order(store.courses, ids, student, "enrolledCourses")


async def student_course_titles(
    store: DocumentStoreLike, student: dict,
) -> list[str]:
    """Title-only variant of student_courses."""
    return [c["title"] for c in await student_courses(store, student)]


async def teacher_courses(store: DocumentStoreLike, teacher: dict) -> list[dict]:
    """Courses whose teacherId is this teacher (derived at read time)."""
    return await store.courses.find({"teacherId": teacher[ID_FIELD]})


async def course_teacher(store: DocumentStoreLike, course: dict) -> dict | None:
    """The course's teacher, or None if the course is teacherless."""
    teacher_id = course.get("teacherId")
    if teacher_id is None:
        return None
    teacher = await store.teachers.find_one({ID_FIELD: teacher_id})
    if teacher is None:
        raise DanglingReferenceError(
            EntityType.COURSE.value, format_id(course[ID_FIELD]),
            "teacherId", format_id(teacher_id),
        )
    return teacher


async def course_students(store: DocumentStoreLike, course: dict) -> list[dict]:
    """Students enrolled in the course, in enrollment order."""
    ids = course.get("studentIds") or []
    if not ids:
        return []
    return await _resolve_in_order(store.students, ids, course, "studentIds")
