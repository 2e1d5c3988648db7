"""Relationship Maintenance — creates, links, unlinks, and deletes entities without breaking references.

Invariants:
    - Student S lists course C in enrolledCourses iff C lists S in studentIds
    - A course's non-null teacherId references an existing teacher
    - No entity holds a duplicate reference ($addToSet on every link)
    - Edge writes order: course (the "many" side) first, then the student
    - Delete writes order: primary document first, then the cascade
    - A failure after the first committed write raises PartialCascadeFailureError
      carrying a `resume` coroutine for the remaining steps; nothing is rolled back
    - Mutations raise NotFoundError for absent entities (they never return None)

Design Decisions:
    - Every cascade step is an idempotent single-document or filter write, so
      retrying a step (or the whole enroll/remove) converges to the same state
    - removeStudentFromCourse treats the pair as enrolled when EITHER side holds
      the edge: a half-applied edge left by a partial failure is repairable
    - coursesTaught is derived at read time (services/projection.py), so teacher
      reassignment and deletion never touch teacher documents
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

from classroom.core.document_filters import ID_FIELD
from classroom.core.domain_types import EntityType, format_id, parse_id
from classroom.core.errors import (
    NotFoundError, PartialCascadeFailureError,
)
from classroom.core.repository_protocols import DocumentStoreLike
from classroom.schemas.entities import (
    CourseCreate, CoursePatch, PersonCreate, StudentPatch, TeacherPatch,
    validate,
)

logger = logging.getLogger(__name__)


class RelationshipService:
    """Write-side handlers: entity lifecycle and cross-reference cascades."""

    def __init__(self, store: DocumentStoreLike):
        self.store = store

    # ─── Lookups ─────────────────────────────────────────────────

    async def _require_student(self, student_id: UUID) -> dict:
        student = await self.store.students.find_one({ID_FIELD: student_id})
        if student is None:
            raise NotFoundError(EntityType.STUDENT.value, format_id(student_id))
        return student

    async def _require_teacher(self, teacher_id: UUID) -> dict:
        teacher = await self.store.teachers.find_one({ID_FIELD: teacher_id})
        if teacher is None:
            raise NotFoundError(EntityType.TEACHER.value, format_id(teacher_id))
        return teacher

    async def _require_course(self, course_id: UUID) -> dict:
        course = await self.store.courses.find_one({ID_FIELD: course_id})
        if course is None:
            raise NotFoundError(EntityType.COURSE.value, format_id(course_id))
        return course

    # ─── Create ──────────────────────────────────────────────────

    async def create_student(self, name: str, email: str) -> dict:
        data = validate(PersonCreate, name=name, email=email)
        doc = {"name": data.name, "email": data.email, "enrolledCourses": []}
        doc[ID_FIELD] = await self.store.students.insert_one(doc)
        logger.info(
            "Student created",
            extra={"operation": "createStudent", "entity_id": format_id(doc[ID_FIELD])},
        )
        return doc

    async def create_teacher(self, name: str, email: str) -> dict:
        data = validate(PersonCreate, name=name, email=email)
        doc = {"name": data.name, "email": data.email}
        doc[ID_FIELD] = await self.store.teachers.insert_one(doc)
        logger.info(
            "Teacher created",
            extra={"operation": "createTeacher", "entity_id": format_id(doc[ID_FIELD])},
        )
        return doc

    async def create_course(
        self, title: str, description: str, teacher_id: str,
    ) -> dict:
        """Create a course owned by an existing teacher."""
        data = validate(
            CourseCreate, title=title, description=description,
            teacher_id=teacher_id,
        )
        tid = parse_id(data.teacher_id, "teacherId")
        await self._require_teacher(tid)
        doc = {
            "title": data.title,
            "description": data.description,
            "teacherId": tid,
            "studentIds": [],
        }
        doc[ID_FIELD] = await self.store.courses.insert_one(doc)
        logger.info(
            "Course created",
            extra={"operation": "createCourse", "entity_id": format_id(doc[ID_FIELD])},
        )
        return doc

    # ─── Update ──────────────────────────────────────────────────

    async def update_student(self, student_id: str, patch: StudentPatch) -> dict:
        sid = parse_id(student_id)
        await self._require_student(sid)
        await self._apply_set(self.store.students, sid, patch.to_set())
        logger.info(
            "Student updated",
            extra={"operation": "updateStudent", "entity_id": format_id(sid)},
        )
        return await self._require_student(sid)

    async def update_teacher(self, teacher_id: str, patch: TeacherPatch) -> dict:
        tid = parse_id(teacher_id)
        await self._require_teacher(tid)
        await self._apply_set(self.store.teachers, tid, patch.to_set())
        logger.info(
            "Teacher updated",
            extra={"operation": "updateTeacher", "entity_id": format_id(tid)},
        )
        return await self._require_teacher(tid)

    async def update_course(self, course_id: str, patch: CoursePatch) -> dict:
        """Apply scalar fields; a new teacherId must reference an existing teacher."""
        cid = parse_id(course_id)
        await self._require_course(cid)
        fields = patch.to_set()
        if patch.teacher_id is not None:
            tid = parse_id(patch.teacher_id, "teacherId")
            await self._require_teacher(tid)
            fields["teacherId"] = tid
        await self._apply_set(self.store.courses, cid, fields)
        logger.info(
            "Course updated",
            extra={"operation": "updateCourse", "entity_id": format_id(cid)},
        )
        return await self._require_course(cid)

    async def _apply_set(self, collection, entity_id: UUID, fields: dict) -> None:
        if fields:
            await collection.update_many({ID_FIELD: entity_id}, {"$set": fields})

    # ─── Edges ───────────────────────────────────────────────────

    async def enroll_student_in_course(
        self, student_id: str, course_id: str,
    ) -> dict:
        """Add the student↔course edge on both sides. Idempotent."""
        sid = parse_id(student_id, "studentId")
        cid = parse_id(course_id, "courseId")
        await self._require_student(sid)
        await self._require_course(cid)

        await self.store.courses.update_many(
            {ID_FIELD: cid}, {"$addToSet": {"studentIds": sid}},
        )
        await self._cascade(
            "enrollStudentInCourse",
            committed_step="courses.studentIds",
            failed_step="students.enrolledCourses",
            step=lambda: self.store.students.update_many(
                {ID_FIELD: sid}, {"$addToSet": {"enrolledCourses": cid}},
            ),
            resume=lambda: self.enroll_student_in_course(student_id, course_id),
        )
        logger.info(
            "Student enrolled",
            extra={"operation": "enrollStudentInCourse", "entity_id": format_id(cid)},
        )
        return await self._require_course(cid)

    async def remove_student_from_course(
        self, student_id: str, course_id: str,
    ) -> dict:
        """Remove the student↔course edge from both sides."""
        sid = parse_id(student_id, "studentId")
        cid = parse_id(course_id, "courseId")
        student = await self._require_student(sid)
        course = await self._require_course(cid)
        if (
            sid not in course.get("studentIds", [])
            and cid not in student.get("enrolledCourses", [])
        ):
            raise NotFoundError("Enrollment", f"{sid}:{cid}")

        await self.store.courses.update_many(
            {ID_FIELD: cid}, {"$pull": {"studentIds": sid}},
        )
        await self._cascade(
            "removeStudentFromCourse",
            committed_step="courses.studentIds",
            failed_step="students.enrolledCourses",
            step=lambda: self.store.students.update_many(
                {ID_FIELD: sid}, {"$pull": {"enrolledCourses": cid}},
            ),
            resume=lambda: self.remove_student_from_course(student_id, course_id),
        )
        logger.info(
            "Student removed from course",
            extra={"operation": "removeStudentFromCourse", "entity_id": format_id(cid)},
        )
        return await self._require_course(cid)

    # ─── Delete ──────────────────────────────────────────────────

    async def delete_student(self, student_id: str) -> bool:
        """Delete the student, then drop it from every course roster."""
        sid = parse_id(student_id)
        if not await self.store.students.delete_many({ID_FIELD: sid}):
            return False
        await self._cascade(
            "deleteStudent",
            committed_step="students.delete",
            failed_step="courses.studentIds",
            step=lambda: self.detach_student(sid),
        )
        logger.info(
            "Student deleted",
            extra={"operation": "deleteStudent", "entity_id": format_id(sid)},
        )
        return True

    async def delete_teacher(self, teacher_id: str) -> bool:
        """Delete the teacher, then null teacherId on its courses (courses survive)."""
        tid = parse_id(teacher_id)
        if not await self.store.teachers.delete_many({ID_FIELD: tid}):
            return False
        await self._cascade(
            "deleteTeacher",
            committed_step="teachers.delete",
            failed_step="courses.teacherId",
            step=lambda: self.detach_teacher(tid),
        )
        logger.info(
            "Teacher deleted",
            extra={"operation": "deleteTeacher", "entity_id": format_id(tid)},
        )
        return True

    async def delete_course(self, course_id: str) -> bool:
        """Delete the course, then drop it from every student's enrollments."""
        cid = parse_id(course_id)
        if not await self.store.courses.delete_many({ID_FIELD: cid}):
            return False
        await self._cascade(
            "deleteCourse",
            committed_step="courses.delete",
            failed_step="students.enrolledCourses",
            step=lambda: self.detach_course(cid),
        )
        logger.info(
            "Course deleted",
            extra={"operation": "deleteCourse", "entity_id": format_id(cid)},
        )
        return True

    # Cascade steps: idempotent, re-run by resume after a partial failure

    async def detach_student(self, sid: UUID) -> None:
        """Drop a student id from every course roster."""
        await self.store.courses.update_many(
            {"studentIds": sid}, {"$pull": {"studentIds": sid}},
        )

    async def detach_teacher(self, tid: UUID) -> None:
        """Make every course owned by the teacher teacherless."""
        await self.store.courses.update_many(
            {"teacherId": tid}, {"$set": {"teacherId": None}},
        )

    async def detach_course(self, cid: UUID) -> None:
        """Drop a course id from every student's enrollments."""
        await self.store.students.update_many(
            {"enrolledCourses": cid}, {"$pull": {"enrolledCourses": cid}},
        )

    async def _cascade(
        self,
        operation: str,
        *,
        committed_step: str,
        failed_step: str,
        step: Callable[[], Awaitable[Any]],
        resume: Callable[[], Awaitable[Any]] | None = None,
    ) -> None:
        """Run the post-commit step; any failure becomes PartialCascadeFailureError.

        `resume` defaults to re-running the step under the same policy and
        returning True (delete cascades). Edge operations pass the whole
        operation instead, since it is idempotent and returns the course the
        caller expects.
        """
        try:
            await step()
        except Exception as e:
            if resume is None:
                async def resume() -> bool:
                    await self._cascade(
                        operation, committed_step=committed_step,
                        failed_step=failed_step, step=step,
                    )
                    return True

            logger.error(
                f"Cascade step failed after commit: {e}",
                extra={
                    "error_code": "PARTIAL_CASCADE_FAILURE",
                    "operation": operation,
                    "committed_step": committed_step,
                    "failed_step": failed_step,
                },
            )
            raise PartialCascadeFailureError(
                operation, committed_step, failed_step,
                cause=e, resume=resume,
            ) from e
