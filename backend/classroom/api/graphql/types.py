"""GraphQL Object Types — Student, Teacher, Course with per-field lazy resolution.

Invariants:
    - Scalar fields come straight from the stored document (no store round-trip)
    - Each nested field resolves through exactly one projection call, only when requested
    - Ids leave the API as opaque strings
    - Course.teacher is null for teacherless courses; a dangling teacherId is an error

Design Decisions:
    - The stored document rides along as strawberry.Private: resolvers need the
      reference lists, clients never see them raw
"""

import strawberry
from strawberry.types import Info

from classroom.core.document_filters import ID_FIELD
from classroom.services import projection


def _gid(value) -> strawberry.ID:
    return strawberry.ID(str(value))


@strawberry.type(description="A student and the courses they are enrolled in.")
class Student:
    id: strawberry.ID
    name: str
    email: str
    doc: strawberry.Private[dict]

    @classmethod
    def from_document(cls, doc: dict) -> "Student":
        return cls(id=_gid(doc[ID_FIELD]), name=doc["name"], email=doc["email"], doc=doc)

    @strawberry.field
    async def enrolled_courses(self, info: Info) -> list["Course"]:
        docs = await projection.student_courses(info.context.store, self.doc)
        return [Course.from_document(d) for d in docs]

    @strawberry.field
    async def enrolled_course_titles(self, info: Info) -> list[str]:
        return await projection.student_course_titles(info.context.store, self.doc)


@strawberry.type(description="A teacher. coursesTaught is derived from courses.teacherId.")
class Teacher:
    id: strawberry.ID
    name: str
    email: str
    doc: strawberry.Private[dict]

    @classmethod
    def from_document(cls, doc: dict) -> "Teacher":
        return cls(id=_gid(doc[ID_FIELD]), name=doc["name"], email=doc["email"], doc=doc)

    @strawberry.field
    async def courses_taught(self, info: Info) -> list["Course"]:
        docs = await projection.teacher_courses(info.context.store, self.doc)
        return [Course.from_document(d) for d in docs]


@strawberry.type(description="A course with its (optional) teacher and enrolled students.")
class Course:
    id: strawberry.ID
    title: str
    description: str
    teacher_id: strawberry.ID | None
    student_ids: list[strawberry.ID]
    doc: strawberry.Private[dict]

    @classmethod
    def from_document(cls, doc: dict) -> "Course":
        teacher_id = doc.get("teacherId")
        return cls(
            id=_gid(doc[ID_FIELD]),
            title=doc["title"],
            description=doc.get("description", ""),
            teacher_id=_gid(teacher_id) if teacher_id is not None else None,
            student_ids=[_gid(s) for s in doc.get("studentIds", [])],
            doc=doc,
        )

    @strawberry.field
    async def teacher(self, info: Info) -> Teacher | None:
        doc = await projection.course_teacher(info.context.store, self.doc)
        return Teacher.from_document(doc) if doc is not None else None

    @strawberry.field
    async def students(self, info: Info) -> list[Student]:
        docs = await projection.course_students(info.context.store, self.doc)
        return [Student.from_document(d) for d in docs]
