"""GraphQL Schema — Query and Mutation roots dispatching to the services.

Invariants:
    - Singular queries return null for absent entities; malformed ids are errors
    - Mutations return the fully updated entity or raise a typed error, never a
      partially-populated object
    - Edge and delete mutations run through CascadeRetrier (partial failures resumed)
    - Deletes return a boolean: false when the entity did not exist

Design Decisions:
    - Resolvers are thin: build the patch, call one service method, wrap the document
"""

import strawberry
from strawberry.types import Info

from classroom.api.graphql.errors import ClassroomErrorExtension
from classroom.api.graphql.types import Course, Student, Teacher
from classroom.schemas.entities import (
    CoursePatch, StudentPatch, TeacherPatch, validate,
)


@strawberry.type
class Query:
    @strawberry.field
    async def students(self, info: Info) -> list[Student]:
        docs = await info.context.queries.students()
        return [Student.from_document(d) for d in docs]

    @strawberry.field
    async def student(self, info: Info, id: strawberry.ID) -> Student | None:
        doc = await info.context.queries.student(id)
        return Student.from_document(doc) if doc else None

    @strawberry.field
    async def teachers(self, info: Info) -> list[Teacher]:
        docs = await info.context.queries.teachers()
        return [Teacher.from_document(d) for d in docs]

    @strawberry.field
    async def teacher(self, info: Info, id: strawberry.ID) -> Teacher | None:
        doc = await info.context.queries.teacher(id)
        return Teacher.from_document(doc) if doc else None

    @strawberry.field
    async def courses(self, info: Info) -> list[Course]:
        docs = await info.context.queries.courses()
        return [Course.from_document(d) for d in docs]

    @strawberry.field
    async def course(self, info: Info, id: strawberry.ID) -> Course | None:
        doc = await info.context.queries.course(id)
        return Course.from_document(doc) if doc else None


@strawberry.type
class Mutation:
    # --- Create ---------------------------------------------------------------

    @strawberry.mutation
    async def create_student(self, info: Info, name: str, email: str) -> Student:
        doc = await info.context.relationships.create_student(name, email)
        return Student.from_document(doc)

    @strawberry.mutation
    async def create_teacher(self, info: Info, name: str, email: str) -> Teacher:
        doc = await info.context.relationships.create_teacher(name, email)
        return Teacher.from_document(doc)

    @strawberry.mutation
    async def create_course(
        self, info: Info, title: str, description: str, teacher_id: strawberry.ID,
    ) -> Course:
        doc = await info.context.relationships.create_course(
            title, description, teacher_id,
        )
        return Course.from_document(doc)

    # --- Update ---------------------------------------------------------------

    @strawberry.mutation
    async def update_student(
        self,
        info: Info,
        id: strawberry.ID,
        name: str | None = None,
        email: str | None = None,
    ) -> Student:
        patch = validate(StudentPatch, name=name, email=email)
        doc = await info.context.relationships.update_student(id, patch)
        return Student.from_document(doc)

    @strawberry.mutation
    async def update_teacher(
        self,
        info: Info,
        id: strawberry.ID,
        name: str | None = None,
        email: str | None = None,
    ) -> Teacher:
        patch = validate(TeacherPatch, name=name, email=email)
        doc = await info.context.relationships.update_teacher(id, patch)
        return Teacher.from_document(doc)

    @strawberry.mutation
    async def update_course(
        self,
        info: Info,
        id: strawberry.ID,
        title: str | None = None,
        description: str | None = None,
        teacher_id: strawberry.ID | None = None,
    ) -> Course:
        patch = validate(
            CoursePatch, title=title, description=description,
            teacher_id=teacher_id,
        )
        doc = await info.context.relationships.update_course(id, patch)
        return Course.from_document(doc)

    # --- Edges ----------------------------------------------------------------

    @strawberry.mutation
    async def enroll_student_in_course(
        self, info: Info, student_id: strawberry.ID, course_id: strawberry.ID,
    ) -> Course:
        ctx = info.context
        doc = await ctx.retrier.run(
            ctx.relationships.enroll_student_in_course, student_id, course_id,
        )
        return Course.from_document(doc)

    @strawberry.mutation
    async def remove_student_from_course(
        self, info: Info, student_id: strawberry.ID, course_id: strawberry.ID,
    ) -> Course:
        ctx = info.context
        doc = await ctx.retrier.run(
            ctx.relationships.remove_student_from_course, student_id, course_id,
        )
        return Course.from_document(doc)

    # --- Delete ---------------------------------------------------------------

    @strawberry.mutation
    async def delete_student(self, info: Info, id: strawberry.ID) -> bool:
        ctx = info.context
        return await ctx.retrier.run(ctx.relationships.delete_student, id)

    @strawberry.mutation
    async def delete_teacher(self, info: Info, id: strawberry.ID) -> bool:
        ctx = info.context
        return await ctx.retrier.run(ctx.relationships.delete_teacher, id)

    @strawberry.mutation
    async def delete_course(self, info: Info, id: strawberry.ID) -> bool:
        ctx = info.context
        return await ctx.retrier.run(ctx.relationships.delete_course, id)


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[ClassroomErrorExtension],
)
