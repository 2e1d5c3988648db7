"""Entity Projection — lazy resolution of stored references."""

from uuid import uuid4

import pytest

from classroom.core.errors import DanglingReferenceError
from classroom.services import projection


@pytest.fixture
async def roster(service):
    teacher = await service.create_teacher("Ana", "ana@x.io")
    algo = await service.create_course("Algo", "...", str(teacher["_id"]))
    data = await service.create_course("Data", "...", str(teacher["_id"]))
    student = await service.create_student("Sam", "sam@x.io")
    await service.enroll_student_in_course(str(student["_id"]), str(data["_id"]))
    await service.enroll_student_in_course(str(student["_id"]), str(algo["_id"]))
    return {"teacher": teacher, "algo": algo, "data": data, "student": student}


async def test_student_courses_in_enrollment_order(store, queries, roster):
    student = await queries.student(str(roster["student"]["_id"]))
    courses = await projection.student_courses(store, student)
    assert [c["title"] for c in courses] == ["Data", "Algo"]


async def test_student_course_titles(store, queries, roster):
    student = await queries.student(str(roster["student"]["_id"]))
    assert await projection.student_course_titles(store, student) == ["Data", "Algo"]


class _UntouchableStore:
    def __getattr__(self, name):
        raise AssertionError(f"store.{name} must not be touched")


async def test_student_without_courses_skips_store():
    student = {"_id": uuid4(), "enrolledCourses": []}
    assert await projection.student_courses(_UntouchableStore(), student) == []
    assert await projection.student_courses(_UntouchableStore(), {"_id": uuid4()}) == []


async def test_course_without_students_skips_store():
    course = {"_id": uuid4(), "studentIds": []}
    assert await projection.course_students(_UntouchableStore(), course) == []


async def test_teacher_courses_derived_from_course_owner(store, service, roster):
    titles = {c["title"] for c in await projection.teacher_courses(store, roster["teacher"])}
    assert titles == {"Algo", "Data"}

    other = await service.create_teacher("Bob", "bob@x.io")
    await store.courses.update_many(
        {"_id": roster["algo"]["_id"]}, {"$set": {"teacherId": other["_id"]}},
    )
    titles = {c["title"] for c in await projection.teacher_courses(store, roster["teacher"])}
    assert titles == {"Data"}


async def test_course_teacher_resolves(store, queries, roster):
    course = await queries.course(str(roster["algo"]["_id"]))
    teacher = await projection.course_teacher(store, course)
    assert teacher["name"] == "Ana"


async def test_course_teacher_none_when_teacherless(store, service, queries, roster):
    await service.delete_teacher(str(roster["teacher"]["_id"]))
    course = await queries.course(str(roster["algo"]["_id"]))
    assert await projection.course_teacher(store, course) is None


async def test_course_teacher_dangling_reference(store, queries, roster):
    await store.teachers.delete_many({"_id": roster["teacher"]["_id"]})
    course = await queries.course(str(roster["algo"]["_id"]))

    with pytest.raises(DanglingReferenceError) as exc_info:
        await projection.course_teacher(store, course)
    assert exc_info.value.code == "DANGLING_REFERENCE"
    assert exc_info.value.field == "teacherId"


async def test_course_students_skips_unresolved_ids(store, queries, roster):
    await store.students.delete_many({"_id": roster["student"]["_id"]})
    course = await queries.course(str(roster["algo"]["_id"]))
    assert course["studentIds"] == [roster["student"]["_id"]]
    assert await projection.course_students(store, course) == []
