"""GraphQL API — end-to-end through FastAPI, strawberry, and the SQLite document store."""

from uuid import uuid4

from classroom.core.domain_types import parse_id
from classroom.services.queries import EntityQueries

CREATE_TEACHER = """
mutation($name: String!, $email: String!) {
  createTeacher(name: $name, email: $email) { id name email }
}
"""

CREATE_COURSE = """
mutation($title: String!, $description: String!, $teacherId: ID!) {
  createCourse(title: $title, description: $description, teacherId: $teacherId) {
    id title teacherId studentIds
  }
}
"""

CREATE_STUDENT = """
mutation($name: String!, $email: String!) {
  createStudent(name: $name, email: $email) { id name email }
}
"""

ENROLL = """
mutation($studentId: ID!, $courseId: ID!) {
  enrollStudentInCourse(studentId: $studentId, courseId: $courseId) {
    id studentIds students { name }
  }
}
"""

REMOVE = """
mutation($studentId: ID!, $courseId: ID!) {
  removeStudentFromCourse(studentId: $studentId, courseId: $courseId) {
    id studentIds
  }
}
"""


async def _seed(gql):
    teacher = (await gql(CREATE_TEACHER, name="Ana", email="ana@x.io"))["data"]["createTeacher"]
    course = (await gql(
        CREATE_COURSE, title="Algo", description="...", teacherId=teacher["id"],
    ))["data"]["createCourse"]
    student = (await gql(CREATE_STUDENT, name="Sam", email="sam@x.io"))["data"]["createStudent"]
    return teacher, course, student


def _error_code(body) -> str:
    return body["errors"][0]["extensions"]["code"]


async def test_create_teacher_then_course_shows_in_courses_taught(gql):
    teacher, course, _ = await _seed(gql)
    assert course["teacherId"] == teacher["id"]
    assert course["studentIds"] == []

    body = await gql(
        "query($id: ID!) { teacher(id: $id) { name coursesTaught { title } } }",
        id=teacher["id"],
    )
    assert body["data"]["teacher"] == {
        "name": "Ana", "coursesTaught": [{"title": "Algo"}],
    }


async def test_enroll_twice_no_duplicates(gql):
    _, course, student = await _seed(gql)
    await gql(ENROLL, studentId=student["id"], courseId=course["id"])
    body = await gql(ENROLL, studentId=student["id"], courseId=course["id"])

    enrolled = body["data"]["enrollStudentInCourse"]
    assert enrolled["studentIds"] == [student["id"]]
    assert enrolled["students"] == [{"name": "Sam"}]

    body = await gql(
        "query($id: ID!) { student(id: $id) { enrolledCourses { id } enrolledCourseTitles } }",
        id=student["id"],
    )
    assert body["data"]["student"] == {
        "enrolledCourses": [{"id": course["id"]}],
        "enrolledCourseTitles": ["Algo"],
    }


async def test_remove_not_enrolled_is_not_found(gql):
    _, course, student = await _seed(gql)
    body = await gql(REMOVE, studentId=student["id"], courseId=course["id"])
    assert body["data"] is None
    assert _error_code(body) == "NOT_FOUND"


async def test_remove_after_enroll(gql):
    _, course, student = await _seed(gql)
    await gql(ENROLL, studentId=student["id"], courseId=course["id"])
    body = await gql(REMOVE, studentId=student["id"], courseId=course["id"])
    assert body["data"]["removeStudentFromCourse"]["studentIds"] == []


async def test_delete_teacher_course_survives_teacherless(gql):
    teacher, course, _ = await _seed(gql)
    body = await gql(
        "mutation($id: ID!) { deleteTeacher(id: $id) }", id=teacher["id"],
    )
    assert body["data"]["deleteTeacher"] is True

    body = await gql(
        "query($id: ID!) { course(id: $id) { title teacherId teacher { name } } }",
        id=course["id"],
    )
    assert "errors" not in body
    assert body["data"]["course"] == {"title": "Algo", "teacherId": None, "teacher": None}


async def test_delete_student_removed_from_every_course(gql):
    teacher, c1, student = await _seed(gql)
    c2 = (await gql(
        CREATE_COURSE, title="Data", description="...", teacherId=teacher["id"],
    ))["data"]["createCourse"]
    for course in (c1, c2):
        await gql(ENROLL, studentId=student["id"], courseId=course["id"])

    body = await gql(
        "mutation($id: ID!) { deleteStudent(id: $id) }", id=student["id"],
    )
    assert body["data"]["deleteStudent"] is True

    body = await gql("{ courses { title studentIds students { id } } }")
    for course in body["data"]["courses"]:
        assert course["studentIds"] == []
        assert course["students"] == []


async def test_delete_absent_returns_false(gql):
    body = await gql("mutation($id: ID!) { deleteCourse(id: $id) }", id=str(uuid4()))
    assert body["data"]["deleteCourse"] is False


async def test_create_course_unknown_teacher(gql):
    body = await gql(
        CREATE_COURSE, title="X", description="...", teacherId=str(uuid4()),
    )
    assert _error_code(body) == "NOT_FOUND"

    body = await gql("{ courses { id } }")
    assert body["data"]["courses"] == []


async def test_create_course_malformed_teacher_id(gql):
    body = await gql(
        CREATE_COURSE, title="X", description="...", teacherId="nonexistent",
    )
    assert _error_code(body) == "INVALID_ARGUMENT"
    assert body["errors"][0]["extensions"]["category"] == "validation"


async def test_missing_singular_is_null_without_error(gql):
    body = await gql("query($id: ID!) { student(id: $id) { id } }", id=str(uuid4()))
    assert body == {"data": {"student": None}}


async def test_update_student_partial(gql):
    _, _, student = await _seed(gql)
    body = await gql(
        """mutation($id: ID!, $email: String) {
             updateStudent(id: $id, email: $email) { name email }
           }""",
        id=student["id"], email="sam@y.io",
    )
    assert body["data"]["updateStudent"] == {"name": "Sam", "email": "sam@y.io"}


async def test_update_missing_teacher_is_not_found(gql):
    body = await gql(
        """mutation($id: ID!) { updateTeacher(id: $id, name: "Zed") { id } }""",
        id=str(uuid4()),
    )
    assert _error_code(body) == "NOT_FOUND"


async def test_update_invalid_email_is_invalid_argument(gql):
    _, _, student = await _seed(gql)
    body = await gql(
        """mutation($id: ID!) { updateStudent(id: $id, email: "broken") { id } }""",
        id=student["id"],
    )
    assert _error_code(body) == "INVALID_ARGUMENT"


async def test_dangling_teacher_reference_surfaces_as_error(gql, store):
    teacher, course, _ = await _seed(gql)
    await store.teachers.delete_many({"_id": parse_id(teacher["id"])})

    body = await gql(
        "query($id: ID!) { course(id: $id) { title teacher { name } } }",
        id=course["id"],
    )
    assert body["data"]["course"] == {"title": "Algo", "teacher": None}
    assert _error_code(body) == "DANGLING_REFERENCE"


async def test_unexpected_error_is_masked(gql, monkeypatch):
    async def boom(self):
        raise RuntimeError("secret connection string")

    monkeypatch.setattr(EntityQueries, "students", boom)
    body = await gql("{ students { id } }")
    assert _error_code(body) == "INTERNAL_ERROR"
    assert "secret" not in body["errors"][0]["message"]
