"""Entity Schemas — input validation and patches.

Tests cover:
    - create inputs strip whitespace and reject empty/invalid values
    - patches only carry supplied fields
    - unknown fields rejected
    - ValidationError always surfaces as InvalidArgumentError
"""

import pytest

from classroom.core.errors import InvalidArgumentError
from classroom.schemas.entities import (
    CourseCreate, CoursePatch, PersonCreate, StudentPatch, TeacherPatch, validate,
)


def test_person_create_strips_fields():
    data = validate(PersonCreate, name="  Ana ", email=" ana@x.io ")
    assert data.name == "Ana"
    assert data.email == "ana@x.io"


@pytest.mark.parametrize("name,email,field", [
    ("   ", "ana@x.io", "name"),
    ("Ana", "not-an-email", "email"),
    ("Ana", "@x.io", "email"),
])
def test_person_create_rejects_invalid(name, email, field):
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate(PersonCreate, name=name, email=email)
    assert exc_info.value.field == field


def test_missing_required_field_is_invalid_argument():
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate(CourseCreate, title="Algo", description="...")
    assert exc_info.value.field == "teacher_id"


def test_course_create_allows_empty_description():
    data = validate(CourseCreate, title="Algo", description="  ", teacher_id="t")
    assert data.description == ""


def test_student_patch_only_supplied_fields():
    assert validate(StudentPatch, name="Bea", email=None).to_set() == {"name": "Bea"}
    assert validate(TeacherPatch).to_set() == {}


def test_course_patch_excludes_teacher_id_from_scalar_set():
    patch = validate(CoursePatch, title="New", teacher_id="abc")
    assert patch.to_set() == {"title": "New"}
    assert patch.teacher_id == "abc"


def test_course_patch_strips_description_like_create():
    created = validate(CourseCreate, title="T", description="  intro  ", teacher_id="abc")
    patch = validate(CoursePatch, description="  intro  ")
    assert patch.to_set() == {"description": created.description}
    assert patch.description == "intro"


def test_patch_rejects_unknown_fields():
    with pytest.raises(InvalidArgumentError):
        validate(StudentPatch, enrolledCourses=[])


def test_patch_rejects_blank_name():
    with pytest.raises(InvalidArgumentError):
        validate(TeacherPatch, name="  ")
