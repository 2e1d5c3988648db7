"""Entity Schemas — Pydantic input models and per-entity patches for the mutation boundary.

Invariants:
    - names, emails, titles are stripped and non-empty; emails contain "@"
    - Patch models list ONLY the fields eligible for partial update, each optional
    - Patch.to_set() maps supplied fields to stored document keys; omitted fields never appear
    - Pydantic ValidationError never escapes: validate() raises InvalidArgumentError

Design Decisions:
    - Explicit patch per entity over an untyped accumulator dict: unknown fields are
      rejected, identity and reference lists can't be patched by accident
    - field_validator for side-effect-free transforms (strip)
"""

from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from classroom.core.errors import InvalidArgumentError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


def _check_email(v: str) -> str:
    v = _strip_required(v)
    local, _, domain = v.partition("@")
    if not local or not domain:
        raise ValueError("must be an email address")
    return v


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# --- Create inputs -----------------------------------------------------------

class PersonCreate(_StrictModel):
    """Student/teacher creation — name and email required."""
    name: str = Field(max_length=200)
    email: str = Field(max_length=320)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class CourseCreate(_StrictModel):
    """Course creation — teacher reference is mandatory."""
    title: str = Field(max_length=200)
    description: str = Field(max_length=10_000)
    teacher_id: str

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


# --- Patches -----------------------------------------------------------------

class PersonPatch(_StrictModel):
    """Partial update for students and teachers."""
    name: str | None = Field(None, max_length=200)
    email: str | None = Field(None, max_length=320)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return None if v is None else _strip_required(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        return None if v is None else _check_email(v)

    def to_set(self) -> dict:
        return self.model_dump(exclude_none=True)


class StudentPatch(PersonPatch):
    """Partial update for a student."""


class TeacherPatch(PersonPatch):
    """Partial update for a teacher."""


class CoursePatch(_StrictModel):
    """Partial update for a course. teacher_id is the raw id string."""
    title: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    teacher_id: str | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return None if v is None else _strip_required(v)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        return None if v is None else v.strip()

    def to_set(self) -> dict:
        """Scalar fields only — teacherId is resolved and set by the caller."""
        return self.model_dump(exclude_none=True, exclude={"teacher_id"})


def validate(model: type[ModelT], **data) -> ModelT:
    """Build model from data, mapping ValidationError to InvalidArgumentError."""
    try:
        return model(**data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or model.__name__
        raise InvalidArgumentError(
            f"Invalid value for '{field}': {first['msg']}", field,
        )
