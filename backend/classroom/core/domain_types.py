"""Domain Types — identity types, collection names, and id parsing at the API boundary.

Invariants:
    - StudentId, TeacherId, CourseId wrap UUIDs — never use bare strings in domain logic
    - Identities cross the API boundary as strings; parse_id is the only way in
    - Malformed id strings raise InvalidArgumentError, never ValueError

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - UUID as the native reference type: globally unique, immutable, JSON-friendly as str
    - str Enums for collection names: serialize without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID

from classroom.core.errors import InvalidArgumentError


# ─── Identity Types ──────────────────────────────────────────────

StudentId = NewType("StudentId", UUID)
TeacherId = NewType("TeacherId", UUID)
CourseId = NewType("CourseId", UUID)

# Raw stored document (JSON body + "_id")
Document = dict


# ─── Enums ───────────────────────────────────────────────────────

class Collection(str, Enum):
    """The three document collections."""
    STUDENTS = "students"
    TEACHERS = "teachers"
    COURSES = "courses"


class EntityType(str, Enum):
    """Entity names used in error messages and log records."""
    STUDENT = "Student"
    TEACHER = "Teacher"
    COURSE = "Course"


# ─── Boundary parsing ────────────────────────────────────────────

def parse_id(raw: str, field: str = "id") -> UUID:
    """Parse an opaque identity string into the store's native reference type."""
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw).strip())
    except (ValueError, AttributeError, TypeError):
        raise InvalidArgumentError(
            f"Malformed identity for '{field}': {raw!r}", field,
        )


def format_id(value: UUID | None) -> str | None:
    """Render a native reference as the opaque API string."""
    return str(value) if value is not None else None
