"""GraphQL Error Extension — typed error codes in extensions, internal details masked.

Invariants:
    - ClassroomError → message kept, {code, category, severity} added to extensions
    - GraphQL syntax/validation errors (no original_error) pass through unchanged
    - Any other exception → INTERNAL_ERROR with a generic message, logged with traceback

Design Decisions:
    - SchemaExtension post-processing the operation result: same hook strawberry's
      own MaskErrors uses, so it covers queries and mutations alike
"""

import logging

from graphql import GraphQLError
from strawberry.extensions import SchemaExtension

from classroom.core.errors import ClassroomError, ErrorSeverity

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def _format_error(error: GraphQLError) -> GraphQLError:
    original = error.original_error
    if original is None:
        return error
    if isinstance(original, ClassroomError):
        logger.warning(
            f"ClassroomError: {original.message}",
            extra={
                "error_code": original.code,
                "path": ".".join(str(p) for p in error.path or []),
            },
        )
        error.extensions = {**(error.extensions or {}), **original.to_extensions()}
        return error
    logger.error(
        f"Unhandled exception in resolver: {original}",
        exc_info=(type(original), original, original.__traceback__),
    )
    return GraphQLError(
        INTERNAL_ERROR_MESSAGE,
        nodes=error.nodes,
        source=error.source,
        positions=error.positions,
        path=error.path,
        extensions={
            "code": "INTERNAL_ERROR",
            "category": "internal",
            "severity": ErrorSeverity.CRITICAL.value,
        },
    )


class ClassroomErrorExtension(SchemaExtension):
    """Attach error codes and mask unexpected exceptions."""

    def on_operation(self):
        yield
        result = self.execution_context.result
        if result is not None and result.errors:
            result.errors = [_format_error(e) for e in result.errors]
