"""GraphQL Request Context — store handles and services for one operation.

Invariants:
    - A fresh context per request; the DB engine/pool behind it is process-wide
    - Resolvers reach the store only through context.store / context services

Design Decisions:
    - DocumentStore built per request over the shared db_manager: cheap wrapper,
      and tests swap db_manager without touching the router
"""

from strawberry.fastapi import BaseContext

from classroom.config import get_settings
from classroom.core.repository_protocols import DocumentStoreLike
from classroom.infrastructure.database import get_db_manager
from classroom.infrastructure.document_store import DocumentStore
from classroom.services.cascade_retry import CascadeRetrier
from classroom.services.queries import EntityQueries
from classroom.services.relationships import RelationshipService


class ClassroomContext(BaseContext):
    """Per-request context handed to every resolver."""

    def __init__(self, store: DocumentStoreLike, retrier: CascadeRetrier):
        super().__init__()
        self.store = store
        self.queries = EntityQueries(store)
        self.relationships = RelationshipService(store)
        self.retrier = retrier


async def get_context() -> ClassroomContext:
    """FastAPI dependency used as the GraphQL router's context_getter."""
    settings = get_settings()
    return ClassroomContext(
        store=DocumentStore(get_db_manager()),
        retrier=CascadeRetrier(
            max_retries=settings.cascade_max_retries,
            base_delay_ms=settings.cascade_base_delay_ms,
            max_delay_ms=settings.cascade_max_delay_ms,
        ),
    )
