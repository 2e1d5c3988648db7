"""Classroom API — FastAPI application entry point.

Invariants:
    - GraphQL endpoint mounted at /graphql; REST health probes under /api/v1/health
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ClassroomError → structured JSON responses
    - Database initialized on startup via lifespan context manager, disposed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - SQLite URLs get create_all at startup (dev convenience); other databases
      are migrated with alembic
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from strawberry.fastapi import GraphQLRouter

from classroom.api.error_handlers import register_error_handlers
from classroom.api.graphql.context import get_context
from classroom.api.graphql.schema import schema
from classroom.api.routes import health
from classroom.config import get_settings
from classroom.infrastructure.database import init_db
from classroom.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_url.startswith("sqlite"):
        await manager.create_all()
    logger.info("Classroom API started")
    yield
    await manager.dispose()
    logger.info("Classroom API shutting down")


settings = get_settings()

app = FastAPI(title="Classroom API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

graphql_router = GraphQLRouter(
    schema,
    context_getter=get_context,
    graphql_ide="graphiql" if settings.graphql_graphiql else None,
)

app.include_router(health.router)
app.include_router(graphql_router, prefix="/graphql")

register_error_handlers(app)
