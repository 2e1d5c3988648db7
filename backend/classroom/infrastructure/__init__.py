"""Infrastructure Layer — database sessions, document store, and logging.

Invariants:
    - All SQLAlchemy exceptions mapped to DatabaseError before leaving this layer

Design Decisions:
    - DocumentStore implements core/repository_protocols structurally
"""
