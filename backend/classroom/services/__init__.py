"""Services Layer — read-side queries, projection, and relationship maintenance.

Invariants:
    - Services depend on DocumentCollection protocols, never on SQLAlchemy
    - Every cascade is an ordered sequence of idempotent single-document writes

Design Decisions:
    - One file per concern for locality (queries, projection, relationships, retry)
"""
