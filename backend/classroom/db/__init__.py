"""Database Infrastructure — declarative base for the documents table.

Invariants:
    - All sessions are async (AsyncSession), created by DatabaseSessionManager
"""
