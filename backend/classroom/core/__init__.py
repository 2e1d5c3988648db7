"""Core Layer — pure domain types, errors, and the document filter language.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: store IO enters only
      through repository_protocols
"""
