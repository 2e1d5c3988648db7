"""Pydantic Schemas — input validation and entity patches at the mutation boundary.

Invariants:
    - Schemas validate at system boundary (user input)
    - Validation failures become InvalidArgumentError
"""
