"""GraphQL Layer — strawberry types, Query/Mutation roots, and request context.

Invariants:
    - Nested entities are resolved per requested field (lazy), never eagerly joined
    - ClassroomError surfaces as a GraphQL error with code in extensions
"""
