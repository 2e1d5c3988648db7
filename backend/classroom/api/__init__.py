"""API Layer — GraphQL schema, health routes, and error handlers.

Invariants:
    - Routes and the GraphQL router registered explicitly in main.py
    - All REST endpoints return structured JSON responses

Design Decisions:
    - Thin resolvers delegate to services
"""
