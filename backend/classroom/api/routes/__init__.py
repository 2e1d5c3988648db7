"""Route Modules — one file per REST concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic
"""
