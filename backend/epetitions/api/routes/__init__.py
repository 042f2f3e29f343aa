"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Public routes depend on require_public_access; admin routes on require_admin
"""
