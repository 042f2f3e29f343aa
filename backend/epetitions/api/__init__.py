"""API Layer — FastAPI routes, access guards and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses
    - Routes stay thin: load, delegate to services, shape the response
"""
