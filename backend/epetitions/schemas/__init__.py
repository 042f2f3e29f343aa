"""API Schemas — Pydantic request/response models for the HTTP boundary.

Invariants:
    - Request models check shape and types only; record rules (lengths, blanks,
      duplicates) are enforced by core/validate_records.py so they apply to every
      caller, not just HTTP
"""
