"""Services — async operations that load, change and persist domain records.

Invariants:
    - Services take an AsyncSession and commit their own unit of work
    - Business decisions live in core/ (pure); services apply them
"""
