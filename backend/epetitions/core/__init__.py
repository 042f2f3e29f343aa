"""Core — pure domain logic: types, errors, rules, validation and formatting.

Invariants:
    - No IO: core never imports from services, infrastructure or api
    - Core functions are synchronous and deterministic given their inputs
"""
