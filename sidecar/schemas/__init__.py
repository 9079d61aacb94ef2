"""Pydantic Schemas — request validation for the lookup and scan endpoints.

Invariants:
    - Schemas validate at system boundary (request bodies)
    - Decoded output uses domain types from core/
"""
