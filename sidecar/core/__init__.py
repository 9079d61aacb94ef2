"""Core Layer — pure key handling, error types and the Reader contract.

Invariants:
    - No module in core/ imports from api/ or infrastructure/
    - No IO happens here; the Reader protocol only describes it

Design Decisions:
    - Functional core separated from imperative shell (routes + LDB adapter)
"""
