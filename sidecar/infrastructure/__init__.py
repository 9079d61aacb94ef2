"""Infrastructure Layer — the LDB adapter and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from api/
    - Store failures leave this layer as ReaderError, never as raw SQLAlchemy errors
"""
