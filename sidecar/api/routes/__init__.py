"""Route Modules — one file per concern.

Invariants:
    - Each module defines its own APIRouter
    - Routes hold no store logic: decode, call the Reader, encode

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
