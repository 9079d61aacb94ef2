"""API Layer — FastAPI routes, dependencies and the error translator.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Handlers return a finished response or raise; they never write a 500 themselves
"""
