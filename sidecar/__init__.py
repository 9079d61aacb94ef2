"""ctlstore Sidecar Package — read-only HTTP access to the local ctlstore replica.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
