"""Root conftest — shared test configuration."""

import os

# Ensure tests never pick up a real LDB or a developer's .env overrides
os.environ.setdefault("SIDECAR_LDB_PATH", "/nonexistent/ldb.db")
os.environ.setdefault("SIDECAR_LOG_FORMAT", "text")
