"""Domain Types — key segments and rows as the Reader sees them.

Invariants:
    - A KeySegment is exactly one of ScalarKey or BinaryKey, never both
    - BinaryKey.payload is the raw byte value (already base64-decoded)
    - Segment order always matches the table's primary-key column order

Design Decisions:
    - Frozen dataclasses + union alias over one model with two optional fields:
      the scalar/binary precedence is decided once, at decode time
"""

from dataclasses import dataclass
from typing import Any


Row = dict[str, Any]


@dataclass(frozen=True)
class ScalarKey:
    """A JSON-typed key value (string, number, bool or null)."""
    value: Any = None


@dataclass(frozen=True)
class BinaryKey:
    """A varbinary key value."""
    payload: bytes


KeySegment = ScalarKey | BinaryKey
