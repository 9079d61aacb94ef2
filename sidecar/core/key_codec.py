"""Key Codec — turns decoded key segments into the Reader's positional key args.

Invariants:
    - Output order == input order (primary-key column order is the caller's job)
    - No validation here: empty or odd values are forwarded to the store as-is
"""

from typing import Any, Sequence

from sidecar.core.domain_types import BinaryKey, KeySegment, ScalarKey


def resolve(segment: KeySegment) -> Any:
    """Native value for one key segment."""
    match segment:
        case BinaryKey(payload=payload):
            return payload
        case ScalarKey(value=value):
            return value
    raise TypeError(f"unsupported key segment: {segment!r}")


def to_positional_args(segments: Sequence[KeySegment]) -> list[Any]:
    return [resolve(segment) for segment in segments]
