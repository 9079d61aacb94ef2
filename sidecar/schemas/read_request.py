"""Read Request Schemas — Pydantic models for the lookup/scan request body.

Invariants:
    - Wire shape is {"Key": [{"Value": ..., "Binary": "<base64>"}, ...]}
    - Field names accepted in both capitalized and lowercase form
    - A JSON null body means no key segments; a null segment is an empty scalar
    - A non-empty Binary wins over Value; the result is a KeySegment sum type
    - Any decode failure surfaces as DecodeError (never FastAPI's 422)

Design Decisions:
    - Body parsed by hand in the route (not a typed body parameter) so malformed
      JSON goes through the sidecar's own error path
    - Binary decoded with validate=True: stray characters are rejected, not skipped
"""

import base64
import binascii
from typing import Any

from pydantic import (
    AliasChoices, BaseModel, Field, ValidationError, field_validator, model_validator,
)

from sidecar.core.domain_types import BinaryKey, KeySegment, ScalarKey
from sidecar.core.errors import DecodeError


class KeySegmentIn(BaseModel):
    """One primary key segment as sent over the wire."""
    value: Any = Field(None, validation_alias=AliasChoices("Value", "value"))
    binary: bytes | None = Field(
        None, validation_alias=AliasChoices("Binary", "binary"),
    )

    @field_validator("binary", mode="before")
    @classmethod
    def decode_base64(cls, v: Any) -> bytes | None:
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("binary key segment must be a base64 string")
        try:
            return base64.b64decode(v, validate=True)
        except binascii.Error as e:
            raise ValueError(f"illegal base64 data: {e}") from e

    def to_segment(self) -> KeySegment:
        if self.binary:
            return BinaryKey(self.binary)
        return ScalarKey(self.value)


class ReadRequestIn(BaseModel):
    """Body of get-row-by-key and get-rows-by-key-prefix."""
    key: list[KeySegmentIn | None] | None = Field(
        None, validation_alias=AliasChoices("Key", "key"),
    )

    @model_validator(mode="before")
    @classmethod
    def null_body_is_empty(cls, data: Any) -> Any:
        return {} if data is None else data

    def segments(self) -> list[KeySegment]:
        return [
            k.to_segment() if k is not None else ScalarKey(None)
            for k in self.key or []
        ]


def decode_read_request(body: bytes) -> list[KeySegment]:
    """Parse a raw request body into ordered key segments."""
    try:
        request = ReadRequestIn.model_validate_json(body)
    except ValidationError as e:
        raise DecodeError(_describe(e)) from e
    return request.segments()


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first["loc"])
    return f"{loc}: {first['msg']}" if loc else first["msg"]
