"""
Decoder and encoder option classes.

Typed configuration for the codec entry points. The text encoding is always
passed explicitly through these options, never held as module state.
"""

from __future__ import annotations
import codecs
from typing import Optional, Any, Dict, Union
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_TRACKED_KEY = b"info"
DEFAULT_MAX_DEPTH = 256


def _check_text_encoding(value: str) -> str:
    try:
        return codecs.lookup(value).name
    except LookupError as e:
        raise ValueError(f"unknown text encoding: {value!r}") from e


class DecoderOptions(BaseModel):
    """
    Options for decoding.

    Controls info-hash tracking, nesting limits and how lenient the decoder
    is about map keys.
    """
    text_encoding: str = Field(
        default="utf-8",
        alias="textEncoding",
        description="Encoding applied to a str tracked key"
    )
    tracked_key: Optional[Union[bytes, str]] = Field(
        default=DEFAULT_TRACKED_KEY,
        alias="trackedKey",
        description="Map key whose value is hashed while decoding (None disables tracking)"
    )
    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        alias="maxDepth",
        description="Maximum list/map nesting depth"
    )
    strict_duplicate_keys: bool = Field(
        default=False,
        alias="strictDuplicateKeys",
        description="Reject maps with repeated keys instead of keeping the last value"
    )
    strict_key_order: bool = Field(
        default=False,
        alias="strictKeyOrder",
        description="Reject maps whose keys are not in ascending byte order"
    )
    initial_digest_capacity: int = Field(
        default=1024,
        ge=1,
        alias="initialDigestCapacity",
        description="Initial buffer size of the digest accumulator"
    )

    model_config = {"populate_by_name": True}

    @field_validator("text_encoding")
    @classmethod
    def validate_text_encoding(cls, v: str) -> str:
        return _check_text_encoding(v)

    @field_validator("tracked_key", mode="before")
    @classmethod
    def validate_tracked_key(cls, v: Union[str, bytes, bytearray, None]) -> Optional[Union[bytes, str]]:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (bytes, bytearray, memoryview)):
            return bytes(v)
        raise ValueError("tracked_key must be bytes, str or None")

    @model_validator(mode="after")
    def validate_tracked_key_encoding(self) -> "DecoderOptions":
        if isinstance(self.tracked_key, str):
            try:
                self.tracked_key.encode(self.text_encoding)
            except UnicodeEncodeError as e:
                raise ValueError(f"tracked_key cannot be encoded with {self.text_encoding}") from e
        return self

    @property
    def tracked_key_bytes(self) -> Optional[bytes]:
        """Tracked key as raw bytes; a str key is encoded with text_encoding."""
        if isinstance(self.tracked_key, str):
            return self.tracked_key.encode(self.text_encoding)
        return self.tracked_key

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        result: Dict[str, Any] = {
            "textEncoding": self.text_encoding,
            "maxDepth": self.max_depth,
        }
        if self.tracked_key is not None:
            result["trackedKey"] = self.tracked_key
        if self.strict_duplicate_keys:
            result["strictDuplicateKeys"] = True
        if self.strict_key_order:
            result["strictKeyOrder"] = True
        if self.initial_digest_capacity != 1024:
            result["initialDigestCapacity"] = self.initial_digest_capacity
        return result


class EncoderOptions(BaseModel):
    """
    Options for encoding.

    Map keys are emitted in ascending byte order unless sort_keys is False,
    in which case the map's own iteration order is kept.
    """
    sort_keys: bool = Field(
        default=True,
        alias="sortKeys",
        description="Emit map keys in canonical (ascending byte) order"
    )
    text_encoding: str = Field(
        default="utf-8",
        alias="textEncoding",
        description="Encoding applied to str values and keys"
    )
    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        alias="maxDepth",
        description="Maximum list/map nesting depth"
    )

    model_config = {"populate_by_name": True}

    @field_validator("text_encoding")
    @classmethod
    def validate_text_encoding(cls, v: str) -> str:
        return _check_text_encoding(v)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "sortKeys": self.sort_keys,
            "textEncoding": self.text_encoding,
            "maxDepth": self.max_depth,
        }


__all__ = [
    "DEFAULT_TRACKED_KEY",
    "DEFAULT_MAX_DEPTH",
    "DecoderOptions",
    "EncoderOptions",
]
