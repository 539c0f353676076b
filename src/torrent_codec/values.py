"""
BEncode value model.

A decoded value is one of four plain Python types:

- ``int`` for integers (signed 64-bit range)
- ``bytes`` for byte strings
- ``list`` for lists of values
- ``dict`` with ``bytes`` keys for maps (insertion order preserved)

Map keys stay raw bytes; turning them into text is up to the consumer.
"""

from __future__ import annotations
from typing import Dict, List, Union

# Type markers
TOKEN_INTEGER = b"i"[0]
TOKEN_LIST = b"l"[0]
TOKEN_DICT = b"d"[0]
TOKEN_END = b"e"[0]
TOKEN_STRING_SEPARATOR = b":"[0]
TOKEN_MINUS = b"-"[0]
TOKEN_ZERO = b"0"[0]
TOKEN_NINE = b"9"[0]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

Value = Union[int, bytes, List["Value"], Dict[bytes, "Value"]]


def is_digit(byte: int) -> bool:
    return TOKEN_ZERO <= byte <= TOKEN_NINE


def in_int64_range(n: int) -> bool:
    return INT64_MIN <= n <= INT64_MAX


def kind_of(value: object) -> str:
    """Name of the BEncode kind of a value, or the Python type name."""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "bytes"
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "dict"
    return type(value).__name__


__all__ = [
    "Value",
    "INT64_MIN",
    "INT64_MAX",
    "TOKEN_INTEGER",
    "TOKEN_LIST",
    "TOKEN_DICT",
    "TOKEN_END",
    "TOKEN_STRING_SEPARATOR",
    "TOKEN_MINUS",
    "TOKEN_ZERO",
    "TOKEN_NINE",
    "is_digit",
    "in_int64_range",
    "kind_of",
]
