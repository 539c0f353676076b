"""
BEncode Writer

Serializes the value model to its BEncode byte form. Map keys are written in
ascending byte order by default, which is the canonical form required for
reproducible info hashes.
"""

from __future__ import annotations
import io
from typing import Any, List, Optional, Tuple

from ..options import EncoderOptions
from ..runtime.errors import EncodingError, ErrorCode
from ..values import in_int64_range, kind_of

_INT_MARKER = b"i"
_LIST_MARKER = b"l"
_DICT_MARKER = b"d"
_END_MARKER = b"e"
_COLON = b":"


class Encoder:
    """
    BEncode writer over a byte sink.

    The sink is anything with ``write(bytes)``; write failures propagate
    unchanged.
    """

    def __init__(self, sink, options: Optional[EncoderOptions] = None):
        """
        Initialize encoder.

        Args:
            sink: Object with a write(bytes) method
            options: Encoder options
        """
        self._sink = sink
        self.options = options or EncoderOptions()
        self._depth = 0

    def encode(self, value: Any) -> None:
        """
        Write one value to the sink.

        Args:
            value: int, bytes, str, list or dict tree

        Raises:
            EncodingError: Unsupported type, integer out of range, duplicate
                key after text encoding, or nesting too deep
        """
        self._depth = 0
        self._write_value(value)

    def _write_value(self, value: Any) -> None:
        if isinstance(value, bool):
            raise EncodingError("bool is not a BEncode type", ErrorCode.UNSUPPORTED_TYPE,
                                {"type": "bool"})
        elif isinstance(value, int):
            self.write_int(value)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self.write_bytes(bytes(value))
        elif isinstance(value, str):
            self.write_bytes(self._text(value))
        elif isinstance(value, (list, tuple)):
            self._write_list(value)
        elif isinstance(value, dict):
            self._write_dict(value)
        else:
            raise EncodingError(f"Type not supported: {kind_of(value)}", ErrorCode.UNSUPPORTED_TYPE,
                                {"type": kind_of(value)})

    def write_int(self, n: int) -> None:
        """Write i<decimal>e."""
        if not in_int64_range(n):
            raise EncodingError(f"integer {n} outside the signed 64-bit range", details={"value": n})
        self._sink.write(_INT_MARKER + str(n).encode("ascii") + _END_MARKER)

    def write_bytes(self, b: bytes) -> None:
        """Write <length>:<bytes>."""
        self._sink.write(str(len(b)).encode("ascii") + _COLON)
        self._sink.write(b)

    def _text(self, s: str) -> bytes:
        try:
            return s.encode(self.options.text_encoding)
        except UnicodeEncodeError as e:
            raise EncodingError(
                f"cannot encode text with {self.options.text_encoding}", cause=e
            ) from e

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.options.max_depth:
            raise EncodingError(f"nesting deeper than {self.options.max_depth}",
                                details={"max_depth": self.options.max_depth})

    def _write_list(self, items) -> None:
        self._enter()
        self._sink.write(_LIST_MARKER)
        for item in items:
            self._write_value(item)
        self._sink.write(_END_MARKER)
        self._depth -= 1

    def _write_dict(self, mapping: dict) -> None:
        self._enter()
        pairs = self._dict_items(mapping)
        self._sink.write(_DICT_MARKER)
        for key, value in pairs:
            self.write_bytes(key)
            self._write_value(value)
        self._sink.write(_END_MARKER)
        self._depth -= 1

    def _dict_items(self, mapping: dict) -> List[Tuple[bytes, Any]]:
        pairs = []
        seen = set()
        for key, value in mapping.items():
            if isinstance(key, str):
                key = self._text(key)
            elif isinstance(key, (bytes, bytearray, memoryview)):
                key = bytes(key)
            else:
                raise EncodingError(f"map key must be bytes or str, not {kind_of(key)}",
                                    ErrorCode.UNSUPPORTED_TYPE, {"type": kind_of(key)})
            if key in seen:
                raise EncodingError(f"duplicate map key {key!r}", details={"key": key})
            seen.add(key)
            pairs.append((key, value))

        if self.options.sort_keys:
            pairs.sort(key=lambda pair: pair[0])
        return pairs


def encode(value: Any, sink=None, options: Optional[EncoderOptions] = None) -> Optional[bytes]:
    """
    Encode a value tree.

    Args:
        value: int, bytes, str, list or dict tree
        sink: Optional object with write(bytes); if omitted the encoding is returned
        options: Encoder options

    Returns:
        Encoded bytes when no sink is given, otherwise None
    """
    if sink is not None:
        Encoder(sink, options).encode(value)
        return None

    buffer = io.BytesIO()
    Encoder(buffer, options).encode(value)
    return buffer.getvalue()


__all__ = [
    "Encoder",
    "encode",
]
