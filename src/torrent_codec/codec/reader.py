"""
BEncode Reader

Single-pass recursive-descent decoder over a byte source. While decoding, the
raw encoding of the value stored under the tracked map key (``info`` by
default) is mirrored into a DigestAccumulator, giving the info hash without a
second pass over the input.
"""

from __future__ import annotations
import logging
from typing import Iterator, Optional, Tuple, Union

from ..options import DecoderOptions
from ..runtime.errors import EndOfInputError, ErrorCode, FormatError
from ..values import (
    INT64_MAX,
    TOKEN_DICT,
    TOKEN_END,
    TOKEN_INTEGER,
    TOKEN_LIST,
    TOKEN_MINUS,
    TOKEN_STRING_SEPARATOR,
    TOKEN_ZERO,
    Value,
    is_digit,
)
from .accumulator import DigestAccumulator
from .source import ByteSource, Cursor, as_source

logger = logging.getLogger(__name__)


def _show(c: int) -> str:
    return repr(chr(c)) if 0x20 <= c < 0x7F else f"0x{c:02x}"


class Decoder:
    """
    Streaming BEncode decoder.

    One Decoder is one decode session: it owns its cursor and its digest
    accumulator, and must not be shared between threads. ``decode()`` may be
    called repeatedly to read consecutive top-level values; it returns None
    once the source is exhausted.

    Example:
        with Decoder(open("file.torrent", "rb"), owns_source=True) as decoder:
            document = decoder.decode()
            digest = decoder.info_hash()
    """

    def __init__(self, source: Union[bytes, bytearray, memoryview, ByteSource, object],
                 options: Optional[DecoderOptions] = None, owns_source: bool = False):
        """
        Initialize decoder.

        Args:
            source: Bytes-like object, binary stream or ByteSource
            options: Decoder options (defaults track the ``info`` key)
            owns_source: Close the source when the decoder is closed
        """
        self.options = options or DecoderOptions()
        self._source = as_source(source)
        self._accumulator = DigestAccumulator(self.options.initial_digest_capacity)
        self._cursor = Cursor(self._source, self._accumulator)
        self._owns_source = owns_source
        self._tracked_key = self.options.tracked_key_bytes
        # map holding the tracked value
        self._tracked_owner: Optional[dict] = None
        self._tracked = False
        self._depth = 0

    def __enter__(self) -> "Decoder":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying source if this decoder owns it."""
        if self._owns_source and hasattr(self._source, "close"):
            self._source.close()

    @property
    def offset(self) -> int:
        """Offset of the next unconsumed byte."""
        return self._cursor.offset

    @property
    def tracking(self) -> bool:
        """True once the tracked key has been seen in this session."""
        return self._tracked

    def decode(self) -> Optional[Value]:
        """
        Decode the next top-level value.

        Returns:
            The decoded value, or None if the source is exhausted before the
            value starts

        Raises:
            FormatError: Malformed input
            EndOfInputError: Source exhausted in the middle of a value
        """
        if self._cursor.peek() is None:
            return None
        return self._decode_value()

    def iter_values(self) -> Iterator[Value]:
        """Yield consecutive top-level values until the source is exhausted."""
        while True:
            value = self.decode()
            if value is None:
                return
            yield value

    def at_end(self) -> bool:
        """True if no bytes remain after the values decoded so far."""
        return self._cursor.peek() is None

    def info_hash(self) -> Optional[bytes]:
        """
        SHA-1 over the raw encoding of the tracked value.

        Returns:
            20-byte digest, or None if the tracked key has not been seen
        """
        if not self._tracked:
            return None
        return self._accumulator.finalize()

    def tracked_bytes(self) -> Optional[bytes]:
        """Raw encoding of the tracked value, or None if not seen."""
        if not self._tracked:
            return None
        return self._accumulator.getvalue()

    def _format_error(self, message: str, code: ErrorCode, **details) -> FormatError:
        details.setdefault("offset", self._cursor.offset)
        return FormatError(message, code, details)

    def _peek_required(self) -> int:
        c = self._cursor.peek()
        if c is None:
            raise EndOfInputError(details={"offset": self._cursor.offset, "wanted": 1, "available": 0})
        return c

    def _decode_value(self) -> Value:
        c = self._peek_required()

        if is_digit(c):
            return self._decode_bytes()
        elif c == TOKEN_INTEGER:
            return self._decode_int()
        elif c == TOKEN_LIST:
            return self._decode_list()
        elif c == TOKEN_DICT:
            return self._decode_dict()
        else:
            raise self._format_error(
                f"unrecognized type marker {_show(c)}", ErrorCode.UNKNOWN_MARKER, marker=c
            )

    def _decode_int(self) -> int:
        """Decodes an integer (format: i<integer>e)."""
        # Skip 'i'
        self._cursor.advance()

        c = self._cursor.read_byte()
        if c == TOKEN_ZERO:
            c = self._cursor.read_byte()
            if c != TOKEN_END:
                raise self._format_error(
                    f"'e' expected after zero, not {_show(c)}", ErrorCode.INVALID_INTEGER
                )
            return 0

        negative = False
        if c == TOKEN_MINUS:
            negative = True
            c = self._cursor.read_byte()
            if c == TOKEN_ZERO:
                raise self._format_error("negative zero not allowed", ErrorCode.INVALID_INTEGER)

        if not is_digit(c):
            raise self._format_error(f"invalid integer start {_show(c)}", ErrorCode.INVALID_INTEGER)

        limit = INT64_MAX + 1 if negative else INT64_MAX
        n, c = self._read_digits(c, limit, "integer")

        if c != TOKEN_END:
            raise self._format_error(
                f"integer should end with 'e', not {_show(c)}", ErrorCode.INVALID_INTEGER
            )
        return -n if negative else n

    def _decode_bytes(self) -> bytes:
        """Decodes a byte string (format: <length>:<bytes>)."""
        c = self._cursor.read_byte()

        if c == TOKEN_ZERO:
            c = self._cursor.read_byte()
            if is_digit(c):
                raise self._format_error("leading zero in string length", ErrorCode.INVALID_LENGTH)
            length = 0
        else:
            length, c = self._read_digits(c, INT64_MAX, "string length")

        if c != TOKEN_STRING_SEPARATOR:
            raise self._format_error(f"colon expected, not {_show(c)}", ErrorCode.MISSING_SEPARATOR)

        return self._cursor.read_exact(length)

    def _read_digits(self, c: int, limit: int, what: str) -> Tuple[int, int]:
        """
        Accumulate a decimal number whose first digit is ``c``.

        Returns the number and the first non-digit byte after it. Fails as
        soon as the running value exceeds ``limit``.
        """
        n = c - TOKEN_ZERO
        c = self._cursor.read_byte()
        while is_digit(c):
            n = n * 10 + (c - TOKEN_ZERO)
            if n > limit:
                raise self._format_error(f"{what} overflows 64 bits", ErrorCode.NUMBER_OVERFLOW)
            c = self._cursor.read_byte()
        return n, c

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.options.max_depth:
            raise self._format_error(
                f"nesting deeper than {self.options.max_depth}",
                ErrorCode.NESTING_TOO_DEEP,
                max_depth=self.options.max_depth,
            )

    def _decode_list(self) -> list:
        """Decodes a list (format: l<item1><item2>...e)."""
        # Skip 'l'
        self._cursor.advance()
        self._enter()

        result = []
        while self._peek_required() != TOKEN_END:
            result.append(self._decode_value())
        # Skip 'e'
        self._cursor.advance()

        self._depth -= 1
        return result

    def _decode_dict(self) -> dict:
        """Decodes a dictionary (format: d<key1><value1>...e). Keys must be byte strings."""
        # Skip 'd'
        self._cursor.advance()
        self._enter()

        result = {}
        last_key = None
        while True:
            c = self._peek_required()
            if c == TOKEN_END:
                break
            if not is_digit(c):
                raise self._format_error(
                    f"map key must be a byte string, found marker {_show(c)}", ErrorCode.INVALID_KEY
                )

            key_offset = self._cursor.offset
            key = self._decode_bytes()

            if key in result:
                if result is self._tracked_owner and key == self._tracked_key:
                    raise self._format_error(
                        f"tracked key {key!r} repeated in the same map", ErrorCode.DUPLICATE_KEY,
                        offset=key_offset,
                    )
                if self.options.strict_duplicate_keys:
                    raise self._format_error(
                        f"duplicate map key {key!r}", ErrorCode.DUPLICATE_KEY, offset=key_offset
                    )
                logger.debug(f"Duplicate map key {key!r} at offset {key_offset}, keeping last value")
            elif self.options.strict_key_order and last_key is not None and key < last_key:
                raise self._format_error(
                    f"map key {key!r} out of order", ErrorCode.KEY_ORDER, offset=key_offset
                )
            last_key = key

            if self._should_track(key):
                self._tracked_owner = result
                result[key] = self._decode_tracked()
            else:
                result[key] = self._decode_value()
        # Skip 'e'
        self._cursor.advance()

        self._depth -= 1
        return result

    def _should_track(self, key: bytes) -> bool:
        if self._tracked_key is None or key != self._tracked_key:
            return False
        if self._cursor.watching:
            return False
        if self._tracked:
            logger.debug(f"Tracked key {key!r} seen again at offset {self._cursor.offset}, ignoring")
            return False
        return True

    def _decode_tracked(self) -> Value:
        start = self._cursor.offset
        logger.debug(f"Tracking value of {self._tracked_key!r} from offset {start}")

        self._tracked = True
        self._cursor.watching = True
        value = self._decode_value()
        self._cursor.watching = False

        logger.debug(f"Stopped tracking at offset {self._cursor.offset} ({len(self._accumulator)} bytes)")
        return value


def _make_options(options: Optional[DecoderOptions], text_encoding: Optional[str]) -> DecoderOptions:
    options = options or DecoderOptions()
    if text_encoding is not None and text_encoding != options.text_encoding:
        options = DecoderOptions(**{**options.model_dump(), "text_encoding": text_encoding})
    return options


def _decode_single(decoder: Decoder) -> Optional[Value]:
    value = decoder.decode()
    if value is not None and not decoder.at_end():
        raise FormatError(
            "trailing data after value",
            ErrorCode.TRAILING_DATA,
            {"offset": decoder.offset},
        )
    return value


def decode(source, options: Optional[DecoderOptions] = None,
           text_encoding: Optional[str] = None) -> Optional[Value]:
    """
    Decode exactly one BEncode value.

    Args:
        source: Bytes-like object, binary stream or ByteSource
        options: Decoder options
        text_encoding: Overrides options.text_encoding, the encoding of a str
            tracked key

    Returns:
        The decoded value, or None for empty input

    Raises:
        FormatError: Malformed input or trailing bytes after the value
        EndOfInputError: Input ends in the middle of a value
    """
    decoder = Decoder(source, _make_options(options, text_encoding))
    return _decode_single(decoder)


def decode_with_tracked_key(source, key_bytes: Union[bytes, str] = b"info",
                            options: Optional[DecoderOptions] = None) -> Tuple[Optional[Value], Optional[bytes]]:
    """
    Decode exactly one value and hash the raw encoding stored under a key.

    Args:
        source: Bytes-like object, binary stream or ByteSource
        key_bytes: Map key whose value is hashed
        options: Decoder options; their tracked_key is replaced by key_bytes

    Returns:
        Tuple of (value, 20-byte SHA-1 digest or None if the key never appeared)
    """
    options = options or DecoderOptions()
    if not isinstance(key_bytes, str):
        key_bytes = bytes(key_bytes)
    options = DecoderOptions(**{**options.model_dump(), "tracked_key": key_bytes})

    decoder = Decoder(source, options)
    value = _decode_single(decoder)
    return value, decoder.info_hash()


__all__ = [
    "Decoder",
    "decode",
    "decode_with_tracked_key",
]
