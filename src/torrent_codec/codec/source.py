"""
Byte sources for the decoder.

``ByteSource`` is the minimal interface the decoder reads through.
``StreamSource`` adapts bytes-like objects and binary streams to it, and
``Cursor`` layers the one-byte lookahead, the stream offset and the digest
mirroring on top. Every byte that reaches the parser goes through a Cursor.
"""

from __future__ import annotations
import io
from typing import Optional, Protocol, Union, runtime_checkable

from ..runtime.errors import EndOfInputError
from .accumulator import DigestAccumulator

READ_CHUNK_SIZE = 64 * 1024


@runtime_checkable
class ByteSource(Protocol):
    """
    Anything the decoder can pull bytes from.

    Both methods raise EndOfInputError when the source runs out.
    """

    def read_byte(self) -> int:
        ...

    def read_exact(self, n: int) -> bytes:
        ...


class StreamSource:
    """
    Byte source over a binary stream or an in-memory buffer.

    Bytes-like input is wrapped in ``io.BytesIO`` and unbuffered raw streams
    in ``io.BufferedReader``; a raw stream may therefore be read past the
    last decoded value. Reads of a declared length are done in bounded
    chunks, so a bogus huge length prefix fails with EndOfInputError instead
    of a giant allocation.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview, io.RawIOBase, io.BufferedIOBase]):
        if isinstance(data, (bytes, bytearray, memoryview)):
            self._stream = io.BytesIO(bytes(data))
        elif isinstance(data, io.RawIOBase):
            self._stream = io.BufferedReader(data)
        elif hasattr(data, "read"):
            self._stream = data
        else:
            raise TypeError(f"expected bytes or a binary stream, got {type(data).__name__}")
        self.offset = 0

    def read_byte_or_none(self) -> Optional[int]:
        """Next byte, or None at end of stream."""
        b = self._stream.read(1)
        if not b:
            return None
        if isinstance(b, str):
            raise TypeError("stream must be opened in binary mode")
        self.offset += 1
        return b[0]

    def read_byte(self) -> int:
        b = self.read_byte_or_none()
        if b is None:
            raise EndOfInputError(details={"offset": self.offset, "wanted": 1, "available": 0})
        return b

    def read_exact(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("cannot read a negative number of bytes")
        chunks = []
        remaining = n
        while remaining > 0:
            chunk = self._stream.read(min(remaining, READ_CHUNK_SIZE))
            if not chunk:
                got = n - remaining
                self.offset += got
                raise EndOfInputError(
                    f"Expected {n} bytes, got {got}",
                    details={"offset": self.offset, "wanted": n, "available": got},
                )
            chunks.append(chunk)
            remaining -= len(chunk)
        self.offset += n
        return b"".join(chunks)

    def close(self) -> None:
        self._stream.close()


def as_source(source) -> ByteSource:
    """Wrap bytes or a stream in a StreamSource; pass ByteSources through."""
    if isinstance(source, ByteSource):
        return source
    return StreamSource(source)


class Cursor:
    """
    Peekable view of a byte source.

    The lookahead byte is read lazily: ``peek()`` pulls one byte from the
    source only when none is pending, and ``advance()`` marks it consumed.
    While ``watching`` is set, each byte is mirrored into the accumulator at
    the moment it leaves the source.
    """

    def __init__(self, source: ByteSource, accumulator: DigestAccumulator):
        self._source = source
        self._accumulator = accumulator
        self._pending: Optional[int] = None
        # bytes pulled from the source, pending lookahead included
        self._pulled = 0
        self.watching = False

    @property
    def offset(self) -> int:
        """Offset of the next unconsumed byte."""
        if self._pending is not None:
            return self._pulled - 1
        return self._pulled

    def peek(self) -> Optional[int]:
        """Lookahead byte, or None at end of input."""
        if self._pending is None:
            try:
                b = self._source.read_byte()
            except EndOfInputError:
                return None
            self._pulled += 1
            if self.watching:
                self._accumulator.append(b)
            self._pending = b
        return self._pending

    def advance(self) -> None:
        self._pending = None

    def read_byte(self) -> int:
        if self._pending is not None:
            b = self._pending
            self._pending = None
            return b
        try:
            b = self._source.read_byte()
        except EndOfInputError as e:
            e.details.setdefault("offset", self._pulled)
            raise
        self._pulled += 1
        if self.watching:
            self._accumulator.append(b)
        return b

    def read_exact(self, n: int) -> bytes:
        if self._pending is not None:
            raise RuntimeError("read_exact with a pending lookahead byte")
        try:
            data = self._source.read_exact(n)
        except EndOfInputError as e:
            e.details.setdefault("offset", self._pulled)
            raise
        self._pulled += n
        if self.watching:
            self._accumulator.append_bytes(data, 0, n)
        return data
