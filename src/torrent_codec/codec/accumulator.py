"""
Digest Accumulator

Growable byte buffer that collects the raw bytes of the tracked value while
the decoder consumes them, and hashes them once decoding is done.
"""

from .hashes import sha1_bytes

DEFAULT_CAPACITY = 1024


class DigestAccumulator:
    """
    Append-only byte buffer feeding a SHA-1 digest.

    The backing storage has an explicit capacity. When an append would not
    fit, the buffer is reallocated to ``capacity * 2 + requested`` bytes and
    the existing contents are copied over, so a single large append never
    needs more than one reallocation.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize accumulator with an empty buffer.

        Args:
            capacity: Initial size of the backing storage in bytes
        """
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._contents = bytearray(capacity)
        self._index = 0

    @property
    def capacity(self) -> int:
        """Size of the backing storage."""
        return len(self._contents)

    def __len__(self) -> int:
        return self._index

    def append(self, c: int) -> None:
        """
        Append a single byte.

        Args:
            c: Byte value (0-255)
        """
        if not 0 <= c <= 0xFF:
            raise ValueError(f"byte value out of range: {c}")
        if self._index == len(self._contents):
            self._grow(1)
        self._contents[self._index] = c
        self._index += 1

    def append_bytes(self, data: bytes, offset: int = 0, length: int = None) -> None:
        """
        Append ``length`` bytes of ``data`` starting at ``offset``.

        Args:
            data: Source bytes
            offset: First byte of data to append
            length: Number of bytes to append (default: rest of data)
        """
        if length is None:
            length = len(data) - offset
        if offset < 0 or length < 0 or offset + length > len(data):
            raise ValueError(
                f"slice [{offset}:{offset + length}] outside data of length {len(data)}"
            )
        if length == 0:
            return
        if self._index + length > len(self._contents):
            self._grow(length)
        self._contents[self._index:self._index + length] = memoryview(data)[offset:offset + length]
        self._index += length

    def getvalue(self) -> bytes:
        """Bytes appended so far, in append order."""
        return bytes(self._contents[:self._index])

    def finalize(self) -> bytes:
        """
        SHA-1 digest over every byte appended so far.

        Returns:
            20-byte digest
        """
        return sha1_bytes(memoryview(self._contents)[:self._index])

    def _grow(self, requested: int) -> None:
        new_contents = bytearray(len(self._contents) * 2 + requested)
        new_contents[:self._index] = self._contents[:self._index]
        self._contents = new_contents
