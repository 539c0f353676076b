"""
BEncode Codec Module

Streaming decoder and encoder for the BitTorrent BEncode format, with an
info-hash side channel on the decoder.

Key components:
- source.py: Byte sources and the peekable cursor every byte goes through
- reader.py: Recursive-descent decoder with digest tracking
- writer.py: Encoder emitting canonical (key-sorted) maps by default
- accumulator.py: Growable buffer feeding the SHA-1 digest
- hashes.py: SHA-1 helpers
"""

from .accumulator import DigestAccumulator
from .hashes import SHA1_DIGEST_SIZE, info_hash_hex, sha1_bytes
from .reader import Decoder, decode, decode_with_tracked_key
from .source import ByteSource, Cursor, StreamSource
from .writer import Encoder, encode

__all__ = [
    "ByteSource",
    "Cursor",
    "Decoder",
    "DigestAccumulator",
    "Encoder",
    "SHA1_DIGEST_SIZE",
    "StreamSource",
    "decode",
    "decode_with_tracked_key",
    "encode",
    "info_hash_hex",
    "sha1_bytes",
]
