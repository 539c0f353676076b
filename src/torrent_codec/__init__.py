"""
torrent-codec - BEncode for BitTorrent metadata

Streaming BEncode decoder and encoder with an info-hash side channel: the
decoder hashes the raw bytes of the ``info`` dictionary while it reads them.
"""

# Codec
from .codec import (
    ByteSource, Cursor, StreamSource,
    Decoder, decode, decode_with_tracked_key,
    Encoder, encode,
    DigestAccumulator, SHA1_DIGEST_SIZE, info_hash_hex, sha1_bytes,
)

# Configuration
from .options import DecoderOptions, EncoderOptions

# Errors
from .runtime.errors import *

# Value model
from .values import Value, INT64_MIN, INT64_MAX

# Metainfo projection
from .metainfo import FileEntry, TorrentMetainfo, load_metainfo

__version__ = "1.0.0"
__all__ = [
    # Codec
    "ByteSource",
    "Cursor",
    "StreamSource",
    "Decoder",
    "decode",
    "decode_with_tracked_key",
    "Encoder",
    "encode",
    "DigestAccumulator",
    "SHA1_DIGEST_SIZE",
    "info_hash_hex",
    "sha1_bytes",

    # Configuration
    "DecoderOptions",
    "EncoderOptions",

    # Errors
    "ErrorCode",
    "BencodeError",
    "FormatError",
    "EndOfInputError",
    "EncodingError",
    "MetainfoError",
    "error_from_dict",

    # Value model
    "Value",
    "INT64_MIN",
    "INT64_MAX",

    # Metainfo
    "FileEntry",
    "TorrentMetainfo",
    "load_metainfo",
]
