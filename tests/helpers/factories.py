"""
Test factories for creating test data consistently.

Provides random value trees for round-trip tests and torrent metainfo
documents for the decoder and the metainfo projection.
"""

from __future__ import annotations
import hashlib
import random
from typing import Any, Dict, List, Optional

from torrent_codec import INT64_MAX, INT64_MIN, encode


def mk_random_value(rng: random.Random, max_depth: int = 5) -> Any:
    """
    Build a random value tree.

    Args:
        rng: Seeded random generator
        max_depth: Maximum container nesting

    Returns:
        int, bytes, list or dict tree
    """
    choices = ["int", "bytes"]
    if max_depth > 0:
        choices += ["list", "dict"]
    kind = rng.choice(choices)

    if kind == "int":
        return rng.choice([
            0, 1, -1,
            rng.randint(-1000, 1000),
            rng.randint(INT64_MIN, INT64_MAX),
            INT64_MIN, INT64_MAX,
        ])
    if kind == "bytes":
        return bytes(rng.getrandbits(8) for _ in range(rng.randint(0, 40)))
    if kind == "list":
        return [mk_random_value(rng, max_depth - 1) for _ in range(rng.randint(0, 4))]

    result = {}
    for _ in range(rng.randint(0, 4)):
        key = bytes(rng.getrandbits(8) for _ in range(rng.randint(0, 8)))
        result[key] = mk_random_value(rng, max_depth - 1)
    return result


def mk_nested_value(depth: int) -> Any:
    """Value nested exactly ``depth`` containers deep, alternating list and dict."""
    value: Any = b"leaf"
    for level in range(depth):
        if level % 2 == 0:
            value = [level, value]
        else:
            value = {b"level": level, b"child": value}
    return value


def mk_pieces(count: int, seed: bytes = b"piece") -> bytes:
    """Concatenated SHA-1 piece hashes."""
    return b"".join(hashlib.sha1(seed + str(i).encode()).digest() for i in range(count))


def mk_info_dict(name: bytes = b"ubuntu.iso", length: Optional[int] = 1048576,
                 files: Optional[List[Dict[bytes, Any]]] = None,
                 piece_length: int = 262144, num_pieces: int = 4,
                 private: Optional[int] = None) -> Dict[bytes, Any]:
    """Info dictionary for a single-file (length) or multi-file (files) torrent."""
    info: Dict[bytes, Any] = {
        b"name": name,
        b"piece length": piece_length,
        b"pieces": mk_pieces(num_pieces),
    }
    if files is not None:
        info[b"files"] = files
    elif length is not None:
        info[b"length"] = length
    if private is not None:
        info[b"private"] = private
    return info


_KEY_NAMES = {"announce_list": "announce-list"}


def mk_torrent_document(info: Optional[Dict[bytes, Any]] = None, **extra: Any) -> Dict[bytes, Any]:
    """
    Top-level torrent document.

    Keyword arguments become top-level keys with spaces for underscores
    (``creation_date`` -> ``b"creation date"``), except
    ``announce_list`` which becomes ``b"announce-list"``.
    """
    document: Dict[bytes, Any] = {
        b"announce": b"http://tracker.example.com:6969/announce",
        b"info": info if info is not None else mk_info_dict(),
    }
    for key, value in extra.items():
        document[_KEY_NAMES.get(key, key.replace("_", " ")).encode()] = value
    return document


def mk_torrent_bytes(info: Optional[Dict[bytes, Any]] = None, **extra: Any) -> bytes:
    """Canonical encoding of mk_torrent_document()."""
    return encode(mk_torrent_document(info, **extra))
