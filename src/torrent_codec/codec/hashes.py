"""
Hash Functions

SHA-1 helpers used for the BitTorrent info hash.
"""

import hashlib

SHA1_DIGEST_SIZE = 20


def sha1_bytes(input_bytes: bytes) -> bytes:
    """
    Compute SHA-1 hash of input bytes.

    Args:
        input_bytes: Input bytes to hash

    Returns:
        SHA-1 hash as bytes (20 bytes)
    """
    return hashlib.sha1(input_bytes).digest()


def info_hash_hex(digest: bytes) -> str:
    """
    Lowercase hex form of an info hash, as shown by torrent clients.

    Args:
        digest: 20-byte SHA-1 digest

    Returns:
        40-character hex string
    """
    if len(digest) != SHA1_DIGEST_SIZE:
        raise ValueError(f"info hash must be {SHA1_DIGEST_SIZE} bytes, got {len(digest)}")
    return digest.hex()
