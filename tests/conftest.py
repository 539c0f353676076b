"""
Test bootstrap:
- Make src/ and tests/ importable at collection time
- Shared fixtures for decoder and encoder tests
"""
import os
import sys
import random
import pathlib
import pytest

TESTS_DIR = pathlib.Path(__file__).parent.resolve()
SRC = TESTS_DIR.parent / "src"

# Ensure src importability at collect-time
for path in (SRC, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

FUZZ_SEED = int(os.environ.get("TORRENT_CODEC_FUZZ_SEED", "20101"))


@pytest.fixture
def rng():
    """Deterministically seeded random generator."""
    return random.Random(FUZZ_SEED)


@pytest.fixture
def simple_torrent():
    """Encoded single-file torrent plus the exact bytes of its info dictionary."""
    from helpers import mk_info_dict, mk_torrent_bytes
    from torrent_codec import encode

    info = mk_info_dict()
    return mk_torrent_bytes(info), encode(info)


@pytest.fixture
def strict_options():
    """Decoder options rejecting duplicate and out-of-order keys."""
    from torrent_codec import DecoderOptions

    return DecoderOptions(strict_duplicate_keys=True, strict_key_order=True)
