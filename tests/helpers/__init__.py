from .factories import (
    mk_random_value,
    mk_nested_value,
    mk_pieces,
    mk_info_dict,
    mk_torrent_document,
    mk_torrent_bytes,
)
from .parity import assert_hex_equal, assert_bytes_equal

__all__ = [
    "mk_random_value",
    "mk_nested_value",
    "mk_pieces",
    "mk_info_dict",
    "mk_torrent_document",
    "mk_torrent_bytes",
    "assert_hex_equal",
    "assert_bytes_equal",
]
