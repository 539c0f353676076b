"""Runtime helpers for the torrent codec"""

from .errors import (
    ErrorCode,
    BencodeError,
    FormatError,
    EndOfInputError,
    EncodingError,
    MetainfoError,
    error_from_dict,
)

__all__ = [
    "ErrorCode",
    "BencodeError",
    "FormatError",
    "EndOfInputError",
    "EncodingError",
    "MetainfoError",
    "error_from_dict",
]
