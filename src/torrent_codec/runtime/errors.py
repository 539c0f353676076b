"""
BEncode Error Model

This module provides the error handling framework for the torrent codec.
Every failure raised by the decoder, the encoder and the metainfo projection
derives from BencodeError and carries a stable ErrorCode.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Error codes for codec failures."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2

    # Format errors (100-199)
    INVALID_FORMAT = 100
    UNKNOWN_MARKER = 101
    INVALID_INTEGER = 102
    INVALID_LENGTH = 103
    MISSING_SEPARATOR = 104
    INVALID_KEY = 105
    DUPLICATE_KEY = 106
    KEY_ORDER = 107
    NUMBER_OVERFLOW = 108
    NESTING_TOO_DEEP = 109
    TRAILING_DATA = 110

    # Input errors (200-299)
    END_OF_INPUT = 200

    # Encoding errors (300-399)
    ENCODING_ERROR = 300
    UNSUPPORTED_TYPE = 301

    # Metainfo errors (400-499)
    INVALID_METAINFO = 400
    MISSING_FIELD = 401
    INVALID_FIELD = 402


class BencodeError(Exception):
    """
    Base class for all codec errors.

    Provides structured error information: a message, a code, free-form
    details (typically the stream offset) and the underlying cause.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a codec error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    @property
    def offset(self) -> Optional[int]:
        """Stream offset at which the error was detected, if known."""
        return self.details.get("offset")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BencodeError':
        """Create error from dictionary representation."""
        code = ErrorCode(data.get("code", ErrorCode.UNKNOWN))
        message = data.get("message", "Unknown error")
        details = data.get("details")
        return cls(message, code, details)


class FormatError(BencodeError):
    """Malformed BEncode syntax."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_FORMAT,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class EndOfInputError(BencodeError):
    """Byte source exhausted before a construct was complete."""

    def __init__(self, message: str = "Unexpected end of input",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.END_OF_INPUT, details, cause)


class EncodingError(BencodeError):
    """Value tree that cannot be serialized."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.ENCODING_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class MetainfoError(BencodeError):
    """Decoded document is not a usable torrent metainfo."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_METAINFO,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


_CODE_TO_CLASS = {
    ErrorCode.END_OF_INPUT: EndOfInputError,
}


def error_from_dict(data: Dict[str, Any]) -> BencodeError:
    """
    Rebuild the most specific error type from its dictionary form.

    Args:
        data: Output of BencodeError.to_dict()

    Returns:
        Error instance of the matching subclass
    """
    try:
        code = ErrorCode(data.get("code", ErrorCode.UNKNOWN))
    except ValueError:
        code = ErrorCode.UNKNOWN

    message = data.get("message", "Unknown error")
    details = data.get("details")

    if code in _CODE_TO_CLASS:
        return _CODE_TO_CLASS[code](message, details)
    if 100 <= code < 200:
        return FormatError(message, code, details)
    if 300 <= code < 400:
        return EncodingError(message, code, details)
    if 400 <= code < 500:
        return MetainfoError(message, code, details)
    return BencodeError(message, code, details)


__all__ = [
    "ErrorCode",
    "BencodeError",
    "FormatError",
    "EndOfInputError",
    "EncodingError",
    "MetainfoError",
    "error_from_dict",
]
