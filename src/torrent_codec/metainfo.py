"""
Torrent metainfo projection.

Maps a decoded torrent document (a BEncode map) plus its info hash onto named
fields: trackers, creation metadata, piece table, and the single-file or
multi-file layout. Byte strings are turned into text here, with an explicit
text encoding.
"""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .codec.hashes import SHA1_DIGEST_SIZE, info_hash_hex
from .codec.reader import decode_with_tracked_key
from .options import DecoderOptions
from .runtime.errors import ErrorCode, MetainfoError

logger = logging.getLogger(__name__)

PIECE_HASH_LENGTH = SHA1_DIGEST_SIZE

# Top-level keys
ANNOUNCE_KEY = b"announce"
ANNOUNCE_LIST_KEY = b"announce-list"
CREATION_DATE_KEY = b"creation date"
COMMENT_KEY = b"comment"
CREATED_BY_KEY = b"created by"
INFO_KEY = b"info"
ENCODING_KEY = b"encoding"

# Info dictionary keys
PIECE_LENGTH_KEY = b"piece length"
PIECES_KEY = b"pieces"
PRIVATE_KEY = b"private"
NAME_KEY = b"name"
LENGTH_KEY = b"length"
FILES_KEY = b"files"
PATH_KEY = b"path"


class FileEntry(BaseModel):
    """One file of a multi-file torrent."""
    length: int = Field(ge=0, description="File size in bytes")
    path: List[str] = Field(min_length=1, description="Path components below the torrent directory")

    @property
    def joined_path(self) -> str:
        return "/".join(self.path)


class TorrentMetainfo(BaseModel):
    """
    Named view of a torrent metainfo document.

    Single-file torrents carry ``length``; multi-file torrents carry
    ``files`` and use ``name`` as the directory name.
    """
    info_hash: bytes = Field(alias="infoHash", description="SHA-1 of the raw info dictionary")
    announce: Optional[str] = Field(default=None, description="Primary tracker URL")
    announce_list: List[List[str]] = Field(
        default_factory=list,
        alias="announceList",
        description="Tracker tiers"
    )
    creation_date: Optional[datetime] = Field(default=None, alias="creationDate")
    comment: Optional[str] = None
    created_by: Optional[str] = Field(default=None, alias="createdBy")
    encoding: Optional[str] = None
    name: str
    piece_length: int = Field(gt=0, alias="pieceLength")
    pieces: bytes
    private: bool = False
    length: Optional[int] = Field(default=None, ge=0)
    files: List[FileEntry] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @field_validator("info_hash")
    @classmethod
    def validate_info_hash(cls, v: bytes) -> bytes:
        if len(v) != SHA1_DIGEST_SIZE:
            raise ValueError(f"info hash must be {SHA1_DIGEST_SIZE} bytes, got {len(v)}")
        return v

    @field_validator("pieces")
    @classmethod
    def validate_pieces(cls, v: bytes) -> bytes:
        if len(v) % PIECE_HASH_LENGTH != 0:
            raise ValueError(f"pieces length {len(v)} is not a multiple of {PIECE_HASH_LENGTH}")
        return v

    @model_validator(mode="after")
    def validate_layout(self) -> "TorrentMetainfo":
        if self.length is None and not self.files:
            raise ValueError("info dictionary needs either 'length' or 'files'")
        if self.length is not None and self.files:
            raise ValueError("info dictionary has both 'length' and 'files'")
        return self

    @property
    def is_multi_file(self) -> bool:
        return bool(self.files)

    @property
    def is_multi_announce(self) -> bool:
        return bool(self.announce_list)

    @property
    def trackers(self) -> List[str]:
        """All tracker URLs, tiers flattened, primary announce first if not listed."""
        result = [url for tier in self.announce_list for url in tier]
        if self.announce and self.announce not in result:
            result.insert(0, self.announce)
        return result

    @property
    def piece_hashes(self) -> List[bytes]:
        return [self.pieces[i:i + PIECE_HASH_LENGTH] for i in range(0, len(self.pieces), PIECE_HASH_LENGTH)]

    @property
    def num_pieces(self) -> int:
        return len(self.pieces) // PIECE_HASH_LENGTH

    @property
    def total_length(self) -> int:
        if self.files:
            return sum(f.length for f in self.files)
        return self.length or 0

    @property
    def info_hash_hex(self) -> str:
        return info_hash_hex(self.info_hash)

    @classmethod
    def from_value(cls, document: Any, info_hash: Optional[bytes],
                   text_encoding: str = "utf-8") -> "TorrentMetainfo":
        """
        Project a decoded document onto named fields.

        Args:
            document: Decoded top-level map
            info_hash: Digest returned alongside the document
            text_encoding: Encoding of the text fields

        Returns:
            TorrentMetainfo

        Raises:
            MetainfoError: Missing or mistyped fields
        """
        if not isinstance(document, dict):
            raise MetainfoError("torrent document must be a map", ErrorCode.INVALID_FIELD)
        if info_hash is None:
            raise MetainfoError("document has no info dictionary to hash", ErrorCode.MISSING_FIELD,
                                {"field": "info"})

        reader = _FieldReader(text_encoding)
        info = reader.require(document, INFO_KEY, dict)

        fields: Dict[str, Any] = {
            "info_hash": info_hash,
            "announce": reader.text(document, ANNOUNCE_KEY),
            "comment": reader.text(document, COMMENT_KEY),
            "created_by": reader.text(document, CREATED_BY_KEY),
            "encoding": reader.text(document, ENCODING_KEY),
            "name": reader.text(info, NAME_KEY, required=True),
            "piece_length": reader.require(info, PIECE_LENGTH_KEY, int),
            "pieces": reader.require(info, PIECES_KEY, bytes),
            "private": reader.optional(info, PRIVATE_KEY, int) == 1,
        }

        announce_list = reader.optional(document, ANNOUNCE_LIST_KEY, list)
        if announce_list is not None:
            fields["announce_list"] = [
                [reader.decode_text(url, "announce-list") for url in reader.as_list(tier, "announce-list")]
                for tier in announce_list
            ]

        timestamp = reader.optional(document, CREATION_DATE_KEY, int)
        if timestamp is not None:
            try:
                fields["creation_date"] = datetime.fromtimestamp(timestamp, tz=timezone.utc)
            except (OverflowError, OSError, ValueError) as e:
                raise MetainfoError("creation date out of range", ErrorCode.INVALID_FIELD,
                                    {"field": "creation date", "value": timestamp}, e) from e

        files = reader.optional(info, FILES_KEY, list)
        if files is not None:
            logger.debug(f"Multi-file torrent with {len(files)} entries")
            fields["files"] = [reader.file_entry(entry) for entry in files]
        else:
            fields["length"] = reader.optional(info, LENGTH_KEY, int)

        try:
            return cls(**fields)
        except ValidationError as e:
            raise MetainfoError(f"invalid torrent metainfo: {e.errors()[0]['msg']}",
                                ErrorCode.INVALID_FIELD, cause=e) from e


class _FieldReader:
    """Typed lookups on decoded maps, raising MetainfoError on mismatch."""

    def __init__(self, text_encoding: str):
        self.text_encoding = text_encoding

    def optional(self, mapping: dict, key: bytes, kind: type) -> Any:
        if key not in mapping:
            return None
        value = mapping[key]
        if not isinstance(value, kind) or isinstance(value, bool):
            raise MetainfoError(
                f"field {key.decode('latin-1')!r} should be {kind.__name__}",
                ErrorCode.INVALID_FIELD,
                {"field": key.decode("latin-1")},
            )
        return value

    def require(self, mapping: dict, key: bytes, kind: type) -> Any:
        value = self.optional(mapping, key, kind)
        if value is None:
            raise MetainfoError(f"missing field {key.decode('latin-1')!r}", ErrorCode.MISSING_FIELD,
                                {"field": key.decode("latin-1")})
        return value

    def text(self, mapping: dict, key: bytes, required: bool = False) -> Optional[str]:
        raw = self.require(mapping, key, bytes) if required else self.optional(mapping, key, bytes)
        if raw is None:
            return None
        return self.decode_text(raw, key.decode("latin-1"))

    def decode_text(self, raw: Any, field: str) -> str:
        if not isinstance(raw, bytes):
            raise MetainfoError(f"field {field!r} should be a byte string", ErrorCode.INVALID_FIELD,
                                {"field": field})
        try:
            return raw.decode(self.text_encoding)
        except UnicodeDecodeError as e:
            raise MetainfoError(f"field {field!r} is not valid {self.text_encoding}",
                                ErrorCode.INVALID_FIELD, {"field": field}, e) from e

    def as_list(self, value: Any, field: str) -> list:
        if not isinstance(value, list):
            raise MetainfoError(f"field {field!r} should be a list", ErrorCode.INVALID_FIELD,
                                {"field": field})
        return value

    def file_entry(self, entry: Any) -> FileEntry:
        if not isinstance(entry, dict):
            raise MetainfoError("file entry should be a map", ErrorCode.INVALID_FIELD, {"field": "files"})
        length = self.require(entry, LENGTH_KEY, int)
        path = [self.decode_text(p, "path") for p in self.require(entry, PATH_KEY, list)]
        try:
            return FileEntry(length=length, path=path)
        except ValidationError as e:
            raise MetainfoError(f"invalid file entry: {e.errors()[0]['msg']}",
                                ErrorCode.INVALID_FIELD, {"field": "files"}, e) from e


def load_metainfo(source, options: Optional[DecoderOptions] = None) -> TorrentMetainfo:
    """
    Decode a torrent document and project it in one step.

    Args:
        source: Bytes-like object, binary stream or ByteSource
        options: Decoder options; the info key is always tracked

    Returns:
        TorrentMetainfo
    """
    options = options or DecoderOptions()
    document, digest = decode_with_tracked_key(source, INFO_KEY, options)
    return TorrentMetainfo.from_value(document, digest, options.text_encoding)


__all__ = [
    "FileEntry",
    "TorrentMetainfo",
    "load_metainfo",
]
