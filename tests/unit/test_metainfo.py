"""
Metainfo projection tests.
"""

import hashlib
import io
from datetime import datetime, timezone

import pytest

from helpers import mk_info_dict, mk_pieces, mk_torrent_bytes, mk_torrent_document
from torrent_codec import (
    DecoderOptions,
    ErrorCode,
    FormatError,
    MetainfoError,
    TorrentMetainfo,
    encode,
    load_metainfo,
)


@pytest.mark.unit
class TestSingleFile:
    """Single-file torrents."""

    def test_fields(self):
        """Test the projected fields."""
        info = mk_info_dict(name=b"ubuntu.iso", length=1048576, piece_length=262144, num_pieces=4)
        meta = load_metainfo(mk_torrent_bytes(info))

        assert meta.name == "ubuntu.iso"
        assert meta.length == 1048576
        assert meta.total_length == 1048576
        assert meta.piece_length == 262144
        assert meta.num_pieces == 4
        assert meta.piece_hashes == [mk_pieces(4)[i:i + 20] for i in range(0, 80, 20)]
        assert not meta.is_multi_file
        assert not meta.private
        assert meta.announce == "http://tracker.example.com:6969/announce"

    def test_info_hash(self):
        """Test that the info hash covers the raw info dictionary."""
        info = mk_info_dict()
        meta = load_metainfo(mk_torrent_bytes(info))
        expected = hashlib.sha1(encode(info)).digest()
        assert meta.info_hash == expected
        assert meta.info_hash_hex == expected.hex()

    def test_from_stream(self):
        """Test loading from a binary stream."""
        meta = load_metainfo(io.BytesIO(mk_torrent_bytes()))
        assert meta.name == "ubuntu.iso"

    def test_optional_fields(self):
        """Test comment, created by, creation date, encoding and private."""
        data = mk_torrent_bytes(
            mk_info_dict(private=1),
            comment=b"a comment",
            created_by=b"mktorrent 1.1",
            creation_date=1700000000,
            encoding=b"UTF-8",
        )
        meta = load_metainfo(data)
        assert meta.comment == "a comment"
        assert meta.created_by == "mktorrent 1.1"
        assert meta.creation_date == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert meta.encoding == "UTF-8"
        assert meta.private

    def test_text_encoding(self):
        """Test decoding text fields with another encoding."""
        data = mk_torrent_bytes(mk_info_dict(name="café".encode("latin-1")))
        meta = load_metainfo(data, DecoderOptions(text_encoding="latin-1"))
        assert meta.name == "café"


@pytest.mark.unit
class TestMultiFile:
    """Multi-file torrents."""

    def test_files(self):
        """Test the file list and total length."""
        files = [
            {b"length": 100, b"path": [b"docs", b"readme.txt"]},
            {b"length": 250, b"path": [b"data.bin"]},
        ]
        meta = load_metainfo(mk_torrent_bytes(mk_info_dict(name=b"bundle", files=files)))

        assert meta.is_multi_file
        assert meta.name == "bundle"
        assert meta.length is None
        assert meta.total_length == 350
        assert [f.path for f in meta.files] == [["docs", "readme.txt"], ["data.bin"]]
        assert meta.files[0].joined_path == "docs/readme.txt"

    def test_empty_path_rejected(self):
        """Test a file entry without path components."""
        files = [{b"length": 1, b"path": []}]
        with pytest.raises(MetainfoError):
            load_metainfo(mk_torrent_bytes(mk_info_dict(files=files)))


@pytest.mark.unit
class TestTrackers:
    """announce and announce-list."""

    def test_announce_list(self):
        """Test tracker tiers."""
        tiers = [[b"http://a/announce", b"http://b/announce"], [b"udp://c:80"]]
        meta = load_metainfo(mk_torrent_bytes(announce_list=tiers))
        assert meta.is_multi_announce
        assert meta.announce_list == [["http://a/announce", "http://b/announce"], ["udp://c:80"]]
        assert meta.trackers == [
            "http://tracker.example.com:6969/announce",
            "http://a/announce",
            "http://b/announce",
            "udp://c:80",
        ]

    def test_trackerless(self):
        """Test a torrent without any tracker."""
        document = mk_torrent_document()
        del document[b"announce"]
        meta = load_metainfo(encode(document))
        assert meta.announce is None
        assert meta.trackers == []

    def test_bad_tier(self):
        """Test an announce-list tier that is not a list."""
        with pytest.raises(MetainfoError):
            load_metainfo(mk_torrent_bytes(announce_list=[b"http://a"]))


@pytest.mark.unit
class TestInvalid:
    """Projection failures."""

    def test_not_a_map(self):
        """Test a document that is not a map."""
        with pytest.raises(MetainfoError):
            load_metainfo(b"li1ee")

    def test_missing_info(self):
        """Test a document without info."""
        with pytest.raises(MetainfoError) as exc_info:
            load_metainfo(b"d8:announce3:urle")
        assert exc_info.value.code == ErrorCode.MISSING_FIELD

    def test_info_not_a_map(self):
        """Test info of the wrong kind."""
        with pytest.raises(MetainfoError) as exc_info:
            load_metainfo(b"d4:infoi1ee")
        assert exc_info.value.code == ErrorCode.INVALID_FIELD

    @pytest.mark.parametrize("missing", [b"name", b"piece length", b"pieces"])
    def test_missing_required(self, missing):
        """Test each required info field."""
        info = mk_info_dict()
        del info[missing]
        with pytest.raises(MetainfoError) as exc_info:
            load_metainfo(mk_torrent_bytes(info))
        assert exc_info.value.code == ErrorCode.MISSING_FIELD

    def test_no_layout(self):
        """Test an info dictionary with neither length nor files."""
        info = mk_info_dict(length=None)
        with pytest.raises(MetainfoError):
            load_metainfo(mk_torrent_bytes(info))

    def test_bad_pieces_length(self):
        """Test a pieces blob that is not a multiple of 20."""
        info = mk_info_dict()
        info[b"pieces"] = b"x" * 21
        with pytest.raises(MetainfoError):
            load_metainfo(mk_torrent_bytes(info))

    def test_wrong_type(self):
        """Test a mistyped field."""
        info = mk_info_dict()
        info[b"piece length"] = b"262144"
        with pytest.raises(MetainfoError) as exc_info:
            load_metainfo(mk_torrent_bytes(info))
        assert exc_info.value.details["field"] == "piece length"

    def test_invalid_text(self):
        """Test a name that is not valid UTF-8."""
        with pytest.raises(MetainfoError):
            load_metainfo(mk_torrent_bytes(mk_info_dict(name=b"\xff\xfe")))

    def test_missing_info_hash(self):
        """Test projecting without a digest."""
        with pytest.raises(MetainfoError):
            TorrentMetainfo.from_value(mk_torrent_document(), None)

    def test_format_errors_pass_through(self):
        """Test that malformed input surfaces as FormatError."""
        with pytest.raises(FormatError):
            load_metainfo(b"d4:infoi-0ee")
