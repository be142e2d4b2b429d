"""Tests for whole glyph records and the byte reader."""

import pytest

from glyfkit.core.glyph_codec import GLYPH_HEADER_SIZE, decode_glyph, decode_glyph_at, encode_glyph
from glyfkit.core.stream import ByteReader
from glyfkit.domain import Component, Glyph, Point
from glyfkit.exceptions import DecodeError, EncodeError


class TestByteReader:
    """Tests for ByteReader class."""

    def test_reads_within_range(self):
        """Test that reads are confined to the view."""
        reader = ByteReader(b"\x00\x01\x02\x03\x04", offset=1, end=4)
        assert reader.remaining == 3
        assert reader.unpack(">H", "word") == (0x0102,)
        assert reader.consumed == 2
        assert reader.read_remainder() == b"\x03"

    def test_read_past_end(self):
        """Test that reading past the view raises DecodeError naming the field."""
        reader = ByteReader(b"\x00\x01\x02", end=2)
        with pytest.raises(DecodeError, match="numberOfContours"):
            reader.unpack(">hh", "numberOfContours")

    def test_invalid_range(self):
        """Test that a view outside the buffer is rejected."""
        with pytest.raises(DecodeError, match="byte range"):
            ByteReader(b"\x00" * 4, offset=2, end=8)
        with pytest.raises(DecodeError, match="byte range"):
            ByteReader(b"\x00" * 4, offset=3, end=2)

    def test_read_array_big_endian(self):
        """Test that arrays are read big-endian."""
        reader = ByteReader(bytes.fromhex("0001 fffe"))
        assert reader.read_array("H", 2, "values") == [1, 0xFFFE]

    def test_independent_views(self):
        """Test that two views of one buffer do not share a cursor."""
        data = bytes(range(8))
        first = ByteReader(data, 0, 4)
        second = ByteReader(data, 4, 8)
        first.read_bytes(2, "a")
        assert second.read_bytes(2, "b") == b"\x04\x05"


class TestGlyphCodec:
    """Tests for whole glyph records."""

    def test_empty_range_is_empty_glyph(self):
        """Test that a zero-length record decodes to the empty glyph."""
        glyph = decode_glyph(b"\x00" * 8, 4, 4)
        assert glyph == Glyph.empty()

    def test_header_only_glyph(self):
        """Test that a record with zero contours has no outline."""
        glyph = decode_glyph(bytes.fromhex("0000 0001 0002 0003 0004"))
        assert glyph.is_empty()
        assert glyph.bounds == (1, 2, 3, 4)

    def test_truncated_header(self):
        """Test that a short header raises DecodeError."""
        with pytest.raises(DecodeError, match="glyph header"):
            decode_glyph(bytes.fromhex("0001 0000"))

    def test_decode_at_offset(self):
        """Test decoding a record in the middle of a buffer."""
        record = encode_glyph(Glyph(contours=[[Point(1, 1)]], x_min=1, y_min=1, x_max=1, y_max=1))
        data = b"\xff" * 6 + record + b"\xff" * 6
        glyph = decode_glyph(data, 6, 6 + len(record))
        assert glyph.contours == [[Point(1, 1)]]

    def test_decode_at_tags_glyph_index(self):
        """Test that decode errors carry the glyph index."""
        with pytest.raises(DecodeError) as excinfo:
            decode_glyph_at(bytes.fromhex("0001 0000"), 17, 0)
        assert excinfo.value.glyph_index == 17
        assert "glyph 17" in str(excinfo.value)

    def test_encode_empty_glyph(self):
        """Test that an empty glyph encodes to no bytes."""
        assert encode_glyph(Glyph.empty()) == b""

    def test_encode_header(self):
        """Test the header of an encoded simple glyph."""
        glyph = Glyph(contours=[[Point(0, 0)], [Point(5, 5)]], x_max=5, y_max=5)
        data = encode_glyph(glyph)
        assert data[:GLYPH_HEADER_SIZE] == bytes.fromhex("0002 0000 0000 0005 0005")

    def test_composite_header(self):
        """Test that composites are written with numberOfContours -1."""
        data = encode_glyph(Glyph(components=[Component(glyph_index=1)]))
        assert data[:2] == b"\xff\xff"

    def test_mixed_glyph_rejected(self):
        """Test that contours and components cannot be combined."""
        glyph = Glyph(contours=[[Point(0, 0)]], components=[Component(glyph_index=1)])
        with pytest.raises(EncodeError, match="glyph outline") as excinfo:
            encode_glyph(glyph)
        assert str(excinfo.value) == "Cannot encode glyph outline: glyph has both contours and components"

    def test_bounds_out_of_range(self):
        """Test that a bounding box beyond int16 raises EncodeError."""
        glyph = Glyph(contours=[[Point(0, 0)]], x_max=40000)
        with pytest.raises(EncodeError, match="xMax") as excinfo:
            encode_glyph(glyph)
        assert excinfo.value.value == 40000
        assert "out of range" in str(excinfo.value)
