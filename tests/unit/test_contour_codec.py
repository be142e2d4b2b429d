"""Tests for the simple glyph codec."""

import pytest

from glyfkit.core.contour_codec import (
    ON_CURVE,
    OVERLAP_SIMPLE,
    REPEAT,
    X_SAME_OR_POSITIVE,
    X_SHORT,
    Y_SAME_OR_POSITIVE,
    Y_SHORT,
    compress_flags,
    decode_simple,
    encode_simple,
)
from glyfkit.core.glyph_codec import decode_glyph, encode_glyph
from glyfkit.core.stream import ByteReader
from glyfkit.domain import Glyph, Point
from glyfkit.exceptions import DecodeError, EncodeError

# A triangle followed by a twelve-point contour
TWO_CONTOUR_GLYPH = bytes.fromhex(
    "0002 0014 0000 0237 0122"
    "0002 000e"
    "0000"
    "33 33 27 24 36 33 32 16 15 14 06 23 22 26 35"
    "14 c8 78 011e 36 25 25 35 35 25 25 36"
    "c8 25 35 35 25 25 36 36 25"
)


class TestDecodeSimple:
    """Tests for decoding simple glyph bodies."""

    def test_two_contour_glyph(self):
        """Test decoding a real two-contour glyph."""
        glyph = decode_glyph(TWO_CONTOUR_GLYPH)

        assert glyph.bounds == (20, 0, 567, 290)
        assert len(glyph.contours) == 2
        assert glyph.contours[0] == [Point(20, 0), Point(220, 0), Point(100, 200)]
        assert glyph.contours[1] == [
            Point(386, 237, on_curve=False),
            Point(440, 290, on_curve=False),
            Point(477, 290),
            Point(514, 290, on_curve=False),
            Point(567, 237, on_curve=False),
            Point(567, 200),
            Point(567, 163, on_curve=False),
            Point(514, 109, on_curve=False),
            Point(477, 109),
            Point(440, 109, on_curve=False),
            Point(386, 163, on_curve=False),
            Point(386, 200),
        ]
        assert glyph.instructions == b""
        assert glyph.overlap is False

    def test_two_contour_glyph_round_trip(self):
        """Test that re-encoding reproduces the original bytes."""
        assert encode_glyph(decode_glyph(TWO_CONTOUR_GLYPH)) == TWO_CONTOUR_GLYPH

    def test_repeat_flag(self):
        """Test that a repeated flag applies to count + 1 points."""
        flag = ON_CURVE | X_SHORT | Y_SHORT | X_SAME_OR_POSITIVE | Y_SAME_OR_POSITIVE
        body = bytes.fromhex("0003 0000") + bytes([flag | REPEAT, 3]) + b"\x01" * 4 + b"\x02" * 4
        contours, _, _ = decode_simple(ByteReader(body), 1)

        assert contours[0] == [Point(1, 2), Point(2, 4), Point(3, 6), Point(4, 8)]

    def test_deltas_continue_across_contours(self):
        """Test that the running position is not reset between contours."""
        flag = ON_CURVE | X_SHORT | X_SAME_OR_POSITIVE | Y_SAME_OR_POSITIVE
        body = bytes.fromhex("0000 0001 0000") + bytes([flag] * 2) + bytes([10, 5])
        contours, _, _ = decode_simple(ByteReader(body), 2)

        assert contours == [[Point(10, 0)], [Point(15, 0)]]

    def test_word_deltas(self):
        """Test that two-byte deltas are signed."""
        body = bytes.fromhex("0000 0000") + bytes([ON_CURVE]) + bytes.fromhex("fc18 03e8")
        contours, _, _ = decode_simple(ByteReader(body), 1)

        assert contours == [[Point(-1000, 1000)]]

    def test_negative_short_delta(self):
        """Test that a short delta without its sign bit is negative."""
        body = bytes.fromhex("0000 0000") + bytes([X_SHORT | Y_SHORT]) + bytes([7, 9])
        contours, _, _ = decode_simple(ByteReader(body), 1)

        assert contours == [[Point(-7, -9, on_curve=False)]]

    def test_instructions_and_overlap(self):
        """Test instructions and the overlap bit of the first flag."""
        flag = ON_CURVE | OVERLAP_SIMPLE | X_SAME_OR_POSITIVE | Y_SAME_OR_POSITIVE
        body = bytes.fromhex("0000 0002 b001") + bytes([flag])
        contours, instructions, overlap = decode_simple(ByteReader(body), 1)

        assert instructions == b"\xb0\x01"
        assert overlap is True
        assert contours == [[Point(0, 0)]]

    def test_truncated_coordinates(self):
        """Test that missing coordinate bytes raise DecodeError."""
        body = bytes.fromhex("0001 0000") + bytes([ON_CURVE, ON_CURVE]) + b"\x00"
        with pytest.raises(DecodeError, match="x coordinates"):
            decode_simple(ByteReader(body), 1)

    def test_non_ascending_end_points(self):
        """Test that end points must strictly increase."""
        body = bytes.fromhex("0003 0003 0000")
        with pytest.raises(DecodeError, match="contour end point indices"):
            decode_simple(ByteReader(body), 2)

    def test_repeat_past_last_point(self):
        """Test that a repeat run longer than the point count is rejected."""
        body = bytes.fromhex("0001 0000") + bytes([ON_CURVE | REPEAT, 5])
        with pytest.raises(DecodeError, match="repeat runs past"):
            decode_simple(ByteReader(body), 1)


class TestEncodeSimple:
    """Tests for encoding simple glyph bodies."""

    def test_zero_deltas_take_no_bytes(self):
        """Test that unchanged coordinates are encoded in the flag only."""
        glyph = Glyph(contours=[[Point(0, 0)]])
        body = encode_simple(glyph)

        assert body == bytes.fromhex("0000 0000") + bytes(
            [ON_CURVE | X_SAME_OR_POSITIVE | Y_SAME_OR_POSITIVE]
        )

    def test_short_and_word_deltas(self):
        """Test that deltas use the most compact form."""
        glyph = Glyph(contours=[[Point(255, -255), Point(-1, 300)]])
        body = encode_simple(glyph)

        flags = body[4:6]
        assert flags[0] == ON_CURVE | X_SHORT | X_SAME_OR_POSITIVE | Y_SHORT
        assert flags[1] == ON_CURVE
        assert body[6:] == bytes.fromhex("ff ff00") + bytes.fromhex("ff 022b")

    def test_overlap_is_set_on_first_flag(self):
        """Test that the overlap flag is written to the first point."""
        glyph = Glyph(contours=[[Point(0, 0), Point(0, 0)]], overlap=True)
        body = encode_simple(glyph)

        assert body[4] & OVERLAP_SIMPLE
        assert not body[5] & OVERLAP_SIMPLE

    def test_round_trip_with_instructions(self):
        """Test that a glyph with instructions survives a round trip."""
        glyph = Glyph(
            contours=[
                [Point(0, 0), Point(0, 700, False), Point(500, 700)],
                [Point(100, 100), Point(-2000, 30000)],
            ],
            instructions=bytes(range(20)),
            x_min=-2000,
            x_max=500,
            y_max=30000,
        )
        assert decode_glyph(encode_glyph(glyph)) == glyph

    def test_empty_contour_rejected(self):
        """Test that an empty contour cannot be encoded."""
        with pytest.raises(EncodeError, match="empty contour") as excinfo:
            encode_simple(Glyph(contours=[[Point(0, 0)], []]))
        assert "out of range" not in str(excinfo.value)
        assert excinfo.value.reason == "empty contour"

    def test_delta_out_of_range(self):
        """Test that a delta beyond int16 raises EncodeError."""
        glyph = Glyph(contours=[[Point(-30000, 0), Point(30000, 0)]])
        with pytest.raises(EncodeError, match="x coordinate"):
            encode_simple(glyph)


class TestCompressFlags:
    """Tests for flag run-length encoding."""

    def test_single_flags(self):
        """Test that differing flags are written as-is."""
        assert compress_flags([1, 2, 3]) == bytes([1, 2, 3])

    def test_pair_is_not_compressed(self):
        """Test that two identical flags are written twice."""
        assert compress_flags([0x33, 0x33]) == bytes([0x33, 0x33])

    def test_three_or_more_use_repeat(self):
        """Test that runs of three or more use a repeat count."""
        assert compress_flags([1, 1, 1]) == bytes([1 | REPEAT, 2])
        assert compress_flags([1, 1, 1, 1, 2]) == bytes([1 | REPEAT, 3, 2])

    def test_long_run_is_split(self):
        """Test that a repeat count never exceeds 255."""
        compressed = compress_flags([1] * 300)

        assert compressed[:2] == bytes([1 | REPEAT, 255])
        assert compressed[2:] == bytes([1 | REPEAT, 43])

    def test_decoder_reads_compressed_flags(self):
        """Test that compressed runs decode back to one flag per point."""
        glyph = Glyph(contours=[[Point(i, 0) for i in range(1, 11)]])
        assert decode_glyph(encode_glyph(glyph)).contours == glyph.contours
