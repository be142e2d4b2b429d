"""Binary codec for simple glyph outlines.

A simple glyph body is laid out as:

    endPtsOfContours[numberOfContours]   uint16, ascending
    instructionLength                    uint16
    instructions[instructionLength]      uint8
    flags[]                              uint8, run-length encoded
    xCoordinates[]                       uint8 or int16 deltas
    yCoordinates[]                       uint8 or int16 deltas

Coordinates are deltas from the previous point of the whole glyph,
starting at (0, 0). Contour boundaries split the point list but do not
reset the running position.
"""

import struct

from glyfkit.core.stream import ByteReader
from glyfkit.domain.glyph import Glyph
from glyfkit.domain.point import Contour, Point
from glyfkit.exceptions import DecodeError, EncodeError

ON_CURVE = 0x01
X_SHORT = 0x02
Y_SHORT = 0x04
REPEAT = 0x08
X_SAME_OR_POSITIVE = 0x10
Y_SAME_OR_POSITIVE = 0x20
OVERLAP_SIMPLE = 0x40

MAX_REPEAT = 255


def decode_simple(reader: ByteReader, num_contours: int) -> tuple[list[Contour], bytes, bool]:
    """Decode the body of a simple glyph.

    Args:
        reader: View positioned just after the glyph header
        num_contours: Contour count from the glyph header

    Returns:
        Tuple of (contours, instruction bytes, overlap flag)

    Raises:
        DecodeError: If the body is truncated or inconsistent
    """
    field = "contour end point indices"
    end_points = reader.read_array("H", num_contours, field)
    previous = -1
    for end in end_points:
        if end <= previous:
            raise DecodeError(field, f"end point {end} does not follow {previous}")
        previous = end
    num_points = previous + 1

    (instruction_length,) = reader.unpack(">H", "instruction length")
    instructions = reader.read_bytes(instruction_length, "instructions")

    flags = _read_flags(reader, num_points)
    xs = _read_coordinates(reader, flags, X_SHORT, X_SAME_OR_POSITIVE, "x coordinates")
    ys = _read_coordinates(reader, flags, Y_SHORT, Y_SAME_OR_POSITIVE, "y coordinates")

    points = [
        Point(x, y, on_curve=bool(flag & ON_CURVE))
        for flag, x, y in zip(flags, xs, ys)
    ]
    contours: list[Contour] = []
    start = 0
    for end in end_points:
        contours.append(points[start : end + 1])
        start = end + 1

    overlap = bool(flags and flags[0] & OVERLAP_SIMPLE)
    return contours, instructions, overlap


def _read_flags(reader: ByteReader, num_points: int) -> list[int]:
    flags: list[int] = []
    while len(flags) < num_points:
        (flag,) = reader.unpack(">B", "point flags")
        flags.append(flag)
        if flag & REPEAT:
            (repeat,) = reader.unpack(">B", "flag repeat count")
            flags.extend([flag] * repeat)
    if len(flags) > num_points:
        raise DecodeError(
            "point flags",
            f"repeat runs past the last point ({len(flags)} flags for {num_points} points)",
        )
    return flags


def _read_coordinates(
    reader: ByteReader,
    flags: list[int],
    short_bit: int,
    same_bit: int,
    field: str,
) -> list[int]:
    values: list[int] = []
    value = 0
    for flag in flags:
        if flag & short_bit:
            (delta,) = reader.unpack(">B", field)
            if not flag & same_bit:
                delta = -delta
        elif flag & same_bit:
            delta = 0
        else:
            (delta,) = reader.unpack(">h", field)
        value += delta
        values.append(value)
    return values


def encode_simple(glyph: Glyph) -> bytes:
    """Encode the body of a simple glyph.

    Each delta gets the most compact legal form: no bytes for zero, one
    byte for magnitudes up to 255, two bytes otherwise.

    Args:
        glyph: Glyph with at least one contour

    Returns:
        Bytes following the glyph header

    Raises:
        EncodeError: If a contour is empty or a value does not fit its field
    """
    end_points: list[int] = []
    total = 0
    for contour in glyph.contours:
        if not contour:
            raise EncodeError("contour end point indices", reason="empty contour")
        total += len(contour)
        end_points.append(total - 1)
    if total > 0xFFFF:
        raise EncodeError("contour end point indices", total - 1)
    if len(glyph.instructions) > 0xFFFF:
        raise EncodeError("instruction length", len(glyph.instructions))

    flags: list[int] = []
    x_data = bytearray()
    y_data = bytearray()
    previous_x = previous_y = 0
    for point in glyph.points():
        flag = ON_CURVE if point.on_curve else 0
        flag |= _write_delta(point.x - previous_x, X_SHORT, X_SAME_OR_POSITIVE, x_data, "x coordinate")
        flag |= _write_delta(point.y - previous_y, Y_SHORT, Y_SAME_OR_POSITIVE, y_data, "y coordinate")
        flags.append(flag)
        previous_x, previous_y = point.x, point.y

    if glyph.overlap and flags:
        flags[0] |= OVERLAP_SIMPLE

    return b"".join(
        [
            struct.pack(f">{len(end_points)}H", *end_points),
            struct.pack(">H", len(glyph.instructions)),
            bytes(glyph.instructions),
            compress_flags(flags),
            bytes(x_data),
            bytes(y_data),
        ]
    )


def _write_delta(delta: int, short_bit: int, same_bit: int, out: bytearray, field: str) -> int:
    if delta == 0:
        return same_bit
    if -255 <= delta <= 255:
        out.append(abs(delta))
        return short_bit | (same_bit if delta > 0 else 0)
    if not -0x8000 <= delta <= 0x7FFF:
        raise EncodeError(field, delta)
    out += struct.pack(">h", delta)
    return 0


def compress_flags(flags: list[int]) -> bytes:
    """Run-length encode point flags.

    Two identical flags in a row are written twice (a repeat byte would not
    save anything); three or more become the flag with REPEAT set followed
    by the number of extra repetitions.
    """
    compressed = bytearray()
    last: int | None = None
    repeat = 0
    for flag in flags:
        if flag == last and repeat != MAX_REPEAT:
            repeat += 1
            if repeat == 1:
                compressed.append(flag)
            else:
                compressed[-2] = flag | REPEAT
                compressed[-1] = repeat
        else:
            repeat = 0
            compressed.append(flag)
        last = flag
    return bytes(compressed)
