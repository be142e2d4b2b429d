"""Binary codec for whole glyph records.

A glyph record starts with a fixed header followed by either a simple
outline body or a list of component records:

    numberOfContours   int16   (negative: composite)
    xMin, yMin         int16
    xMax, yMax         int16
"""

from fontTools.misc import sstruct

from glyfkit.core.component_codec import decode_components, encode_components
from glyfkit.core.contour_codec import decode_simple, encode_simple
from glyfkit.core.stream import ByteReader
from glyfkit.domain.glyph import Glyph
from glyfkit.exceptions import DecodeError, EncodeError

GLYPH_HEADER_FORMAT = """
    >   # big endian
    numberOfContours:   h
    xMin:               h
    yMin:               h
    xMax:               h
    yMax:               h
"""

GLYPH_HEADER_SIZE = sstruct.calcsize(GLYPH_HEADER_FORMAT)


def decode_glyph(data: bytes, offset: int = 0, end: int | None = None) -> Glyph:
    """Decode one glyph record from a byte range.

    The range is read through its own view, so records can be decoded in
    any order (or concurrently) without a shared cursor.

    Args:
        data: Buffer holding the glyf table (or just this record)
        offset: Position of the record in the buffer
        end: Position one past the record's last byte (buffer end if None)

    Returns:
        The decoded Glyph

    Raises:
        DecodeError: If the record is truncated or inconsistent
    """
    reader = ByteReader(data, offset, end)
    if reader.remaining == 0:
        return Glyph.empty()

    header = reader.read_struct(GLYPH_HEADER_FORMAT, "glyph header")
    num_contours = header["numberOfContours"]
    glyph = Glyph(
        x_min=header["xMin"],
        y_min=header["yMin"],
        x_max=header["xMax"],
        y_max=header["yMax"],
    )

    if num_contours < 0:
        glyph.components, glyph.instructions, glyph.overlap = decode_components(reader)
    elif num_contours > 0:
        glyph.contours, glyph.instructions, glyph.overlap = decode_simple(reader, num_contours)
    return glyph


def encode_glyph(glyph: Glyph) -> bytes:
    """Encode one glyph record.

    Empty glyphs encode to no bytes at all; their absence is expressed by
    the offset table.

    Args:
        glyph: Glyph to encode

    Returns:
        The binary glyph record (unpadded)

    Raises:
        EncodeError: If the glyph mixes contours and components or a value
            does not fit its field
    """
    if glyph.is_empty():
        return b""
    if glyph.contours and glyph.components:
        raise EncodeError("glyph outline", reason="glyph has both contours and components")

    if glyph.components:
        num_contours = -1
        body = encode_components(glyph.components, glyph.instructions, glyph.overlap)
    else:
        num_contours = len(glyph.contours)
        if num_contours > 0x7FFF:
            raise EncodeError("numberOfContours", num_contours)
        body = encode_simple(glyph)

    for name, value in zip(("xMin", "yMin", "xMax", "yMax"), glyph.bounds):
        if not -0x8000 <= value <= 0x7FFF:
            raise EncodeError(name, value)

    header = sstruct.pack(
        GLYPH_HEADER_FORMAT,
        {
            "numberOfContours": num_contours,
            "xMin": glyph.x_min,
            "yMin": glyph.y_min,
            "xMax": glyph.x_max,
            "yMax": glyph.y_max,
        },
    )
    return header + body


def decode_glyph_at(data: bytes, glyph_index: int, offset: int, end: int | None = None) -> Glyph:
    """Decode one glyph record, tagging any DecodeError with its index."""
    try:
        return decode_glyph(data, offset, end)
    except DecodeError as e:
        raise e.for_glyph(glyph_index) from e
