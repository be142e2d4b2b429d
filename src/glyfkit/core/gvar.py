"""Glyph variations (gvar) table decoding.

Decodes the gvar header, the per-glyph offset array, the shared tuples and,
for each glyph, the tuple variation headers (which region of the design
space each variation applies to) together with the shared point numbers.
The private point numbers and deltas of each variation are kept as raw
bytes; applying deltas to outlines is not supported.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from fontTools.misc.fixedTools import fixedToFloat

from glyfkit.core.stream import ByteReader
from glyfkit.exceptions import DecodeError

GVAR_HEADER_FORMAT = """
    >   # big endian
    majorVersion:                   H
    minorVersion:                   H
    axisCount:                      H
    sharedTupleCount:               H
    sharedTuplesOffset:             I
    glyphCount:                     H
    flags:                          H
    glyphVariationDataArrayOffset:  I
"""

LONG_OFFSETS = 0x0001

SHARED_POINT_NUMBERS = 0x8000
TUPLE_COUNT_MASK = 0x0FFF

EMBEDDED_PEAK_TUPLE = 0x8000
INTERMEDIATE_REGION = 0x4000
PRIVATE_POINT_NUMBERS = 0x2000
TUPLE_INDEX_MASK = 0x0FFF

POINTS_ARE_WORDS = 0x80
POINT_RUN_COUNT_MASK = 0x7F

Tuple = tuple[float, ...]


def _read_tuple(reader: ByteReader, axis_count: int, field_name: str) -> Tuple:
    return tuple(fixedToFloat(v, 14) for v in reader.read_array("h", axis_count, field_name))


@dataclass
class TupleVariation:
    """Header of one variation of a glyph and its undecoded payload.

    Attributes:
        peak: Peak coordinates, one per axis
        start: Intermediate region start, if the variation has one
        end: Intermediate region end, if the variation has one
        shared_tuple_index: Index into the shared tuples when the peak is shared
        private_points: Whether the payload carries its own point numbers
        data: Packed point numbers and deltas
    """

    peak: Tuple
    start: Tuple | None = None
    end: Tuple | None = None
    shared_tuple_index: int | None = None
    private_points: bool = False
    data: bytes = b""


@dataclass
class GlyphVariationData:
    """All variations of one glyph.

    Attributes:
        shared_point_numbers: Whether the variations share one point list
        variations: Tuple variations in stored order
        shared_points: The shared point numbers; None means all points
    """

    shared_point_numbers: bool = False
    variations: list[TupleVariation] = field(default_factory=list)
    shared_points: list[int] | None = None


@dataclass
class GvarTable:
    """Decoded gvar table.

    Attributes:
        major_version: Table major version (1)
        minor_version: Table minor version (0)
        axis_count: Number of variation axes
        flags: Header flags (bit 0: 32-bit offsets)
        shared_tuples: Peak tuples shared between glyphs
        glyph_variations: Per glyph, its variation data or None
    """

    major_version: int
    minor_version: int
    axis_count: int
    flags: int = 0
    shared_tuples: list[Tuple] = field(default_factory=list)
    glyph_variations: list[GlyphVariationData | None] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> "GvarTable":
        """Decode a gvar table.

        Args:
            data: Raw gvar table bytes

        Returns:
            Decoded table

        Raises:
            DecodeError: If the table is truncated or an offset is out of range
        """
        reader = ByteReader(data)
        header = reader.read_struct(GVAR_HEADER_FORMAT, "gvar table header")
        glyph_count = header["glyphCount"]
        axis_count = header["axisCount"]

        if header["flags"] & LONG_OFFSETS:
            offsets = reader.read_array("I", glyph_count + 1, "glyph variation data offsets")
        else:
            offsets = [
                2 * offset
                for offset in reader.read_array("H", glyph_count + 1, "glyph variation data offsets")
            ]

        table = cls(
            major_version=header["majorVersion"],
            minor_version=header["minorVersion"],
            axis_count=axis_count,
            flags=header["flags"],
        )

        tuples_start = header["sharedTuplesOffset"]
        tuples_end = tuples_start + 2 * axis_count * header["sharedTupleCount"]
        tuples = ByteReader(data, tuples_start, min(tuples_end, len(data)))
        for _ in range(header["sharedTupleCount"]):
            table.shared_tuples.append(_read_tuple(tuples, axis_count, "shared tuple"))

        base = header["glyphVariationDataArrayOffset"]
        for glyph_index, (start, end) in enumerate(zip(offsets, offsets[1:])):
            if end <= start:
                table.glyph_variations.append(None)
                continue
            try:
                variation = decode_glyph_variations(
                    data, base + start, base + end, axis_count, table.shared_tuples
                )
            except DecodeError as e:
                raise e.for_glyph(glyph_index) from e
            table.glyph_variations.append(variation)
        return table


def decode_glyph_variations(
    data: bytes,
    start: int,
    end: int,
    axis_count: int,
    shared_tuples: Sequence[Tuple],
) -> GlyphVariationData:
    """Decode the tuple variation headers of one glyph.

    Args:
        data: Buffer holding the gvar table
        start: Position of the glyph's GlyphVariationData
        end: Position one past its last byte
        axis_count: Number of variation axes
        shared_tuples: Shared peak tuples of the table

    Returns:
        The glyph's variations with undecoded payloads
    """
    reader = ByteReader(data, start, min(end, len(data)))
    count_word, data_offset = reader.unpack(">HH", "glyph variation data header")
    result = GlyphVariationData(shared_point_numbers=bool(count_word & SHARED_POINT_NUMBERS))

    sizes: list[int] = []
    for _ in range(count_word & TUPLE_COUNT_MASK):
        size, tuple_index = reader.unpack(">HH", "tuple variation header")
        variation = TupleVariation(peak=(), private_points=bool(tuple_index & PRIVATE_POINT_NUMBERS))
        if tuple_index & EMBEDDED_PEAK_TUPLE:
            variation.peak = _read_tuple(reader, axis_count, "embedded peak tuple")
        else:
            index = tuple_index & TUPLE_INDEX_MASK
            if index >= len(shared_tuples):
                raise DecodeError("shared tuple index", f"{index} of {len(shared_tuples)} shared tuples")
            variation.peak = shared_tuples[index]
            variation.shared_tuple_index = index
        if tuple_index & INTERMEDIATE_REGION:
            variation.start = _read_tuple(reader, axis_count, "intermediate start tuple")
            variation.end = _read_tuple(reader, axis_count, "intermediate end tuple")
        result.variations.append(variation)
        sizes.append(size)

    payload = ByteReader(data, start + data_offset, min(end, len(data)))
    if result.shared_point_numbers:
        result.shared_points = read_packed_points(payload)
    for variation, size in zip(result.variations, sizes):
        variation.data = payload.read_bytes(size, "tuple variation data")
    return result


def read_packed_points(reader: ByteReader) -> list[int] | None:
    """Read a packed point number list.

    Returns:
        Ascending point numbers, or None when the list means "all points"
    """
    (first,) = reader.unpack(">B", "packed point count")
    if first == 0:
        return None
    count = first
    if first & POINTS_ARE_WORDS:
        (second,) = reader.unpack(">B", "packed point count")
        count = ((first & POINT_RUN_COUNT_MASK) << 8) | second

    points: list[int] = []
    point = 0
    while len(points) < count:
        (control,) = reader.unpack(">B", "packed point run header")
        run_length = (control & POINT_RUN_COUNT_MASK) + 1
        typecode = "H" if control & POINTS_ARE_WORDS else "B"
        for delta in reader.read_array(typecode, run_length, "packed point numbers"):
            point += delta
            points.append(point)
    if len(points) > count:
        raise DecodeError("packed point numbers", f"runs hold {len(points)} points, expected {count}")
    return points
