"""Font writer for saving fonts with a re-encoded glyf table.

This module provides the FontWriter class, which installs the bytes produced
by GlyfTable.compile() into a fontTools TTFont, keeps loca, head and maxp
consistent with them, and saves the result.
"""

import sys
from array import array
from pathlib import Path

from fontTools.misc.arrayTools import unionRect
from fontTools.ttLib import TTFont
from fontTools.ttLib.tables.DefaultTable import DefaultTable

from glyfkit.core.table import GlyfTable, MaxpStatistics
from glyfkit.exceptions import FontSaveError

# maxp version carrying the TrueType statistics fields
MAXP_VERSION_1 = 0x00010000

SHORT_LOCA_LIMIT = 0x20000

UINT16_MAX = 0xFFFF


def pack_loca(offsets: list[int]) -> tuple[bytes, int]:
    """Pack loca offsets in the smallest format that can hold them.

    The short format stores offset / 2 as uint16 and needs every offset to
    be even and below 0x20000.

    Args:
        offsets: numGlyphs + 1 glyph offsets

    Returns:
        Tuple of (loca bytes, indexToLocFormat: 0 short, 1 long)
    """
    if all(offset % 2 == 0 for offset in offsets) and max(offsets, default=0) < SHORT_LOCA_LIMIT:
        packed = array("H", [offset // 2 for offset in offsets])
        index_format = 0
    else:
        packed = array("I", offsets)
        index_format = 1
    if sys.byteorder != "big":
        packed.byteswap()
    return packed.tobytes(), index_format


class FontWriter:
    """Writes a font with its glyf table replaced.

    Example:
        writer = FontWriter(font, Path("output.ttf"))
        writer.update_table(table)
        writer.save()
    """

    def __init__(self, font: TTFont, output_path: Path) -> None:
        """Initialize the font writer.

        Args:
            font: The fonttools TTFont object to write
            output_path: Path where the font will be saved
        """
        self._font = font
        self._output_path = output_path

    def update_table(self, table: GlyfTable, statistics: MaxpStatistics | None = None) -> None:
        """Install a glyf table and the tables that depend on it.

        The glyf and loca tables are stored as raw data, so fontTools saves
        the bytes glyfkit produced rather than re-encoding them. The head
        bounding box is the union of all non-empty glyph boxes.

        Args:
            table: Glyph table to install
            statistics: maxp values (computed from the table if None)

        Raises:
            ValueError: If the table's glyph count differs from the font's
            EncodeError: If a glyph cannot be encoded
        """
        if len(table) != self._font["maxp"].numGlyphs:
            raise ValueError(
                f"Table has {len(table)} glyphs, font has {self._font['maxp'].numGlyphs}"
            )

        data, offsets = table.compile()
        loca_data, index_format = pack_loca(offsets)

        glyf = DefaultTable("glyf")
        glyf.data = data
        loca = DefaultTable("loca")
        loca.data = loca_data
        self._font["glyf"] = glyf
        self._font["loca"] = loca

        head = self._font["head"]
        head.indexToLocFormat = index_format
        bounds = None
        for glyph in table:
            if glyph.is_empty():
                continue
            bounds = glyph.bounds if bounds is None else unionRect(bounds, glyph.bounds)
        head.xMin, head.yMin, head.xMax, head.yMax = bounds or (0, 0, 0, 0)

        self.update_maxp(statistics if statistics is not None else table.maxp_statistics())

    def update_maxp(self, statistics: MaxpStatistics) -> None:
        """Write glyph statistics into the maxp table.

        Version 0.5 maxp tables (CFF fonts) only carry numGlyphs. The
        statistics fields are uint16 and saturate at 0xFFFF.
        """
        maxp = self._font["maxp"]
        maxp.numGlyphs = statistics.num_glyphs
        if maxp.tableVersion != MAXP_VERSION_1:
            return
        maxp.maxPoints = min(statistics.max_points, UINT16_MAX)
        maxp.maxContours = min(statistics.max_contours, UINT16_MAX)
        maxp.maxCompositePoints = min(statistics.max_composite_points, UINT16_MAX)
        maxp.maxCompositeContours = min(statistics.max_composite_contours, UINT16_MAX)
        maxp.maxComponentElements = min(statistics.max_component_elements, UINT16_MAX)
        maxp.maxComponentDepth = min(statistics.max_component_depth, UINT16_MAX)

    def save(self) -> None:
        """Save the font file to the output path.

        Raises:
            FontSaveError: If file cannot be written
        """
        try:
            self._font.save(str(self._output_path))
        except OSError as e:
            raise FontSaveError(str(self._output_path), str(e)) from e

    @staticmethod
    def get_flat_path(input_path: Path) -> Path:
        """Generate the default output path for a flattened font.

        Converts: font.ttf -> font-Flat.ttf

        Args:
            input_path: Original font file path

        Returns:
            Path with -Flat suffix before extension
        """
        return input_path.parent / f"{input_path.stem}-Flat{input_path.suffix}"
