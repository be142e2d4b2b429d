"""Font reader for loading TrueType fonts.

This module provides the FontReader class, which opens a font with
fontTools and hands the raw glyf bytes and loca offsets to the glyfkit
codec. fontTools is only used for the container: the glyf table itself is
never decompiled by fontTools.
"""

from pathlib import Path

from fontTools.ttLib import TTFont

from glyfkit.config.settings import ErrorPolicy
from glyfkit.core.gvar import GvarTable
from glyfkit.core.table import MAX_COMPONENT_DEPTH, GlyfTable
from glyfkit.exceptions import FontFormatError


class FontReader:
    """Loads TrueType fonts and extracts the glyf table.

    Example:
        reader = FontReader(Path("font.ttf"))
        reader.load()
        table = reader.read_table()
        print(table.maxp_statistics())
    """

    def __init__(self, font_path: Path) -> None:
        """Initialize the font reader.

        Args:
            font_path: Path to the TTF font file
        """
        self._font_path = font_path
        self._font: TTFont | None = None

    def load(self) -> None:
        """Load the font file.

        Bounding boxes are not recalculated by fontTools on save; glyfkit
        owns the glyph boxes and the maxp values derived from them.

        Raises:
            FileNotFoundError: If font file does not exist
            Exception: If font file is invalid or cannot be loaded
        """
        if not self._font_path.exists():
            raise FileNotFoundError(f"Font file not found: {self._font_path}")

        self._font = TTFont(str(self._font_path), recalcBBoxes=False)

    @property
    def font(self) -> TTFont:
        """The underlying fontTools font.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        if self._font is None:
            raise RuntimeError("Font not loaded. Call load() first.")
        return self._font

    @property
    def format(self) -> str:
        """Return font format.

        Returns:
            'TrueType' for glyf-based fonts, 'OpenType' for CFF-based fonts
        """
        font = self.font
        if "CFF " in font or "CFF2" in font:
            return "OpenType"
        return "TrueType"

    @property
    def has_outlines(self) -> bool:
        """Whether the font has a glyf table."""
        return "glyf" in self.font

    @property
    def has_variations(self) -> bool:
        """Whether the font has a gvar table."""
        return "gvar" in self.font

    @property
    def units_per_em(self) -> int:
        """Return font's units per em."""
        return self.font["head"].unitsPerEm  # type: ignore[attr-defined]

    @property
    def glyph_count(self) -> int:
        """Return total number of glyphs in the font."""
        return self.font["maxp"].numGlyphs

    def glyph_order(self) -> list[str]:
        """Glyph names in glyph ID order."""
        return list(self.font.getGlyphOrder())

    def read_glyf_data(self) -> bytes:
        """Raw bytes of the glyf table."""
        return self.font.getTableData("glyf")

    def read_loca(self) -> list[int]:
        """Glyph offsets from the loca table (numGlyphs + 1 entries)."""
        return [int(offset) for offset in self.font["loca"]]

    def read_table(
        self,
        on_error: ErrorPolicy = ErrorPolicy.RAISE,
        max_component_depth: int = MAX_COMPONENT_DEPTH,
    ) -> GlyfTable:
        """Decode the glyf table.

        Args:
            on_error: Policy for glyphs that fail to decode
            max_component_depth: Composite nesting depth treated as a loop

        Returns:
            Decoded GlyfTable

        Raises:
            FontFormatError: If the font has no glyf table
            DecodeError: If a glyph is malformed and on_error is RAISE
        """
        if not self.has_outlines:
            raise FontFormatError(str(self._font_path), "no glyf table")
        return GlyfTable.from_loca(
            self.read_glyf_data(),
            self.read_loca(),
            on_error=on_error,
            max_component_depth=max_component_depth,
        )

    def read_gvar(self) -> GvarTable | None:
        """Decode the gvar table header, shared tuples and variation headers.

        Returns:
            GvarTable, or None when the font is not variable
        """
        if not self.has_variations:
            return None
        return GvarTable.from_bytes(self.font.getTableData("gvar"))

    def close(self) -> None:
        """Close the font file and free resources."""
        if self._font is not None:
            self._font.close()
            self._font = None

    def __enter__(self) -> "FontReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
