"""Font I/O layer for glyfkit.

This module handles reading and writing font files using fonttools.
fontTools provides the sfnt container; the glyf table bytes are decoded
and encoded by glyfkit itself.

Key responsibilities:
- Load TrueType fonts
- Extract raw glyf, loca and gvar data
- Install a re-encoded glyf table with consistent loca, head and maxp

Key classes:
- FontReader: Load fonts and decode their glyf table
- FontWriter: Save fonts with a replaced glyf table
"""

from glyfkit.io.reader import FontReader
from glyfkit.io.writer import FontWriter, pack_loca

__all__ = [
    "FontReader",
    "FontWriter",
    "pack_loca",
]
