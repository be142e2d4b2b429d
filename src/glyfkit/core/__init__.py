"""Core codec and table algorithms for glyfkit.

This module contains:

- Binary readers for bounds-checked, big-endian access to a byte range
- Simple glyph codec (flag compression, delta-encoded coordinates)
- Composite glyph codec (component records, F2Dot14 transforms)
- Whole-record glyph codec
- Table-wide passes (composite flattening, bounds, maxp statistics)
- gvar header and tuple variation decoding

Decoding a glyph depends only on its own byte range, so glyphs may be
decoded in any order or in parallel. Table-wide passes need the whole
table and run afterwards.

Key functions:
- decode_glyph / encode_glyph: One glyph record
- decode_simple / encode_simple: Simple glyph body
- decode_components / encode_components: Composite glyph body
- compress_flags: Run-length encode simple glyph flags

Key classes:
- ByteReader: Bounds-checked view of a byte range
- GlyfTable: Glyphs indexed by glyph ID with table-wide passes
- GvarTable: Decoded gvar header, shared tuples and variation headers
- GlyfProcessor: Font-level pipeline
"""

from glyfkit.core.component_codec import decode_components, encode_components
from glyfkit.core.contour_codec import compress_flags, decode_simple, encode_simple
from glyfkit.core.glyph_codec import decode_glyph, decode_glyph_at, encode_glyph
from glyfkit.core.gvar import GlyphVariationData, GvarTable, TupleVariation, read_packed_points
from glyfkit.core.processor import GlyfProcessor, decode_glyph_task
from glyfkit.core.stream import ByteReader
from glyfkit.core.table import MAX_COMPONENT_DEPTH, GlyfTable, MaxpStatistics, glyph_ranges

__all__ = [
    # Binary access
    "ByteReader",
    # Codecs
    "compress_flags",
    "decode_components",
    "decode_glyph",
    "decode_glyph_at",
    "decode_simple",
    "encode_components",
    "encode_glyph",
    "encode_simple",
    # Table
    "MAX_COMPONENT_DEPTH",
    "GlyfTable",
    "MaxpStatistics",
    "glyph_ranges",
    # Variations
    "GlyphVariationData",
    "GvarTable",
    "TupleVariation",
    "read_packed_points",
    # Processor
    "GlyfProcessor",
    "decode_glyph_task",
]
