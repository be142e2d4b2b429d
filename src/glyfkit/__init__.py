"""glyfkit - Decode, edit and re-encode TrueType glyph outlines.

glyfkit reads the ``glyf`` table of a TrueType font into plain Python
objects (points, contours, components), offers table-wide passes such as
composite flattening and bounding-box recalculation, and writes the table
back byte-for-byte.

Example:
    $ glyfkit flatten MyFont.ttf

This will create MyFont-Flat.ttf with every composite glyph reduced to a
single level of positioned components and fresh bounding boxes.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
