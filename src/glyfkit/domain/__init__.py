"""Domain models for glyfkit.

This module contains the in-memory representation of glyf table records.
All models are designed to be:

- Independent of the binary layout (absolute coordinates, resolved transforms)
- Serializable for inter-process communication (parallel decoding)
- Index-addressed: components refer to glyphs by position, never by object

Key classes:
- Point: An outline vertex with an on-curve flag
- Component: A placed reference to another glyph
- ComponentFlags: Bit flags of a component record
- Glyph: A simple or composite glyph record
"""

from glyfkit.domain.component import SCALE_FLAGS, Component, ComponentFlags
from glyfkit.domain.glyph import Bounds, Glyph
from glyfkit.domain.point import Contour, Point

__all__: list[str] = [
    # Flags
    "ComponentFlags",
    "SCALE_FLAGS",
    # Core types
    "Point",
    "Contour",
    "Component",
    "Glyph",
    "Bounds",
]
