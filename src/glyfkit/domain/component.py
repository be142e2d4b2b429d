"""Composite glyph components.

A composite glyph is built from components, each of which places another
glyph (by index) under an affine transformation. Components only refer to
glyphs by index and never hold glyph data, so self-referencing and
mutually-referencing composites can be represented without cycles in the
object graph.
"""

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any

from fontTools.misc.transform import Identity, Transform


class ComponentFlags(IntFlag):
    """Flag bits of a composite glyph component record.

    WE_HAVE_A_SCALE, WE_HAVE_AN_X_AND_Y_SCALE and WE_HAVE_A_TWO_BY_TWO are
    alternative encodings of the same transform and at most one of them is
    read per component.
    """

    ARG_1_AND_2_ARE_WORDS = 0x0001
    ARGS_ARE_XY_VALUES = 0x0002
    ROUND_XY_TO_GRID = 0x0004
    WE_HAVE_A_SCALE = 0x0008
    MORE_COMPONENTS = 0x0020
    WE_HAVE_AN_X_AND_Y_SCALE = 0x0040
    WE_HAVE_A_TWO_BY_TWO = 0x0080
    WE_HAVE_INSTRUCTIONS = 0x0100
    USE_MY_METRICS = 0x0200
    OVERLAP_COMPOUND = 0x0400
    SCALED_COMPONENT_OFFSET = 0x0800
    UNSCALED_COMPONENT_OFFSET = 0x1000


SCALE_FLAGS = (
    ComponentFlags.WE_HAVE_A_SCALE
    | ComponentFlags.WE_HAVE_AN_X_AND_Y_SCALE
    | ComponentFlags.WE_HAVE_A_TWO_BY_TWO
)


@dataclass
class Component:
    """One placed reference inside a composite glyph.

    Attributes:
        glyph_index: Index of the referenced glyph in the glyf table
        transformation: Affine transform (xx, xy, yx, yy, dx, dy)
        match_points: (parent point, child point) anchor pair when the
            component is positioned by point matching instead of an offset
        flags: Component flag bits as read from or written to the font
    """

    glyph_index: int
    transformation: Transform = field(default=Identity)
    match_points: tuple[int, int] | None = None
    flags: ComponentFlags = ComponentFlags.ARGS_ARE_XY_VALUES

    @property
    def offset(self) -> tuple[float, float]:
        """Translation part of the transformation."""
        return (self.transformation.dx, self.transformation.dy)

    @property
    def uses_my_metrics(self) -> bool:
        """Whether the parent glyph takes its metrics from this component."""
        return bool(self.flags & ComponentFlags.USE_MY_METRICS)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "glyph": self.glyph_index,
            "transform": list(self.transformation),
            "match": list(self.match_points) if self.match_points else None,
            "flags": int(self.flags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Component":
        """Deserialize from dictionary."""
        match = data.get("match")
        return cls(
            glyph_index=data["glyph"],
            transformation=Transform(*data["transform"]),
            match_points=(match[0], match[1]) if match else None,
            flags=ComponentFlags(data["flags"]),
        )
