"""Glyph records of the glyf table.

A glyph is either a simple outline (a list of contours) or a composite
(a list of components referring to other glyphs). A glyph with neither is
a valid empty glyph, e.g. the space character.
"""

from dataclasses import dataclass, field
from typing import Any

from fontTools.misc.arrayTools import calcIntBounds

from glyfkit.domain.component import Component
from glyfkit.domain.point import Contour, Point

Bounds = tuple[int, int, int, int]


def _midpoint(a: Point, b: Point) -> Point:
    return Point(int((a.x + b.x) / 2), int((a.y + b.y) / 2), on_curve=True)


@dataclass
class Glyph:
    """A single glyph record.

    Attributes:
        contours: Outline contours (simple glyphs only)
        components: Component references (composite glyphs only)
        overlap: Whether the glyph is flagged as having overlapping contours
        instructions: Raw hinting instruction bytes, passed through untouched
        x_min: Bounding box minimum x
        y_min: Bounding box minimum y
        x_max: Bounding box maximum x
        y_max: Bounding box maximum y
    """

    contours: list[Contour] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)
    overlap: bool = False
    instructions: bytes = b""
    x_min: int = 0
    y_min: int = 0
    x_max: int = 0
    y_max: int = 0

    @classmethod
    def empty(cls) -> "Glyph":
        """Create a glyph with no outline data and an all-zero box."""
        return cls()

    def is_composite(self) -> bool:
        """Check if glyph is made of component references."""
        return len(self.components) > 0

    def is_empty(self) -> bool:
        """Check if glyph has neither contours nor components."""
        return not self.contours and not self.components

    @property
    def num_points(self) -> int:
        """Total number of points across all contours."""
        return sum(len(contour) for contour in self.contours)

    @property
    def bounds(self) -> Bounds:
        """Bounding box as (x_min, y_min, x_max, y_max)."""
        return (self.x_min, self.y_min, self.x_max, self.y_max)

    @bounds.setter
    def bounds(self, value: Bounds) -> None:
        self.x_min, self.y_min, self.x_max, self.y_max = value

    def points(self) -> list[Point]:
        """All points of all contours in stream order."""
        return [point for contour in self.contours for point in contour]

    def calc_outline_bounds(self) -> Bounds:
        """Compute the tight integer box of the outline points.

        Returns:
            (x_min, y_min, x_max, y_max), all zero when there are no points
        """
        return calcIntBounds([point.to_tuple() for point in self.points()])

    def insert_explicit_oncurves(self) -> None:
        """Make implied on-curve points explicit.

        TrueType allows two consecutive off-curve points, implying an
        on-curve point halfway between them. This inserts that point
        wherever two adjacent points of a contour (including the closing
        pair, last to first) are both off-curve. Coordinates of the inserted
        point are truncated toward zero. Running this twice changes nothing.
        """
        self.contours = [self._expand_contour(contour) for contour in self.contours]

    @staticmethod
    def _expand_contour(contour: Contour) -> Contour:
        count = len(contour)
        expanded: Contour = []
        for i, point in enumerate(contour):
            expanded.append(point)
            following = contour[(i + 1) % count]
            if count > 1 and not point.on_curve and not following.on_curve:
                expanded.append(_midpoint(point, following))
        return expanded

    def remove_implied_oncurves(self) -> None:
        """Drop on-curve points that are exactly implied by their neighbours.

        An on-curve point whose two neighbours are off-curve and which sits
        at their exact midpoint carries no information and can be omitted
        from the stored outline.
        """
        self.contours = [self._compact_contour(contour) for contour in self.contours]

    @staticmethod
    def _compact_contour(contour: Contour) -> Contour:
        count = len(contour)
        if count < 3:
            return list(contour)
        kept: Contour = []
        for i, point in enumerate(contour):
            before = contour[i - 1]
            after = contour[(i + 1) % count]
            implied = (
                point.on_curve
                and not before.on_curve
                and not after.on_curve
                and before.x + after.x == 2 * point.x
                and before.y + after.y == 2 * point.y
            )
            if not implied:
                kept.append(point)
        return kept

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the glyph
        """
        return {
            "contours": [[p.to_dict() for p in contour] for contour in self.contours],
            "components": [c.to_dict() for c in self.components],
            "overlap": self.overlap,
            "instructions": self.instructions.hex(),
            "bounds": list(self.bounds),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Glyph":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a glyph

        Returns:
            Glyph instance
        """
        x_min, y_min, x_max, y_max = data.get("bounds", (0, 0, 0, 0))
        return cls(
            contours=[[Point.from_dict(p) for p in contour] for contour in data["contours"]],
            components=[Component.from_dict(c) for c in data["components"]],
            overlap=data.get("overlap", False),
            instructions=bytes.fromhex(data.get("instructions", "")),
            x_min=x_min,
            y_min=y_min,
            x_max=x_max,
            y_max=y_max,
        )
