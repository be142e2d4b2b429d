"""Outline points and contours.

This module defines the leaf geometric types of a TrueType outline:
- Point: An integer vertex with an on-curve flag
- Contour: An ordered list of points forming one closed path
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Point:
    """A vertex of a TrueType outline.

    Coordinates are absolute font units. The binary format stores deltas
    between consecutive points; those are resolved on decode.

    Attributes:
        x: X coordinate in font units
        y: Y coordinate in font units
        on_curve: True for points on the path, False for quadratic control points
    """

    x: int
    y: int
    on_curve: bool = True

    def to_tuple(self) -> tuple[int, int]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with x, y, and on fields
        """
        return {"x": self.x, "y": self.y, "on": self.on_curve}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x, y, and on fields

        Returns:
            Point instance
        """
        return cls(x=data["x"], y=data["y"], on_curve=data["on"])


Contour = list[Point]
