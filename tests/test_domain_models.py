"""Tests for domain models to verify they work correctly."""

import pytest
from fontTools.misc.transform import Identity, Transform

from glyfkit.domain import Component, ComponentFlags, Glyph, Point


class TestPoint:
    """Tests for Point class."""

    def test_point_creation(self) -> None:
        """Test basic point creation."""
        p = Point(100, 200)
        assert p.x == 100
        assert p.y == 200
        assert p.on_curve is True

    def test_point_off_curve(self) -> None:
        """Test point with explicit off-curve flag."""
        p = Point(100, 200, on_curve=False)
        assert p.on_curve is False

    def test_point_to_tuple(self) -> None:
        """Test point to tuple conversion."""
        assert Point(100, 200).to_tuple() == (100, 200)

    def test_point_equality(self) -> None:
        """Points compare by value."""
        assert Point(1, 2, False) == Point(1, 2, False)
        assert Point(1, 2, False) != Point(1, 2, True)

    def test_point_is_immutable(self) -> None:
        """Points cannot be modified in place."""
        p = Point(1, 2)
        with pytest.raises(AttributeError):
            p.x = 5  # type: ignore[misc]

    def test_point_serialization(self) -> None:
        """Test point serialization and deserialization."""
        p1 = Point(-30, 169, on_curve=False)
        data = p1.to_dict()
        assert data == {"x": -30, "y": 169, "on": False}
        assert Point.from_dict(data) == p1


class TestComponent:
    """Tests for Component class."""

    def test_component_defaults(self) -> None:
        """A new component is an identity placement by offset."""
        c = Component(glyph_index=3)
        assert c.transformation == Identity
        assert c.match_points is None
        assert c.flags == ComponentFlags.ARGS_ARE_XY_VALUES
        assert c.offset == (0, 0)

    def test_uses_my_metrics(self) -> None:
        """USE_MY_METRICS is exposed as a property."""
        c = Component(
            glyph_index=3,
            flags=ComponentFlags.ARGS_ARE_XY_VALUES | ComponentFlags.USE_MY_METRICS,
        )
        assert c.uses_my_metrics
        assert not Component(glyph_index=3).uses_my_metrics

    def test_offset(self) -> None:
        """Offset is the translation part of the transform."""
        c = Component(glyph_index=7, transformation=Transform(1, 0, 0, 1, 402, 130))
        assert c.offset == (402, 130)

    def test_component_serialization(self) -> None:
        """Test component serialization and deserialization."""
        c1 = Component(
            glyph_index=7,
            transformation=Transform(0.5, 0, 0, -1, 10, -20),
            flags=ComponentFlags.ARGS_ARE_XY_VALUES | ComponentFlags.ROUND_XY_TO_GRID,
        )
        c2 = Component.from_dict(c1.to_dict())
        assert c2 == c1
        assert isinstance(c2.transformation, Transform)
        assert isinstance(c2.flags, ComponentFlags)

    def test_match_points_serialization(self) -> None:
        """Point-matched components keep their anchor pair."""
        c1 = Component(glyph_index=2, match_points=(0, 0), flags=ComponentFlags(0))
        c2 = Component.from_dict(c1.to_dict())
        assert c2.match_points == (0, 0)


class TestGlyph:
    """Tests for Glyph class."""

    @pytest.fixture
    def square(self) -> Glyph:
        return Glyph(
            contours=[[Point(0, 0), Point(0, 100), Point(100, 100), Point(100, 0)]],
        )

    def test_empty_glyph(self) -> None:
        """An empty glyph has no outline and an all-zero box."""
        glyph = Glyph.empty()
        assert glyph.is_empty()
        assert not glyph.is_composite()
        assert glyph.bounds == (0, 0, 0, 0)
        assert glyph.num_points == 0

    def test_simple_glyph(self, square: Glyph) -> None:
        """A glyph with contours is simple."""
        assert not square.is_empty()
        assert not square.is_composite()
        assert square.num_points == 4

    def test_composite_glyph(self) -> None:
        """A glyph with components is composite."""
        glyph = Glyph(components=[Component(glyph_index=1)])
        assert glyph.is_composite()
        assert not glyph.is_empty()

    def test_bounds_setter(self, square: Glyph) -> None:
        """Bounds can be assigned as a tuple."""
        square.bounds = (1, 2, 3, 4)
        assert (square.x_min, square.y_min, square.x_max, square.y_max) == (1, 2, 3, 4)

    def test_calc_outline_bounds(self) -> None:
        """Outline bounds include off-curve points."""
        glyph = Glyph(contours=[[Point(10, -5), Point(50, 80, False), Point(90, 0)]])
        assert glyph.calc_outline_bounds() == (10, -5, 90, 80)

    def test_calc_outline_bounds_empty(self) -> None:
        """Outline bounds of an empty glyph are zero."""
        assert Glyph.empty().calc_outline_bounds() == (0, 0, 0, 0)

    def test_points_order(self) -> None:
        """points() concatenates contours in order."""
        glyph = Glyph(contours=[[Point(0, 0)], [Point(1, 1), Point(2, 2)]])
        assert glyph.points() == [Point(0, 0), Point(1, 1), Point(2, 2)]

    def test_glyph_serialization(self) -> None:
        """Test glyph serialization and deserialization."""
        glyph = Glyph(
            contours=[[Point(0, 0), Point(50, 100, False), Point(100, 0)]],
            overlap=True,
            instructions=b"\xb0\x01",
            x_min=0,
            y_min=0,
            x_max=100,
            y_max=100,
        )
        data = glyph.to_dict()
        assert data["instructions"] == "b001"
        assert Glyph.from_dict(data) == glyph

    def test_composite_serialization(self) -> None:
        """Composite glyphs survive serialization."""
        glyph = Glyph(
            components=[
                Component(glyph_index=0, flags=ComponentFlags(0x26)),
                Component(glyph_index=7, transformation=Transform(1, 0, 0, 1, 402, 130)),
            ],
            x_min=5,
            x_max=751,
            y_max=915,
        )
        assert Glyph.from_dict(glyph.to_dict()) == glyph


class TestOnCurveReconstruction:
    """Tests for making implied on-curve points explicit."""

    @pytest.fixture
    def letter_o(self) -> Glyph:
        return Glyph(
            contours=[
                [
                    Point(634, 650, True),
                    Point(634, 160, False),
                    Point(484, -10, False),
                    Point(332, -10, True),
                    Point(181, -10, False),
                    Point(30, 169, False),
                    Point(30, 350, True),
                    Point(30, 531, False),
                    Point(181, 710, False),
                    Point(332, 710, True),
                ]
            ]
        )

    def test_insert_explicit_oncurves(self, letter_o: Glyph) -> None:
        """A midpoint is inserted between every two adjacent off-curve points."""
        letter_o.insert_explicit_oncurves()
        assert letter_o.contours[0] == [
            Point(634, 650, True),
            Point(634, 160, False),
            Point(559, 75, True),
            Point(484, -10, False),
            Point(332, -10, True),
            Point(181, -10, False),
            Point(105, 79, True),
            Point(30, 169, False),
            Point(30, 350, True),
            Point(30, 531, False),
            Point(105, 620, True),
            Point(181, 710, False),
            Point(332, 710, True),
        ]

    def test_insert_is_idempotent(self, letter_o: Glyph) -> None:
        """Running the insertion twice changes nothing the second time."""
        letter_o.insert_explicit_oncurves()
        once = [list(c) for c in letter_o.contours]
        letter_o.insert_explicit_oncurves()
        assert letter_o.contours == once

    def test_insert_closing_pair(self) -> None:
        """The pair formed by the last and first point is considered."""
        glyph = Glyph(
            contours=[[Point(0, 0, False), Point(100, 0, True), Point(100, 100, False)]]
        )
        glyph.insert_explicit_oncurves()
        assert glyph.contours[0] == [
            Point(0, 0, False),
            Point(100, 0, True),
            Point(100, 100, False),
            Point(50, 50, True),
        ]

    def test_insert_truncates_toward_zero(self) -> None:
        """Odd sums are truncated, not rounded."""
        glyph = Glyph(contours=[[Point(-3, 0, True), Point(0, 0, False), Point(-5, 3, False)]])
        glyph.insert_explicit_oncurves()
        assert glyph.contours[0][2] == Point(-2, 1, True)

    def test_insert_single_point_contour(self) -> None:
        """A lone off-curve point has no neighbour to pair with."""
        glyph = Glyph(contours=[[Point(5, 5, False)]])
        glyph.insert_explicit_oncurves()
        assert glyph.contours[0] == [Point(5, 5, False)]

    def test_remove_implied_oncurves(self) -> None:
        """Exact midpoints between two off-curve points are dropped."""
        glyph = Glyph(
            contours=[
                [
                    Point(0, 0, True),
                    Point(0, 100, False),
                    Point(50, 100, True),
                    Point(100, 100, False),
                    Point(100, 0, True),
                ]
            ]
        )
        glyph.remove_implied_oncurves()
        assert glyph.contours[0] == [
            Point(0, 0, True),
            Point(0, 100, False),
            Point(100, 100, False),
            Point(100, 0, True),
        ]

    def test_remove_keeps_inexact_midpoints(self) -> None:
        """A truncated midpoint is not exactly implied and is kept."""
        glyph = Glyph(
            contours=[[Point(0, 0, False), Point(50, 0, True), Point(101, 0, False), Point(0, 50, True)]]
        )
        glyph.remove_implied_oncurves()
        assert len(glyph.contours[0]) == 4
