"""The glyf table and its table-wide passes.

Composite glyphs refer to other glyphs by index, so resolving them needs
random access to the whole table. GlyfTable owns the glyph list and the
passes that cross glyph boundaries:

- flat_components / flatten_components: resolve nested composites into a
  single level of positioned components
- recalc_bounds: recompute every bounding box (flattens first)
- maxp_statistics: gather the values the maxp table needs

The passes mutate the table in place and must not run concurrently with
other mutation of the same table. Glyph indices are never changed.

Sub-composites shared by several glyphs are resolved once per pass, and
each top-level glyph may visit at most max_flat_components component
records, so the work stays bounded for any composite graph.
"""

import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from typing import NamedTuple

import structlog
from fontTools.misc.arrayTools import calcBounds, unionRect
from fontTools.misc.fixedTools import otRound

from glyfkit.config.settings import ErrorPolicy
from glyfkit.core.glyph_codec import decode_glyph_at, encode_glyph
from glyfkit.domain.component import Component, ComponentFlags
from glyfkit.domain.glyph import Bounds, Glyph
from glyfkit.exceptions import CompositeGlyphError, DecodeError

logger = structlog.get_logger(__name__)

MAX_COMPONENT_DEPTH = 64

# Components one glyph may resolve to, and component records one
# top-level glyph may visit
MAX_FLAT_COMPONENTS = 0xFFFF

NO_LOOP = sys.maxsize

GlyphRange = tuple[int, int | None]


class MaxpStatistics(NamedTuple):
    """Glyph statistics stored in the maxp table."""

    num_glyphs: int
    max_points: int
    max_contours: int
    max_composite_points: int
    max_composite_contours: int
    max_component_elements: int
    max_component_depth: int


class _Flattened(NamedTuple):
    components: list[Component]
    height: int
    loop_depth: int
    complete: bool


class _Totals(NamedTuple):
    points: int
    contours: int
    levels: int
    loop_depth: int
    complete: bool


@dataclass
class _Walk:
    """State shared by one pass over the composite graph.

    Results are memoized per glyph index only when they do not depend on
    where the glyph was reached from: no loop led above the glyph, and no
    branch was cut by the depth cap or the budget.
    """

    limit: int
    budget: int = 0
    exhausted: bool = False
    flattened: dict[int, _Flattened] = field(default_factory=dict)
    totals: dict[int, _Totals] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.reset_budget()

    def reset_budget(self) -> None:
        self.budget = self.limit
        self.exhausted = False

    def spend(self) -> bool:
        if self.budget <= 0:
            return False
        self.budget -= 1
        return True

    def warn_exhausted(self) -> None:
        if not self.exhausted:
            logger.warning("Component graph too large, truncating", limit=self.limit)
            self.exhausted = True


def _without_instructions(flags: ComponentFlags) -> ComponentFlags:
    return ComponentFlags(int(flags) & ~int(ComponentFlags.WE_HAVE_INSTRUCTIONS))


class GlyfTable:
    """Ordered collection of glyphs, indexed by glyph ID.

    Example:
        table = GlyfTable.from_bytes(glyf_data, offsets)
        table.recalc_bounds()
        data, loca = table.compile()
    """

    def __init__(
        self,
        glyphs: list[Glyph] | None = None,
        max_component_depth: int = MAX_COMPONENT_DEPTH,
        max_flat_components: int = MAX_FLAT_COMPONENTS,
    ) -> None:
        """Initialize the table.

        Args:
            glyphs: Glyphs in glyph ID order
            max_component_depth: Composite nesting depth treated as a loop
            max_flat_components: Work and output bound for resolving one glyph
        """
        self.glyphs: list[Glyph] = glyphs if glyphs is not None else []
        self.max_component_depth = max_component_depth
        self.max_flat_components = max_flat_components
        self.decode_errors: dict[int, DecodeError] = {}

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        offsets: Sequence[int | None],
        on_error: ErrorPolicy = ErrorPolicy.RAISE,
        max_component_depth: int = MAX_COMPONENT_DEPTH,
    ) -> "GlyfTable":
        """Decode a table from raw glyf data and per-glyph offsets.

        Args:
            data: Raw glyf table bytes
            offsets: One entry per glyph ID; None means the glyph has no outline
            on_error: RAISE to abort on the first malformed glyph, EMPTY to
                substitute an empty glyph and continue
            max_component_depth: Composite nesting depth treated as a loop

        Returns:
            Decoded table

        Raises:
            DecodeError: If a glyph is malformed and on_error is RAISE
        """
        ranges = [None if offset is None else (offset, None) for offset in offsets]
        return cls._decode(data, ranges, on_error, max_component_depth)

    @classmethod
    def from_loca(
        cls,
        data: bytes,
        loca: Sequence[int],
        on_error: ErrorPolicy = ErrorPolicy.RAISE,
        max_component_depth: int = MAX_COMPONENT_DEPTH,
    ) -> "GlyfTable":
        """Decode a table from raw glyf data and loca offsets.

        The loca table has one more entry than there are glyphs; glyph i
        occupies loca[i]..loca[i + 1] and has no outline when that range is
        empty.
        """
        ranges = glyph_ranges(loca)
        return cls._decode(data, ranges, on_error, max_component_depth)

    @classmethod
    def _decode(
        cls,
        data: bytes,
        ranges: Sequence[GlyphRange | None],
        on_error: ErrorPolicy,
        max_component_depth: int,
    ) -> "GlyfTable":
        table = cls(max_component_depth=max_component_depth)
        for index, glyph_range in enumerate(ranges):
            if glyph_range is None:
                table.glyphs.append(Glyph.empty())
                continue
            start, end = glyph_range
            try:
                glyph = decode_glyph_at(data, index, start, end)
            except DecodeError as e:
                if on_error == ErrorPolicy.RAISE:
                    raise
                logger.warning("Substituting empty glyph", glyph=index, error=str(e))
                table.decode_errors[index] = e
                glyph = Glyph.empty()
            table.glyphs.append(glyph)
        return table

    def __len__(self) -> int:
        return len(self.glyphs)

    def __getitem__(self, index: int) -> Glyph:
        return self.glyphs[index]

    def __iter__(self) -> Iterator[Glyph]:
        return iter(self.glyphs)

    def _lookup(self, glyph_index: int) -> Glyph | None:
        if 0 <= glyph_index < len(self.glyphs):
            return self.glyphs[glyph_index]
        logger.warning("Component references missing glyph", glyph_index=glyph_index)
        return None

    def _index_of(self, glyph: Glyph) -> int | None:
        for index, candidate in enumerate(self.glyphs):
            if candidate is glyph:
                return index
        return None

    def flat_components(
        self,
        glyph: Glyph,
        depth: int = 0,
        glyph_index: int | None = None,
    ) -> list[Component]:
        """Return the simple-glyph components a glyph ultimately places.

        Nested composites are resolved recursively. Each returned component
        refers to a simple glyph and carries the composed transformation:
        the parent's transform applied after the child's
        (``parent.transform(child)``).

        A branch nested deeper than max_component_depth, or one that leads
        back to a glyph index already being resolved, is treated as a
        reference loop: a warning is logged and the branch contributes
        nothing. At most max_flat_components components are returned.

        Args:
            glyph: Glyph whose components to resolve
            depth: Current nesting depth (0 for a top-level call)
            glyph_index: Index of the glyph in the table (looked up by
                identity if None)

        Returns:
            List of components referring only to non-composite glyphs
        """
        if glyph_index is None:
            glyph_index = self._index_of(glyph)
        path = {} if glyph_index is None else {glyph_index: depth}
        return self._flat_components(glyph, depth, path, _Walk(self.max_flat_components)).components

    def _flat_components(
        self,
        glyph: Glyph,
        depth: int,
        path: dict[int, int],
        walk: _Walk,
    ) -> _Flattened:
        if depth > self.max_component_depth:
            logger.warning(
                "Extremely deeply nested component, possible loop",
                depth=depth,
                components=[c.glyph_index for c in glyph.components],
            )
            return _Flattened([], 0, NO_LOOP, complete=False)

        flat: list[Component] = []
        height = 1
        loop_depth = NO_LOOP
        complete = True
        for component in glyph.components:
            if len(flat) >= self.max_flat_components:
                logger.warning(
                    "Too many flattened components, truncating",
                    limit=self.max_flat_components,
                    depth=depth,
                )
                break
            if not walk.spend():
                walk.warn_exhausted()
                complete = False
                break
            target_index = component.glyph_index
            target = self._lookup(target_index)
            if target is None:
                continue
            if not target.is_composite():
                flat.append(replace(component))
                continue
            if target_index in path:
                logger.warning("Component loop detected", glyph_index=target_index, depth=depth)
                loop_depth = min(loop_depth, path[target_index])
                continue

            child = walk.flattened.get(target_index)
            if child is None or depth + child.height > self.max_component_depth:
                child = self._flat_components(target, depth + 1, {**path, target_index: depth + 1}, walk)
                if child.complete and child.loop_depth > depth:
                    walk.flattened[target_index] = child
            height = max(height, child.height + 1)
            loop_depth = min(loop_depth, child.loop_depth)
            complete = complete and child.complete

            children = child.components[: self.max_flat_components - len(flat)]
            flat.extend(
                replace(
                    child_component,
                    transformation=component.transformation.transform(child_component.transformation),
                    flags=_without_instructions(child_component.flags),
                )
                for child_component in children
            )
        return _Flattened(flat, height, loop_depth, complete)

    def flatten_components(self) -> list[int]:
        """Replace nested composites with a single level of components.

        Glyphs whose flattened list equals their current list are left
        untouched. A glyph that carried an instruction block keeps it
        announced on its new last component.

        Returns:
            Indices of the glyphs that changed
        """
        walk = _Walk(self.max_flat_components)
        changed: list[tuple[int, list[Component]]] = []
        for index, glyph in enumerate(self.glyphs):
            if not glyph.is_composite():
                continue
            walk.reset_budget()
            flat = self._flat_components(glyph, 0, {index: 0}, walk).components
            if flat != glyph.components:
                changed.append((index, flat))

        for index, flat in changed:
            glyph = self.glyphs[index]
            had_instructions = bool(glyph.components[-1].flags & ComponentFlags.WE_HAVE_INSTRUCTIONS)
            for component in flat:
                component.flags = _without_instructions(component.flags)
            if had_instructions and flat:
                flat[-1].flags |= ComponentFlags.WE_HAVE_INSTRUCTIONS
            glyph.components = flat
        return [index for index, _ in changed]

    def recalc_bounds(self) -> None:
        """Recalculate the bounding box of every glyph.

        Composites are flattened first, then simple glyphs get the tight box
        of their points, then each composite gets either the box of its
        first USE_MY_METRICS component's glyph, copied verbatim, or the
        union of its components' boxes each transformed by the component.
        """
        self.flatten_components()

        for glyph in self.glyphs:
            if not glyph.is_composite():
                glyph.bounds = glyph.calc_outline_bounds()

        boxes = [glyph.bounds for glyph in self.glyphs]
        for index, glyph in enumerate(self.glyphs):
            if glyph.is_composite():
                glyph.bounds = self.composite_bounds(glyph, boxes, glyph_index=index)

    def composite_bounds(
        self,
        glyph: Glyph,
        boxes: Sequence[Bounds] | None = None,
        glyph_index: int = -1,
    ) -> Bounds:
        """Compute the bounding box of a single-level composite glyph.

        Args:
            glyph: Composite glyph whose components refer to simple glyphs
            boxes: Box of every glyph by index (current glyph boxes if None)
            glyph_index: Index of the glyph, used in error messages

        Returns:
            (x_min, y_min, x_max, y_max)

        Raises:
            CompositeGlyphError: If the glyph has no components
        """
        if not glyph.components:
            raise CompositeGlyphError(glyph_index, "composite glyph declares zero components")
        if boxes is None:
            boxes = [g.bounds for g in self.glyphs]

        for component in glyph.components:
            if component.uses_my_metrics and 0 <= component.glyph_index < len(boxes):
                return boxes[component.glyph_index]

        union = None
        for component in glyph.components:
            if not 0 <= component.glyph_index < len(boxes):
                continue
            x_min, y_min, x_max, y_max = boxes[component.glyph_index]
            corners = [(x_min, y_min), (x_min, y_max), (x_max, y_min), (x_max, y_max)]
            rect = calcBounds(component.transformation.transformPoints(corners))
            union = rect if union is None else unionRect(union, rect)

        if union is None:
            raise CompositeGlyphError(glyph_index, "no component refers to an existing glyph")
        return tuple(otRound(value) for value in union)

    def maxp_statistics(self) -> MaxpStatistics:
        """Gather statistics for the maxp table.

        Composite statistics walk the composite graph as it currently is, so
        call this before flatten_components to report the source font's
        true nesting depth.

        Returns:
            MaxpStatistics, which also unpacks as the plain 7-tuple
        """
        max_points = max((g.num_points for g in self.glyphs), default=0)
        max_contours = max((len(g.contours) for g in self.glyphs), default=0)
        max_component_elements = max((len(g.components) for g in self.glyphs), default=0)

        max_composite_points = max_composite_contours = max_component_depth = 0
        walk = _Walk(self.max_flat_components)
        for index, glyph in enumerate(self.glyphs):
            if not glyph.is_composite():
                continue
            walk.reset_budget()
            totals = self._composite_totals(glyph, 1, {index: 1}, walk)
            max_composite_points = max(max_composite_points, totals.points)
            max_composite_contours = max(max_composite_contours, totals.contours)
            max_component_depth = max(max_component_depth, totals.levels)

        return MaxpStatistics(
            num_glyphs=len(self.glyphs),
            max_points=max_points,
            max_contours=max_contours,
            max_composite_points=max_composite_points,
            max_composite_contours=max_composite_contours,
            max_component_elements=max_component_elements,
            max_component_depth=max_component_depth,
        )

    def _composite_totals(
        self,
        glyph: Glyph,
        depth: int,
        path: dict[int, int],
        walk: _Walk,
    ) -> _Totals:
        points = contours = 0
        levels = 1
        loop_depth = NO_LOOP
        complete = True
        for component in glyph.components:
            if not walk.spend():
                walk.warn_exhausted()
                complete = False
                break
            target_index = component.glyph_index
            target = self._lookup(target_index)
            if target is None:
                continue
            if not target.is_composite():
                points += target.num_points
                contours += len(target.contours)
                continue
            if depth >= self.max_component_depth or target_index in path:
                logger.warning("Component loop detected", glyph_index=target_index, depth=depth)
                if target_index in path:
                    loop_depth = min(loop_depth, path[target_index])
                else:
                    complete = False
                continue

            child = walk.totals.get(target_index)
            if child is None or depth + child.levels > self.max_component_depth:
                child = self._composite_totals(target, depth + 1, {**path, target_index: depth + 1}, walk)
                if child.complete and child.loop_depth > depth:
                    walk.totals[target_index] = child
            points += child.points
            contours += child.contours
            levels = max(levels, child.levels + 1)
            loop_depth = min(loop_depth, child.loop_depth)
            complete = complete and child.complete
        return _Totals(points, contours, levels, loop_depth, complete)

    def compile(self) -> tuple[bytes, list[int]]:
        """Encode every glyph into glyf data and matching loca offsets.

        Records are padded to a multiple of four bytes. Empty glyphs take no
        space, so their loca entry equals the next one.

        Returns:
            Tuple of (glyf bytes, loca offsets with len(self) + 1 entries)
        """
        data = bytearray()
        loca = [0]
        for glyph in self.glyphs:
            record = encode_glyph(glyph)
            data += record
            data += b"\0" * (-len(record) % 4)
            loca.append(len(data))
        return bytes(data), loca


def glyph_ranges(loca: Sequence[int]) -> list[GlyphRange | None]:
    """Turn loca offsets into per-glyph (start, end) ranges.

    Args:
        loca: numGlyphs + 1 ascending offsets

    Returns:
        One entry per glyph; None where the glyph has no data
    """
    ranges: list[GlyphRange | None] = []
    for start, end in zip(loca, loca[1:]):
        ranges.append((start, end) if end > start else None)
    return ranges
