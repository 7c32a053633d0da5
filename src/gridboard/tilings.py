"""Square and hex tilings — cells, corners and edges computed from coordinates.

Both tilings expose the same surface:

- ``Cell.pick(position)`` — nearest cell to a world position (total).
- ``cell.position()`` — world-space centre.
- ``cell.neighbors()`` — geometric neighbours.
- ``cell.shape()`` — boundary :class:`~geometry.Polygon`, counter-clockwise.
- ``cell.corners()`` / ``cell.lines()`` — corners and edges in the same order.
- ``cell.adjacent_to(other)`` / ``cell.neighboring_edge(other)``.

Corners carry no identifiers of their own: two cells share a vertex exactly
when they compute equal corner values.  An edge is a ``(corner, corner)``
tuple oriented counter-clockwise around the cell that produced it, so the
neighbour sees the same boundary reversed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple, Type, Union

from .geometry import Point, Polygon


SQRT3 = math.sqrt(3.0)

# World units between neighbouring square cell centres.
SQUARE_SPACING = 2.0


class NotAdjacentError(ValueError):
    """Raised when an edge is requested between two non-adjacent cells."""


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def round_with_diff(value: float) -> Tuple[int, float]:
    """Round *value* and return the absolute rounding error alongside."""
    rounded = round_half_away(value)
    return rounded, abs(value - rounded)


class _CellOps:
    """Operations shared by every cell type, defined over the primitives."""

    def lines(self) -> List[Tuple]:
        corners = self.corners()
        n = len(corners)
        return [(corners[i], corners[(i + 1) % n]) for i in range(n)]

    def adjacent_to(self, other) -> bool:
        return other in self.neighbors()

    def neighboring_edge(self, other) -> Tuple:
        """Return the edge of *self* that *other* also owns, in *self*'s orientation."""
        theirs = {(b, a) for a, b in other.lines()}
        for edge in self.lines():
            if edge in theirs:
                return edge
        raise NotAdjacentError(f"{self!r} and {other!r} do not share an edge")


# ═══════════════════════════════════════════════════════════════════
# Square tiling
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True, order=True)
class SquareCorner:
    """Lattice corner at the lower-left of square cell ``(x, y)``."""

    x: int
    y: int

    def position(self) -> Point:
        return (self.x * SQUARE_SPACING - 1.0, self.y * SQUARE_SPACING - 1.0)


@dataclass(frozen=True, order=True)
class SquareCell(_CellOps):
    x: int
    y: int

    @classmethod
    def pick(cls, position: Point) -> "SquareCell":
        px, py = position
        return cls(
            round_half_away(px / SQUARE_SPACING),
            round_half_away(py / SQUARE_SPACING),
        )

    def position(self) -> Point:
        return (self.x * SQUARE_SPACING, self.y * SQUARE_SPACING)

    def neighbors(self) -> List["SquareCell"]:
        return [
            SquareCell(self.x + 1, self.y),
            SquareCell(self.x, self.y + 1),
            SquareCell(self.x - 1, self.y),
            SquareCell(self.x, self.y - 1),
        ]

    def shape(self) -> Polygon:
        cx, cy = self.position()
        offsets = [(-1.0, -1.0), (1.0, -1.0), (1.0, 1.0), (-1.0, 1.0)]
        return Polygon(tuple((cx + dx, cy + dy) for dx, dy in offsets))

    def corners(self) -> List[SquareCorner]:
        return [
            SquareCorner(self.x, self.y),
            SquareCorner(self.x + 1, self.y),
            SquareCorner(self.x + 1, self.y + 1),
            SquareCorner(self.x, self.y + 1),
        ]

    def coords(self) -> Tuple[int, int]:
        return (self.x, self.y)


# ═══════════════════════════════════════════════════════════════════
# Hex tiling (flat-top, axial coordinates)
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True, order=True)
class HexCorner:
    """Corner one unit left or right of hex ``(q, r)``'s centre.

    Every hex corner is the left or right corner of exactly one axial
    coordinate, so ``(q, r, left)`` identifies it uniquely.
    """

    q: int
    r: int
    left: bool

    def position(self) -> Point:
        cx, cy = HexCell(self.q, self.r).position()
        return (cx - 1.0, cy) if self.left else (cx + 1.0, cy)


_HEX_OFFSETS: Tuple[Point, ...] = (
    (1.0, 0.0),
    (0.5, SQRT3 / 2),
    (-0.5, SQRT3 / 2),
    (-1.0, 0.0),
    (-0.5, -SQRT3 / 2),
    (0.5, -SQRT3 / 2),
)


@dataclass(frozen=True, order=True)
class HexCell(_CellOps):
    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    @classmethod
    def pick(cls, position: Point) -> "HexCell":
        """Cube-round *position* to the nearest hex.

        The coordinate with the largest rounding error is rebuilt from the
        other two so that ``q + r + s == 0`` holds.
        """
        px, py = position
        cq = 2.0 * px / 3.0
        cr = -px / 3.0 + SQRT3 / 3.0 * py
        q, dq = round_with_diff(cq)
        r, dr = round_with_diff(cr)
        s, ds = round_with_diff(-cq - cr)
        if dq > dr and dq > ds:
            return cls(-r - s, r)
        if dr > ds:
            return cls(q, -q - s)
        return cls(q, r)

    def position(self) -> Point:
        return (
            self.q * 3.0 / 2.0,
            SQRT3 / 2.0 * self.q + SQRT3 * self.r,
        )

    def neighbors(self) -> List["HexCell"]:
        q, r = self.q, self.r
        return [
            HexCell(q - 1, r),
            HexCell(q - 1, r + 1),
            HexCell(q, r - 1),
            HexCell(q, r + 1),
            HexCell(q + 1, r - 1),
            HexCell(q + 1, r),
        ]

    def shape(self) -> Polygon:
        cx, cy = self.position()
        return Polygon(tuple((cx + dx, cy + dy) for dx, dy in _HEX_OFFSETS))

    def corners(self) -> List[HexCorner]:
        q, r = self.q, self.r
        return [
            HexCorner(q, r, False),
            HexCorner(q + 1, r, True),
            HexCorner(q - 1, r + 1, False),
            HexCorner(q, r, True),
            HexCorner(q - 1, r, False),
            HexCorner(q + 1, r - 1, True),
        ]

    def coords(self) -> Tuple[int, int]:
        return (self.q, self.r)


Cell = Union[SquareCell, HexCell]
Corner = Union[SquareCorner, HexCorner]
Edge = Tuple[Corner, Corner]

TILINGS: Dict[str, Type] = {
    "square": SquareCell,
    "hex": HexCell,
}


def tiling_name(cell_type: Type) -> str:
    """Reverse lookup of :data:`TILINGS`; raise ``KeyError`` for unknown types."""
    for name, candidate in TILINGS.items():
        if candidate is cell_type:
            return name
    raise KeyError(f"Unknown cell type {cell_type!r}")


def canonical_edge(edge: Edge) -> Edge:
    """Order an edge's corners so both orientations compare equal."""
    a, b = edge
    return (a, b) if a <= b else (b, a)
