"""Polygon geometry helpers used across the package."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple


Point = Tuple[float, float]


def perp_dot(a: Point, b: Point) -> float:
    """2D cross product ``a.x * b.y - a.y * b.x``."""
    return a[0] * b[1] - a[1] * b[0]


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.dist(a, b)


def segment_ray_intersection(
    start: Point,
    end: Point,
    origin: Point,
    direction: Point,
) -> Optional[Point]:
    """Intersection of segment *start*–*end* with a ray, or ``None``.

    Solves ``start + t·(end - start) = origin + u·direction`` and accepts
    ``u >= 0`` and ``0 <= t <= 1``.  Parallel segments never intersect.
    """
    ab = (end[0] - start[0], end[1] - start[1])
    denom_t = perp_dot(ab, direction)
    denom_u = perp_dot(direction, ab)
    if denom_t == 0.0 or denom_u == 0.0:
        return None
    t = perp_dot((origin[0] - start[0], origin[1] - start[1]), direction) / denom_t
    u = perp_dot((start[0] - origin[0], start[1] - origin[1]), ab) / denom_u
    if u >= 0.0 and 0.0 <= t <= 1.0:
        return (start[0] + ab[0] * t, start[1] + ab[1] * t)
    return None


@dataclass(frozen=True)
class Polygon:
    """Closed ring of 2D points; the last point connects back to the first."""

    points: Tuple[Point, ...]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "points", tuple((float(x), float(y)) for x, y in self.points)
        )

    def __len__(self) -> int:
        return len(self.points)

    def segments(self) -> Iterator[Tuple[Point, Point]]:
        n = len(self.points)
        for i in range(n):
            yield self.points[i], self.points[(i + 1) % n]

    def contains(self, point: Point) -> bool:
        """Even-odd test with a ray cast towards +X.

        A side only counts when it straddles the ray's line half-open
        (one end strictly above, the other at or below), so a ray through a
        shared vertex is counted once.  Points on the boundary give an
        unspecified answer.
        """
        y = point[1]
        hits = sum(
            1
            for start, end in self.segments()
            if (start[1] > y) != (end[1] > y)
            and segment_ray_intersection(start, end, point, (1.0, 0.0)) is not None
        )
        return hits % 2 == 1

    def centroid(self) -> Point:
        """Unweighted mean of the points."""
        n = len(self.points)
        if n == 0:
            return (0.0, 0.0)
        return (
            sum(x for x, _ in self.points) / n,
            sum(y for _, y in self.points) / n,
        )

    def perimeter(self) -> float:
        return sum(distance(a, b) for a, b in self.segments())

    def signed_area(self) -> float:
        """Shoelace area; positive when wound counter-clockwise."""
        return sum(perp_dot(a, b) for a, b in self.segments()) / 2.0

    def translated(self, dx: float, dy: float) -> "Polygon":
        return Polygon(tuple((x + dx, y + dy) for x, y in self.points))
