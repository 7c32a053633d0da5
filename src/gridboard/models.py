from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Tuple, Union

from .geometry import Point, Polygon


Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Path:
    """Piecewise-linear curve from keyframe to 2D position.

    *keyframes* is kept sorted by keyframe.  NaN keyframes are rejected so
    the ordering is total.
    """

    keyframes: Tuple[Tuple[float, Point], ...]

    def __post_init__(self) -> None:
        frames: Dict[float, Point] = {}
        for key, (x, y) in self.keyframes:
            key = float(key)
            if math.isnan(key):
                raise ValueError("Path keyframes must not be NaN")
            frames[key] = (float(x), float(y))
        object.__setattr__(self, "keyframes", tuple(sorted(frames.items())))

    @classmethod
    def simple(cls, start: Point, end: Point) -> "Path":
        return cls(((0.0, start), (1.0, end)))

    @property
    def start(self) -> Point:
        return self.keyframes[0][1]

    @property
    def end(self) -> Point:
        return self.keyframes[-1][1]

    def sample(self, t: float) -> Point:
        """Interpolate the position at *t*, clamped to the first/last keyframe."""
        if not self.keyframes:
            raise ValueError("Cannot sample an empty path")
        keys = [k for k, _ in self.keyframes]
        if t <= keys[0]:
            return self.keyframes[0][1]
        if t >= keys[-1]:
            return self.keyframes[-1][1]
        i = bisect.bisect_right(keys, t)
        (k0, (x0, y0)), (k1, (x1, y1)) = self.keyframes[i - 1], self.keyframes[i]
        f = (t - k0) / (k1 - k0)
        return (x0 + (x1 - x0) * f, y0 + (y1 - y0) * f)


# ═══════════════════════════════════════════════════════════════════
# Colours
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PlayerColor:
    """Tint the mesh with the owning player's colour."""


@dataclass(frozen=True)
class StaticColor:
    r: float
    g: float
    b: float


BoardColor = Union[PlayerColor, StaticColor]

PLAYER_COLOR = PlayerColor()


# ═══════════════════════════════════════════════════════════════════
# Meshes
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class IndexedLineMesh:
    vertices: Tuple[Vec3, ...]
    lines: Tuple[Tuple[int, int], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertices", _vec3_tuple(self.vertices))
        object.__setattr__(
            self, "lines", tuple((int(a), int(b)) for a, b in self.lines)
        )

    def neighbors(self, v: int) -> Iterator[int]:
        """Vertices joined to *v* by a line, once per line."""
        for a, b in self.lines:
            if a == v:
                yield b
            elif b == v:
                yield a

    def index_errors(self) -> List[str]:
        n = len(self.vertices)
        return [
            f"line {i} references missing vertex {idx}"
            for i, line in enumerate(self.lines)
            for idx in line
            if not 0 <= idx < n
        ]


@dataclass(frozen=True)
class IndexedTriMesh:
    vertices: Tuple[Vec3, ...]
    triangles: Tuple[Tuple[int, int, int], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertices", _vec3_tuple(self.vertices))
        object.__setattr__(
            self, "triangles", tuple((int(a), int(b), int(c)) for a, b, c in self.triangles)
        )

    def index_errors(self) -> List[str]:
        n = len(self.vertices)
        return [
            f"triangle {i} references missing vertex {idx}"
            for i, tri in enumerate(self.triangles)
            for idx in tri
            if not 0 <= idx < n
        ]


Mesh = Union[IndexedLineMesh, IndexedTriMesh]


@dataclass(frozen=True)
class BoardMesh:
    color: BoardColor
    mesh: Mesh


# ═══════════════════════════════════════════════════════════════════
# Cells
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BoardCell:
    """One playable cell of an exported board.

    *neighbors* maps the index of every reachable cell to the path a piece
    follows to get there.
    """

    shape: Polygon
    position: Point
    neighbors: Dict[int, Path] = field(default_factory=dict)


def _vec3_tuple(vertices: Iterable[Iterable[float]]) -> Tuple[Vec3, ...]:
    out = []
    for vertex in vertices:
        x, y, z = vertex
        out.append((float(x), float(y), float(z)))
    return tuple(out)
