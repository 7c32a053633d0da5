"""Reconstruct board cells from an unstructured line mesh.

Each directed line is followed by always turning as far left as possible,
which traces the face lying to the left of that line.  Faces found from
different starting lines are deduplicated by rotating their vertex loop to
start at the smallest index.  The outer boundary of the drawing is traced
as one more (clockwise) loop, with the largest perimeter; it is dropped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import structlog

from .geometry import Point, Polygon, distance, perp_dot
from .models import BoardCell, IndexedLineMesh, Path, Vec3

logger = structlog.get_logger()


@dataclass(frozen=True)
class Loop:
    """A closed vertex cycle, rotated to begin at its smallest index."""

    vertices: Tuple[int, ...]

    @classmethod
    def canonical(cls, vertices: Sequence[int]) -> "Loop":
        vertices = list(vertices)
        start = vertices.index(min(vertices))
        return cls(tuple(vertices[start:] + vertices[:start]))

    def __len__(self) -> int:
        return len(self.vertices)

    def directed_edges(self) -> List[Tuple[int, int]]:
        n = len(self.vertices)
        return [(self.vertices[i], self.vertices[(i + 1) % n]) for i in range(n)]

    def edges(self) -> Set[Tuple[int, int]]:
        """Undirected edges as ``(low, high)`` index pairs."""
        return {(min(a, b), max(a, b)) for a, b in self.directed_edges()}

    def perimeter(self, vertices: Sequence[Vec3]) -> float:
        return sum(distance(vertices[a], vertices[b]) for a, b in self.directed_edges())

    def polygon(self, vertices: Sequence[Vec3]) -> Polygon:
        return Polygon(tuple((vertices[v][0], vertices[v][1]) for v in self.vertices))


def _xy(vertex: Vec3) -> Point:
    return (vertex[0], vertex[1])


def _turn_angle(incoming: Point, outgoing: Point) -> float:
    """Signed angle from *incoming* to *outgoing*, positive counter-clockwise."""
    dot = incoming[0] * outgoing[0] + incoming[1] * outgoing[1]
    return math.atan2(perp_dot(incoming, outgoing), dot)


def trace_loop(mesh: IndexedLineMesh, start: int, first: int) -> Optional[Loop]:
    """Walk from the directed line *start*→*first*, turning hardest left.

    Returns ``None`` when the walk revisits a vertex before getting back to
    *start*, or reaches a vertex with no way on.
    """
    vertices = mesh.vertices
    current: List[int] = []
    seen: Set[int] = set()
    a, b = start, first
    while True:
        if a in seen:
            return None
        seen.add(a)
        current.append(a)
        if b == start:
            return Loop.canonical(current)
        ax, ay = _xy(vertices[a])
        bx, by = _xy(vertices[b])
        incoming = (bx - ax, by - ay)
        candidates = [c for c in mesh.neighbors(b) if c != a]
        if not candidates:
            return None
        c = max(
            candidates,
            key=lambda x: _turn_angle(incoming, (vertices[x][0] - bx, vertices[x][1] - by)),
        )
        a, b = b, c


def find_loops(mesh: IndexedLineMesh) -> List[Loop]:
    """Every distinct closed loop reachable from some directed line, sorted."""
    found: Dict[Loop, None] = {}
    consumed: Set[Tuple[int, int]] = set()
    for start in range(len(mesh.vertices)):
        for first in mesh.neighbors(start):
            if (start, first) in consumed:
                continue
            loop = trace_loop(mesh, start, first)
            if loop is None or len(loop) < 3:
                continue
            consumed.update(loop.directed_edges())
            found[loop] = None
    return sorted(found, key=lambda loop: loop.vertices)


def outer_loop(loops: Iterable[Loop], vertices: Sequence[Vec3]) -> Optional[Loop]:
    """The loop with the greatest perimeter, preferring a clockwise one on ties."""
    loops = list(loops)
    if not loops:
        return None
    perimeters = [loop.perimeter(vertices) for loop in loops]
    longest = max(perimeters)
    tied = [
        loop
        for loop, perimeter in zip(loops, perimeters)
        if math.isclose(perimeter, longest, rel_tol=1e-9, abs_tol=1e-12)
    ]
    for loop in tied:
        if loop.polygon(vertices).signed_area() < 0:
            return loop
    return tied[0]


def extract_cells(mesh: IndexedLineMesh) -> List[BoardCell]:
    """Turn the faces of *mesh* into board cells with shared-edge adjacency.

    The outer boundary is discarded whenever at least two loops are found,
    so a lone outline (traced once per winding) yields a single cell.
    """
    loops = find_loops(mesh)
    discarded = outer_loop(loops, mesh.vertices) if len(loops) >= 2 else None
    if discarded is not None:
        loops = [loop for loop in loops if loop != discarded]

    shapes = [loop.polygon(mesh.vertices) for loop in loops]
    positions = [shape.centroid() for shape in shapes]
    edge_sets = [loop.edges() for loop in loops]

    cells: List[BoardCell] = []
    for i, (shape, position) in enumerate(zip(shapes, positions)):
        neighbors = {
            j: Path.simple(position, positions[j])
            for j, other in enumerate(edge_sets)
            if edge_sets[i] & other and edge_sets[i] != other
        }
        cells.append(BoardCell(shape=shape, position=position, neighbors=neighbors))

    logger.debug(
        "loops extracted",
        cells=len(cells),
        discarded_perimeter=discarded.perimeter(mesh.vertices) if discarded else None,
    )
    return cells
