"""Board synthesis — turn authored cells into a renderable, navigable board.

Usage
-----
>>> from gridboard.authoring import EdgeRegistry
>>> from gridboard.synthesis import build_board, SQUARE_SYNTHESIS
>>> from gridboard.tilings import SquareCell
>>> edges = EdgeRegistry()
>>> edges.add_one_way_edge(SquareCell(0, 0), SquareCell(1, 0))
>>> board = build_board([SquareCell(0, 0), SquareCell(1, 0)], edges, SQUARE_SYNTHESIS)

Walls are every cell side that is not a one-way edge, deduplicated by
canonical corner order.  One-way edges become arrow triangles whose tip is
pushed from the edge midpoint towards the destination cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Optional, Tuple, Type

import structlog

from .authoring import EdgeDirection, EdgeRegistry
from .board import Board
from .geometry import Point
from .models import (
    PLAYER_COLOR,
    BoardCell,
    BoardColor,
    BoardMesh,
    IndexedLineMesh,
    IndexedTriMesh,
    Path,
    Vec3,
)
from .tilings import Cell, Corner, Edge, HexCell, SquareCell, canonical_edge

logger = structlog.get_logger()


# ═══════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════


@dataclass
class SynthesisConfig:
    """Tuneable parameters for :func:`build_board`.

    Attributes
    ----------
    arrow_offset : float
        Distance of an arrow tip from its edge midpoint, as a multiple of
        the edge length.
    wall_color : BoardColor
        Colour directive of the wall line mesh.
    arrow_color : BoardColor
        Colour directive of the arrow triangle mesh.
    """

    arrow_offset: float = 0.14
    wall_color: BoardColor = PLAYER_COLOR
    arrow_color: BoardColor = PLAYER_COLOR


SQUARE_SYNTHESIS = SynthesisConfig(arrow_offset=0.14)
HEX_SYNTHESIS = SynthesisConfig(arrow_offset=0.21)

_DEFAULT_CONFIGS: Dict[Type, SynthesisConfig] = {
    SquareCell: SQUARE_SYNTHESIS,
    HexCell: HEX_SYNTHESIS,
}


def default_config(cell_type: Type) -> SynthesisConfig:
    return _DEFAULT_CONFIGS.get(cell_type, SynthesisConfig())


# ═══════════════════════════════════════════════════════════════════
# Vertex pooling
# ═══════════════════════════════════════════════════════════════════


class _VertexPool:
    """Assigns indices to vertex keys in first-seen order."""

    def __init__(self) -> None:
        self._index: Dict[Hashable, int] = {}
        self.vertices: List[Vec3] = []

    def index(self, key: Hashable, position: Point) -> int:
        found = self._index.get(key)
        if found is None:
            found = len(self.vertices)
            self._index[key] = found
            self.vertices.append((position[0], position[1], 0.0))
        return found


def arrow_tip(a: Corner, b: Corner, arrow_offset: float) -> Point:
    """Tip of the arrow on edge a→b, displaced along the left perpendicular."""
    (ax, ay), (bx, by) = a.position(), b.position()
    mx, my = (ax + bx) / 2.0, (ay + by) / 2.0
    dx, dy = bx - ax, by - ay
    return (mx - dy * arrow_offset, my + dx * arrow_offset)


# ═══════════════════════════════════════════════════════════════════
# Synthesis
# ═══════════════════════════════════════════════════════════════════


def classify_edges(
    cells: List[Cell],
    edges: EdgeRegistry,
) -> Tuple[List[Edge], List[Edge]]:
    """Split every cell side into walls and directed edges.

    Walls come back in canonical corner order.  Directed edges are oriented
    so their left side faces the destination cell.  Both lists are in
    first-seen order over *cells* and each cell's neighbours.
    """
    cell_set = set(cells)
    walls: Dict[Edge, None] = {}
    directed: Dict[Edge, None] = {}
    for cell in cells:
        for neighbor in cell.neighbors():
            # Counter-clockwise around ``cell``: its left side faces ``cell``.
            edge = cell.neighboring_edge(neighbor)
            direction = edges.edge_dir(cell, neighbor) if neighbor in cell_set else None
            if direction is EdgeDirection.A_TO_B:
                directed[(edge[1], edge[0])] = None
            elif direction is EdgeDirection.B_TO_A:
                directed[edge] = None
            else:
                walls[canonical_edge(edge)] = None
    return list(walls), list(directed)


def build_board(
    cells: Iterable[Cell],
    edges: Optional[EdgeRegistry] = None,
    config: Optional[SynthesisConfig] = None,
) -> Board:
    """Materialise a :class:`Board` from authored cells and one-way overrides.

    Cell order is preserved (duplicates dropped) and becomes the board's
    index order.  A cell reaches each authored neighbour unless the
    override between them points the other way.
    """
    cells = list(dict.fromkeys(cells))
    edges = edges if edges is not None else EdgeRegistry()
    if config is None:
        config = default_config(type(cells[0])) if cells else SynthesisConfig()

    walls, directed = classify_edges(cells, edges)

    line_pool = _VertexPool()
    lines = [
        (line_pool.index(a, a.position()), line_pool.index(b, b.position()))
        for a, b in walls
    ]
    meshes = [
        BoardMesh(config.wall_color, IndexedLineMesh(tuple(line_pool.vertices), tuple(lines)))
    ]

    if directed:
        tri_pool = _VertexPool()
        triangles = [
            (
                tri_pool.index(("corner", a), a.position()),
                tri_pool.index(("corner", b), b.position()),
                tri_pool.index(("tip", a, b), arrow_tip(a, b, config.arrow_offset)),
            )
            for a, b in directed
        ]
        meshes.append(
            BoardMesh(config.arrow_color, IndexedTriMesh(tuple(tri_pool.vertices), tuple(triangles)))
        )

    index_of = {cell: i for i, cell in enumerate(cells)}
    board_cells = []
    for cell in cells:
        position = cell.position()
        neighbors = {
            index_of[n]: Path.simple(position, n.position())
            for n in cell.neighbors()
            if n in index_of and edges.edge_dir(cell, n) is not EdgeDirection.B_TO_A
        }
        board_cells.append(BoardCell(shape=cell.shape(), position=position, neighbors=neighbors))

    logger.debug(
        "board synthesized",
        cells=len(board_cells),
        walls=len(walls),
        directed_edges=len(directed),
    )
    return Board(board_cells, meshes)
