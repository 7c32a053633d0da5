from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Tuple

from .board import Board
from .geometry import Point
from .models import BoardCell, IndexedLineMesh, IndexedTriMesh, StaticColor


def render_png(
    board: Board,
    output_path: str | Path,
    cell_alpha: float = 0.15,
    cell_color: str = "#5aa9e6",
    player_color: str = "#2b2b2b",
    arrow_color: str = "#f58231",
    show_one_way: bool = True,
    padding: float = 0.5,
    dpi: int = 150,
) -> None:
    """Render a board to PNG: cell shapes, board meshes and one-way links.

    Requires matplotlib; imported lazily to keep core package lightweight.
    """
    try:
        import matplotlib.pyplot as plt
        from matplotlib.patches import Polygon
    except ImportError as exc:  # pragma: no cover - requires optional dep
        raise RuntimeError(
            "matplotlib is required for rendering. Install with `pip install matplotlib`."
        ) from exc

    fig, ax = plt.subplots()

    for cell in board.cells:
        _draw_cell(ax, cell, Polygon, cell_color, cell_alpha)

    for board_mesh in board.meshes:
        color = _mpl_color(board_mesh.color, player_color)
        mesh = board_mesh.mesh
        if isinstance(mesh, IndexedLineMesh):
            for a, b in mesh.lines:
                (x0, y0, _), (x1, y1, _) = mesh.vertices[a], mesh.vertices[b]
                ax.plot([x0, x1], [y0, y1], color=color, linewidth=1.5, zorder=2)
        elif isinstance(mesh, IndexedTriMesh):
            for tri in mesh.triangles:
                points = [mesh.vertices[i][:2] for i in tri]
                ax.add_patch(Polygon(points, closed=True, facecolor=color, zorder=2))

    if show_one_way:
        for a, b in one_way_links(board):
            _draw_link(ax, board.cells[a].position, board.cells[b].position, arrow_color)

    xs, ys = _extent(board)
    if xs and ys:
        ax.set_xlim(min(xs) - padding, max(xs) + padding)
        ax.set_ylim(min(ys) - padding, max(ys) + padding)
    ax.set_aspect("equal", "box")
    ax.axis("off")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=dpi, bbox_inches="tight", pad_inches=0)
    plt.close(fig)


def one_way_links(board: Board) -> List[Tuple[int, int]]:
    """Adjacencies a→b whose reverse b→a is absent."""
    return [
        (a, b)
        for a, cell in enumerate(board.cells)
        for b in sorted(cell.neighbors)
        if a not in board.cells[b].neighbors
    ]


def _mpl_color(color, player_color: str):
    if isinstance(color, StaticColor):
        return (color.r, color.g, color.b)
    return player_color


def _draw_cell(ax, cell: BoardCell, polygon_cls, color: str, alpha: float) -> None:
    points = list(cell.shape.points)
    if len(points) < 3:
        return
    ax.add_patch(polygon_cls(points, closed=True, facecolor=color, alpha=alpha))
    xs, ys = zip(*(points + [points[0]]))
    ax.plot(xs, ys, color=color, linewidth=0.8)


def _draw_link(ax, start: Point, end: Point, color: str) -> None:
    """Short arrow over the middle of the segment, offset to its right."""
    dx, dy = end[0] - start[0], end[1] - start[1]
    ox, oy = dy * 0.15, -dx * 0.15
    x0, y0 = start[0] + ox + dx * 0.35, start[1] + oy + dy * 0.35
    ax.annotate(
        "",
        xy=(x0 + dx * 0.3, y0 + dy * 0.3),
        xytext=(x0, y0),
        arrowprops={"arrowstyle": "->", "color": color},
    )


def _extent(board: Board) -> Tuple[List[float], List[float]]:
    points: List[Iterable[float]] = [p for cell in board.cells for p in cell.shape.points]
    for board_mesh in board.meshes:
        points.extend(v[:2] for v in board_mesh.mesh.vertices)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return xs, ys
