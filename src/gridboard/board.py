from __future__ import annotations

import json
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from .geometry import Point, Polygon
from .models import (
    PLAYER_COLOR,
    BoardCell,
    BoardColor,
    BoardMesh,
    IndexedLineMesh,
    IndexedTriMesh,
    Mesh,
    Path,
    StaticColor,
)


class BoardDecodeError(ValueError):
    """Raised when a board payload cannot be decoded."""


class Board:
    """An exported board: ordered cells plus decorative meshes.

    Neighbour keys in every cell are indices into :attr:`cells`.  Editing
    helpers return a new board and leave this one untouched.
    """

    def __init__(
        self,
        cells: Iterable[BoardCell] = (),
        meshes: Iterable[BoardMesh] = (),
    ) -> None:
        self.cells: List[BoardCell] = list(cells)
        self.meshes: List[BoardMesh] = list(meshes)

    def __repr__(self) -> str:
        return f"Board(cells={len(self.cells)}, meshes={len(self.meshes)})"

    # ── Queries ─────────────────────────────────────────────────────

    def pick(self, position: Point) -> Optional[int]:
        """Index of the first cell whose shape contains *position*."""
        for index, cell in enumerate(self.cells):
            if cell.shape.contains(position):
                return index
        return None

    def capacity(self) -> int:
        """Sum over cells of one less than the neighbour count (floored at 0)."""
        return sum(max(len(cell.neighbors), 1) - 1 for cell in self.cells)

    def validate(self) -> List[str]:
        errors: List[str] = []
        n = len(self.cells)
        for index, cell in enumerate(self.cells):
            if len(cell.shape) < 3:
                errors.append(f"Cell {index} shape has fewer than 3 points")
            for neighbor in cell.neighbors:
                if neighbor == index:
                    errors.append(f"Cell {index} is its own neighbor")
                elif not 0 <= neighbor < n:
                    errors.append(f"Cell {index} references missing cell {neighbor}")
        for index, board_mesh in enumerate(self.meshes):
            for message in board_mesh.mesh.index_errors():
                errors.append(f"Mesh {index} {message}")
        return errors

    # ── Editing ─────────────────────────────────────────────────────

    def toggle_neighbor(self, a: int, b: int) -> "Board":
        """Add the a→b adjacency with a straight path, or remove it if present."""
        for index in (a, b):
            if not 0 <= index < len(self.cells):
                raise IndexError(f"No cell at index {index}")
        if a == b:
            return Board(self.cells, self.meshes)
        cells = list(self.cells)
        neighbors = dict(cells[a].neighbors)
        if b in neighbors:
            del neighbors[b]
        else:
            neighbors[b] = Path.simple(cells[a].position, cells[b].position)
        cells[a] = replace(cells[a], neighbors=neighbors)
        return Board(cells, self.meshes)

    def remove_cell(self, index: int) -> "Board":
        """Drop cell *index* and shift every neighbour index above it down by one."""
        if not 0 <= index < len(self.cells):
            raise IndexError(f"No cell at index {index}")
        cells = []
        for i, cell in enumerate(self.cells):
            if i == index:
                continue
            neighbors = {
                (n - 1 if n > index else n): path
                for n, path in cell.neighbors.items()
                if n != index
            }
            cells.append(replace(cell, neighbors=neighbors))
        return Board(cells, self.meshes)

    # ── Serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "cells": [_cell_to_dict(cell) for cell in self.cells],
            "meshes": [
                {"color": _color_to_dict(m.color), "mesh": _mesh_to_dict(m.mesh)}
                for m in self.meshes
            ],
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "Board":
        try:
            cells = [_cell_from_dict(cell) for cell in payload["cells"]]
            meshes = [
                BoardMesh(_color_from_dict(m["color"]), _mesh_from_dict(m["mesh"]))
                for m in payload["meshes"]
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise BoardDecodeError(f"Malformed board payload: {exc!r}") from exc
        return cls(cells, meshes)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    @classmethod
    def from_json(cls, json_data: str) -> "Board":
        try:
            payload = json.loads(json_data)
        except json.JSONDecodeError as exc:
            raise BoardDecodeError(f"Invalid board JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise BoardDecodeError("Board JSON must be an object")
        return cls.from_dict(payload)


# ═══════════════════════════════════════════════════════════════════
# Payload helpers
# ═══════════════════════════════════════════════════════════════════


def _path_to_dict(path: Path) -> Dict[str, list]:
    return {repr(key): [x, y] for key, (x, y) in path.keyframes}


def _path_from_dict(payload: Dict[str, Any]) -> Path:
    return Path(tuple((float(key), tuple(point)) for key, point in payload.items()))


def _cell_to_dict(cell: BoardCell) -> dict:
    return {
        "neighbors": {str(n): _path_to_dict(p) for n, p in cell.neighbors.items()},
        "shape": {"points": [[x, y] for x, y in cell.shape.points]},
        "position": [cell.position[0], cell.position[1]],
    }


def _cell_from_dict(payload: dict) -> BoardCell:
    x, y = payload["position"]
    return BoardCell(
        shape=Polygon(tuple(tuple(p) for p in payload["shape"]["points"])),
        position=(float(x), float(y)),
        neighbors={
            int(n): _path_from_dict(p) for n, p in payload["neighbors"].items()
        },
    )


def _color_to_dict(color: BoardColor) -> Any:
    if isinstance(color, StaticColor):
        return {"StaticColor": [color.r, color.g, color.b]}
    return "PlayerColor"


def _color_from_dict(payload: Any) -> BoardColor:
    if payload == "PlayerColor":
        return PLAYER_COLOR
    if isinstance(payload, dict) and set(payload) == {"StaticColor"}:
        r, g, b = payload["StaticColor"]
        return StaticColor(float(r), float(g), float(b))
    raise ValueError(f"Unknown board color {payload!r}")


def _mesh_to_dict(mesh: Mesh) -> dict:
    vertices = [list(v) for v in mesh.vertices]
    if isinstance(mesh, IndexedLineMesh):
        return {
            "IndexedLineMesh": {
                "vertices": vertices,
                "lines": [list(line) for line in mesh.lines],
            }
        }
    return {
        "IndexedTriMesh": {
            "vertices": vertices,
            "triangles": [list(tri) for tri in mesh.triangles],
        }
    }


def _mesh_from_dict(payload: dict) -> Mesh:
    if not isinstance(payload, dict) or len(payload) != 1:
        raise ValueError(f"Mesh must be a single-key object, got {payload!r}")
    (kind, body), = payload.items()
    if kind == "IndexedLineMesh":
        return IndexedLineMesh(tuple(body["vertices"]), tuple(body["lines"]))
    if kind == "IndexedTriMesh":
        return IndexedTriMesh(tuple(body["vertices"]), tuple(body["triangles"]))
    raise ValueError(f"Unknown mesh kind {kind!r}")


def validate_board_payload(payload: Dict[str, Any]) -> List[str]:
    """Validate a raw board payload's structure.

    Returns a list of error messages (empty = valid).

    This is a lightweight structural check; use
    ``schemas/board.schema.json`` for formal validation with ``jsonschema``.
    """
    errors: List[str] = []
    if not isinstance(payload, dict):
        return ["Board payload must be an object"]

    for key in ("cells", "meshes"):
        if key not in payload:
            errors.append(f"Missing top-level key: {key}")

    cells = payload.get("cells", [])
    if not isinstance(cells, list):
        errors.append("'cells' must be a list")
        cells = []
    for i, cell in enumerate(cells):
        if not isinstance(cell, dict):
            errors.append(f"Cell {i}: must be an object")
            continue
        for key in ("neighbors", "shape", "position"):
            if key not in cell:
                errors.append(f"Cell {i}: missing '{key}'")
        position = cell.get("position")
        if position is not None and (not isinstance(position, list) or len(position) != 2):
            errors.append(f"Cell {i}: 'position' must be [x, y]")
        shape = cell.get("shape")
        if shape is not None and not (isinstance(shape, dict) and isinstance(shape.get("points"), list)):
            errors.append(f"Cell {i}: 'shape' must be {{'points': [...]}}")
        neighbors = cell.get("neighbors", {})
        if not isinstance(neighbors, dict):
            errors.append(f"Cell {i}: 'neighbors' must be an object")
            continue
        for key in neighbors:
            if not key.isdigit():
                errors.append(f"Cell {i}: neighbor key {key!r} is not an index")
            elif int(key) >= len(cells):
                errors.append(f"Cell {i}: neighbor {key} out of range")

    meshes = payload.get("meshes", [])
    if not isinstance(meshes, list):
        errors.append("'meshes' must be a list")
        meshes = []
    for i, entry in enumerate(meshes):
        if not isinstance(entry, dict) or "color" not in entry or "mesh" not in entry:
            errors.append(f"Mesh {i}: must have 'color' and 'mesh'")
            continue
        mesh = entry["mesh"]
        if not isinstance(mesh, dict) or set(mesh) not in ({"IndexedLineMesh"}, {"IndexedTriMesh"}):
            errors.append(f"Mesh {i}: unknown mesh kind")

    return errors
