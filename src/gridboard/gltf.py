"""Binary glTF (GLB) import of line and triangle primitives.

Only the parts of glTF 2.0 needed for board reconstruction are read: the
JSON chunk, the embedded BIN chunk, and primitives of mode ``LINES`` or
``TRIANGLES`` with ``unsigned short`` indices and ``float`` VEC3 positions.

Usage
-----
>>> from gridboard.gltf import import_gltf
>>> result = import_gltf("board.glb")
>>> boards = result.to_boards()

A primitive that cannot be read fails on its own: the error is logged,
recorded in :attr:`ImportResult.failures`, and the rest of the file is
still imported.  Point primitives are skipped with a warning.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import structlog

from .board import Board
from .mesh_import import extract_cells
from .models import (
    PLAYER_COLOR,
    BoardCell,
    BoardColor,
    BoardMesh,
    IndexedLineMesh,
    IndexedTriMesh,
    Mesh,
)

logger = structlog.get_logger()

PathLike = Union[str, Path]

GLB_MAGIC = 0x46546C67  # b"glTF"
CHUNK_JSON = 0x4E4F534A  # b"JSON"
CHUNK_BIN = 0x004E4942  # b"BIN\0"

MODE_POINTS = 0
MODE_LINES = 1
MODE_LINE_LOOP = 2
MODE_LINE_STRIP = 3
MODE_TRIANGLES = 4
MODE_TRIANGLE_STRIP = 5
MODE_TRIANGLE_FAN = 6

MODE_NAMES = {
    MODE_POINTS: "POINTS",
    MODE_LINES: "LINES",
    MODE_LINE_LOOP: "LINE_LOOP",
    MODE_LINE_STRIP: "LINE_STRIP",
    MODE_TRIANGLES: "TRIANGLES",
    MODE_TRIANGLE_STRIP: "TRIANGLE_STRIP",
    MODE_TRIANGLE_FAN: "TRIANGLE_FAN",
}

COMPONENT_UNSIGNED_SHORT = 5123
COMPONENT_FLOAT = 5126

_COMPONENT_DTYPES = {
    5120: np.dtype("i1"),
    5121: np.dtype("u1"),
    5122: np.dtype("<i2"),
    COMPONENT_UNSIGNED_SHORT: np.dtype("<u2"),
    5125: np.dtype("<u4"),
    COMPONENT_FLOAT: np.dtype("<f4"),
}

_TYPE_WIDTHS = {"SCALAR": 1, "VEC2": 2, "VEC3": 3, "VEC4": 4}


class GltfFormatError(ValueError):
    """The input is not a readable GLB container."""


class UnsupportedPrimitiveError(ValueError):
    """A single primitive cannot be converted to a board mesh."""


@dataclass(frozen=True)
class GlbDocument:
    gltf: Dict[str, Any]
    blob: bytes


@dataclass(frozen=True)
class PrimitiveFailure:
    mesh: int
    primitive: int
    reason: str


@dataclass
class ImportResult:
    """Everything recovered from one file.

    *boards* holds one cell list per line-mesh primitive, in file order.
    *meshes* holds every successfully read primitive, triangles included.
    """

    boards: List[List[BoardCell]] = field(default_factory=list)
    meshes: List[Mesh] = field(default_factory=list)
    failures: List[PrimitiveFailure] = field(default_factory=list)

    def to_boards(self, color: BoardColor = PLAYER_COLOR) -> List[Board]:
        """One :class:`Board` per cell list, each carrying all imported meshes."""
        board_meshes = [BoardMesh(color, mesh) for mesh in self.meshes]
        return [Board(cells, board_meshes) for cells in self.boards]


# ═══════════════════════════════════════════════════════════════════
# Container
# ═══════════════════════════════════════════════════════════════════


def read_glb(data: bytes) -> GlbDocument:
    """Split a GLB file into its JSON document and binary blob."""
    if len(data) < 12:
        raise GltfFormatError("File too short for a GLB header")
    magic, version, length = (int(x) for x in np.frombuffer(data, dtype="<u4", count=3))
    if magic != GLB_MAGIC:
        raise GltfFormatError("Missing glTF magic; only binary .glb files are supported")
    if version != 2:
        raise GltfFormatError(f"Unsupported glTF container version {version}")
    if length > len(data):
        raise GltfFormatError(f"Header declares {length} bytes but file has {len(data)}")

    document: Optional[Dict[str, Any]] = None
    blob = b""
    offset = 12
    while offset + 8 <= length:
        chunk_length, chunk_type = (
            int(x) for x in np.frombuffer(data, dtype="<u4", count=2, offset=offset)
        )
        body = data[offset + 8 : offset + 8 + chunk_length]
        if len(body) != chunk_length:
            raise GltfFormatError("Truncated GLB chunk")
        if chunk_type == CHUNK_JSON and document is None:
            try:
                document = json.loads(body.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise GltfFormatError(f"Invalid glTF JSON chunk: {exc}") from exc
        elif chunk_type == CHUNK_BIN and not blob:
            blob = bytes(body)
        offset += 8 + chunk_length

    if document is None:
        raise GltfFormatError("GLB file has no JSON chunk")
    return GlbDocument(document, blob)


def read_accessor(document: GlbDocument, index: int) -> np.ndarray:
    """Read accessor *index* from the embedded blob as ``(count, width)``."""
    gltf = document.gltf
    try:
        accessor = gltf["accessors"][index]
        view = gltf["bufferViews"][accessor["bufferView"]]
        dtype = _COMPONENT_DTYPES[accessor["componentType"]]
        width = _TYPE_WIDTHS[accessor["type"]]
        count = int(accessor["count"])
    except (KeyError, IndexError, TypeError) as exc:
        raise UnsupportedPrimitiveError(f"Unreadable accessor {index}: {exc!r}") from exc

    if view.get("buffer", 0) != 0:
        raise UnsupportedPrimitiveError("Only the embedded GLB buffer is supported")
    stride = view.get("byteStride")
    if stride and stride != dtype.itemsize * width:
        raise UnsupportedPrimitiveError(f"Interleaved accessor {index} is not supported")

    start = int(view.get("byteOffset", 0)) + int(accessor.get("byteOffset", 0))
    try:
        values = np.frombuffer(document.blob, dtype=dtype, count=count * width, offset=start)
    except ValueError as exc:
        raise UnsupportedPrimitiveError(f"Accessor {index} runs past the buffer") from exc
    return values.reshape(count, width)


# ═══════════════════════════════════════════════════════════════════
# Primitives
# ═══════════════════════════════════════════════════════════════════


def _accessor(document: GlbDocument, index: Any) -> Dict[str, Any]:
    if not isinstance(index, int) or index < 0:
        raise UnsupportedPrimitiveError(f"Invalid accessor index {index!r}")
    try:
        return document.gltf["accessors"][index]
    except (KeyError, IndexError, TypeError) as exc:
        raise UnsupportedPrimitiveError(f"Missing accessor {index!r}") from exc


def _positions(document: GlbDocument, primitive: Dict[str, Any]) -> List[List[float]]:
    index = primitive.get("attributes", {}).get("POSITION")
    if index is None:
        raise UnsupportedPrimitiveError("Primitive has no POSITION attribute")
    accessor = _accessor(document, index)
    if accessor.get("componentType") != COMPONENT_FLOAT or accessor.get("type") != "VEC3":
        raise UnsupportedPrimitiveError("Positions must be float VEC3")
    return read_accessor(document, index).astype(float).tolist()


def _indices(document: GlbDocument, primitive: Dict[str, Any], width: int) -> List[List[int]]:
    index = primitive.get("indices")
    if index is None:
        raise UnsupportedPrimitiveError("Primitive has no index buffer")
    accessor = _accessor(document, index)
    if accessor.get("componentType") != COMPONENT_UNSIGNED_SHORT:
        raise UnsupportedPrimitiveError("Indices must be unsigned short")
    flat = read_accessor(document, index).reshape(-1)
    if flat.size % width:
        raise UnsupportedPrimitiveError(f"Index count {flat.size} is not a multiple of {width}")
    return flat.astype(int).reshape(-1, width).tolist()


def primitive_mesh(document: GlbDocument, primitive: Dict[str, Any]) -> Optional[Mesh]:
    """Convert one primitive.  Returns ``None`` for point primitives.

    Every index must refer to one of the primitive's own positions.
    """
    mode = primitive.get("mode", MODE_TRIANGLES)
    if mode == MODE_POINTS:
        return None
    if mode == MODE_LINES:
        mesh: Mesh = IndexedLineMesh(
            tuple(_positions(document, primitive)),
            tuple(_indices(document, primitive, 2)),
        )
    elif mode == MODE_TRIANGLES:
        mesh = IndexedTriMesh(
            tuple(_positions(document, primitive)),
            tuple(_indices(document, primitive, 3)),
        )
    else:
        raise UnsupportedPrimitiveError(
            f"Primitive mode {MODE_NAMES.get(mode, mode)} is not supported"
        )
    errors = mesh.index_errors()
    if errors:
        raise UnsupportedPrimitiveError(errors[0])
    return mesh


def load_primitives(document: GlbDocument) -> Tuple[List[Mesh], List[PrimitiveFailure]]:
    """Read every mesh primitive in file order, collecting failures."""
    meshes: List[Mesh] = []
    failures: List[PrimitiveFailure] = []
    for mesh_index, mesh in enumerate(document.gltf.get("meshes", [])):
        for prim_index, primitive in enumerate(mesh.get("primitives", [])):
            try:
                converted = primitive_mesh(document, primitive)
            except UnsupportedPrimitiveError as exc:
                logger.warning(
                    "primitive import failed",
                    mesh=mesh_index,
                    primitive=prim_index,
                    error=str(exc),
                )
                failures.append(PrimitiveFailure(mesh_index, prim_index, str(exc)))
                continue
            if converted is None:
                logger.warning(
                    "skipping point primitive", mesh=mesh_index, primitive=prim_index
                )
                continue
            meshes.append(converted)
    return meshes, failures


def import_gltf(source: Union[PathLike, bytes]) -> ImportResult:
    """Import a GLB file (path or raw bytes) and extract one board per line mesh."""
    data = source if isinstance(source, (bytes, bytearray)) else Path(source).read_bytes()
    document = read_glb(bytes(data))
    meshes, failures = load_primitives(document)
    boards = [
        extract_cells(mesh) for mesh in meshes if isinstance(mesh, IndexedLineMesh)
    ]
    logger.info(
        "gltf imported",
        boards=len(boards),
        meshes=len(meshes),
        failures=len(failures),
    )
    return ImportResult(boards, meshes, failures)
