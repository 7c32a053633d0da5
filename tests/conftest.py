import json

import numpy as np
import pytest

from gridboard.authoring import EdgeRegistry
from gridboard.gltf import CHUNK_BIN, CHUNK_JSON, GLB_MAGIC
from gridboard.models import IndexedLineMesh
from gridboard.synthesis import SQUARE_SYNTHESIS, build_board
from gridboard.tilings import SquareCell


# Two unit squares sharing the edge 1-4.
TWO_SQUARES_VERTICES = [
    (0.0, 0.0, 0.0),
    (1.0, 0.0, 0.0),
    (2.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (1.0, 1.0, 0.0),
    (2.0, 1.0, 0.0),
]
TWO_SQUARES_LINES = [(0, 1), (1, 2), (0, 3), (1, 4), (2, 5), (3, 4), (4, 5)]

SCENARIO_CELLS = [SquareCell(0, 0), SquareCell(1, 0), SquareCell(0, 1), SquareCell(1, 1)]


@pytest.fixture
def two_squares_mesh():
    return IndexedLineMesh(tuple(TWO_SQUARES_VERTICES), tuple(TWO_SQUARES_LINES))


@pytest.fixture
def scenario_edges():
    edges = EdgeRegistry()
    edges.add_one_way_edge(SquareCell(0, 0), SquareCell(1, 0))
    return edges


@pytest.fixture
def scenario_board(scenario_edges):
    """2x2 square board with (0,0)->(1,0) made one-way."""
    return build_board(SCENARIO_CELLS, scenario_edges, SQUARE_SYNTHESIS)


def _pad(data: bytes, fill: bytes) -> bytes:
    return data + fill * (-len(data) % 4)


def build_glb(primitives):
    """Pack primitive specs into GLB bytes, one mesh holding every primitive.

    Each spec is a dict with ``mode``, ``positions`` and optionally
    ``indices`` and ``index_dtype`` (``"<u2"`` by default).
    ``position_accessor`` and ``index_accessor`` replace the accessor
    references written into the primitive.
    """
    blob = b""
    views, accessors, prims = [], [], []

    def add_accessor(array, component_type, type_name):
        nonlocal blob
        views.append({"buffer": 0, "byteOffset": len(blob), "byteLength": array.nbytes})
        accessors.append({
            "bufferView": len(views) - 1,
            "componentType": component_type,
            "count": len(array),
            "type": type_name,
        })
        blob = _pad(blob + array.tobytes(), b"\x00")
        return len(accessors) - 1

    for spec in primitives:
        positions = np.asarray(spec["positions"], dtype="<f4").reshape(-1, 3)
        prim = {"mode": spec["mode"], "attributes": {"POSITION": add_accessor(positions, 5126, "VEC3")}}
        if spec.get("indices") is not None:
            dtype = np.dtype(spec.get("index_dtype", "<u2"))
            component = {2: 5123, 4: 5125}[dtype.itemsize]
            indices = np.asarray(spec["indices"], dtype=dtype).reshape(-1)
            prim["indices"] = add_accessor(indices, component, "SCALAR")
        if "position_accessor" in spec:
            prim["attributes"]["POSITION"] = spec["position_accessor"]
        if "index_accessor" in spec:
            prim["indices"] = spec["index_accessor"]
        prims.append(prim)

    document = {
        "asset": {"version": "2.0"},
        "buffers": [{"byteLength": len(blob)}],
        "bufferViews": views,
        "accessors": accessors,
        "meshes": [{"primitives": prims}],
    }
    json_chunk = _pad(json.dumps(document).encode("utf-8"), b" ")
    total = 12 + 8 + len(json_chunk) + 8 + len(blob)
    return b"".join([
        np.array([GLB_MAGIC, 2, total], dtype="<u4").tobytes(),
        np.array([len(json_chunk), CHUNK_JSON], dtype="<u4").tobytes(),
        json_chunk,
        np.array([len(blob), CHUNK_BIN], dtype="<u4").tobytes(),
        blob,
    ])


@pytest.fixture
def make_glb():
    return build_glb
