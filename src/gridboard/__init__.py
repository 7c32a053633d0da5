"""gridboard — tile-based board authoring on square and hex grids.

Public API is organised into layers:

- **Tilings** — square and hex cells, corners and edges
- **Core** — polygons, board model, container, I/O
- **Authoring** — editable drafts and one-way edge overrides
- **Building** — board synthesis from drafts, board extraction from line meshes
- **Rendering** — PNG previews (requires matplotlib)
"""

# ── Tilings ─────────────────────────────────────────────────────────
from .tilings import (
    HexCell,
    HexCorner,
    NotAdjacentError,
    SquareCell,
    SquareCorner,
    TILINGS,
)

# ── Core ────────────────────────────────────────────────────────────
from .geometry import Polygon
from .models import (
    PLAYER_COLOR,
    BoardCell,
    BoardMesh,
    IndexedLineMesh,
    IndexedTriMesh,
    Path,
    PlayerColor,
    StaticColor,
)
from .board import Board, BoardDecodeError, validate_board_payload
from .io import load_draft, load_json, save_draft, save_json

# ── Authoring ───────────────────────────────────────────────────────
from .authoring import BoardDraft, EdgeDirection, EdgeRegistry

# ── Building ────────────────────────────────────────────────────────
from .synthesis import (
    HEX_SYNTHESIS,
    SQUARE_SYNTHESIS,
    SynthesisConfig,
    build_board,
)
from .mesh_import import Loop, extract_cells, find_loops
from .gltf import (
    GltfFormatError,
    ImportResult,
    UnsupportedPrimitiveError,
    import_gltf,
)

# ── Rendering (requires matplotlib) ────────────────────────────────
from .render import render_png

__all__ = [
    # Tilings
    "HexCell",
    "HexCorner",
    "NotAdjacentError",
    "SquareCell",
    "SquareCorner",
    "TILINGS",
    # Core
    "Polygon",
    "PLAYER_COLOR",
    "BoardCell",
    "BoardMesh",
    "IndexedLineMesh",
    "IndexedTriMesh",
    "Path",
    "PlayerColor",
    "StaticColor",
    "Board",
    "BoardDecodeError",
    "validate_board_payload",
    "load_draft",
    "load_json",
    "save_draft",
    "save_json",
    # Authoring
    "BoardDraft",
    "EdgeDirection",
    "EdgeRegistry",
    # Building
    "HEX_SYNTHESIS",
    "SQUARE_SYNTHESIS",
    "SynthesisConfig",
    "build_board",
    "Loop",
    "extract_cells",
    "find_loops",
    "GltfFormatError",
    "ImportResult",
    "UnsupportedPrimitiveError",
    "import_gltf",
    # Rendering
    "render_png",
]
