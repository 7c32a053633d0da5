import sys
from pathlib import Path

ROOT = Path(__file__).parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from gridboard.authoring import BoardDraft
from gridboard.tilings import HexCell


def main() -> None:
    draft = BoardDraft(HexCell)
    for q in range(-2, 3):
        for r in range(-2, 3):
            if abs(q + r) <= 2:
                draft.toggle_cell(HexCell(q, r))
    draft.apply_drag(HexCell(0, 0).position(), HexCell(1, 0).position())

    board = draft.to_board()
    errors = board.validate()
    if errors:
        raise SystemExit("\n".join(errors))

    print("Cells:", len(board.cells))
    print("Wall lines:", len(board.meshes[0].mesh.lines))
    print("Arrows:", len(board.meshes[1].mesh.triangles))
    print("Capacity:", board.capacity())
    print("Cell under origin:", board.pick((0.0, 0.0)))


if __name__ == "__main__":
    main()
