from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from .authoring import BoardDraft
from .board import Board, BoardDecodeError


PathLike = Union[str, Path]


def load_json(path: PathLike) -> Board:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise BoardDecodeError(f"{path} is not UTF-8 text") from exc
    return Board.from_json(text)


def save_json(board: Board, path: PathLike) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(board.to_json(), encoding="utf-8")


def load_draft(path: PathLike) -> BoardDraft:
    return BoardDraft.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))


def save_draft(draft: BoardDraft, path: PathLike) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(draft.to_dict(), indent=2), encoding="utf-8")
