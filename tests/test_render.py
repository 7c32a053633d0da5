import pytest

from gridboard.render import one_way_links, render_png
from gridboard.synthesis import build_board
from gridboard.tilings import HexCell


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_one_way_links(scenario_board):
    assert one_way_links(scenario_board) == [(0, 1)]


def test_no_one_way_links_without_overrides():
    board = build_board([HexCell(0, 0), HexCell(1, 0)])
    assert one_way_links(board) == []


def test_render_png(tmp_path, scenario_board):
    pytest.importorskip("matplotlib")
    out = tmp_path / "renders" / "board.png"
    render_png(scenario_board, out)
    assert out.read_bytes()[:8] == PNG_SIGNATURE


def test_render_without_links(tmp_path, scenario_board):
    pytest.importorskip("matplotlib")
    out = tmp_path / "board.png"
    render_png(scenario_board, str(out), show_one_way=False, dpi=72)
    assert out.stat().st_size > 0

