import pytest

from gridboard.board import Board
from gridboard.geometry import Polygon
from gridboard.models import PLAYER_COLOR, BoardCell, BoardMesh, IndexedLineMesh, Path
from gridboard.tilings import HexCell
from gridboard.synthesis import build_board


def _neighbor_sets(board):
    return [set(cell.neighbors) for cell in board.cells]


class TestQueries:

    def test_repr(self, scenario_board):
        assert repr(scenario_board) == "Board(cells=4, meshes=2)"

    def test_pick_finds_cell(self, scenario_board):
        assert scenario_board.pick((0.0, 0.0)) == 0
        assert scenario_board.pick((2.3, 0.2)) == 1
        assert scenario_board.pick((-0.5, 2.5)) == 2
        assert scenario_board.pick((1.7, 1.9)) == 3

    def test_pick_outside(self, scenario_board):
        assert scenario_board.pick((10.0, 10.0)) is None

    def test_pick_hex_centres(self):
        cells = [HexCell(0, 0), HexCell(1, 0), HexCell(0, 1)]
        board = build_board(cells)
        for index, cell in enumerate(cells):
            assert board.pick(cell.position()) == index

    def test_capacity(self, scenario_board):
        assert scenario_board.capacity() == 3

    def test_capacity_of_isolated_cells(self):
        shape = Polygon(((0, 0), (1, 0), (0, 1)))
        board = Board([BoardCell(shape, (0.3, 0.3)), BoardCell(shape, (0.3, 0.3))])
        assert board.capacity() == 0


class TestValidate:

    def test_synthesized_board_is_valid(self, scenario_board):
        assert scenario_board.validate() == []

    def test_dangling_neighbor(self):
        shape = Polygon(((0, 0), (1, 0), (0, 1)))
        board = Board([BoardCell(shape, (0, 0), {4: Path.simple((0, 0), (1, 1))})])
        assert board.validate() == ["Cell 0 references missing cell 4"]

    def test_self_neighbor(self):
        shape = Polygon(((0, 0), (1, 0), (0, 1)))
        board = Board([BoardCell(shape, (0, 0), {0: Path.simple((0, 0), (0, 0))})])
        assert board.validate() == ["Cell 0 is its own neighbor"]

    def test_degenerate_shape(self):
        board = Board([BoardCell(Polygon(((0, 0), (1, 0))), (0, 0))])
        assert board.validate() == ["Cell 0 shape has fewer than 3 points"]

    def test_mesh_index_out_of_range(self):
        mesh = IndexedLineMesh(((0, 0, 0), (1, 0, 0)), ((0, 2),))
        board = Board([], [BoardMesh(PLAYER_COLOR, mesh)])
        assert board.validate() == ["Mesh 0 line 0 references missing vertex 2"]


class TestEditing:

    def test_toggle_neighbor_adds_straight_path(self, scenario_board):
        edited = scenario_board.toggle_neighbor(1, 0)
        path = edited.cells[1].neighbors[0]
        assert path == Path.simple(scenario_board.cells[1].position, scenario_board.cells[0].position)
        assert 0 not in scenario_board.cells[1].neighbors

    def test_toggle_neighbor_removes(self, scenario_board):
        edited = scenario_board.toggle_neighbor(0, 1)
        assert set(edited.cells[0].neighbors) == {2}

    def test_toggle_self_is_noop(self, scenario_board):
        edited = scenario_board.toggle_neighbor(2, 2)
        assert edited.cells == scenario_board.cells
        assert edited is not scenario_board

    @pytest.mark.parametrize("a, b", [(0, -1), (-1, 0), (0, 4), (7, 1)])
    def test_toggle_neighbor_out_of_range(self, scenario_board, a, b):
        with pytest.raises(IndexError):
            scenario_board.toggle_neighbor(a, b)

    def test_remove_cell_reindexes(self, scenario_board):
        edited = scenario_board.remove_cell(0)
        assert _neighbor_sets(edited) == [{2}, {2}, {0, 1}]
        assert edited.validate() == []
        assert len(scenario_board.cells) == 4

    def test_remove_last_cell(self, scenario_board):
        edited = scenario_board.remove_cell(3)
        assert _neighbor_sets(edited) == [{1, 2}, set(), {0}]

    def test_remove_cell_out_of_range(self, scenario_board):
        with pytest.raises(IndexError):
            scenario_board.remove_cell(4)

    def test_meshes_shared(self, scenario_board):
        assert scenario_board.remove_cell(1).meshes == scenario_board.meshes
