import pytest

from gridboard.board import Board
from gridboard.mesh_import import Loop, extract_cells, find_loops, outer_loop, trace_loop
from gridboard.models import IndexedLineMesh


UNIT_SQUARE = IndexedLineMesh(
    ((0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)),
    ((0, 1), (1, 2), (2, 3), (3, 0)),
)


class TestLoop:

    def test_canonical_rotation(self):
        assert Loop.canonical([4, 1, 3, 2]).vertices == (1, 3, 2, 4)

    def test_edges(self):
        loop = Loop((0, 1, 4, 3))
        assert loop.directed_edges() == [(0, 1), (1, 4), (4, 3), (3, 0)]
        assert loop.edges() == {(0, 1), (1, 4), (3, 4), (0, 3)}

    def test_perimeter(self):
        assert Loop((0, 1, 2, 3)).perimeter(UNIT_SQUARE.vertices) == pytest.approx(4.0)


class TestTraceLoop:

    def test_counter_clockwise_face(self, two_squares_mesh):
        assert trace_loop(two_squares_mesh, 0, 1) == Loop((0, 1, 4, 3))

    def test_outer_face(self, two_squares_mesh):
        assert trace_loop(two_squares_mesh, 0, 3) == Loop((0, 3, 4, 5, 2, 1))

    def test_dead_end(self):
        mesh = IndexedLineMesh(((0, 0, 0), (1, 0, 0), (2, 0, 0)), ((0, 1), (1, 2)))
        assert trace_loop(mesh, 0, 1) is None


class TestFindLoops:

    def test_two_squares(self, two_squares_mesh):
        loops = find_loops(two_squares_mesh)
        assert [loop.vertices for loop in loops] == [
            (0, 1, 4, 3),
            (0, 3, 4, 5, 2, 1),
            (1, 2, 5, 4),
        ]

    def test_outer_loop_is_longest(self, two_squares_mesh):
        loops = find_loops(two_squares_mesh)
        outer = outer_loop(loops, two_squares_mesh.vertices)
        assert outer == Loop((0, 3, 4, 5, 2, 1))
        assert outer.perimeter(two_squares_mesh.vertices) == pytest.approx(6.0)

    def test_outer_loop_prefers_clockwise_on_tie(self):
        loops = find_loops(UNIT_SQUARE)
        assert len(loops) == 2
        outer = outer_loop(loops, UNIT_SQUARE.vertices)
        assert outer.polygon(UNIT_SQUARE.vertices).signed_area() < 0

    def test_outer_loop_empty(self):
        assert outer_loop([], ()) is None


class TestExtractCells:

    def test_two_squares(self, two_squares_mesh):
        cells = extract_cells(two_squares_mesh)
        assert len(cells) == 2
        assert cells[0].position == pytest.approx((0.5, 0.5))
        assert cells[1].position == pytest.approx((1.5, 0.5))
        assert set(cells[0].neighbors) == {1}
        assert set(cells[1].neighbors) == {0}
        path = cells[0].neighbors[1]
        assert path.start == pytest.approx((0.5, 0.5))
        assert path.end == pytest.approx((1.5, 0.5))

    def test_cells_are_counter_clockwise(self, two_squares_mesh):
        for cell in extract_cells(two_squares_mesh):
            assert cell.shape.signed_area() > 0

    def test_single_outline_gives_one_cell(self):
        cells = extract_cells(UNIT_SQUARE)
        assert len(cells) == 1
        assert cells[0].position == pytest.approx((0.5, 0.5))
        assert cells[0].neighbors == {}
        assert cells[0].shape.signed_area() > 0

    def test_dangling_spur_is_ignored(self):
        mesh = IndexedLineMesh(
            UNIT_SQUARE.vertices + ((2.0, 2.0, 0.0),),
            UNIT_SQUARE.lines + ((2, 4),),
        )
        cells = extract_cells(mesh)
        assert len(cells) == 1
        assert cells[0].position == pytest.approx((0.5, 0.5))

    def test_open_polyline_has_no_cells(self):
        mesh = IndexedLineMesh(((0, 0, 0), (1, 0, 0), (1, 1, 0)), ((0, 1), (1, 2)))
        assert extract_cells(mesh) == []

    def test_three_by_one_strip(self):
        vertices = tuple((float(x), float(y), 0.0) for y in (0, 1) for x in range(4))
        lines = [(i, i + 1) for i in range(3)] + [(i + 4, i + 5) for i in range(3)]
        lines += [(i, i + 4) for i in range(4)]
        cells = extract_cells(IndexedLineMesh(vertices, tuple(lines)))
        positions = sorted(c.position for c in cells)
        assert positions == [(0.5, 0.5), (1.5, 0.5), (2.5, 0.5)]
        board = Board(cells)
        assert board.validate() == []
        middle = board.pick((1.5, 0.5))
        assert len(board.cells[middle].neighbors) == 2

    def test_no_self_adjacency(self, two_squares_mesh):
        for index, cell in enumerate(extract_cells(two_squares_mesh)):
            assert index not in cell.neighbors
