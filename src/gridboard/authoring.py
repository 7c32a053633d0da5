"""Authoring state — the editable cell set and its one-way edge overrides.

A :class:`BoardDraft` is what an editor keeps while the user paints cells
and drags arrows between them.  Nothing here is persisted in a
:class:`~board.Board`; :meth:`BoardDraft.to_board` hands the draft to
:func:`~synthesis.build_board` to produce one.
"""

from __future__ import annotations

import enum
from typing import Dict, Iterator, List, Optional, Set, Tuple, Type

from .geometry import Point
from .tilings import TILINGS, Cell, tiling_name


class EdgeDirection(enum.Enum):
    """Which way a one-way override runs for an ordered pair ``(a, b)``."""

    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"


class EdgeRegistry:
    """One-way overrides between adjacent cells, keyed by the source cell."""

    def __init__(self) -> None:
        self._one_way: Dict[Cell, Set[Cell]] = {}

    def __len__(self) -> int:
        return sum(len(targets) for targets in self._one_way.values())

    def __iter__(self) -> Iterator[Tuple[Cell, Cell]]:
        for source in sorted(self._one_way):
            for target in sorted(self._one_way[source]):
                yield source, target

    def copy(self) -> "EdgeRegistry":
        other = EdgeRegistry()
        other._one_way = {k: set(v) for k, v in self._one_way.items()}
        return other

    def add_one_way_edge(self, source: Cell, target: Cell) -> None:
        """Make source→target one-way, replacing any target→source override."""
        reverse = self._one_way.get(target)
        if reverse is not None:
            reverse.discard(source)
            if not reverse:
                del self._one_way[target]
        self._one_way.setdefault(source, set()).add(target)

    def remove_cell(self, cell: Cell) -> None:
        """Forget every override that starts or ends at *cell*."""
        self._one_way.pop(cell, None)
        for source in list(self._one_way):
            targets = self._one_way[source]
            targets.discard(cell)
            if not targets:
                del self._one_way[source]

    def edge_dir(self, a: Cell, b: Cell) -> Optional[EdgeDirection]:
        if b in self._one_way.get(a, ()):
            return EdgeDirection.A_TO_B
        if a in self._one_way.get(b, ()):
            return EdgeDirection.B_TO_A
        return None


class BoardDraft:
    """Editable grid of one tiling variant."""

    def __init__(
        self,
        cell_type: Type = TILINGS["square"],
        cells: Optional[Set[Cell]] = None,
        edges: Optional[EdgeRegistry] = None,
    ) -> None:
        self.cell_type = cell_type
        self.cells: Set[Cell] = set(cells or ())
        self.edges = edges if edges is not None else EdgeRegistry()

    @property
    def tiling(self) -> str:
        return tiling_name(self.cell_type)

    def sorted_cells(self) -> List[Cell]:
        return sorted(self.cells)

    def toggle_cell(self, cell: Cell) -> bool:
        """Add *cell*, or remove it with its overrides.  Return whether it is now present."""
        if cell in self.cells:
            self.cells.remove(cell)
            self.edges.remove_cell(cell)
            return False
        self.cells.add(cell)
        return True

    def apply_drag(self, down: Point, up: Point) -> None:
        """Interpret a press at *down* released at *up*.

        A click toggles the cell under it.  A drag between two authored,
        adjacent cells makes the edge one-way from *down* to *up*.  Other
        drags are ignored.
        """
        start = self.cell_type.pick(down)
        end = self.cell_type.pick(up)
        if start == end:
            self.toggle_cell(start)
        elif start.adjacent_to(end) and start in self.cells and end in self.cells:
            self.edges.add_one_way_edge(start, end)

    def to_board(self, config=None):
        from .synthesis import build_board, default_config

        if config is None:
            config = default_config(self.cell_type)
        return build_board(self.sorted_cells(), self.edges, config)

    # ── Serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "tiling": self.tiling,
            "cells": [list(cell.coords()) for cell in self.sorted_cells()],
            "one_way": [
                [list(source.coords()), list(target.coords())]
                for source, target in self.edges
            ],
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "BoardDraft":
        tiling = payload.get("tiling", "square")
        if tiling not in TILINGS:
            raise ValueError(f"Unknown tiling {tiling!r}; expected one of {sorted(TILINGS)}")
        cell_type = TILINGS[tiling]
        draft = cls(cell_type, {cell_type(*coords) for coords in payload.get("cells", [])})
        for source, target in payload.get("one_way", []):
            a, b = cell_type(*source), cell_type(*target)
            if a not in draft.cells or b not in draft.cells:
                raise ValueError(f"One-way edge {source}->{target} references an unknown cell")
            if not a.adjacent_to(b):
                raise ValueError(f"One-way edge {source}->{target} joins non-adjacent cells")
            draft.edges.add_one_way_edge(a, b)
        return draft
