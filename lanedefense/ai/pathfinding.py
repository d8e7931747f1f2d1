"""A* pathfinding over the walkability grid.

Provides a `Pathfinder` class that computes cell paths through the grid
using 8-directional adjacency with separate straight and diagonal costs.

Usage:
    pf = Pathfinder(grid)
    path = pf.find_path(start, goal)          # list[Cell] or None
    turns = simplify_path(path)               # endpoints + direction changes
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lanedefense.core.models import Cell

if TYPE_CHECKING:
    from lanedefense.config import SimulationConfig
    from lanedefense.core.grid import GridMap

# Axis-aligned first, then diagonals
_DIRS: tuple[tuple[int, int], ...] = (
    (1, 0), (-1, 0), (0, 1), (0, -1),
    (1, 1), (1, -1), (-1, 1), (-1, -1),
)


@dataclass(slots=True)
class PathNode:
    """Search-scoped bookkeeping for one cell. Never outlives a search."""

    cell: Cell
    g: float = 0.0
    h: float = 0.0
    f: float = 0.0
    parent: PathNode | None = None
    seq: int = 0        # first-insertion order, used to break f ties
    closed: bool = False


class Pathfinder:
    """A* pathfinder operating on the simulation GridMap.

    Reads walkability live from the grid it was built with, so obstacle
    refreshes are visible to the next search without rebuilding.
    Performance-bounded: expands at most `max_steps` nodes before giving up.
    """

    __slots__ = ("_grid", "_straight", "_diagonal", "_max_steps", "_heuristic")

    def __init__(
        self,
        grid: GridMap,
        straight_cost: float = 1.0,
        diagonal_cost: float = 1.4,
        max_steps: int = 1000,
        heuristic: str = "manhattan",
    ) -> None:
        self._grid = grid
        self._straight = straight_cost
        self._diagonal = diagonal_cost
        self._max_steps = max_steps
        self._heuristic = heuristic

    @classmethod
    def from_config(cls, grid: GridMap, config: SimulationConfig) -> Pathfinder:
        return cls(
            grid,
            straight_cost=config.pathfinding_straight_cost,
            diagonal_cost=config.pathfinding_diagonal_cost,
            max_steps=config.pathfinding_max_steps,
            heuristic=config.pathfinding_heuristic,
        )

    @property
    def grid(self) -> GridMap:
        return self._grid

    def is_walkable(self, col: int, row: int) -> bool:
        return self._grid.is_walkable(col, row)

    def estimate(self, a: Cell, b: Cell) -> float:
        dx = abs(a.col - b.col)
        dy = abs(a.row - b.row)
        if self._heuristic == "octile":
            # straight * (dx + dy) + (diagonal - 2 * straight) * min(dx, dy)
            return self._straight * (dx + dy) + (self._diagonal - 2 * self._straight) * min(dx, dy)
        return self._straight * (dx + dy)

    def find_path(self, start: Cell, goal: Cell) -> list[Cell] | None:
        """Compute an A* path from *start* to *goal*.

        Returns the cells from *start* to *goal* inclusive, or None if an
        endpoint is out of bounds, the goal is unwalkable, or no path is
        found within the step budget.
        """
        grid = self._grid
        if not grid.in_bounds(start.col, start.row) or not grid.in_bounds(goal.col, goal.row):
            return None
        if not grid.is_walkable(goal.col, goal.row):
            return None
        if start == goal:
            return [start]

        nodes: dict[tuple[int, int], PathNode] = {}
        seq = 0
        start_node = PathNode(start, h=self.estimate(start, goal))
        start_node.f = start_node.h
        nodes[(start.col, start.row)] = start_node

        # Open heap: (f, first-insertion seq, node). Stale entries are skipped.
        open_heap: list[tuple[float, int, PathNode]] = [(start_node.f, seq, start_node)]
        steps = 0

        while open_heap and steps < self._max_steps:
            f, _, node = heapq.heappop(open_heap)
            if node.closed or f > node.f:
                continue
            node.closed = True
            steps += 1

            if node.cell == goal:
                return self._reconstruct(node)

            cc, cr = node.cell.col, node.cell.row
            for dc, dr in _DIRS:
                nc, nr = cc + dc, cr + dr
                if not grid.is_walkable(nc, nr):
                    continue
                key = (nc, nr)
                neighbor = nodes.get(key)
                if neighbor is not None and neighbor.closed:
                    continue

                step_cost = self._diagonal if dc and dr else self._straight
                tentative_g = node.g + step_cost

                if neighbor is None:
                    seq += 1
                    cell = Cell(nc, nr)
                    neighbor = PathNode(cell, h=self.estimate(cell, goal), seq=seq)
                    nodes[key] = neighbor
                elif tentative_g >= neighbor.g:
                    continue

                neighbor.parent = node
                neighbor.g = tentative_g
                neighbor.f = tentative_g + neighbor.h
                heapq.heappush(open_heap, (neighbor.f, neighbor.seq, neighbor))

        return None  # Exhausted or over budget

    def next_step(self, start: Cell, goal: Cell) -> Cell | None:
        """Return the first cell after *start* on the A* path, or None."""
        path = self.find_path(start, goal)
        if path and len(path) > 1:
            return path[1]
        return None

    @staticmethod
    def _reconstruct(end: PathNode) -> list[Cell]:
        """Walk parent links back from *end*, then reverse."""
        path: list[Cell] = []
        node: PathNode | None = end
        while node is not None:
            path.append(node.cell)
            node = node.parent
        path.reverse()
        return path


def simplify_path(path: list[Cell]) -> list[Cell]:
    """Collapse colinear runs, keeping both endpoints and every turn point."""
    if len(path) <= 2:
        return list(path)

    simplified = [path[0]]
    for i in range(1, len(path) - 1):
        prev, cur, nxt = path[i - 1], path[i], path[i + 1]
        d1 = (cur.col - prev.col, cur.row - prev.row)
        d2 = (nxt.col - cur.col, nxt.row - cur.row)
        if d1 != d2:
            simplified.append(cur)
    simplified.append(path[-1])
    return simplified
