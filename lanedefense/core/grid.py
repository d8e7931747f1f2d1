"""Grid / walkability map."""

from __future__ import annotations

import math
from typing import Iterable

from lanedefense.core.models import Cell, WorldPos


class GridMap:
    """2D walkability grid backed by a flat list for cache-friendly access.

    Rows outside the battle band ``[battle_start_row, battle_start_row +
    battle_rows)`` are permanently unwalkable. Out-of-range coordinates are
    ignored by setters and read as unwalkable.
    """

    __slots__ = ("width", "height", "battle_start_row", "battle_rows", "cell_size", "_walkable")

    def __init__(
        self,
        width: int,
        height: int,
        battle_start_row: int = 0,
        battle_rows: int | None = None,
        cell_size: float = 1.0,
    ) -> None:
        self.width = width
        self.height = height
        self.battle_start_row = battle_start_row
        self.battle_rows = height - battle_start_row if battle_rows is None else battle_rows
        self.cell_size = cell_size
        self._walkable: list[bool] = [True] * (width * height)
        self._apply_boundary()

    # -- bounds --

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def in_battle_band(self, row: int) -> bool:
        return self.battle_start_row <= row < self.battle_start_row + self.battle_rows

    @property
    def battle_row_range(self) -> range:
        return range(self.battle_start_row, self.battle_start_row + self.battle_rows)

    @property
    def battle_center_row(self) -> float:
        return self.battle_start_row + self.battle_rows / 2

    # -- walkability --

    def is_walkable(self, col: int, row: int) -> bool:
        if 0 <= col < self.width and 0 <= row < self.height:
            return self._walkable[row * self.width + col]
        return False

    def is_cell_walkable(self, cell: Cell) -> bool:
        return self.is_walkable(cell.col, cell.row)

    def set_walkable(self, col: int, row: int, walkable: bool) -> None:
        if 0 <= col < self.width and 0 <= row < self.height:
            self._walkable[row * self.width + col] = walkable

    def set_obstacles(self, cells: Iterable[Cell], reset_battle_rows_first: bool = False) -> None:
        """Mark *cells* unwalkable, optionally clearing the battle band first.

        The reset touches battle rows only; boundary rows stay blocked.
        """
        if reset_battle_rows_first:
            w = self.width
            for row in self.battle_row_range:
                if 0 <= row < self.height:
                    base = row * w
                    self._walkable[base:base + w] = [True] * w
        for cell in cells:
            self.set_walkable(cell.col, cell.row, False)

    def _apply_boundary(self) -> None:
        for row in range(self.height):
            if not self.in_battle_band(row):
                base = row * self.width
                self._walkable[base:base + self.width] = [False] * self.width

    # -- world conversion --

    def cell_center(self, cell: Cell) -> WorldPos:
        half = self.cell_size / 2
        return WorldPos(cell.col * self.cell_size + half, cell.row * self.cell_size + half)

    def world_to_cell(self, pos: WorldPos) -> Cell:
        return Cell(math.floor(pos.x / self.cell_size), math.floor(pos.y / self.cell_size))

    # -- export / copy --

    def walkable_mask(self) -> list[bool]:
        """Row-major copy of the walkability flags."""
        return list(self._walkable)

    def copy(self) -> GridMap:
        new = GridMap.__new__(GridMap)
        new.width = self.width
        new.height = self.height
        new.battle_start_row = self.battle_start_row
        new.battle_rows = self.battle_rows
        new.cell_size = self.cell_size
        new._walkable = list(self._walkable)
        return new
