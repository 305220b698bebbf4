from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from dual_grid.errors import OutOfBoundsError
from dual_grid.types import MAX_MATERIALS, TILE_DTYPE, TileType

TileArray = npt.NDArray[np.uint8]


@dataclass
class Grid:
    """
    Dense world grid of material identifiers.
    - ``cells[y, x]`` is the TileType of cell (x, y).
    - Reads outside the grid return ``default_material``: the world is treated
      as surrounded by an infinite border of the default material.
    - Writes outside the grid raise ``OutOfBoundsError`` and change nothing.
    - Values are not checked against the material registry here; the
      compositor asserts that precondition when it runs.
    """

    width: int
    height: int
    default_material: TileType = 0

    cells: TileArray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._check_value(self.default_material)
        self.cells = np.full(
            (self.height, self.width), self.default_material, dtype=TILE_DTYPE
        )

    # -------- Grid API --------

    def get(self, x: int, y: int) -> TileType:
        """
        Return the material at (x, y), or the default material when out of range.
        """
        if not self.is_in_bounds(x, y):
            return self.default_material
        return int(self.cells[y, x])

    def set(self, x: int, y: int, value: TileType) -> None:
        """
        Overwrite the material at (x, y).
        """
        self._check_bounds(x, y)
        self._check_value(value)
        self.cells[y, x] = value

    def reset(self, value: TileType) -> None:
        """
        Rewrite every cell to ``value``.
        """
        self._check_value(value)
        self.cells.fill(value)

    def is_in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def max_value(self) -> TileType:
        """Largest material id currently stored (or the default when empty)."""
        if self.cells.size == 0:
            return self.default_material
        return int(self.cells.max())

    # -------- Internal helpers --------

    def _check_bounds(self, x: int, y: int) -> None:
        if not self.is_in_bounds(x, y):
            raise OutOfBoundsError(x, y, self.width, self.height)

    @staticmethod
    def _check_value(value: TileType) -> None:
        if not 0 <= value < MAX_MATERIALS:
            raise ValueError(f"TileType must be in [0, {MAX_MATERIALS}), got {value}")
