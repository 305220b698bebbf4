"""Corner sampling and bitmask derivation.

A dual tile sits on the corner shared by four grid cells. Corner sample
``(tile_x, tile_y)`` touches cells ``(tile_x-1, tile_y-1)`` (top-left),
``(tile_x, tile_y-1)`` (top-right), ``(tile_x-1, tile_y)`` (bottom-left) and
``(tile_x, tile_y)`` (bottom-right).

Samples range over ``[0, width] x [0, height]``: the extra row and column
cover the outer edge of the grid, where missing cells read as the default
material.

When material ``M`` is drawn at a sample, a corner sets its bit if its
material is ``M`` *or any higher id*. Lower ids therefore act as ground under
every higher material, and a tile never shows a gap where a higher layer's
mask is transparent.
"""

from typing import List, NamedTuple

from dual_grid.grid import Grid
from dual_grid.types import Bitmask, Corner, TileType


class Corners(NamedTuple):
    top_left: TileType
    top_right: TileType
    bottom_left: TileType
    bottom_right: TileType


def is_valid_sample(grid: Grid, tile_x: int, tile_y: int) -> bool:
    """True when the corner lies on or inside the grid's outer edge."""
    return 0 <= tile_x <= grid.width and 0 <= tile_y <= grid.height


def sample_corners(grid: Grid, tile_x: int, tile_y: int) -> Corners:
    """Materials of the four cells meeting at corner (tile_x, tile_y)."""
    default = grid.default_material
    has_left = tile_x >= 1
    has_right = tile_x < grid.width
    has_top = tile_y >= 1
    has_bottom = tile_y < grid.height
    return Corners(
        top_left=grid.get(tile_x - 1, tile_y - 1) if has_left and has_top else default,
        top_right=grid.get(tile_x, tile_y - 1) if has_right and has_top else default,
        bottom_left=(
            grid.get(tile_x - 1, tile_y) if has_left and has_bottom else default
        ),
        bottom_right=grid.get(tile_x, tile_y) if has_right and has_bottom else default,
    )


def material_bitmask(corners: Corners, material: TileType) -> Bitmask:
    """Canonical bitmask of ``material`` for the given corners."""
    bitmask = 0
    if corners.top_left >= material:
        bitmask |= Corner.TOP_LEFT
    if corners.top_right >= material:
        bitmask |= Corner.TOP_RIGHT
    if corners.bottom_left >= material:
        bitmask |= Corner.BOTTOM_LEFT
    if corners.bottom_right >= material:
        bitmask |= Corner.BOTTOM_RIGHT
    return int(bitmask)


def layers(corners: Corners) -> List[TileType]:
    """Distinct materials present at the corners, bottom layer first."""
    return sorted(set(corners))
