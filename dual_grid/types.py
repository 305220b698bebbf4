"""Common type aliases and constants.

``TileType`` identifies a registered material and is what the grid stores.
``Bitmask`` is one of the 16 canonical transition shapes; its four bits say
which corners of a dual tile belong to the material being drawn.
"""

from enum import IntFlag
from typing import Mapping, Sequence

import numpy as np

TileType = int
Bitmask = int

# Grid cells are stored as uint8, which caps the number of materials.
TILE_DTYPE = np.uint8
MAX_MATERIALS = int(np.iinfo(TILE_DTYPE).max) + 1

CANONICAL_TILE_COUNT = 16
ATLAS_COLUMNS = 4
ATLAS_MIN_ROWS = 4

DEFAULT_TILE_SIZE = 16

# Variant hash multipliers (world corner x, world corner y).
VARIANT_HASH_X = 7919
VARIANT_HASH_Y = 6151

VariantSpec = Mapping[Bitmask, Sequence[int]]


class Corner(IntFlag):
    """Bit assigned to each corner of a dual tile."""

    BOTTOM_RIGHT = 1 << 0
    BOTTOM_LEFT = 1 << 1
    TOP_RIGHT = 1 << 2
    TOP_LEFT = 1 << 3


FULL_MASK: Bitmask = int(
    Corner.TOP_LEFT | Corner.TOP_RIGHT | Corner.BOTTOM_LEFT | Corner.BOTTOM_RIGHT
)
