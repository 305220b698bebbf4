"""Natural-order to canonical-order tile permutation.

Artists lay out the 16 transition tiles of a material as a 4x4 sheet read in
row-major order. The compositor addresses them by corner bitmask instead.
``TILE_REMAP[i]`` is the canonical slot for natural sheet position ``i``.

The table is an opaque constant: it matches the sheet layout the tile art is
authored against and is not derived from the bitmask bit order.
"""

from typing import Tuple

from dual_grid.types import Bitmask

TILE_REMAP: Tuple[int, ...] = (2, 5, 11, 3, 9, 7, 15, 14, 4, 12, 13, 10, 0, 1, 6, 8)

# TILE_REMAP_INVERSE[bitmask] -> natural sheet position
TILE_REMAP_INVERSE: Tuple[int, ...] = tuple(
    TILE_REMAP.index(bitmask) for bitmask in range(len(TILE_REMAP))
)


def canonical_slot(natural_index: int) -> Bitmask:
    """Canonical slot that natural sheet position ``natural_index`` is copied to."""
    return TILE_REMAP[natural_index]


def natural_index(bitmask: Bitmask) -> int:
    """Natural sheet position holding the art for ``bitmask``."""
    return TILE_REMAP_INVERSE[bitmask]
