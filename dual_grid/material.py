"""Material and variant table.

A :class:`Material` owns one horizontal atlas strip. Slots ``0..15`` hold the
canonical transition tiles indexed by corner bitmask; slots ``16..`` hold
variant art appended at registration time.

The variant table maps a bitmask to an ordered tuple of interchangeable slots.
The first entry of every tuple is the canonical slot itself, so variant choice
``0`` always reproduces the default art. Bitmasks without an entry always use
their canonical slot.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image
from pyrsistent import pmap
from pyrsistent.typing import PMap

from dual_grid.types import (
    CANONICAL_TILE_COUNT,
    VARIANT_HASH_X,
    VARIANT_HASH_Y,
    Bitmask,
)
from dual_grid.utils.image import strip_tile_box

VariantTable = PMap[Bitmask, Tuple[int, ...]]


def variant_hash(tile_x: int, tile_y: int, count: int) -> int:
    """Stable choice in ``[0, count)`` for a world corner.

    Depends only on the absolute corner coordinates, never on the viewport,
    so panning does not change which variant a location shows.
    """
    return (tile_x * VARIANT_HASH_X + tile_y * VARIANT_HASH_Y) % count


@dataclass(frozen=True)
class Material:
    """Registered material.

    Attributes:
        atlas (Image.Image): RGBA strip ``tile_size`` tall holding
            ``16 + variant_count`` tiles side by side.
        tile_size (int): Edge length of one tile in pixels.
        variants (VariantTable): Bitmask -> candidate slots (canonical first).
        name (str | None): Optional label for logs and debugging.
    """

    atlas: Image.Image
    tile_size: int
    variants: VariantTable = pmap()
    name: Optional[str] = None

    @property
    def slot_count(self) -> int:
        return self.atlas.width // self.tile_size

    @property
    def variant_count(self) -> int:
        return self.slot_count - CANONICAL_TILE_COUNT

    def candidates(self, bitmask: Bitmask) -> Tuple[int, ...]:
        """All slots usable for ``bitmask``, canonical slot first."""
        return self.variants.get(bitmask, (bitmask,))

    def select_slot(self, bitmask: Bitmask, tile_x: int, tile_y: int) -> int:
        """Atlas slot to draw for ``bitmask`` at world corner (tile_x, tile_y)."""
        choices = self.variants.get(bitmask)
        if not choices:
            return bitmask
        return choices[variant_hash(tile_x, tile_y, len(choices))]

    def tile(self, slot: int) -> Image.Image:
        """Crop a single tile out of the atlas strip."""
        return self.atlas.crop(strip_tile_box(slot, self.tile_size))
