from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

from dual_grid.compositor import Batches
from dual_grid.config import DualGridConfig
from dual_grid.remap import canonical_slot
from dual_grid.types import FULL_MASK, Bitmask, TileType, VariantSpec
from dual_grid.utils.image import natural_tile_box
from dual_grid.world import DualGrid

TILE = 4

RGBA = Tuple[int, int, int, int]


def tile_color(index: int, salt: int = 0) -> RGBA:
    """Distinct opaque colour for natural tile ``index``."""
    return (
        (index * 13 + salt * 61) % 256,
        (255 - index * 7) % 256,
        (index * 29) % 256,
        255,
    )


def make_atlas(
    rows: int = 4,
    tile_size: int = TILE,
    salt: int = 0,
    color_fn: Optional[Callable[[int], RGBA]] = None,
) -> Image.Image:
    """Atlas whose natural tile ``i`` is filled with ``tile_color(i)``."""
    color_fn = color_fn or (lambda i: tile_color(i, salt))
    image = Image.new("RGBA", (4 * tile_size, rows * tile_size), (0, 0, 0, 0))
    for i in range(4 * rows):
        image.paste(color_fn(i), natural_tile_box(i, tile_size))
    return image


def make_full_only_mask(tile_size: int = TILE) -> Image.Image:
    """Mask that is opaque white only on the tile that becomes the full bitmask."""
    return make_atlas(
        tile_size=tile_size,
        color_fn=lambda i: (
            (255, 255, 255, 255) if canonical_slot(i) == FULL_MASK else (0, 0, 0, 0)
        ),
    )


def solid_image(color: RGBA, size: Tuple[int, int]) -> Image.Image:
    return Image.new("RGBA", size, color)


def tile_pixels(image: Image.Image) -> np.ndarray:
    return np.asarray(image.convert("RGBA"), dtype=np.uint8)


def is_filled_with(image: Image.Image, color: RGBA) -> bool:
    return bool((tile_pixels(image) == np.array(color, dtype=np.uint8)).all())


def make_world(
    width: int,
    height: int,
    material_count: int = 2,
    default_material: TileType = 0,
    variants: Optional[Dict[TileType, VariantSpec]] = None,
    atlas_rows: int = 4,
) -> DualGrid:
    """World with ``material_count`` atlas materials registered in order."""
    world = DualGrid(
        DualGridConfig(
            width=width,
            height=height,
            tile_size=TILE,
            default_material=default_material,
        )
    )
    variants = variants or {}
    for material in range(material_count):
        world.register_from_atlas(
            make_atlas(rows=atlas_rows, salt=material),
            variants=variants.get(material),
            name=f"material-{material}",
        )
    return world


def quad_index(batches: Batches) -> Dict[Tuple[TileType, int, int], Bitmask]:
    """(material, tile_x, tile_y) -> bitmask for every emitted quad."""
    out: Dict[Tuple[TileType, int, int], Bitmask] = {}
    for material, batch in batches:
        for quad in batch.quads:
            out[(material, quad.tile_x, quad.tile_y)] = quad.bitmask
    return out


def slot_index(batches: Batches) -> Dict[Tuple[TileType, int, int], int]:
    out: Dict[Tuple[TileType, int, int], int] = {}
    for material, batch in batches:
        for quad in batch.quads:
            out[(material, quad.tile_x, quad.tile_y)] = quad.slot
    return out


def sample_layers(batches: Batches) -> Dict[Tuple[int, int], List[TileType]]:
    """(tile_x, tile_y) -> materials drawn there, in submission order."""
    out: Dict[Tuple[int, int], List[TileType]] = {}
    for material, batch in batches:
        for quad in batch.quads:
            out.setdefault((quad.tile_x, quad.tile_y), []).append(material)
    return out
