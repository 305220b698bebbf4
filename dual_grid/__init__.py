"""dual_grid
=========

Dual-grid tile compositing. Each drawn tile is chosen from the four world
cells meeting at its corners, so a 16-tile atlas per material is enough for
smooth transitions between any number of materials.

Typical use::

    from dual_grid import DualGrid, DualGridConfig, Viewport

    world = DualGrid(DualGridConfig(width=64, height=64, tile_size=16))
    dirt = world.register_from_atlas("dirt_atlas.png")
    grass = world.register_from_atlas("grass_atlas.png", variants={15: [16, 17]})
    world.place(10, 12, grass)
    for material, batch in world.recompute(world.full_viewport()) or []:
        ...

Lower-level pieces (``Grid``, ``MaterialRegistry``, ``composite``) are
re-exported for callers that want to wire them up themselves.
"""

from .batch import DrawBatch, Quad, RenderBackend, Vertex, Viewport
from .bitmask import Corners, material_bitmask, sample_corners
from .compositor import Compositor, composite
from .config import DualGridConfig
from .errors import (
    ConfigError,
    DualGridError,
    MaskDimensionError,
    OutOfBoundsError,
    RegistryFullError,
    TextureDimensionError,
    TilemapDimensionError,
    VariantSpecError,
)
from .grid import Grid
from .material import Material
from .registry import MaterialRegistry
from .remap import TILE_REMAP
from .types import MAX_MATERIALS, Bitmask, Corner, TileType
from .world import DualGrid

__all__ = [
    "Bitmask",
    "ConfigError",
    "Compositor",
    "Corner",
    "Corners",
    "DrawBatch",
    "DualGrid",
    "DualGridConfig",
    "DualGridError",
    "Grid",
    "MAX_MATERIALS",
    "MaskDimensionError",
    "Material",
    "MaterialRegistry",
    "OutOfBoundsError",
    "Quad",
    "RegistryFullError",
    "RenderBackend",
    "TILE_REMAP",
    "TextureDimensionError",
    "TileType",
    "TilemapDimensionError",
    "VariantSpecError",
    "Vertex",
    "Viewport",
    "composite",
    "material_bitmask",
    "sample_corners",
]
