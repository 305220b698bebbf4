"""Dual-grid compositing pass.

For a pixel viewport the compositor walks the corner samples it covers, works
out which materials meet at each corner and emits one quad per (corner,
material) into that material's batch. Layers are emitted in ascending
material id so higher ids draw on top.

The pass is stateless and rebuilds every batch from the current grid. Variant
art is chosen with a hash of the world corner coordinates, so the same world
location shows the same variant regardless of the viewport origin.
"""

import logging
from typing import Dict, List, Tuple

from dual_grid.batch import DrawBatch, Quad, RenderBackend, Viewport
from dual_grid.bitmask import (
    is_valid_sample,
    layers,
    material_bitmask,
    sample_corners,
)
from dual_grid.grid import Grid
from dual_grid.registry import MaterialRegistry
from dual_grid.types import TileType

logger = logging.getLogger(__name__)

Batches = List[Tuple[TileType, DrawBatch]]


def composite(grid: Grid, registry: MaterialRegistry, viewport: Viewport) -> Batches:
    """
    Build one draw batch per material for ``viewport``.

    Returns (material, batch) pairs in ascending material order; materials
    without quads in this pass are omitted.

    Precondition: every value in ``grid`` (and its default material) is a
    registered material. This is asserted, not handled.
    """
    assert max(grid.max_value(), grid.default_material) < len(registry), (
        f"Grid references material {max(grid.max_value(), grid.default_material)} "
        f"but only {len(registry)} are registered"
    )

    tile_size = registry.tile_size
    start_x, offset_x = divmod(viewport.left, tile_size)
    start_y, offset_y = divmod(viewport.top, tile_size)
    columns = viewport.width // tile_size
    rows = viewport.height // tile_size

    batches: Dict[TileType, DrawBatch] = {}
    for row in range(rows):
        tile_y = start_y + row
        dst_y = row * tile_size - offset_y
        for col in range(columns):
            tile_x = start_x + col
            if not is_valid_sample(grid, tile_x, tile_y):
                continue
            dst_x = col * tile_size - offset_x

            corners = sample_corners(grid, tile_x, tile_y)
            for material_id in layers(corners):
                material = registry[material_id]
                bitmask = material_bitmask(corners, material_id)
                slot = material.select_slot(bitmask, tile_x, tile_y)
                batch = batches.get(material_id)
                if batch is None:
                    batch = batches[material_id] = DrawBatch(material=material_id)
                batch.add(
                    Quad(
                        dst_x=dst_x,
                        dst_y=dst_y,
                        src_x=slot * tile_size,
                        src_y=0,
                        size=tile_size,
                        tile_x=tile_x,
                        tile_y=tile_y,
                        bitmask=bitmask,
                        slot=slot,
                    )
                )

    logger.debug(
        "Composited viewport %s: %d batches, %d quads",
        viewport,
        len(batches),
        sum(len(b) for b in batches.values()),
    )
    return sorted(batches.items())


def submit(
    registry: MaterialRegistry, batches: Batches, backend: RenderBackend
) -> None:
    """Hand each non-empty batch to ``backend`` bound to its material's atlas."""
    for material_id, batch in batches:
        if len(batch) == 0:
            continue
        backend.draw_batch(registry[material_id].atlas, batch)


class Compositor:
    grid: Grid
    registry: MaterialRegistry

    def __init__(self, grid: Grid, registry: MaterialRegistry):
        self.grid = grid
        self.registry = registry

    def composite(
        self,
        viewport_left: int,
        viewport_top: int,
        viewport_width: int,
        viewport_height: int,
    ) -> Batches:
        return composite(
            self.grid,
            self.registry,
            Viewport(viewport_left, viewport_top, viewport_width, viewport_height),
        )

    def draw_to(self, backend: RenderBackend, viewport: Viewport) -> Batches:
        """Composite ``viewport`` and submit the batches; returns them too."""
        batches = composite(self.grid, self.registry, viewport)
        submit(self.registry, batches, backend)
        return batches
