"""High-level world facade.

:class:`DualGrid` bundles a :class:`~dual_grid.grid.Grid`, a
:class:`~dual_grid.registry.MaterialRegistry` and a
:class:`~dual_grid.compositor.Compositor` behind one object, and tracks a
``dirty`` flag so callers only recomposite after something changed.

Usage:

``world = DualGrid(DualGridConfig(width=32, height=32, tile_size=16))``
``grass = world.register_from_mask("grass.png", "mask.png")``
``world.place(3, 4, grass)``
``batches = world.recompute(Viewport(0, 0, 33 * 16, 33 * 16))``

UI state (selected material, camera position, overlays) is not stored here;
it is passed in per call.
"""

import logging
from typing import Optional, Tuple

from dual_grid.batch import RenderBackend, Viewport
from dual_grid.compositor import Batches, Compositor
from dual_grid.config import DualGridConfig
from dual_grid.grid import Grid
from dual_grid.registry import MaterialRegistry
from dual_grid.types import TileType, VariantSpec
from dual_grid.utils.image import ImageSource

logger = logging.getLogger(__name__)


class DualGrid:
    config: DualGridConfig
    grid: Grid
    registry: MaterialRegistry
    compositor: Compositor
    dirty: bool

    def __init__(self, config: DualGridConfig):
        self.config = config
        self.grid = Grid(config.width, config.height, config.default_material)
        self.registry = MaterialRegistry(config.tile_size)
        self.compositor = Compositor(self.grid, self.registry)
        self.dirty = True
        self._last_viewport: Optional[Viewport] = None

    @property
    def tile_size(self) -> int:
        return self.config.tile_size

    @property
    def default_material(self) -> TileType:
        return self.grid.default_material

    # -------- Materials --------

    def register_from_atlas(
        self,
        image: ImageSource,
        variants: Optional[VariantSpec] = None,
        name: Optional[str] = None,
    ) -> TileType:
        tile_type = self.registry.register_from_atlas(image, variants, name)
        self.dirty = True
        return tile_type

    def register_from_mask(
        self,
        texture: ImageSource,
        mask: ImageSource,
        variants: Optional[VariantSpec] = None,
        name: Optional[str] = None,
    ) -> TileType:
        tile_type = self.registry.register_from_mask(texture, mask, variants, name)
        self.dirty = True
        return tile_type

    # -------- Grid mutation --------

    def is_in_bounds(self, x: int, y: int) -> bool:
        return self.grid.is_in_bounds(x, y)

    def place(self, x: int, y: int, material: TileType) -> None:
        """Write ``material`` into cell (x, y)."""
        assert self.registry.is_registered(material), (
            f"Material {material} is not registered"
        )
        self.grid.set(x, y, material)
        self.dirty = True

    def erase(self, x: int, y: int) -> None:
        """Restore cell (x, y) to the default material."""
        self.grid.set(x, y, self.grid.default_material)
        self.dirty = True

    def reset(self, material: TileType) -> None:
        """Make ``material`` the new default and fill the whole grid with it."""
        assert self.registry.is_registered(material), (
            f"Material {material} is not registered"
        )
        self.grid.reset(material)
        self.grid.default_material = material
        self.dirty = True
        logger.info(
            "Reset %dx%d grid to material %d",
            self.grid.width,
            self.grid.height,
            material,
        )

    # -------- Screen mapping --------

    def cell_at(
        self, px: int, py: int, camera_x: int = 0, camera_y: int = 0
    ) -> Tuple[int, int]:
        """Grid cell under screen pixel (px, py).

        Dual tiles are drawn on cell corners, so cell centres sit half a tile
        in from the composited image's origin.
        """
        half = self.tile_size // 2
        return (
            (px + camera_x - half) // self.tile_size,
            (py + camera_y - half) // self.tile_size,
        )

    def full_viewport(self) -> Viewport:
        """Viewport covering every corner sample, outer edge included."""
        return Viewport(
            0,
            0,
            (self.grid.width + 1) * self.tile_size,
            (self.grid.height + 1) * self.tile_size,
        )

    # -------- Compositing --------

    def recompute(self, viewport: Viewport, force: bool = False) -> Optional[Batches]:
        """Fresh batches when the grid, the materials or the viewport changed.

        Returns ``None`` when the previous result for this viewport still holds.
        """
        if not (self.dirty or force or viewport != self._last_viewport):
            return None
        batches = self.compositor.composite(
            viewport.left, viewport.top, viewport.width, viewport.height
        )
        self._mark_clean(viewport)
        return batches

    def draw_to(self, backend: RenderBackend, viewport: Viewport) -> Batches:
        batches = self.compositor.draw_to(backend, viewport)
        self._mark_clean(viewport)
        return batches

    def _mark_clean(self, viewport: Viewport) -> None:
        self.dirty = False
        self._last_viewport = viewport
