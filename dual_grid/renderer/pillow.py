from typing import Dict, Optional, Tuple

from PIL import Image

from dual_grid.batch import DrawBatch, Viewport
from dual_grid.compositor import composite, submit
from dual_grid.grid import Grid
from dual_grid.registry import MaterialRegistry

DEFAULT_BACKGROUND: Tuple[int, int, int, int] = (0, 0, 0, 0)

TileBox = Tuple[int, int, int]


class PillowBackend:
    """CPU ``RenderBackend`` that alpha-composites batches onto a PIL image.

    Quads partially outside the target (sub-tile panning) are clipped.
    Tile crops are cached per texture; the cache holds the texture itself so
    an entry never outlives the image it was cropped from.
    """

    target: Image.Image

    def __init__(self, target: Image.Image):
        if target.mode != "RGBA":
            raise ValueError(f"Target image must be RGBA, got {target.mode}")
        self.target = target
        self._cache: Dict[int, Tuple[Image.Image, Dict[TileBox, Image.Image]]] = {}

    def draw_batch(self, texture: Image.Image, batch: DrawBatch) -> None:
        tiles = self._tiles_for(texture)
        for quad in batch.quads:
            key = (quad.src_x, quad.src_y, quad.size)
            tile = tiles.get(key)
            if tile is None:
                x0, y0 = quad.src_x, quad.src_y
                tile = texture.crop((x0, y0, x0 + quad.size, y0 + quad.size))
                tiles[key] = tile
            self._paste(tile, quad.dst_x, quad.dst_y)

    def clear_cache(self) -> None:
        self._cache.clear()

    def _tiles_for(self, texture: Image.Image) -> Dict[TileBox, Image.Image]:
        entry = self._cache.get(id(texture))
        if entry is None or entry[0] is not texture:
            entry = (texture, {})
            self._cache[id(texture)] = entry
        return entry[1]

    def _paste(self, tile: Image.Image, x: int, y: int) -> None:
        # alpha_composite rejects negative destinations; crop the tile instead.
        sx, sy = max(0, -x), max(0, -y)
        if sx >= tile.width or sy >= tile.height:
            return
        if x >= self.target.width or y >= self.target.height:
            return
        if sx or sy:
            tile = tile.crop((sx, sy, tile.width, tile.height))
        self.target.alpha_composite(tile, (x + sx, y + sy))


def render(
    grid: Grid,
    registry: MaterialRegistry,
    viewport: Viewport,
    background: Tuple[int, int, int, int] = DEFAULT_BACKGROUND,
    target: Optional[Image.Image] = None,
) -> Image.Image:
    """
    Renders the grid under ``viewport`` as a PIL Image, one layer per material.
    """
    if target is None:
        target = Image.new("RGBA", (viewport.width, viewport.height), background)
    backend = PillowBackend(target)
    submit(registry, composite(grid, registry, viewport), backend)
    return target


class PillowRenderer:
    background: Tuple[int, int, int, int]

    def __init__(self, background: Tuple[int, int, int, int] = DEFAULT_BACKGROUND):
        self.background = background

    def render(
        self, grid: Grid, registry: MaterialRegistry, viewport: Viewport
    ) -> Image.Image:
        return render(grid, registry, viewport, background=self.background)
