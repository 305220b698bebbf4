"""Material registry.

Materials are registered either from a pre-authored tile atlas or from a base
texture stamped through a shape mask. Either way the result is a canonical
atlas strip plus a variant table (see :mod:`dual_grid.material`).

Registration is all-or-nothing: every input is validated before the material
is appended, so a failed call never leaves a partial entry behind. A
material's ``TileType`` is its zero-based registration index and never
changes.
"""

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from PIL import Image
from pyrsistent import pmap

from dual_grid.errors import (
    MaskDimensionError,
    RegistryFullError,
    TextureDimensionError,
    TilemapDimensionError,
    VariantSpecError,
)
from dual_grid.material import Material
from dual_grid.remap import canonical_slot
from dual_grid.types import (
    CANONICAL_TILE_COUNT,
    DEFAULT_TILE_SIZE,
    MAX_MATERIALS,
    Bitmask,
    TileType,
    VariantSpec,
)
from dual_grid.utils.image import (
    ImageSource,
    atlas_tile_count,
    check_atlas_dimensions,
    load_image,
    multiply_stamp,
    natural_tile_box,
    tile_texture,
)

logger = logging.getLogger(__name__)


def normalize_variant_spec(
    variants: Optional[VariantSpec], tile_count: int
) -> List[Tuple[Bitmask, Tuple[int, ...]]]:
    """
    Validate a variant spec against an atlas holding ``tile_count`` tiles.
    Returns (bitmask, source indices) pairs in ascending bitmask order; empty
    lists are dropped.
    """
    if not variants:
        return []
    out: List[Tuple[Bitmask, Tuple[int, ...]]] = []
    for bitmask in sorted(variants):
        if not 0 <= bitmask < CANONICAL_TILE_COUNT:
            raise VariantSpecError(
                f"Variant bitmask must be in [0, {CANONICAL_TILE_COUNT}), got {bitmask}"
            )
        sources = tuple(int(i) for i in variants[bitmask])
        for index in sources:
            if not 0 <= index < tile_count:
                raise VariantSpecError(
                    f"Variant source tile {index} for bitmask {bitmask} is outside "
                    f"the atlas ({tile_count} tiles)"
                )
        if sources:
            out.append((bitmask, sources))
    return out


def build_material(
    atlas: Image.Image,
    tile_size: int,
    variants: Optional[VariantSpec] = None,
    name: Optional[str] = None,
) -> Material:
    """
    Reorder a natural-order atlas into canonical slots and append variant art.
    """
    check_atlas_dimensions(atlas, tile_size, TilemapDimensionError)
    spec = normalize_variant_spec(variants, atlas_tile_count(atlas, tile_size))

    variant_total = sum(len(sources) for _, sources in spec)
    strip = Image.new(
        "RGBA",
        ((CANONICAL_TILE_COUNT + variant_total) * tile_size, tile_size),
        (0, 0, 0, 0),
    )

    for i in range(CANONICAL_TILE_COUNT):
        tile = atlas.crop(natural_tile_box(i, tile_size))
        strip.paste(tile, (canonical_slot(i) * tile_size, 0))

    table: Dict[Bitmask, Tuple[int, ...]] = {}
    next_slot = CANONICAL_TILE_COUNT
    for bitmask, sources in spec:
        slots: List[int] = [bitmask]
        for index in sources:
            tile = atlas.crop(natural_tile_box(index, tile_size))
            strip.paste(tile, (next_slot * tile_size, 0))
            slots.append(next_slot)
            next_slot += 1
        table[bitmask] = tuple(slots)

    return Material(atlas=strip, tile_size=tile_size, variants=pmap(table), name=name)


def stamp_mask(texture: Image.Image, mask: Image.Image, tile_size: int) -> Image.Image:
    """
    Synthesize an atlas by repeating ``texture`` over the mask's extent and
    multiplying the mask on top.
    """
    if texture.size != (tile_size, tile_size):
        raise TextureDimensionError(
            f"Base texture must be {tile_size}x{tile_size}, "
            f"got {texture.width}x{texture.height}"
        )
    check_atlas_dimensions(mask, tile_size, MaskDimensionError, label="Mask")
    canvas = tile_texture(texture, mask.size)
    return multiply_stamp(canvas, mask)


class MaterialRegistry:
    """Ordered list of registered materials sharing one tile size."""

    tile_size: int

    def __init__(self, tile_size: int = DEFAULT_TILE_SIZE):
        self.tile_size = tile_size
        self._materials: List[Material] = []

    def __len__(self) -> int:
        return len(self._materials)

    def __iter__(self) -> Iterator[Material]:
        return iter(self._materials)

    def __getitem__(self, tile_type: TileType) -> Material:
        if not self.is_registered(tile_type):
            raise IndexError(f"Material {tile_type} is not registered")
        return self._materials[tile_type]

    @property
    def count(self) -> int:
        """Number of registered materials; valid TileTypes are ``[0, count)``."""
        return len(self._materials)

    @property
    def materials(self) -> Sequence[Material]:
        return tuple(self._materials)

    def is_registered(self, tile_type: TileType) -> bool:
        return 0 <= tile_type < len(self._materials)

    def register_from_atlas(
        self,
        image: ImageSource,
        variants: Optional[VariantSpec] = None,
        name: Optional[str] = None,
    ) -> TileType:
        """Register a material from a natural-order tile atlas.

        Args:
            image: Atlas image (or path) 4 tiles wide and at least 4 tiles tall.
                Rows below the fourth hold variant source tiles.
            variants: Bitmask -> natural-order source tile indices to append as
                alternates for that bitmask.
            name: Optional label.

        Returns:
            TileType: Identifier of the new material.

        Raises:
            TilemapDimensionError: The atlas breaks the layout contract.
            VariantSpecError: The variant spec references unknown tiles.
            RegistryFullError: All material identifiers are taken.
        """
        self._check_capacity()
        material = build_material(load_image(image), self.tile_size, variants, name)
        return self._append(material)

    def register_from_mask(
        self,
        texture: ImageSource,
        mask: ImageSource,
        variants: Optional[VariantSpec] = None,
        name: Optional[str] = None,
    ) -> TileType:
        """Register a material by stamping a base texture through a shape mask.

        Args:
            texture: One-tile base texture (or path).
            mask: Shape mask (or path) following the atlas layout contract.
                Opaque areas show the texture, transparent areas show nothing.
            variants: Same as :meth:`register_from_atlas`, indexing mask tiles.
            name: Optional label.

        Raises:
            TextureDimensionError: The texture is not exactly one tile.
            MaskDimensionError: The mask breaks the layout contract.
            VariantSpecError: The variant spec references unknown tiles.
            RegistryFullError: All material identifiers are taken.
        """
        self._check_capacity()
        atlas = stamp_mask(load_image(texture), load_image(mask), self.tile_size)
        material = build_material(atlas, self.tile_size, variants, name)
        return self._append(material)

    def _check_capacity(self) -> None:
        if len(self._materials) >= MAX_MATERIALS:
            raise RegistryFullError(
                f"Cannot register more than {MAX_MATERIALS} materials"
            )

    def _append(self, material: Material) -> TileType:
        tile_type = len(self._materials)
        self._materials.append(material)
        logger.info(
            "Registered material %d (%s): %d slots, %d variant bitmasks",
            tile_type,
            material.name or "unnamed",
            material.slot_count,
            len(material.variants),
        )
        return tile_type
