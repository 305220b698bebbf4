import os
from typing import Tuple, Type, Union

import numpy as np
import numpy.typing as npt
from PIL import Image

from dual_grid.types import ATLAS_COLUMNS, ATLAS_MIN_ROWS

# Type aliases for clarity
FloatArray = npt.NDArray[np.float32]
UInt8Array = npt.NDArray[np.uint8]

ImageSource = Union[Image.Image, str, os.PathLike[str]]
Box = Tuple[int, int, int, int]


def load_image(source: ImageSource) -> Image.Image:
    """
    Return ``source`` as an RGBA image, opening it from disk when given a path.
    """
    if not isinstance(source, Image.Image):
        with Image.open(source) as opened:
            return opened.convert("RGBA")
    if source.mode != "RGBA":
        return source.convert("RGBA")
    return source


def check_atlas_dimensions(
    image: Image.Image,
    tile_size: int,
    error_cls: Type[Exception],
    label: str = "Tilemap",
) -> None:
    """
    Enforce the atlas layout contract: 4 tiles wide, at least 4 tiles tall and
    a whole number of tiles tall.
    """
    width, height = image.size
    if (
        width != ATLAS_COLUMNS * tile_size
        or height < ATLAS_MIN_ROWS * tile_size
        or height % tile_size != 0
    ):
        raise error_cls(
            f"{label} must be {ATLAS_COLUMNS * tile_size}px wide and a multiple of "
            f"{tile_size}px tall (min {ATLAS_MIN_ROWS * tile_size}px), "
            f"got {width}x{height}"
        )


def atlas_tile_count(image: Image.Image, tile_size: int) -> int:
    """Number of tiles in an atlas that passed ``check_atlas_dimensions``."""
    return ATLAS_COLUMNS * (image.height // tile_size)


def natural_tile_box(index: int, tile_size: int) -> Box:
    """Pixel box of the ``index``-th tile counted row-major over a 4-wide sheet."""
    x = (index % ATLAS_COLUMNS) * tile_size
    y = (index // ATLAS_COLUMNS) * tile_size
    return (x, y, x + tile_size, y + tile_size)


def strip_tile_box(slot: int, tile_size: int) -> Box:
    """Pixel box of ``slot`` in a horizontal one-row strip."""
    x = slot * tile_size
    return (x, 0, x + tile_size, tile_size)


def tile_texture(texture: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """
    Repeat ``texture`` across a canvas of ``size`` (width, height), starting at
    the top-left corner.
    """
    arr: UInt8Array = np.asarray(texture.convert("RGBA"), dtype=np.uint8)
    th, tw = arr.shape[:2]
    width, height = size
    reps_y = -(-height // th)
    reps_x = -(-width // tw)
    tiled: UInt8Array = np.tile(arr, (reps_y, reps_x, 1))[:height, :width]
    return Image.fromarray(np.ascontiguousarray(tiled))


def multiply_stamp(base: Image.Image, mask: Image.Image) -> Image.Image:
    """
    Stamp ``mask`` onto ``base`` with a multiply blend.

    Per pixel: ``rgb = base_rgb * mask_rgb`` and ``alpha = base_alpha *
    mask_alpha`` (both normalised to [0,1]). An opaque white mask pixel keeps
    the base pixel unchanged; a transparent mask pixel yields a fully
    transparent result.

    Partially transparent masks (soft edges) are treated as straight alpha:
    mask colour and mask alpha scale the base independently, with no
    premultiplication. A half-transparent white pixel keeps the base colour
    and halves its alpha.
    """
    if base.size != mask.size:
        raise ValueError(f"Size mismatch: base {base.size} vs mask {mask.size}")

    base_arr: FloatArray = (
        np.asarray(base.convert("RGBA"), dtype=np.uint8).astype(np.float32) / 255.0
    )
    mask_arr: FloatArray = (
        np.asarray(mask.convert("RGBA"), dtype=np.uint8).astype(np.float32) / 255.0
    )

    out: FloatArray = base_arr * mask_arr
    # Fully transparent pixels carry no colour
    out[..., :3][out[..., 3] == 0.0] = 0.0

    out8: UInt8Array = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)
    return Image.fromarray(out8)
