"""Draw batches handed to the rendering backend.

A :class:`DrawBatch` collects every quad one material contributes to a
compositing pass. Backends draw a batch as a single call bound to the
material's atlas texture. Batches are rebuilt from scratch on every pass.
"""

from dataclasses import dataclass, field
from typing import List, Protocol, Tuple

import numpy as np
import numpy.typing as npt
from PIL import Image

from dual_grid.types import Bitmask, TileType

# Two triangles per quad sharing the TR-BL diagonal, same winding for both.
QUAD_INDICES: Tuple[int, ...] = (0, 1, 2, 2, 1, 3)
VERTICES_PER_QUAD = 4


@dataclass(frozen=True)
class Viewport:
    """Pixel rectangle of the world to composite."""

    left: int
    top: int
    width: int
    height: int


@dataclass(frozen=True)
class Vertex:
    dst_x: float
    dst_y: float
    src_x: float
    src_y: float


@dataclass(frozen=True)
class Quad:
    """One tile-sized textured quad.

    Attributes:
        dst_x (int): Destination left edge in viewport pixels.
        dst_y (int): Destination top edge in viewport pixels.
        src_x (int): Source left edge in the material atlas.
        src_y (int): Source top edge in the material atlas.
        size (int): Edge length in pixels.
        tile_x (int): World corner column this quad was sampled from.
        tile_y (int): World corner row this quad was sampled from.
        bitmask (Bitmask): Canonical transition shape.
        slot (int): Atlas slot drawn (canonical or variant).
    """

    dst_x: int
    dst_y: int
    src_x: int
    src_y: int
    size: int
    tile_x: int
    tile_y: int
    bitmask: Bitmask
    slot: int

    def vertices(self) -> Tuple[Vertex, Vertex, Vertex, Vertex]:
        """Top-left, top-right, bottom-left, bottom-right."""
        x0, y0 = float(self.dst_x), float(self.dst_y)
        u0, v0 = float(self.src_x), float(self.src_y)
        s = float(self.size)
        return (
            Vertex(x0, y0, u0, v0),
            Vertex(x0 + s, y0, u0 + s, v0),
            Vertex(x0, y0 + s, u0, v0 + s),
            Vertex(x0 + s, y0 + s, u0 + s, v0 + s),
        )


@dataclass
class DrawBatch:
    material: TileType
    quads: List[Quad] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.quads)

    def add(self, quad: Quad) -> None:
        self.quads.append(quad)

    def vertices(self) -> List[Vertex]:
        return [v for quad in self.quads for v in quad.vertices()]

    def indices(self) -> List[int]:
        return [
            i * VERTICES_PER_QUAD + offset
            for i in range(len(self.quads))
            for offset in QUAD_INDICES
        ]

    def to_arrays(
        self,
    ) -> Tuple[npt.NDArray[np.float32], npt.NDArray[np.uint32]]:
        """
        Pack the batch for GPU upload: an (N*4, 4) float32 array of
        (dst_x, dst_y, src_x, src_y) rows and a flat uint32 index array.
        """
        verts = np.array(
            [(v.dst_x, v.dst_y, v.src_x, v.src_y) for v in self.vertices()],
            dtype=np.float32,
        ).reshape(-1, 4)
        idx = np.array(self.indices(), dtype=np.uint32)
        return verts, idx


class RenderBackend(Protocol):
    """Host renderer contract: one draw call per material batch."""

    def draw_batch(self, texture: Image.Image, batch: DrawBatch) -> None: ...
