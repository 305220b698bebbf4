from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from dual_grid.errors import ConfigError
from dual_grid.types import DEFAULT_TILE_SIZE, MAX_MATERIALS, TileType


@dataclass(frozen=True)
class DualGridConfig:
    """World settings shared by the grid, the registry and the compositor.

    Attributes:
        width (int): Grid width in cells.
        height (int): Grid height in cells.
        tile_size (int): Edge length of one tile in pixels.
        default_material (TileType): Material assumed for every cell outside
            the grid, and the initial fill value.
    """

    width: int
    height: int
    tile_size: int = DEFAULT_TILE_SIZE
    default_material: TileType = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(
                f"Grid dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.tile_size <= 0:
            raise ConfigError(f"tile_size must be positive, got {self.tile_size}")
        if not 0 <= self.default_material < MAX_MATERIALS:
            raise ConfigError(
                f"default_material must be in [0, {MAX_MATERIALS}), "
                f"got {self.default_material}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DualGridConfig:
        """Build a config from plain data, ignoring unknown keys."""
        names = {f.name for f in dataclasses.fields(cls)}
        missing = {"width", "height"} - set(data)
        if missing:
            raise ConfigError(f"Missing config keys: {sorted(missing)}")
        kwargs = {k: int(v) for k, v in data.items() if k in names}
        return cls(**kwargs)
