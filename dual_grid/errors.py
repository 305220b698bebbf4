"""Error taxonomy.

Configuration problems (bad image dimensions, malformed variant specs, invalid
settings) derive from ``ValueError``; grid bounds violations derive from
``IndexError``. All of them share :class:`DualGridError` so callers can catch
everything raised by the package in one place.
"""


class DualGridError(Exception):
    """Base class for every error raised by ``dual_grid``."""


class ConfigError(DualGridError, ValueError):
    """Invalid ``DualGridConfig`` value."""


class TilemapDimensionError(DualGridError, ValueError):
    """Atlas is not 4 tiles wide or not a whole number (>= 4) of tiles tall."""


class TextureDimensionError(DualGridError, ValueError):
    """Base texture is not exactly one tile."""


class MaskDimensionError(DualGridError, ValueError):
    """Shape mask does not follow the atlas dimension contract."""


class VariantSpecError(DualGridError, ValueError):
    """Variant spec references an unknown bitmask or a missing source tile."""


class RegistryFullError(DualGridError, ValueError):
    """No more material identifiers are available."""


class OutOfBoundsError(DualGridError, IndexError):
    """Grid mutation outside the grid extent."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"Out of bounds: {(x, y)} for grid {width}x{height}")
        self.x = x
        self.y = y
