"""
Exception hierarchy for the photo mosaic package.

Every error raised by the package derives from MosaicError. Each kind also
inherits the builtin exception callers would naturally expect, so code that
catches ValueError or OSError keeps working.

Classes:
    MosaicError: Base class for all package errors
    ConfigError: Grid parameters yield unusable cell dimensions
    DecodeError: The source image could not be decoded
    DirectoryAccessError: The tile directory could not be listed
    EmptyPaletteError: No usable tiles remain after loading
    DegenerateRegionError: A zero-area or out-of-bounds region was averaged
"""

from typing import Optional


class MosaicError(Exception):
    """Base class for all mosaic generation errors."""


class ConfigError(MosaicError, ValueError):
    """
    Raised when the grid division count is unusable.

    Attributes:
        x_delta: Computed cell width, if it got that far
        y_delta: Computed cell height, if it got that far
    """

    def __init__(self, message: str,
                 x_delta: Optional[int] = None,
                 y_delta: Optional[int] = None):
        super().__init__(message)
        self.x_delta = x_delta
        self.y_delta = y_delta


class DecodeError(MosaicError, ValueError):
    """Raised when the source image cannot be decoded."""


class DirectoryAccessError(MosaicError, OSError):
    """Raised when the tile directory cannot be listed or read."""


class EmptyPaletteError(MosaicError, ValueError):
    """Raised when a palette would contain no tiles."""


class DegenerateRegionError(MosaicError, ValueError):
    """Raised when averaging a region with no pixels in it."""
