"""
Configuration constants for the photo mosaic package.

This module contains the configurable parameters used throughout the mosaic
generation process: recognised tile extensions, output encoding quality,
worker pool sizing and logging, plus the validation helpers that turn a grid
division count into cell dimensions.

Constants:
    TILE_EXTENSIONS: File extensions recognised as tile images
    SOURCE_FORMAT: The single raster format read and written by the package
    SOURCE_FORMATS: Decoder format names accepted as that raster format
    JPEG_QUALITY: Fixed compression quality of the encoded mosaic
    NUM_WORKERS: Default size of the worker pools
    DEFAULT_TILES_DIR: Default directory for tile images
    DEFAULT_OUTPUT_FILE: Default side-artifact path used by the web app
"""

import numbers
import os
from typing import Tuple

from .exceptions import ConfigError

# ========== Grid Settings ==========
DEFAULT_DIVISIONS: int = 20
"""Default number of cells along each edge used by the web app"""

MAX_DIVISIONS: int = 200
"""Upper bound offered by the web app slider"""

# ========== File and Directory Settings ==========
DEFAULT_TILES_DIR: str = "images"
"""Default directory containing tile images"""

DEFAULT_OUTPUT_FILE: str = "mosaic.jpg"
"""Side artifact written by the web app after each run"""

TILE_EXTENSIONS: Tuple[str, ...] = (".jpg", ".jpeg")
"""Tile file extensions, matched case-insensitively"""

SOURCE_FORMAT: str = "JPEG"
"""Pillow format name of the only supported raster format"""

SOURCE_FORMATS: Tuple[str, ...] = ("JPEG", "MPO")
"""Pillow format names accepted on decode; MPO is a JPEG with multi-picture
metadata, as written by many phone cameras, and decodes to its first frame"""

# ========== Encoding Settings ==========
JPEG_QUALITY: int = 80
"""Compression quality of the encoded mosaic (0-100)"""

# ========== Performance Settings ==========
NUM_WORKERS: int = max(4, os.cpu_count() or 1)
"""Number of worker threads for palette building and compositing"""

# ========== Logging Settings ==========
LOG_LEVEL: str = "INFO"
"""Logging level: 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'"""

# ========== Metadata Column Names ==========
METADATA_COLUMNS = {
    "filename": "filename",
    "width": "width",
    "height": "height",
    "avg_red": "average-red",
    "avg_green": "average-green",
    "avg_blue": "average-blue",
    "dominant_color": "dominant-color",
}
"""Column names of the palette report produced by Palette.to_dataframe"""


def validate_divisions(divisions: int) -> None:
    """
    Validate the grid division count.

    Args:
        divisions: Number of cells along each edge of the source image

    Raises:
        ConfigError: If divisions is not a positive integer

    Example:
        >>> validate_divisions(10)  # Valid
        >>> validate_divisions(0)  # Raises ConfigError
    """
    if isinstance(divisions, bool) or not isinstance(divisions, numbers.Integral):
        raise ConfigError(
            f"Division count must be an integer, got {type(divisions).__name__}"
        )

    if divisions <= 0:
        raise ConfigError(f"Division count must be positive, got {divisions}")


def compute_cell_deltas(width: int, height: int, divisions: int) -> Tuple[int, int]:
    """
    Compute the cell width and height for a grid of the given division count.

    Args:
        width: Source image width in pixels
        height: Source image height in pixels
        divisions: Number of cells along each edge

    Returns:
        Tuple[int, int]: Cell dimensions (x_delta, y_delta)

    Raises:
        ConfigError: If divisions is invalid or either delta would be zero

    Example:
        >>> compute_cell_deltas(100, 80, 10)
        (10, 8)
        >>> compute_cell_deltas(100, 5, 10)  # Raises ConfigError
    """
    validate_divisions(divisions)
    divisions = int(divisions)

    x_delta = width // divisions
    y_delta = height // divisions

    if x_delta <= 0 or y_delta <= 0:
        raise ConfigError(
            f"x_delta={x_delta}, y_delta={y_delta}, must be > 0 "
            f"(image {width}x{height}, {divisions} divisions)",
            x_delta=x_delta,
            y_delta=y_delta,
        )

    return x_delta, y_delta


def validate_jpeg_quality(quality: int) -> None:
    """
    Validate a JPEG quality setting.

    Raises:
        ConfigError: If quality is outside [1, 95]
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ConfigError(f"JPEG quality must be an integer, got {type(quality).__name__}")

    if not 1 <= quality <= 95:
        raise ConfigError(f"JPEG quality must be in range [1, 95], got {quality}")


def validate_max_workers(max_workers: int) -> None:
    """Validate a worker pool size."""
    if isinstance(max_workers, bool) or not isinstance(max_workers, int):
        raise ConfigError(f"max_workers must be an integer, got {type(max_workers).__name__}")

    if max_workers < 1:
        raise ConfigError(f"max_workers must be at least 1, got {max_workers}")
