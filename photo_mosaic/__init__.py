"""
Photo Mosaic Package

Turns a source image and a directory of tile images into a photomosaic: the
source is divided into a grid, every cell is matched to the tile with the
nearest average color, and the scaled tiles are drawn into an output image
of the same size. Tile loading and cell compositing both run on bounded
thread pools.

Main Components:
    - MosaicEngine: Validates the grid, builds the palette, composites and encodes
    - Palette / build_palette: Scaled tiles with nearest-color matching
    - MosaicCompositor: Parallel per-cell matching and drawing
    - average_color: Mean color of an image region

Example:
    >>> from photo_mosaic import MosaicEngine, load_image
    >>>
    >>> engine = MosaicEngine(tile_directory='images/')
    >>> result = engine.create_mosaic(load_image('input.jpg'), divisions=20)
    >>> with open('mosaic.jpg', 'wb') as f:
    ...     f.write(result.encoded)
"""

from .mosaic_builder import MosaicEngine, MosaicResult, create_mosaic
from .palette import Palette, PaletteTile, build_palette
from .compositor import CellMatch, MosaicCompositor
from .color import average_color, color_distance
from .image_processor import Cell, compute_grid, decode_image, encode_image, load_image
from .exceptions import (
    ConfigError,
    DecodeError,
    DegenerateRegionError,
    DirectoryAccessError,
    EmptyPaletteError,
    MosaicError,
)
from .config import (
    JPEG_QUALITY,
    NUM_WORKERS,
    TILE_EXTENSIONS,
)

__version__ = "1.0.0"

__all__ = [
    # Main classes
    "MosaicEngine",
    "MosaicResult",
    "MosaicCompositor",
    "CellMatch",
    "Palette",
    "PaletteTile",
    "Cell",

    # Functions
    "create_mosaic",
    "build_palette",
    "average_color",
    "color_distance",
    "compute_grid",
    "decode_image",
    "encode_image",
    "load_image",

    # Errors
    "MosaicError",
    "ConfigError",
    "DecodeError",
    "DirectoryAccessError",
    "EmptyPaletteError",
    "DegenerateRegionError",

    # Configuration constants
    "JPEG_QUALITY",
    "NUM_WORKERS",
    "TILE_EXTENSIONS",
]
