"""
Mosaic builder module - main mosaic construction logic.

This module provides the MosaicEngine class that orchestrates the mosaic
generation process: it validates the grid, builds a fresh palette from the
tile directory, composites the mosaic and encodes the result.

Classes:
    MosaicResult: Output of one mosaic request
    MosaicEngine: Main class for creating photomosaics

Functions:
    create_mosaic: One-call helper returning the encoded mosaic
"""

import base64
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import pandas as pd
from PIL import Image

from .compositor import CellMatch, MosaicCompositor
from .config import (
    DEFAULT_TILES_DIR,
    JPEG_QUALITY,
    NUM_WORKERS,
    compute_cell_deltas,
    validate_jpeg_quality,
    validate_max_workers,
)
from .image_processor import encode_image, prepare_source
from .palette import build_palette
from .utils import logger

SourceLike = Union[np.ndarray, Image.Image, bytes]


@dataclass
class MosaicResult:
    """
    Output of one mosaic request.

    Attributes:
        image: Mosaic canvas (H, W, 3) uint8, same size as the source
        encoded: The mosaic encoded as JPEG
        matches: Chosen tile for every cell, in row-major order
        x_delta: Cell width
        y_delta: Cell height
        palette_size: Number of tiles the palette held
        elapsed: Wall time of the whole request in seconds
    """
    image: np.ndarray
    encoded: bytes
    matches: List[CellMatch]
    x_delta: int
    y_delta: int
    palette_size: int
    elapsed: float

    @property
    def cell_count(self) -> int:
        return len(self.matches)

    def to_base64(self) -> str:
        """Encoded mosaic as a base64 string, ready for embedding in HTML."""
        return base64.b64encode(self.encoded).decode("ascii")

    def tile_usage(self) -> pd.Series:
        """
        Count how many cells each tile was used for.

        Returns:
            pd.Series: Cell counts indexed by tile identifier, most used first
        """
        return pd.Series(
            [match.identifier for match in self.matches], dtype="object"
        ).value_counts()


class MosaicEngine:
    """
    Main class for creating photomosaics from a directory of tiles.

    The MosaicEngine coordinates the mosaic generation process:
    1. Validates the division count against the source size
    2. Builds a palette from the tile directory (in parallel)
    3. Matches every grid cell to its nearest tile and draws it (in parallel)
    4. Encodes the finished mosaic as JPEG

    The palette is rebuilt for every request because the tiles are scaled to
    that request's cell size.

    Attributes:
        tile_directory: Directory containing tile images
        max_workers: Thread pool size for both phases
        jpeg_quality: Compression quality of the encoded mosaic

    Example:
        >>> from photo_mosaic import MosaicEngine, load_image
        >>>
        >>> engine = MosaicEngine(tile_directory='images/')
        >>> result = engine.create_mosaic(load_image("photo.jpg"), divisions=20)
        >>> print(result.cell_count, len(result.encoded))
        400 48213
    """

    def __init__(self,
                 tile_directory: Union[str, Path] = DEFAULT_TILES_DIR,
                 max_workers: Optional[int] = None,
                 jpeg_quality: int = JPEG_QUALITY):
        """
        Initialize MosaicEngine.

        Args:
            tile_directory: Directory containing tile images
            max_workers: Thread pool size (default: config.NUM_WORKERS)
            jpeg_quality: JPEG quality of the encoded mosaic

        Raises:
            ConfigError: If max_workers or jpeg_quality is invalid
        """
        self.tile_directory = Path(tile_directory)
        self.max_workers = max_workers if max_workers is not None else NUM_WORKERS
        validate_max_workers(self.max_workers)

        validate_jpeg_quality(jpeg_quality)
        self.jpeg_quality = jpeg_quality

        logger.info(
            f"Initialized MosaicEngine for {self.tile_directory} "
            f"with {self.max_workers} workers"
        )

    def create_mosaic(self,
                      image: SourceLike,
                      divisions: int,
                      save_path: Optional[Union[str, Path]] = None) -> MosaicResult:
        """
        Create a photomosaic from a source image.

        Args:
            image: Source as RGB array (H, W, 3), PIL image or JPEG bytes
            divisions: Number of cells along each edge
            save_path: Optionally also write the encoded mosaic to this file

        Returns:
            MosaicResult: Mosaic image, JPEG bytes and per-cell matches

        Raises:
            DecodeError: If JPEG bytes were given and cannot be decoded
            ConfigError: If divisions yields a zero cell width or height
            DirectoryAccessError: If the tile directory cannot be read
            EmptyPaletteError: If the tile directory holds no usable tiles

        Example:
            >>> result = engine.create_mosaic(image, divisions=10)
            >>> with open("mosaic.jpg", "wb") as f:
            ...     f.write(result.encoded)
        """
        start_time = time.time()

        source = prepare_source(image)
        height, width = source.shape[:2]

        x_delta, y_delta = compute_cell_deltas(width, height, divisions)
        logger.info(
            f"Creating mosaic of {width}x{height} image with {divisions} divisions "
            f"(x_delta={x_delta}, y_delta={y_delta})"
        )

        try:
            palette = build_palette(
                self.tile_directory, x_delta, y_delta, max_workers=self.max_workers
            )

            canvas = np.zeros_like(source)
            compositor = MosaicCompositor(palette, max_workers=self.max_workers)
            matches = compositor.composite(source, canvas, x_delta, y_delta)

            encoded = encode_image(canvas, quality=self.jpeg_quality)
        except Exception as e:
            logger.error(f"Mosaic generation failed: {e}")
            raise

        if save_path is not None:
            Path(save_path).write_bytes(encoded)
            logger.info(f"Saved mosaic to {save_path}")

        elapsed = time.time() - start_time
        logger.info(f"Mosaic created in {elapsed:.3f}s")

        return MosaicResult(
            image=canvas,
            encoded=encoded,
            matches=matches,
            x_delta=x_delta,
            y_delta=y_delta,
            palette_size=len(palette),
            elapsed=elapsed,
        )


def create_mosaic(tile_directory: Union[str, Path],
                  image: SourceLike,
                  divisions: int,
                  max_workers: Optional[int] = None) -> bytes:
    """
    Create a photomosaic and return it as JPEG bytes.

    Args:
        tile_directory: Directory containing tile images
        image: Source as RGB array, PIL image or JPEG bytes
        divisions: Number of cells along each edge
        max_workers: Thread pool size (default: config.NUM_WORKERS)

    Returns:
        bytes: Encoded mosaic
    """
    engine = MosaicEngine(tile_directory, max_workers=max_workers)
    return engine.create_mosaic(image, divisions).encoded
