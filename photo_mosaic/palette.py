"""
Palette module for the photo mosaic package.

This module builds the palette of candidate tiles for one mosaic request and
answers nearest-color queries against it. Tiles are loaded from a directory,
decoded, scaled to the cell size and measured in parallel on a bounded
thread pool; the completed palette is read-only and safe to share between
compositing workers.

Classes:
    PaletteTile: One scaled tile and its average color
    Palette: Read-only collection of tiles with nearest-color matching

Functions:
    list_tile_files: Find candidate tile files in a directory
    load_tile: Decode, scale and measure one tile file
    build_palette: Build a palette from a tile directory
"""

import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from PIL import Image

from .color import ColorLike, image_average_color
from .config import (
    METADATA_COLUMNS,
    NUM_WORKERS,
    TILE_EXTENSIONS,
    validate_max_workers,
)
from .exceptions import DirectoryAccessError, EmptyPaletteError
from .image_processor import DECODE_ERRORS, check_source_format, scale_tile
from .utils import logger, rgb_to_text


@dataclass(frozen=True, eq=False)
class PaletteTile:
    """
    A tile scaled to cover one cell, with its average color.

    Attributes:
        identifier: Tile file name, unique within a palette
        scaled: Scaled tile image (h, w, 3) uint8, h >= y_delta and w >= x_delta
        average_color: Mean (R, G, B) over the whole scaled image
    """
    identifier: str
    scaled: np.ndarray
    average_color: np.ndarray


class Palette:
    """
    Read-only collection of palette tiles keyed by identifier.

    On construction the palette builds a color index: identifiers in
    lexicographic order and the matching (K, 3) matrix of average colors.
    Nearest-color queries scan that index, so among tiles at exactly the
    same distance the lexicographically smallest identifier wins no matter
    in which order the tiles were loaded.

    Attributes:
        x_delta: Cell width the tiles were scaled for
        y_delta: Cell height the tiles were scaled for

    Example:
        >>> palette = build_palette("images/", x_delta=10, y_delta=10)
        >>> print(f"Loaded {len(palette)} tiles")
        Loaded 250 tiles
        >>> palette.nearest([255, 0, 0])
        'red_car.jpg'
    """

    def __init__(self, tiles: Dict[str, PaletteTile], x_delta: int, y_delta: int):
        if not tiles:
            raise EmptyPaletteError("A palette needs at least one tile")

        self._tiles: Dict[str, PaletteTile] = dict(tiles)
        self.x_delta = x_delta
        self.y_delta = y_delta

        self._build_color_index()

    def _build_color_index(self) -> None:
        self._identifiers: Tuple[str, ...] = tuple(sorted(self._tiles))
        colors = np.stack([
            np.asarray(self._tiles[name].average_color, dtype=np.float64)
            for name in self._identifiers
        ])
        colors.setflags(write=False)
        self._colors = colors

    @property
    def identifiers(self) -> Tuple[str, ...]:
        """Tile identifiers in lexicographic order."""
        return self._identifiers

    @property
    def colors(self) -> np.ndarray:
        """Average colors (K, 3) aligned with identifiers."""
        return self._colors

    def distances(self, target: ColorLike) -> np.ndarray:
        """
        Euclidean distance from a color to every tile, in identifier order.

        Args:
            target: RGB color (3,) in the same scale as the tile colors

        Returns:
            np.ndarray: Distances (K,)
        """
        target = np.asarray(target, dtype=np.float64)
        if target.shape != (3,):
            raise ValueError(f"Target color must have 3 channels, got shape {target.shape}")

        return np.sqrt(np.sum((self._colors - target) ** 2, axis=1))

    def nearest(self, target: ColorLike) -> str:
        """
        Find the tile whose average color is nearest to a color.

        Args:
            target: RGB color (3,) in the same scale as the tile colors

        Returns:
            str: Identifier of the best matching tile; ties go to the
                 lexicographically smallest identifier

        Example:
            >>> palette.nearest([250, 5, 5])
            'red.jpg'
        """
        return self.match(target)[0]

    def match(self, target: ColorLike) -> Tuple[str, float]:
        """Return the nearest identifier together with its distance."""
        if not self._identifiers:
            raise EmptyPaletteError("Cannot match against an empty palette")

        distances = self.distances(target)
        index = int(np.argmin(distances))
        return self._identifiers[index], float(distances[index])

    def nearest_tile(self, target: ColorLike) -> PaletteTile:
        """Return the PaletteTile nearest to a color."""
        return self._tiles[self.nearest(target)]

    def __len__(self) -> int:
        return len(self._tiles)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._tiles

    def __getitem__(self, identifier: str) -> PaletteTile:
        return self._tiles[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._identifiers)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Describe the palette as a table, one row per tile.

        Returns:
            pd.DataFrame: Columns named after config.METADATA_COLUMNS,
                          sorted by file name
        """
        rows = []
        for name in self._identifiers:
            tile = self._tiles[name]
            r, g, b = (float(c) for c in tile.average_color)
            rows.append({
                METADATA_COLUMNS["filename"]: name,
                METADATA_COLUMNS["width"]: tile.scaled.shape[1],
                METADATA_COLUMNS["height"]: tile.scaled.shape[0],
                METADATA_COLUMNS["avg_red"]: r,
                METADATA_COLUMNS["avg_green"]: g,
                METADATA_COLUMNS["avg_blue"]: b,
                METADATA_COLUMNS["dominant_color"]: rgb_to_text(r, g, b),
            })
        return pd.DataFrame(rows, columns=list(METADATA_COLUMNS.values()))

    def get_statistics(self) -> Dict:
        """
        Get statistics about the palette.

        Returns:
            Dict: Tile count, cell size, dominant color counts and memory use
        """
        frame = self.to_dataframe()
        memory = sum(tile.scaled.nbytes for tile in self._tiles.values())
        return {
            'total_tiles': len(self._tiles),
            'cell_size': (self.x_delta, self.y_delta),
            'dominant_colors': frame[METADATA_COLUMNS["dominant_color"]].value_counts().to_dict(),
            'memory_mb': memory / (1024 * 1024),
        }


def list_tile_files(tile_directory: Union[str, Path],
                    extensions: Sequence[str] = TILE_EXTENSIONS) -> List[Path]:
    """
    Find candidate tile files in a directory.

    Args:
        tile_directory: Directory to scan (not recursive)
        extensions: Recognised suffixes, compared case-insensitively

    Returns:
        List[Path]: Matching regular files, sorted by name

    Raises:
        DirectoryAccessError: If the directory cannot be listed
    """
    wanted = {ext.lower() for ext in extensions}
    try:
        entries = list(os.scandir(tile_directory))
    except OSError as e:
        raise DirectoryAccessError(f"Cannot read tile directory {tile_directory}: {e}") from e

    files = [
        Path(entry.path) for entry in entries
        if Path(entry.name).suffix.lower() in wanted and entry.is_file()
    ]
    return sorted(files, key=lambda p: p.name)


def load_tile(path: Union[str, Path], x_delta: int, y_delta: int) -> Optional[PaletteTile]:
    """
    Decode, scale and measure one tile file.

    Args:
        path: Tile file
        x_delta: Cell width to cover
        y_delta: Cell height to cover

    Returns:
        Optional[PaletteTile]: The tile, or None if the file could not be
                               opened or decoded
    """
    path = Path(path)
    try:
        with Image.open(path) as pil_image:
            check_source_format(pil_image)
            scaled = scale_tile(pil_image, x_delta, y_delta)
    except DECODE_ERRORS as e:
        logger.warning(f"Failed to load tile {path.name}: {e}")
        return None

    scaled.setflags(write=False)
    average = image_average_color(scaled)
    logger.debug(f"Loaded tile {path.name}: {scaled.shape[1]}x{scaled.shape[0]}, color {average}")

    return PaletteTile(identifier=path.name, scaled=scaled, average_color=average)


def build_palette(tile_directory: Union[str, Path],
                  x_delta: int,
                  y_delta: int,
                  max_workers: Optional[int] = None,
                  extensions: Sequence[str] = TILE_EXTENSIONS) -> Palette:
    """
    Build a palette from every usable tile file in a directory.

    One task per candidate file runs on a thread pool of at most
    max_workers threads; the function returns once every task finished.
    Files that fail to decode are skipped.

    Args:
        tile_directory: Directory containing tile images
        x_delta: Cell width the tiles must cover
        y_delta: Cell height the tiles must cover
        max_workers: Thread pool size (default: config.NUM_WORKERS)
        extensions: Recognised tile file suffixes

    Returns:
        Palette: Tiles keyed by file name

    Raises:
        DirectoryAccessError: If the directory cannot be listed
        EmptyPaletteError: If no tile could be loaded

    Example:
        >>> palette = build_palette("images/", x_delta=16, y_delta=12)
        >>> palette.get_statistics()['total_tiles']
        250
    """
    if x_delta <= 0 or y_delta <= 0:
        raise ValueError(f"Cell deltas must be positive, got {x_delta}x{y_delta}")

    workers = max_workers if max_workers is not None else NUM_WORKERS
    validate_max_workers(workers)

    files = list_tile_files(tile_directory, extensions)
    logger.info(f"Building palette from {len(files)} candidate files in {tile_directory}")

    start_time = time.time()
    tiles: Dict[str, PaletteTile] = {}

    if files:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_path = {
                executor.submit(load_tile, path, x_delta, y_delta): path
                for path in files
            }

            for future in future_to_path:
                tile = future.result()
                if tile is not None:
                    tiles[tile.identifier] = tile

    if not tiles:
        raise EmptyPaletteError(
            f"No usable tiles found in {tile_directory} "
            f"({len(files)} candidate files)"
        )

    elapsed = time.time() - start_time
    logger.info(
        f"Palette built with {len(tiles)} of {len(files)} tiles in {elapsed:.3f}s"
    )

    return Palette(tiles, x_delta, y_delta)
