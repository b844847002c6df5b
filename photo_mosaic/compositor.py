"""
Mosaic compositor - draws the best matching tile into every grid cell.

Classes:
    CellMatch: The tile chosen for one cell
    MosaicCompositor: Parallel per-cell matching and drawing
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .color import average_color
from .config import NUM_WORKERS, validate_max_workers
from .image_processor import Cell, compute_grid
from .palette import Palette
from .utils import logger


@dataclass(frozen=True)
class CellMatch:
    """
    The tile chosen for one cell.

    Attributes:
        cell: Grid cell
        identifier: Identifier of the matched palette tile
        distance: Color distance between the cell and the tile
    """
    cell: Cell
    identifier: str
    distance: float


class MosaicCompositor:
    """
    Fills a canvas with palette tiles, one per grid cell.

    Each cell is handled by its own task on a bounded thread pool. Tasks
    read the source image and the palette without locking, since neither
    changes while compositing. Writes into the shared canvas go through a
    single lock held only for the pixel copy.

    Attributes:
        palette: Palette to match cells against
        max_workers: Thread pool size

    Example:
        >>> compositor = MosaicCompositor(palette)
        >>> canvas = np.zeros_like(source)
        >>> matches = compositor.composite(source, canvas, x_delta=10, y_delta=10)
        >>> print(len(matches))
        100
    """

    def __init__(self, palette: Palette, max_workers: Optional[int] = None):
        if not isinstance(palette, Palette):
            raise TypeError(
                f"palette must be a Palette instance, got {type(palette).__name__}"
            )

        self.palette = palette
        self.max_workers = max_workers if max_workers is not None else NUM_WORKERS
        validate_max_workers(self.max_workers)

        self._draw_lock = threading.Lock()

    def composite(self,
                  source: np.ndarray,
                  canvas: np.ndarray,
                  x_delta: int,
                  y_delta: int) -> List[CellMatch]:
        """
        Match every cell of the source and draw the chosen tiles on the canvas.

        Args:
            source: Source image (H, W, 3), not modified
            canvas: Output image with the same shape as source, filled in place
            x_delta: Cell width
            y_delta: Cell height

        Returns:
            List[CellMatch]: One match per cell in row-major grid order

        Raises:
            ValueError: If canvas and source shapes differ, or the palette
                        tiles were scaled for a smaller cell
        """
        if canvas.shape != source.shape:
            raise ValueError(
                f"Canvas shape {canvas.shape} does not match source shape {source.shape}"
            )

        if self.palette.x_delta < x_delta or self.palette.y_delta < y_delta:
            raise ValueError(
                f"Palette tiles cover {self.palette.x_delta}x{self.palette.y_delta} "
                f"cells, need {x_delta}x{y_delta}"
            )

        height, width = source.shape[:2]
        cells = compute_grid(width, height, x_delta, y_delta)

        logger.info(
            f"Compositing {len(cells)} cells of {x_delta}x{y_delta} "
            f"with {self.max_workers} workers"
        )
        start_time = time.time()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._process_cell, source, canvas, cell)
                for cell in cells
            ]
            matches = [future.result() for future in futures]

        elapsed = time.time() - start_time
        logger.info(f"Composited {len(matches)} cells in {elapsed:.3f}s")

        return matches

    def _process_cell(self, source: np.ndarray, canvas: np.ndarray, cell: Cell) -> CellMatch:
        color = average_color(source, cell.x, cell.y, cell.x_max, cell.y_max)

        identifier, distance = self.palette.match(color)
        self._draw(canvas, cell, self.palette[identifier].scaled)

        return CellMatch(cell=cell, identifier=identifier, distance=distance)

    def _draw(self, canvas: np.ndarray, cell: Cell, tile_image: np.ndarray) -> None:
        # Tiles cover at least x_delta x y_delta, so the top-left corner fills the cell.
        patch = tile_image[:cell.height, :cell.width]
        with self._draw_lock:
            canvas[cell.y:cell.y_max, cell.x:cell.x_max] = patch
