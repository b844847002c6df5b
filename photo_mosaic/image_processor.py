"""
Image processing module for the photo mosaic package.

This module provides functions for decoding and encoding JPEG images,
scaling tiles to the cell size, and partitioning an image into a grid of
cells.

Classes:
    Cell: One rectangular region of the mosaic grid

Functions:
    check_source_format: Reject images that are not JPEG
    decode_image: Decode JPEG bytes into an RGB array
    load_image: Load a JPEG file into an RGB array
    prepare_source: Normalise any accepted source into a read-only RGB array
    encode_image: Encode an RGB array as JPEG bytes
    compute_scaled_size: Size a tile must be scaled to in order to cover a cell
    scale_tile: Resample a tile so it covers a cell
    compute_grid: Divide an image into cells
"""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .config import JPEG_QUALITY, SOURCE_FORMAT, SOURCE_FORMATS, validate_jpeg_quality
from .exceptions import DecodeError
from .utils import logger, to_rgb_array


@dataclass(frozen=True)
class Cell:
    """
    One rectangular region of the mosaic grid.

    Attributes:
        row: Grid row index
        col: Grid column index
        x: Left pixel column
        y: Top pixel row
        width: Cell width in pixels (x_delta, smaller on a clamped last column)
        height: Cell height in pixels (y_delta, smaller on a clamped last row)
    """
    row: int
    col: int
    x: int
    y: int
    width: int
    height: int

    @property
    def x_max(self) -> int:
        return self.x + self.width

    @property
    def y_max(self) -> int:
        return self.y + self.height


# Errors raised by Pillow for files that are unreadable, malformed or too large
DECODE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError)


def check_source_format(pil_image: Image.Image) -> None:
    """
    Ensure an opened image is a JPEG.

    Multi-picture JPEGs (reported by Pillow as MPO) are accepted; they
    decode to their first frame.

    Raises:
        UnidentifiedImageError: If the image is in any other format
    """
    if pil_image.format not in SOURCE_FORMATS:
        raise UnidentifiedImageError(
            f"Expected {SOURCE_FORMAT} data, got {pil_image.format}"
        )


def _open_jpeg(fp) -> Image.Image:
    pil_image = Image.open(fp)
    check_source_format(pil_image)
    pil_image.load()
    return pil_image


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode JPEG bytes into an RGB array.

    Args:
        data: Encoded JPEG image

    Returns:
        np.ndarray: Decoded image (H, W, 3) uint8

    Raises:
        DecodeError: If the bytes are not a decodable JPEG image

    Example:
        >>> with open("photo.jpg", "rb") as f:
        ...     image = decode_image(f.read())
        >>> print(image.shape)
        (768, 1024, 3)
    """
    try:
        pil_image = _open_jpeg(io.BytesIO(data))
        return np.array(pil_image.convert("RGB"))
    except DECODE_ERRORS as e:
        raise DecodeError(f"Failed to decode source image: {e}") from e


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load a JPEG file into an RGB array.

    Raises:
        FileNotFoundError: If the file does not exist
        DecodeError: If the file is not a decodable JPEG image
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    image = decode_image(path.read_bytes())
    logger.debug(f"Loaded image from {path} with shape {image.shape}")
    return image


def prepare_source(image: Union[np.ndarray, Image.Image, bytes]) -> np.ndarray:
    """
    Normalise a source image into a read-only (H, W, 3) uint8 array.

    Accepts an already decoded array, a PIL image, or JPEG bytes. The
    returned array is a private copy with its writeable flag cleared, so
    concurrent readers never observe a mutation.

    Raises:
        DecodeError: If bytes are given and cannot be decoded
        TypeError: If the input type is not supported
        ValueError: If the array shape is not an image
    """
    if isinstance(image, (bytes, bytearray)):
        array = decode_image(bytes(image))
    elif isinstance(image, Image.Image):
        array = np.array(image.convert("RGB"))
    elif isinstance(image, np.ndarray):
        array = to_rgb_array(image)
    else:
        raise TypeError(
            f"Source must be a NumPy array, PIL image or bytes, got {type(image).__name__}"
        )

    source = np.array(array, dtype=np.uint8, copy=True)
    source.setflags(write=False)
    return source


def encode_image(image: np.ndarray, quality: int = JPEG_QUALITY) -> bytes:
    """
    Encode an RGB array as JPEG bytes.

    Args:
        image: Image (H, W, 3) uint8
        quality: JPEG quality

    Returns:
        bytes: Encoded JPEG data
    """
    validate_jpeg_quality(quality)

    buffer = io.BytesIO()
    Image.fromarray(to_rgb_array(image)).save(buffer, format=SOURCE_FORMAT, quality=quality)
    return buffer.getvalue()


def compute_scaled_size(width: int, height: int,
                        x_delta: int, y_delta: int) -> Tuple[int, int]:
    """
    Compute the size a tile is scaled to so that it covers a cell.

    The tile keeps its aspect ratio and its narrow dimension, relative to
    the cell, matches the cell exactly. A tile no wider than the cell's
    aspect ratio is scaled to width x_delta with proportional height.

    Args:
        width: Tile width
        height: Tile height
        x_delta: Cell width
        y_delta: Cell height

    Returns:
        Tuple[int, int]: Scaled (width, height), at least (x_delta, y_delta)

    Example:
        >>> compute_scaled_size(100, 100, 10, 10)
        (10, 10)
        >>> compute_scaled_size(100, 200, 10, 10)
        (10, 20)
        >>> compute_scaled_size(200, 100, 10, 10)
        (20, 10)
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Tile size must be positive, got {width}x{height}")

    scale = max(x_delta / width, y_delta / height)
    new_width = max(x_delta, int(round(width * scale)))
    new_height = max(y_delta, int(round(height * scale)))
    return new_width, new_height


def scale_tile(pil_image: Image.Image, x_delta: int, y_delta: int) -> np.ndarray:
    """
    Resample a tile with the LANCZOS filter so that it covers one cell.

    Returns:
        np.ndarray: Scaled tile (h, w, 3) uint8 with w >= x_delta, h >= y_delta
    """
    size = compute_scaled_size(pil_image.width, pil_image.height, x_delta, y_delta)
    resized = pil_image.convert("RGB").resize(size, Image.Resampling.LANCZOS)
    return np.array(resized)


def compute_grid(width: int, height: int,
                 x_delta: int, y_delta: int) -> List[Cell]:
    """
    Divide an image into a grid of cells.

    Cells start at the top-left corner and step by x_delta and y_delta.
    When a dimension is not an exact multiple of its delta, the last
    column or row is clamped to the remaining pixels, so the cells cover
    every pixel of the image exactly once.

    Args:
        width: Image width
        height: Image height
        x_delta: Cell width
        y_delta: Cell height

    Returns:
        List[Cell]: Cells in row-major order

    Example:
        >>> cells = compute_grid(100, 100, 10, 10)
        >>> len(cells)
        100
        >>> cells = compute_grid(105, 100, 10, 10)
        >>> len(cells), cells[10].width
        (110, 5)
    """
    if x_delta <= 0 or y_delta <= 0:
        raise ValueError(f"Cell deltas must be positive, got {x_delta}x{y_delta}")

    cells = []
    for row, y in enumerate(range(0, height, y_delta)):
        cell_h = min(y_delta, height - y)
        for col, x in enumerate(range(0, width, x_delta)):
            cell_w = min(x_delta, width - x)
            cells.append(Cell(row=row, col=col, x=x, y=y, width=cell_w, height=cell_h))

    logger.debug(
        f"Created grid of {len(cells)} cells over {width}x{height} image. "
        f"Cell size: {x_delta}x{y_delta}"
    )
    return cells
