"""
Color measurement for mosaic matching.

Average colors are kept in the raw decoded channel domain (0-255 for 8-bit
images) so that distances between source cells and tiles compare exactly.

Functions:
    average_color: Mean RGB color of a rectangular region
    image_average_color: Mean RGB color of a whole image
    color_distance: Euclidean distance between two colors
"""

from typing import Sequence, Union

import numpy as np

from .exceptions import DegenerateRegionError

ColorLike = Union[Sequence[float], np.ndarray]


def average_color(image: np.ndarray,
                  x_min: int, y_min: int,
                  x_max: int, y_max: int) -> np.ndarray:
    """
    Compute the mean color of a rectangular region of an image.

    The region covers columns x_min..x_max-1 and rows y_min..y_max-1, so it
    holds exactly (x_max - x_min) * (y_max - y_min) pixels.

    Args:
        image: Image array (H, W, C)
        x_min: Left edge (inclusive)
        y_min: Top edge (inclusive)
        x_max: Right edge (exclusive)
        y_max: Bottom edge (exclusive)

    Returns:
        np.ndarray: Mean (R, G, B) as float64, same scale as the image values

    Raises:
        DegenerateRegionError: If the region is empty or leaves the image

    Example:
        >>> image = np.full((10, 10, 3), (200, 10, 30), dtype=np.uint8)
        >>> average_color(image, 0, 0, 5, 5)
        array([200.,  10.,  30.])
    """
    height, width = image.shape[:2]

    if x_max <= x_min or y_max <= y_min:
        raise DegenerateRegionError(
            f"Region ({x_min}, {y_min})-({x_max}, {y_max}) has no pixels"
        )

    if x_min < 0 or y_min < 0 or x_max > width or y_max > height:
        raise DegenerateRegionError(
            f"Region ({x_min}, {y_min})-({x_max}, {y_max}) exceeds image "
            f"bounds {width}x{height}"
        )

    region = image[y_min:y_max, x_min:x_max, :3]
    return region.mean(axis=(0, 1), dtype=np.float64)


def image_average_color(image: np.ndarray) -> np.ndarray:
    """Mean color over the full bounds of an image."""
    height, width = image.shape[:2]
    return average_color(image, 0, 0, width, height)


def color_distance(a: ColorLike, b: ColorLike) -> float:
    """
    Euclidean distance between two RGB colors.

    Example:
        >>> color_distance([255, 0, 0], [255, 0, 0])
        0.0
        >>> color_distance([0, 0, 0], [3, 4, 0])
        5.0
    """
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.sqrt(np.sum(diff ** 2)))
