"""
Utility functions for the photo mosaic package.

This module provides helper functions used across the package, including
logging setup, color naming, and image array validation and normalisation.

Functions:
    setup_logging: Configure logging for the package
    rgb_to_text: Convert RGB values to color name
    validate_image: Validate image format and dimensions
    to_rgb_array: Normalise an image array to (H, W, 3) uint8
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL, name: str = "photo_mosaic") -> logging.Logger:
    """
    Configure and return a logger for the package.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        name: Logger name

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging("INFO")
        >>> logger.info("Starting mosaic generation")
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


# Initialize package logger
logger = setup_logging()


def rgb_to_text(r: float, g: float, b: float) -> str:
    """
    Convert RGB values to a human-readable color name.

    Determines the dominant color based on the relative magnitudes
    of the red, green, and blue channels.

    Args:
        r: Red channel value (0-255)
        g: Green channel value (0-255)
        b: Blue channel value (0-255)

    Returns:
        str: Color name (e.g., 'Red', 'Green', 'Blue', 'Yellow', etc.)
             Returns 'Unknown' if no clear dominant color

    Example:
        >>> rgb_to_text(255, 0, 0)
        'Red'
        >>> rgb_to_text(128, 128, 128)
        'Unknown'
    """
    if r > g and r > b:
        return "Red"
    elif g > r and g > b:
        return "Green"
    elif b > r and b > g:
        return "Blue"

    elif r == g and r > b:
        return "Yellow"
    elif r == b and r > g:
        return "Magenta"
    elif g == b and g > r:
        return "Cyan"

    return "Unknown"


def validate_image(image: np.ndarray,
                   min_size: Optional[Tuple[int, int]] = None) -> None:
    """
    Validate that an image array can be used as a mosaic source or tile.

    Args:
        image: Image to validate
        min_size: Minimum (height, width), optional

    Raises:
        TypeError: If image is not a NumPy array
        ValueError: If image dimensions or channels are invalid

    Example:
        >>> image = np.zeros((256, 256, 3), dtype=np.uint8)
        >>> validate_image(image, min_size=(64, 64))
        >>> validate_image(image, min_size=(512, 512))  # Raises ValueError
    """
    if not isinstance(image, np.ndarray):
        raise TypeError(f"Image must be a NumPy array, got {type(image).__name__}")

    if image.ndim not in [2, 3]:
        raise ValueError(f"Image must be 2D or 3D array, got {image.ndim}D")

    h, w = image.shape[:2]
    if h == 0 or w == 0:
        raise ValueError(f"Image must not be empty, got {h}x{w}")

    if min_size is not None:
        min_h, min_w = min_size
        if h < min_h or w < min_w:
            raise ValueError(
                f"Image size ({h}x{w}) is smaller than minimum required ({min_h}x{min_w})"
            )

    if image.ndim == 3:
        channels = image.shape[2]
        if channels not in [1, 3, 4]:
            raise ValueError(
                f"Image must have 1, 3, or 4 color channels, got {channels}"
            )


def to_rgb_array(image: np.ndarray) -> np.ndarray:
    """
    Normalise an image array to a contiguous (H, W, 3) uint8 RGB array.

    Grayscale images are replicated across channels and an alpha channel
    is dropped. Values are clipped to [0, 255].

    Args:
        image: Image as (H, W), (H, W, 1), (H, W, 3) or (H, W, 4) array

    Returns:
        np.ndarray: RGB image (H, W, 3) of dtype uint8
    """
    validate_image(image)

    if image.ndim == 2:
        image = image[:, :, np.newaxis]

    if image.shape[2] == 1:
        image = np.repeat(image, 3, axis=2)
    elif image.shape[2] == 4:
        image = image[:, :, :3]

    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    return np.ascontiguousarray(image)
