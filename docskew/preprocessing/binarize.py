"""Grayscale conversion and fixed-threshold binarization."""

import numpy as np

from docskew.utils.logger import get_logger

logger = get_logger(__name__)

_LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def to_luma(image: np.ndarray) -> np.ndarray:
    """Convert an RGB(A) or grayscale image to float32 luma.

    Args:
        image: ``(H, W)`` grayscale or ``(H, W, 3|4)`` RGB(A) image.

    Returns:
        ``(H, W)`` float32 luma in the 0..255 range. Alpha is ignored.
    """
    if image.ndim == 2:
        return image.astype(np.float32)
    return image[..., :3].astype(np.float32) @ _LUMA_WEIGHTS


def binarize_threshold(image: np.ndarray, threshold: int = 128) -> np.ndarray:
    """Binarize an image against a fixed luma threshold.

    Args:
        image: ``(H, W)`` grayscale or ``(H, W, 3|4)`` RGB(A) image.
        threshold: Pixels with luma strictly above this become white.

    Returns:
        ``(H, W)`` uint8 image with pixel values 0 or 255.
    """
    binary = np.where(to_luma(image) > threshold, 255, 0).astype(np.uint8)
    logger.debug("Applied fixed binarization (threshold=%d)", threshold)
    return binary
