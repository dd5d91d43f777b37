"""Gaussian smoothing for document photographs.

Reduces sensor noise before thresholding so isolated speckles do not turn
into foreground pixels.
"""

import cv2
import numpy as np

from docskew.utils.logger import get_logger

logger = get_logger(__name__)


def gaussian_kernel(radius: int) -> np.ndarray:
    """Build a normalized square Gaussian kernel.

    Args:
        radius: Kernel half-width; the kernel is ``(2 * radius + 1)`` wide
            and sigma is ``radius / 3``.

    Returns:
        Float32 kernel whose entries sum to 1.
    """
    if radius <= 0:
        return np.ones((1, 1), dtype=np.float32)

    sigma = radius / 3
    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    xx, yy = np.meshgrid(offsets, offsets)
    kernel = np.exp(-(xx**2 + yy**2) / (2 * sigma**2))
    return (kernel / kernel.sum()).astype(np.float32)


def gaussian_blur(image: np.ndarray, radius: int = 1) -> np.ndarray:
    """Apply Gaussian blur to every channel of an image.

    Taps that fall outside the image are skipped and the remaining weights
    renormalized, so borders are not darkened by implicit zero padding.
    Cost grows with ``radius ** 2`` per pixel.

    Args:
        image: ``(H, W)`` or ``(H, W, C)`` uint8 image.
        radius: Kernel half-width. Zero returns an unchanged copy.

    Returns:
        Blurred uint8 image with the same shape as the input.
    """
    if radius <= 0:
        return image.copy()

    kernel = gaussian_kernel(radius)
    weighted = cv2.filter2D(
        image.astype(np.float32), -1, kernel, borderType=cv2.BORDER_CONSTANT
    )
    coverage = cv2.filter2D(
        np.ones(image.shape[:2], dtype=np.float32),
        -1,
        kernel,
        borderType=cv2.BORDER_CONSTANT,
    )
    if weighted.ndim == 3:
        coverage = coverage[..., np.newaxis]

    result = np.clip(np.rint(weighted / coverage), 0, 255).astype(np.uint8)
    logger.debug("Applied Gaussian blur with radius=%d", radius)
    return result.reshape(image.shape)
