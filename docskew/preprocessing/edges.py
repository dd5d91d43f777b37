"""Sobel edge extraction shared by the edge-based angle estimators."""

from dataclasses import dataclass

import cv2
import numpy as np

from docskew.utils.logger import get_logger

from .pipeline import ProcessedBitmap

logger = get_logger(__name__)


@dataclass
class EdgeField:
    """Per-pixel Sobel gradient magnitude.

    Attributes:
        magnitude: ``(H, W)`` float32 array; the outermost rows and columns
            are always zero.
    """

    magnitude: np.ndarray


def sobel_edges(bitmap: ProcessedBitmap) -> EdgeField:
    """Compute the 3x3 Sobel gradient magnitude of a bitmap.

    Args:
        bitmap: Preprocessed single-channel bitmap.

    Returns:
        Edge field with the same dimensions as the bitmap.
    """
    gray = bitmap.pixels.astype(np.float32)
    if min(gray.shape) < 3:
        return EdgeField(magnitude=np.zeros_like(gray))

    gx = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=3)
    magnitude = cv2.magnitude(gx, gy)

    magnitude[0, :] = 0
    magnitude[-1, :] = 0
    magnitude[:, 0] = 0
    magnitude[:, -1] = 0

    logger.debug("Computed Sobel edge field, max magnitude %.1f", magnitude.max())
    return EdgeField(magnitude=magnitude)
