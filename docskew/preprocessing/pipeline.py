"""Preprocessing pipeline feeding the angle estimators.

Smooths the decoded photograph and reduces it to a single-channel bitmap
according to the per-call processing options.
"""

from dataclasses import dataclass

import numpy as np

from docskew.utils.config import ProcessingOptions
from docskew.utils.logger import get_logger

from .binarize import binarize_threshold, to_luma
from .blur import gaussian_blur

logger = get_logger(__name__)


@dataclass
class ProcessedBitmap:
    """Single-channel bitmap derived from the source image.

    Attributes:
        pixels: ``(H, W)`` uint8 array, 0/255 when binarized.
        binarized: Whether the fixed threshold was applied.
    """

    pixels: np.ndarray
    binarized: bool

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


class PreprocessingPipeline:
    """Blur-then-threshold preprocessing for skew estimation.

    Args:
        options: Processing options controlling which steps to apply.
    """

    def __init__(self, options: ProcessingOptions) -> None:
        self.options = options

    def process(self, image: np.ndarray) -> ProcessedBitmap:
        """Run preprocessing on an image.

        Args:
            image: Source pixels, RGBA or grayscale uint8.

        Returns:
            Bitmap with the same width and height as the input.
        """
        result = image

        if self.options.enable_gaussian_blur:
            result = gaussian_blur(result, self.options.blur_radius)

        if self.options.enable_binarization:
            pixels = binarize_threshold(result, self.options.threshold_value)
        else:
            pixels = np.clip(np.rint(to_luma(result)), 0, 255).astype(np.uint8)

        logger.debug(
            "Preprocessing complete: %dx%d, blur=%s, binarized=%s",
            pixels.shape[1],
            pixels.shape[0],
            self.options.enable_gaussian_blur,
            self.options.enable_binarization,
        )
        return ProcessedBitmap(
            pixels=pixels, binarized=self.options.enable_binarization
        )
