"""Directional-gradient skew estimator.

Text produces most intensity transitions across its baselines. For each
candidate angle the image is compared with itself shifted one pixel along
the candidate text normal; the direction with the strongest mean change is
taken as the normal of the text.
"""

import math

import cv2
import numpy as np

from docskew.utils.config import DetectionMethod
from docskew.utils.logger import get_logger

from .base import (
    AngleCandidate,
    EstimationContext,
    candidate_angles,
    clamp_confidence,
    select_peak,
)

logger = get_logger(__name__)


def mean_directional_gradient(gray: np.ndarray, angle: float) -> float:
    """Mean absolute difference between each interior pixel and its neighbour.

    The neighbour sits one pixel away along the normal of a baseline skewed
    by ``angle`` and is sampled bilinearly, so nearby candidate angles are
    told apart instead of snapping to the same integer offset.

    Args:
        gray: ``(H, W)`` float32 image, at least 3x3.
        angle: Candidate skew angle in degrees.

    Returns:
        Mean absolute difference over interior pixels.
    """
    theta = math.radians(angle)
    height, width = gray.shape
    shift = np.float32([[1, 0, math.sin(theta)], [0, 1, math.cos(theta)]])
    neighbour = cv2.warpAffine(
        gray,
        shift,
        (width, height),
        flags=cv2.INTER_LINEAR | cv2.WARP_INVERSE_MAP,
        borderMode=cv2.BORDER_REPLICATE,
    )
    diff = np.abs(gray[1:-1, 1:-1] - neighbour[1:-1, 1:-1])
    return float(diff.mean())


class TextOrientationEstimator:
    """Coarse 3 degree scan for the direction of strongest text gradient.

    Args:
        step: Angle granularity in degrees.
        gradient_scale: Mean gradient that maps to full confidence.
    """

    method = DetectionMethod.TEXT_ORIENTATION

    def __init__(self, step: float = 3.0, gradient_scale: float = 50.0) -> None:
        self.step = step
        self.gradient_scale = gradient_scale

    def estimate(self, context: EstimationContext) -> AngleCandidate:
        gray = context.bitmap.pixels.astype(np.float32)
        if min(gray.shape) < 3:
            return AngleCandidate(0.0, 0.0, self.method)

        angles = candidate_angles(self.step)
        gradients = np.array([mean_directional_gradient(gray, a) for a in angles])
        angle, peak = select_peak(angles, gradients)

        logger.debug("Text orientation peak gradient %.2f at %.1f degrees", peak, angle)
        return AngleCandidate(
            angle, clamp_confidence(peak / self.gradient_scale), self.method
        )
