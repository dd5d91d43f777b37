"""Edge-direction histogram skew estimator.

Strong edges vote, weighted by their magnitude, for the orientation of
their normal. Text edges are dominated by baselines and vertical strokes,
which both point at the same skew once folded by 90 degrees.

Binarized edges are pixel staircases: read at single-pixel scale their
differences point at 0 or 90 degrees whatever the skew. The edge field is
therefore smoothed before differencing, and neighbouring histogram bins are
pooled before the peak is taken.
"""

import cv2
import numpy as np

from docskew.utils.config import DetectionMethod
from docskew.utils.logger import get_logger

from .base import AngleCandidate, EstimationContext, clamp_confidence, fold_angle

logger = get_logger(__name__)

HISTOGRAM_BINS = 180

# Triangular window over +/-3 bins; the centre bin keeps the largest share.
_POOLING_WEIGHTS = np.array([1.0, 2.0, 3.0, 4.0, 3.0, 2.0, 1.0])


def orientation_histogram(
    magnitude: np.ndarray,
    magnitude_threshold: float = 50.0,
    smoothing_sigma: float = 3.0,
) -> np.ndarray:
    """Magnitude-weighted histogram of edge normal orientations.

    The direction at each pixel comes from central differences of the
    Gaussian-smoothed edge field. Pixels where that gradient vanishes have
    no direction and do not vote.

    Args:
        magnitude: ``(H, W)`` edge magnitude field.
        magnitude_threshold: Minimum smoothed magnitude for a pixel to vote.
        smoothing_sigma: Gaussian sigma applied to the field before
            differencing; 0 disables smoothing.

    Returns:
        Array of 180 accumulated weights; bin ``k`` holds normals at ``k``
        degrees (y axis pointing up, modulo 180).
    """
    histogram = np.zeros(HISTOGRAM_BINS, dtype=np.float64)
    if min(magnitude.shape) < 3:
        return histogram

    field = magnitude.astype(np.float32)
    if smoothing_sigma > 0:
        field = cv2.GaussianBlur(field, (0, 0), smoothing_sigma)

    centre = field[1:-1, 1:-1]
    dx = field[1:-1, 2:] - field[1:-1, :-2]
    dy = field[2:, 1:-1] - field[:-2, 1:-1]
    voting = (centre > magnitude_threshold) & ((dx != 0) | (dy != 0))
    if not voting.any():
        return histogram

    # Rows grow downwards; flip dy so angles read counter-clockwise.
    normals = np.degrees(np.arctan2(-dy[voting], dx[voting]))
    bins = np.rint(normals).astype(np.intp) % HISTOGRAM_BINS
    histogram += np.bincount(
        bins, weights=centre[voting].astype(np.float64), minlength=HISTOGRAM_BINS
    )
    return histogram


def pool_histogram(histogram: np.ndarray) -> np.ndarray:
    """Spread each bin over its neighbours, wrapping around at 180 degrees.

    Returns:
        Pooled histogram on the same scale as the input (weights sum to 1).
    """
    half = len(_POOLING_WEIGHTS) // 2
    pooled = np.zeros_like(histogram)
    for shift, weight in zip(range(-half, half + 1), _POOLING_WEIGHTS):
        pooled += weight * np.roll(histogram, shift)
    return pooled / _POOLING_WEIGHTS.sum()


class EdgeHistogramEstimator:
    """Pick the dominant edge orientation from the shared edge field.

    Args:
        magnitude_threshold: Minimum edge magnitude for a pixel to vote.
        peak_scale: Pooled peak weight that maps to full confidence.
        smoothing_sigma: Gaussian sigma applied to the edge field first.
    """

    method = DetectionMethod.EDGE_DETECTION

    def __init__(
        self,
        magnitude_threshold: float = 50.0,
        peak_scale: float = 1000.0,
        smoothing_sigma: float = 3.0,
    ) -> None:
        self.magnitude_threshold = magnitude_threshold
        self.peak_scale = peak_scale
        self.smoothing_sigma = smoothing_sigma

    def estimate(self, context: EstimationContext) -> AngleCandidate:
        histogram = orientation_histogram(
            context.edges.magnitude, self.magnitude_threshold, self.smoothing_sigma
        )
        pooled = pool_histogram(histogram)
        peak_bin = int(np.argmax(pooled))
        peak = float(pooled[peak_bin])
        if peak <= 0:
            return AngleCandidate(0.0, 0.0, self.method)

        # A baseline normal at 90 + a degrees means text skewed by a degrees.
        angle = fold_angle(peak_bin - 90.0)
        logger.debug(
            "Edge histogram peak %.1f in bin %d -> %.1f degrees", peak, peak_bin, angle
        )
        return AngleCandidate(angle, clamp_confidence(peak / self.peak_scale), self.method)
