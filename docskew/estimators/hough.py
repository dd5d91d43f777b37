"""Simplified Hough skew estimator.

A reduced, angle-only variant of the Hough line transform: for each
candidate angle the strong edge pixels vote their magnitude into a single
rho profile, and the angle is scored by how much of that energy piles up
on common lines. No full (rho, theta) accumulator is kept.
"""

import numpy as np

from docskew.utils.config import DetectionMethod
from docskew.utils.logger import get_logger

from .base import (
    AngleCandidate,
    EstimationContext,
    candidate_angles,
    clamp_confidence,
    normal_bins,
    select_peak,
)

logger = get_logger(__name__)


def alignment_strength(
    xs: np.ndarray, ys: np.ndarray, weights: np.ndarray, angle: float
) -> float:
    """Energy-weighted concentration of edge votes along one angle.

    Args:
        xs: Column indices of edge pixels.
        ys: Row indices of edge pixels.
        weights: Edge magnitudes of those pixels.
        angle: Candidate skew angle in degrees.

    Returns:
        Sum of squared rho-bin energies divided by the total edge energy.
    """
    indices, n_bins = normal_bins(xs, ys, angle)
    accumulator = np.bincount(indices, weights=weights, minlength=n_bins)
    return float(np.dot(accumulator, accumulator) / weights.sum())


class HoughEstimator:
    """Angle-only Hough scan over the shared edge field.

    Args:
        step: Angle granularity in degrees.
        magnitude_threshold: Minimum edge magnitude for a pixel to vote.
        strength_scale: Alignment strength that maps to full confidence.
    """

    method = DetectionMethod.HOUGH

    def __init__(
        self,
        step: float = 1.0,
        magnitude_threshold: float = 50.0,
        strength_scale: float = 10000.0,
    ) -> None:
        self.step = step
        self.magnitude_threshold = magnitude_threshold
        self.strength_scale = strength_scale

    def estimate(self, context: EstimationContext) -> AngleCandidate:
        magnitude = context.edges.magnitude
        ys, xs = np.nonzero(magnitude > self.magnitude_threshold)
        if xs.size == 0:
            # No edges is no signal, same as every other estimator.
            return AngleCandidate(0.0, 0.0, self.method)

        weights = magnitude[ys, xs].astype(np.float64)
        angles = candidate_angles(self.step)
        strengths = np.array(
            [alignment_strength(xs, ys, weights, a) for a in angles]
        )
        angle, peak = select_peak(angles, strengths)

        logger.debug("Hough peak strength %.1f at %.1f degrees", peak, angle)
        return AngleCandidate(
            angle, clamp_confidence(peak / self.strength_scale), self.method
        )
