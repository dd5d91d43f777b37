"""Shared types and helpers for the skew angle estimators.

Every estimator is a small class exposing a ``method`` tag and an
``estimate(context)`` method; they are looked up by tag rather than
subclassing a common base.

Angles follow the usual image convention: a positive angle means the text
baselines rise to the right (the page is turned counter-clockwise) and the
correction rotates the image clockwise by that angle.
"""

import math
from dataclasses import dataclass
from functools import cached_property
from typing import Protocol

import numpy as np

from docskew.preprocessing.edges import EdgeField, sobel_edges
from docskew.preprocessing.pipeline import ProcessedBitmap
from docskew.utils.config import DetectionMethod

MIN_ANGLE = -45.0
MAX_ANGLE = 45.0


@dataclass(frozen=True)
class AngleCandidate:
    """One estimator's answer: a skew angle with a ranking score."""

    angle: float
    confidence: float
    method: DetectionMethod


@dataclass
class EstimationContext:
    """Inputs shared by all estimators of one call.

    The edge field is computed on first access so calls that enable no
    edge-based estimator never pay for it.
    """

    bitmap: ProcessedBitmap

    @cached_property
    def edges(self) -> EdgeField:
        return sobel_edges(self.bitmap)


class AngleEstimator(Protocol):
    """Interface implemented by every skew estimator."""

    method: DetectionMethod

    def estimate(self, context: EstimationContext) -> AngleCandidate: ...


def candidate_angles(step: float) -> np.ndarray:
    """Return the scanned angles from -45 to 45 degrees inclusive."""
    count = int(round((MAX_ANGLE - MIN_ANGLE) / step)) + 1
    return MIN_ANGLE + step * np.arange(count, dtype=np.float64)


def clamp_confidence(value: float) -> float:
    """Clamp a raw score into [0, 1]; NaN counts as no signal."""
    if not math.isfinite(value):
        return 0.0 if math.isnan(value) else 1.0
    return float(min(max(value, 0.0), 1.0))


def fold_angle(angle: float) -> float:
    """Fold an orientation into [-45, 45] using its 90 degree symmetry."""
    while angle > MAX_ANGLE:
        angle -= 90.0
    while angle < MIN_ANGLE:
        angle += 90.0
    return float(angle)


def select_peak(angles: np.ndarray, scores: np.ndarray) -> tuple[float, float]:
    """Return the first angle with the highest score.

    No positive score means no signal: the result is ``(0.0, 0.0)``.
    """
    if scores.size == 0:
        return 0.0, 0.0
    index = int(np.argmax(scores))
    peak = float(scores[index])
    if not peak > 0:
        return 0.0, 0.0
    return float(angles[index]), peak


def normal_bins(
    xs: np.ndarray, ys: np.ndarray, angle: float
) -> tuple[np.ndarray, int]:
    """Bin pixel coordinates by their offset along a candidate text normal.

    Pixels on one text line skewed by ``angle`` share the same offset, so
    they land in the same unit-width bin.

    Args:
        xs: Column indices of the pixels.
        ys: Row indices of the pixels.
        angle: Candidate skew angle in degrees.

    Returns:
        Tuple of (bin index per pixel, number of bins).
    """
    theta = math.radians(angle)
    offsets = xs * math.sin(theta) + ys * math.cos(theta)
    offsets -= offsets.min()
    indices = np.floor(offsets).astype(np.intp)
    return indices, int(indices.max()) + 1
