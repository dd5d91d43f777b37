"""Running the enabled estimators and fusing their candidates.

Each estimator runs once; a failure in one of them only drops its
candidate. The winner is the candidate with the highest confidence scaled
by a fixed per-method reliability weight.
"""

from collections.abc import Callable, Iterable

from docskew.utils.config import DetectionMethod
from docskew.utils.logger import get_logger

from .base import AngleCandidate, AngleEstimator, EstimationContext
from .edge_histogram import EdgeHistogramEstimator
from .hough import HoughEstimator
from .projection import ProjectionProfileEstimator
from .text_orientation import TextOrientationEstimator

logger = get_logger(__name__)

NO_METHOD = "none"

METHOD_WEIGHTS: dict[DetectionMethod, float] = {
    DetectionMethod.PROJECTION: 1.0,
    DetectionMethod.EDGE_DETECTION: 0.9,
    DetectionMethod.TEXT_ORIENTATION: 0.8,
    DetectionMethod.HOUGH: 0.7,
}

ESTIMATORS: dict[DetectionMethod, Callable[[], AngleEstimator]] = {
    DetectionMethod.PROJECTION: ProjectionProfileEstimator,
    DetectionMethod.TEXT_ORIENTATION: TextOrientationEstimator,
    DetectionMethod.EDGE_DETECTION: EdgeHistogramEstimator,
    DetectionMethod.HOUGH: HoughEstimator,
}


def run_estimators(
    context: EstimationContext, methods: Iterable[DetectionMethod]
) -> list[AngleCandidate]:
    """Run each enabled estimator once, in order.

    Args:
        context: Shared bitmap (and lazily computed edge field).
        methods: Estimators to run.

    Returns:
        Candidates of the estimators that completed.
    """
    candidates: list[AngleCandidate] = []
    for method in methods:
        try:
            estimator = ESTIMATORS[DetectionMethod(method)]()
            candidate = estimator.estimate(context)
        except Exception as exc:
            logger.warning("Rotation detection method %s failed: %s", method, exc)
            continue
        logger.debug(
            "%s: angle=%.1f confidence=%.3f",
            method,
            candidate.angle,
            candidate.confidence,
        )
        candidates.append(candidate)
    return candidates


def weighted_score(candidate: AngleCandidate) -> float:
    """Confidence scaled by the reliability weight of its method."""
    return candidate.confidence * METHOD_WEIGHTS.get(candidate.method, 0.5)


def select_best_rotation(
    candidates: Iterable[AngleCandidate],
) -> AngleCandidate | None:
    """Pick the candidate with the highest weighted score.

    Candidates without confidence carry no signal and are ignored. On equal
    scores the earlier candidate wins.

    Returns:
        The winning candidate, or None when nothing usable remains.
    """
    best: AngleCandidate | None = None
    for candidate in candidates:
        if candidate.confidence <= 0:
            continue
        if best is None or weighted_score(candidate) > weighted_score(best):
            best = candidate
    return best
