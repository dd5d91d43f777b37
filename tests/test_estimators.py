"""Tests for the four skew angle estimators and their shared helpers."""

import math

import numpy as np
import pytest

from docskew.estimators.base import (
    AngleCandidate,
    EstimationContext,
    candidate_angles,
    clamp_confidence,
    fold_angle,
    normal_bins,
    select_peak,
)
from docskew.estimators.edge_histogram import (
    EdgeHistogramEstimator,
    orientation_histogram,
    pool_histogram,
)
from docskew.estimators.hough import HoughEstimator
from docskew.estimators.projection import ProjectionProfileEstimator, profile_variance
from docskew.estimators.text_orientation import (
    TextOrientationEstimator,
    mean_directional_gradient,
)
from docskew.preprocessing.edges import EdgeField
from docskew.preprocessing.pipeline import PreprocessingPipeline, ProcessedBitmap
from docskew.utils.config import DetectionMethod, ProcessingOptions
from tests.helpers import make_bar_page, make_text_page, skew


def _context(pixels: np.ndarray) -> EstimationContext:
    """Preprocess RGBA pixels with default options."""
    bitmap = PreprocessingPipeline(ProcessingOptions()).process(pixels)
    return EstimationContext(bitmap)


def _uniform_context(value: int, height: int = 100, width: int = 100) -> EstimationContext:
    pixels = np.full((height, width), value, dtype=np.uint8)
    return EstimationContext(ProcessedBitmap(pixels=pixels, binarized=True))


def _ridge_context(angle: float, height: int = 200, width: int = 300) -> EstimationContext:
    """Context whose edge field holds parallel smooth ridges skewed by ``angle``."""
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    theta = math.radians(angle)
    offsets = xs * math.sin(theta) + ys * math.cos(theta)
    phase = offsets % 25.0 - 12.5
    magnitude = (400.0 * np.exp(-(phase**2) / 18.0)).astype(np.float32)
    magnitude[0, :] = magnitude[-1, :] = 0
    magnitude[:, 0] = magnitude[:, -1] = 0

    bitmap = ProcessedBitmap(np.zeros((height, width), dtype=np.uint8), binarized=True)
    context = EstimationContext(bitmap)
    context.edges = EdgeField(magnitude=magnitude)
    return context


class TestHelpers:
    """Tests for the shared estimator helpers."""

    def test_candidate_angles_one_degree(self) -> None:
        angles = candidate_angles(1.0)
        assert len(angles) == 91
        assert angles[0] == -45.0
        assert angles[-1] == 45.0

    def test_candidate_angles_three_degrees(self) -> None:
        angles = candidate_angles(3.0)
        assert len(angles) == 31
        assert angles[-1] == 45.0

    @pytest.mark.parametrize(
        ("raw", "folded"),
        [(0.0, 0.0), (45.0, 45.0), (-45.0, -45.0), (50.0, -40.0), (-60.0, 30.0), (-90.0, 0.0), (135.0, 45.0)],
    )
    def test_fold_angle(self, raw: float, folded: float) -> None:
        assert fold_angle(raw) == folded

    @pytest.mark.parametrize(
        ("raw", "clamped"),
        [(-0.2, 0.0), (0.3, 0.3), (1.5, 1.0), (float("nan"), 0.0), (float("inf"), 1.0)],
    )
    def test_clamp_confidence(self, raw: float, clamped: float) -> None:
        assert clamp_confidence(raw) == clamped

    def test_select_peak_first_wins_ties(self) -> None:
        angles = np.array([-1.0, 0.0, 1.0])
        assert select_peak(angles, np.array([2.0, 5.0, 5.0])) == (0.0, 5.0)

    def test_select_peak_without_signal(self) -> None:
        angles = np.array([-45.0, 0.0, 45.0])
        assert select_peak(angles, np.zeros(3)) == (0.0, 0.0)

    def test_normal_bins_at_zero_are_rows(self) -> None:
        xs = np.array([0, 5, 9])
        ys = np.array([3, 3, 7])
        indices, n_bins = normal_bins(xs, ys, 0.0)
        np.testing.assert_array_equal(indices, [0, 0, 4])
        assert n_bins == 5

    def test_edges_computed_lazily_once(self) -> None:
        context = _uniform_context(255)
        assert "edges" not in context.__dict__
        first = context.edges
        assert context.edges is first


class TestProjectionProfileEstimator:
    """Tests for the projection-profile estimator."""

    @pytest.mark.parametrize("angle", [-33.0, -20.0, -5.0, 0.0, 8.0, 41.0])
    def test_recovers_bar_skew(self, angle: float) -> None:
        context = _context(skew(make_bar_page(), angle))
        candidate = ProjectionProfileEstimator().estimate(context)
        assert candidate.method == DetectionMethod.PROJECTION
        assert abs(candidate.angle - angle) <= 1.0
        assert candidate.confidence == 1.0

    def test_recovers_text_skew(self) -> None:
        context = _context(skew(make_text_page(), 7.0))
        candidate = ProjectionProfileEstimator().estimate(context)
        assert abs(candidate.angle - 7.0) <= 1.0

    def test_variance_peaks_at_true_angle(self) -> None:
        bitmap = _context(skew(make_bar_page(), 10.0)).bitmap
        ys, xs = np.nonzero(bitmap.pixels <= 127)
        assert profile_variance(xs, ys, 10.0) > profile_variance(xs, ys, 5.0)
        assert profile_variance(xs, ys, 10.0) > profile_variance(xs, ys, 15.0)

    def test_blank_page_has_no_signal(self) -> None:
        candidate = ProjectionProfileEstimator().estimate(_uniform_context(255))
        assert candidate == AngleCandidate(0.0, 0.0, DetectionMethod.PROJECTION)

    def test_all_black_within_ranges(self) -> None:
        candidate = ProjectionProfileEstimator().estimate(_uniform_context(0, 40, 60))
        assert -45.0 <= candidate.angle <= 45.0
        assert 0.0 <= candidate.confidence <= 1.0

    def test_single_pixel(self) -> None:
        candidate = ProjectionProfileEstimator().estimate(_uniform_context(0, 1, 1))
        assert (candidate.angle, candidate.confidence) == (0.0, 0.0)


class TestTextOrientationEstimator:
    """Tests for the directional-gradient estimator."""

    def test_horizontal_stripes_full_gradient_across_rows(self) -> None:
        gray = np.zeros((20, 20), dtype=np.float32)
        gray[::2, :] = 255
        assert mean_directional_gradient(gray, 0.0) == pytest.approx(255.0)

    def test_vertical_stripes_no_gradient_across_rows(self) -> None:
        gray = np.zeros((20, 20), dtype=np.float32)
        gray[:, ::2] = 255
        assert mean_directional_gradient(gray, 0.0) == pytest.approx(0.0)

    @pytest.mark.parametrize("angle", [9.0, -12.0])
    def test_follows_bar_skew(self, angle: float) -> None:
        context = _context(skew(make_bar_page(), angle))
        candidate = TextOrientationEstimator().estimate(context)
        assert candidate.method == DetectionMethod.TEXT_ORIENTATION
        assert abs(candidate.angle - angle) <= 6.0
        assert 0.0 < candidate.confidence <= 1.0

    def test_scans_three_degree_steps(self) -> None:
        context = _context(skew(make_bar_page(), 9.0))
        candidate = TextOrientationEstimator().estimate(context)
        assert candidate.angle % 3 == 0

    def test_blank_page_has_no_signal(self) -> None:
        candidate = TextOrientationEstimator().estimate(_uniform_context(255))
        assert (candidate.angle, candidate.confidence) == (0.0, 0.0)

    def test_tiny_bitmap_has_no_signal(self) -> None:
        candidate = TextOrientationEstimator().estimate(_uniform_context(0, 2, 2))
        assert (candidate.angle, candidate.confidence) == (0.0, 0.0)


class TestEdgeHistogramEstimator:
    """Tests for the edge-direction histogram estimator."""

    def test_horizontal_ridges_vote_bin_ninety(self) -> None:
        histogram = orientation_histogram(_ridge_context(0.0).edges.magnitude)
        assert histogram.shape == (180,)
        assert int(np.argmax(histogram)) == 90

    @pytest.mark.parametrize("angle", [0.0, 12.0, -20.0])
    def test_recovers_ridge_skew(self, angle: float) -> None:
        candidate = EdgeHistogramEstimator().estimate(_ridge_context(angle))
        assert candidate.method == DetectionMethod.EDGE_DETECTION
        assert abs(candidate.angle - angle) <= 2.0
        assert candidate.confidence == 1.0

    def test_vertical_strokes_fold_to_zero(self) -> None:
        magnitude = _ridge_context(0.0).edges.magnitude.T.copy()
        bitmap = ProcessedBitmap(np.zeros(magnitude.shape, dtype=np.uint8), True)
        context = EstimationContext(bitmap)
        context.edges = EdgeField(magnitude=magnitude)
        assert EdgeHistogramEstimator().estimate(context).angle == 0.0

    def test_blank_page_has_no_signal(self) -> None:
        candidate = EdgeHistogramEstimator().estimate(_uniform_context(255))
        assert (candidate.angle, candidate.confidence) == (0.0, 0.0)

    @pytest.mark.parametrize("angle", [-25.0, -12.0, 7.0, 20.0])
    def test_recovers_text_page_skew(self, angle: float) -> None:
        candidate = EdgeHistogramEstimator().estimate(
            _context(skew(make_text_page(), angle))
        )
        assert abs(candidate.angle - angle) <= 2.0
        assert 0.0 < candidate.confidence <= 1.0

    def test_upright_text_page(self) -> None:
        candidate = EdgeHistogramEstimator().estimate(_context(make_text_page()))
        assert candidate.angle == 0.0

    def test_pooling_keeps_single_peak_centred(self) -> None:
        histogram = np.zeros(180)
        histogram[90] = 160.0
        pooled = pool_histogram(histogram)
        assert int(np.argmax(pooled)) == 90
        assert pooled.sum() == pytest.approx(160.0)

    def test_pooling_wraps_around(self) -> None:
        histogram = np.zeros(180)
        histogram[0] = 16.0
        pooled = pool_histogram(histogram)
        assert pooled[179] == pytest.approx(pooled[1])
        assert pooled[177] > 0


class TestHoughEstimator:
    """Tests for the simplified Hough estimator."""

    @pytest.mark.parametrize("angle", [0.0, 12.0, -25.0])
    def test_recovers_ridge_skew(self, angle: float) -> None:
        candidate = HoughEstimator().estimate(_ridge_context(angle))
        assert candidate.method == DetectionMethod.HOUGH
        assert abs(candidate.angle - angle) <= 1.0
        assert 0.0 < candidate.confidence <= 1.0

    def test_recovers_bar_skew(self) -> None:
        candidate = HoughEstimator().estimate(_context(skew(make_bar_page(), -14.0)))
        assert abs(candidate.angle + 14.0) <= 2.0

    def test_no_edges_means_zero_confidence(self) -> None:
        candidate = HoughEstimator().estimate(_uniform_context(255))
        assert (candidate.angle, candidate.confidence) == (0.0, 0.0)
