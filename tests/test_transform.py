"""Tests for the canvas-expanding rotation."""

import numpy as np
import pytest

from docskew.rotation.transform import (
    MIN_ROTATION_DEGREES,
    WHITE,
    rotate_image,
    rotated_dimensions,
)


def _dot_image(size: int = 101) -> np.ndarray:
    """White RGBA square with a black blob right of the centre."""
    image = np.full((size, size, 4), 255, dtype=np.uint8)
    image[48:53, 78:83, :3] = 0
    return image


class TestRotatedDimensions:
    """Tests for the expanded canvas size."""

    def test_thirty_degrees(self) -> None:
        assert rotated_dimensions(200, 100, 30.0) == (223, 187)

    def test_sign_does_not_matter(self) -> None:
        assert rotated_dimensions(200, 100, -30.0) == rotated_dimensions(200, 100, 30.0)

    def test_quarter_turn_swaps(self) -> None:
        assert rotated_dimensions(200, 100, 90.0) == (100, 200)

    def test_never_empty(self) -> None:
        assert rotated_dimensions(1, 1, 45.0) == (1, 1)


class TestRotateImage:
    """Tests for rotate_image."""

    @pytest.mark.parametrize("angle", [0.0, 0.3, -0.49])
    def test_small_angle_returns_copy(self, angle: float) -> None:
        image = _dot_image()
        result = rotate_image(image, angle)
        np.testing.assert_array_equal(result, image)
        assert result is not image

    def test_threshold_constant(self) -> None:
        assert MIN_ROTATION_DEGREES == 0.5

    def test_canvas_expands(self) -> None:
        image = np.full((100, 200, 4), 255, dtype=np.uint8)
        result = rotate_image(image, 30.0)
        assert result.shape == (187, 223, 4)
        assert result.dtype == np.uint8

    def test_uncovered_corners_are_white(self) -> None:
        image = np.zeros((100, 200, 4), dtype=np.uint8)
        image[..., 3] = 255
        result = rotate_image(image, 20.0)
        for corner in (result[0, 0], result[0, -1], result[-1, 0], result[-1, -1]):
            np.testing.assert_array_equal(corner, WHITE)
        height, width = result.shape[:2]
        assert result[height // 2, width // 2, :3].max() < 10

    def test_positive_angle_turns_clockwise(self) -> None:
        result = rotate_image(_dot_image(), 90.0)
        assert result.shape == (101, 101, 4)
        assert result[80, 50, :3].max() < 60
        assert result[50, 80, :3].min() > 200

    def test_negative_angle_turns_counter_clockwise(self) -> None:
        result = rotate_image(_dot_image(), -90.0)
        assert result[20, 50, :3].max() < 60
        assert result[50, 80, :3].min() > 200

    def test_grayscale_image(self) -> None:
        image = np.zeros((50, 80), dtype=np.uint8)
        result = rotate_image(image, 10.0)
        assert result.ndim == 2
        assert result[0, 0] == 255

    def test_does_not_modify_input(self) -> None:
        image = _dot_image()
        original = image.copy()
        rotate_image(image, 12.0)
        np.testing.assert_array_equal(image, original)
