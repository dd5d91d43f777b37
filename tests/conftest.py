"""Shared test fixtures for the rotation engine test suite."""

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from tests.helpers import encode, make_text_page, skew


@pytest.fixture
def text_page() -> np.ndarray:
    """A 1000x600 upright page of horizontal text lines."""
    return make_text_page()


@pytest.fixture
def small_page() -> np.ndarray:
    """A 400x300 upright page of horizontal text lines."""
    return make_text_page(
        width=400, height=300, line_height=8, line_spacing=24, margin=40
    )


@pytest.fixture
def skewed_page_factory(text_page: np.ndarray) -> Callable[[float], np.ndarray]:
    """Return a function producing the 1000x600 page skewed by an angle."""

    def _factory(angle: float) -> np.ndarray:
        return skew(text_page, angle)

    return _factory


@pytest.fixture
def blank_png() -> bytes:
    """A blank white 100x100 PNG."""
    return encode(np.full((100, 100, 4), 255, dtype=np.uint8))


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
