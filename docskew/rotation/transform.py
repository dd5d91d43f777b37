"""Canvas-expanding rotation used to correct detected skew."""

import math

import cv2
import numpy as np

from docskew.utils.logger import get_logger

logger = get_logger(__name__)

# Smaller corrections would only add resampling blur.
MIN_ROTATION_DEGREES = 0.5

WHITE = (255, 255, 255, 255)


def rotated_dimensions(width: int, height: int, angle: float) -> tuple[int, int]:
    """Canvas size that holds a ``width`` x ``height`` image rotated by ``angle``.

    Args:
        width: Original width in pixels.
        height: Original height in pixels.
        angle: Rotation angle in degrees.

    Returns:
        ``(new_width, new_height)``, each at least 1.
    """
    radians = math.radians(angle)
    cos_a = abs(math.cos(radians))
    sin_a = abs(math.sin(radians))
    new_width = int(round(width * cos_a + height * sin_a))
    new_height = int(round(width * sin_a + height * cos_a))
    return max(new_width, 1), max(new_height, 1)


def rotate_image(
    image: np.ndarray,
    angle: float,
    fill: tuple[int, int, int, int] = WHITE,
) -> np.ndarray:
    """Rotate an image clockwise by ``angle`` degrees without cropping.

    The canvas grows so every source pixel stays visible; the uncovered
    corners are filled with ``fill``.

    Args:
        image: ``(H, W)`` or ``(H, W, C)`` uint8 image.
        angle: Correction angle in degrees; positive undoes a
            counter-clockwise skew.
        fill: Colour of the uncovered canvas area.

    Returns:
        Rotated image. Angles below 0.5 degrees return an unchanged copy.
    """
    if abs(angle) < MIN_ROTATION_DEGREES:
        return image.copy()

    height, width = image.shape[:2]
    new_width, new_height = rotated_dimensions(width, height, angle)

    # OpenCV treats positive angles as counter-clockwise.
    matrix = cv2.getRotationMatrix2D(((width - 1) / 2, (height - 1) / 2), -angle, 1.0)
    matrix[0, 2] += (new_width - width) / 2
    matrix[1, 2] += (new_height - height) / 2

    result = cv2.warpAffine(
        np.ascontiguousarray(image),
        matrix,
        (new_width, new_height),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=fill,
    )
    logger.debug(
        "Rotated %dx%d image by %.2f degrees onto %dx%d canvas",
        width,
        height,
        angle,
        new_width,
        new_height,
    )
    return result
