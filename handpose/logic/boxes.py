"""Conversion of detector boxes into pixel and normalized representations."""

from typing import Optional, Tuple

from ..result import Box, BoxCorners

ZERO_BOX: Box = (0.0, 0.0, 0.0, 0.0)


def normalize_box(
    box: Optional[BoxCorners],
    image_width: float,
    image_height: float
) -> Tuple[Box, Box]:
    """
    Convert a corner-point box into ``(box, box_raw)``.

    ``box`` is ``(x, y, w, h)`` in pixels with each edge clamped to the image
    independently; width and height are not floored at zero. ``box_raw`` is
    computed from the unclamped corners divided by the image size and may fall
    outside [0, 1].

    Args:
        box: Detector box, or None when the detection carried no box
        image_width: Source image width in pixels
        image_height: Source image height in pixels

    Returns:
        Tuple of (pixel box, normalized box); both are zero boxes when ``box`` is None
    """
    if box is None:
        return ZERO_BOX, ZERO_BOX

    (x1, y1), (x2, y2) = box.top_left, box.bottom_right

    left = max(0.0, x1)
    top = max(0.0, y1)
    pixel_box = (
        left,
        top,
        min(image_width, x2) - left,
        min(image_height, y2) - top,
    )

    raw_box = (
        x1 / image_width,
        y1 / image_height,
        (x2 - x1) / image_width,
        (y2 - y1) / image_height,
    )

    return pixel_box, raw_box
