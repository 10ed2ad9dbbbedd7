"""Grouping of the 21 hand landmarks into named anatomical regions."""

from typing import Dict, Optional, Sequence, Tuple

from ..result import HandAnnotations, Point3

LANDMARK_COUNT = 21

# Landmark indices per group, in the order points are emitted
ANNOTATION_INDICES: Dict[str, Tuple[int, ...]] = {
    'thumb': (1, 2, 3, 4),
    'index_finger': (5, 6, 7, 8),
    'middle_finger': (9, 10, 11, 12),
    'ring_finger': (13, 14, 15, 16),
    'pinky': (17, 18, 19, 20),
    'palm_base': (0,),
}


def annotate(landmarks: Optional[Sequence[Point3]]) -> HandAnnotations:
    """
    Group a flat landmark sequence by finger.

    Args:
        landmarks: 21 ordered (x, y, z) points, or None

    Returns:
        Grouped landmarks; empty annotations when ``landmarks`` is None

    Raises:
        ValueError: If fewer than 21 landmarks are supplied
    """
    if landmarks is None:
        return HandAnnotations()

    if len(landmarks) < LANDMARK_COUNT:
        raise ValueError(
            f"Expected {LANDMARK_COUNT} landmarks for annotation, got {len(landmarks)}"
        )

    groups = {
        name: tuple(tuple(landmarks[i]) for i in indices)
        for name, indices in ANNOTATION_INDICES.items()
    }
    return HandAnnotations(**groups)
