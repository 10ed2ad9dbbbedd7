"""Assembly of raw pipeline detections into finalized hand results."""

from typing import List, Optional, Sequence

from ..result import HandResult, RawDetection
from .annotations import annotate
from .boxes import normalize_box


def round_confidence(confidence: float) -> float:
    """Round a confidence score to two decimal places."""
    return round(100 * confidence) / 100


def assemble_results(
    detections: Optional[Sequence[RawDetection]],
    image_width: float,
    image_height: float
) -> List[HandResult]:
    """
    Build the ordered result list for one frame.

    Args:
        detections: Raw per-hand detections from the pipeline (may be None)
        image_width: Source image width in pixels
        image_height: Source image height in pixels

    Returns:
        One HandResult per detection, ``id`` being its position in the list
    """
    if not detections:
        return []

    hands: List[HandResult] = []
    for i, detection in enumerate(detections):
        box, box_raw = normalize_box(detection.box, image_width, image_height)
        hands.append(HandResult(
            id=i,
            confidence=round_confidence(detection.confidence),
            box=box,
            box_raw=box_raw,
            landmarks=detection.landmarks,
            annotations=annotate(detection.landmarks),
        ))

    return hands
