"""Result normalization: box conversion, landmark grouping and result assembly."""

from .annotations import ANNOTATION_INDICES, LANDMARK_COUNT, annotate
from .assembler import assemble_results, round_confidence
from .boxes import normalize_box

__all__ = [
    "ANNOTATION_INDICES",
    "LANDMARK_COUNT",
    "annotate",
    "assemble_results",
    "round_confidence",
    "normalize_box",
]
