"""Result types shared by the pipeline and the result assembler."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

Point2 = Tuple[float, float]
Point3 = Tuple[float, float, float]
Box = Tuple[float, float, float, float]  # (x, y, w, h)


class BoxCorners(NamedTuple):
    """Detector box as two corner points in pixel space."""
    top_left: Point2
    bottom_right: Point2


class RawDetection(NamedTuple):
    """Per-hand output of the hand pipeline."""
    box: Optional[BoxCorners]
    confidence: float
    landmarks: Optional[List[Point3]] = None  # 21 points when present


@dataclass(frozen=True)
class HandAnnotations:
    """Landmarks grouped by finger. All groups are empty when no landmarks were regressed."""
    thumb: Tuple[Point3, ...] = ()
    index_finger: Tuple[Point3, ...] = ()
    middle_finger: Tuple[Point3, ...] = ()
    ring_finger: Tuple[Point3, ...] = ()
    pinky: Tuple[Point3, ...] = ()
    palm_base: Tuple[Point3, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in self.group_names())

    @staticmethod
    def group_names() -> Tuple[str, ...]:
        return ('thumb', 'index_finger', 'middle_finger', 'ring_finger', 'pinky', 'palm_base')

    def as_dict(self) -> Dict[str, List[Point3]]:
        """Mapping of group name to points; empty when no landmarks were present."""
        if self.is_empty:
            return {}
        return {name: list(getattr(self, name)) for name in self.group_names()}


@dataclass(frozen=True)
class HandResult:
    """Finalized, consumer-facing result for one detected hand."""
    id: int
    confidence: float
    box: Box
    box_raw: Box
    landmarks: Optional[List[Point3]] = None
    annotations: HandAnnotations = field(default_factory=HandAnnotations)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            'id': self.id,
            'confidence': self.confidence,
            'box': list(self.box),
            'box_raw': list(self.box_raw),
            'landmarks': [list(p) for p in self.landmarks] if self.landmarks is not None else None,
            'annotations': {k: [list(p) for p in v] for k, v in self.annotations.as_dict().items()},
        }
