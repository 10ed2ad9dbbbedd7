"""Visualization of hand results on BGR frames."""

from typing import Dict, List, Optional, Sequence, Tuple
import cv2
import numpy as np
import logging

from ..result import HandResult, Point3

logger = logging.getLogger(__name__)

# BGR color per annotation group
FINGER_COLORS: Dict[str, Tuple[int, int, int]] = {
    'thumb': (0, 165, 255),
    'index_finger': (0, 255, 255),
    'middle_finger': (0, 255, 0),
    'ring_finger': (255, 255, 0),
    'pinky': (255, 0, 255),
    'palm_base': (255, 255, 255),
}


class OverlayRenderer:
    """Renderer for hand result overlays."""

    def __init__(
        self,
        show_fps: bool = True,
        show_confidence: bool = True,
        show_landmarks: bool = True,
        hand_color: Tuple[int, int, int] = (0, 255, 0),
        font_scale: float = 0.6,
        line_thickness: int = 2
    ):
        """
        Initialize overlay renderer.

        Args:
            show_fps: Show FPS counter
            show_confidence: Show hand confidence in labels
            show_landmarks: Draw landmark points and finger polylines
            hand_color: Color for hand bounding boxes (BGR)
            font_scale: Font scale for text
            line_thickness: Line thickness for drawings
        """
        self.show_fps = show_fps
        self.show_confidence = show_confidence
        self.show_landmarks = show_landmarks
        self.hand_color = hand_color
        self.font_scale = font_scale
        self.line_thickness = line_thickness

        self.font = cv2.FONT_HERSHEY_SIMPLEX

    def draw_hands(
        self,
        image: np.ndarray,
        hands: List[HandResult],
        fps: Optional[float] = None
    ) -> np.ndarray:
        """
        Draw hand results on a copy of ``image``.

        Args:
            image: Input image (BGR)
            hands: Hand results for this frame
            fps: Current processing rate, drawn when ``show_fps`` is set

        Returns:
            Annotated image
        """
        annotated = image.copy()

        for hand in hands:
            self.draw_hand(annotated, hand)

        if self.show_fps and fps is not None:
            cv2.putText(
                annotated, f"FPS: {fps:.1f}", (10, 25),
                self.font, self.font_scale, (255, 255, 255), 1
            )

        return annotated

    def draw_hand(self, image: np.ndarray, hand: HandResult) -> None:
        """
        Draw one hand result on image in place.

        Args:
            image: Image to draw on
            hand: Hand result
        """
        x, y, w, h = (int(round(v)) for v in hand.box)

        cv2.rectangle(image, (x, y), (x + w, y + h), self.hand_color, self.line_thickness)

        label = f"Hand {hand.id}"
        if self.show_confidence:
            label += f" {hand.confidence:.2f}"

        (text_width, text_height), baseline = cv2.getTextSize(label, self.font, self.font_scale, 1)

        text_y = y - 10 if y - 10 > text_height else y + h + text_height + 10
        cv2.rectangle(
            image,
            (x, text_y - text_height - baseline),
            (x + text_width, text_y + baseline),
            self.hand_color,
            -1
        )
        cv2.putText(
            image, label, (x, text_y - baseline),
            self.font, self.font_scale, (255, 255, 255), 1
        )

        if self.show_landmarks:
            self._draw_annotations(image, hand.annotations.as_dict())

    def _draw_annotations(self, image: np.ndarray, groups: Dict[str, List[Point3]]) -> None:
        """Draw each finger as a polyline from the palm base through its landmarks."""
        palm = groups.get('palm_base') or []
        for name, points in groups.items():
            color = FINGER_COLORS.get(name, self.hand_color)
            chain = points if name == 'palm_base' else list(palm[:1]) + list(points)
            self._draw_chain(image, chain, color)

    def _draw_chain(self, image: np.ndarray, points: Sequence[Point3], color: Tuple[int, int, int]) -> None:
        pixels = [(int(round(p[0])), int(round(p[1]))) for p in points]
        for a, b in zip(pixels, pixels[1:]):
            cv2.line(image, a, b, color, self.line_thickness, cv2.LINE_AA)
        for pt in pixels:
            cv2.circle(image, pt, 3, color, -1, lineType=cv2.LINE_AA)


def create_overlay_renderer(**kwargs) -> OverlayRenderer:
    """
    Factory function to create overlay renderer.

    Args:
        **kwargs: Arguments for OverlayRenderer

    Returns:
        OverlayRenderer instance
    """
    return OverlayRenderer(**kwargs)
