"""Two-stage hand pipeline: region detection followed by landmark regression."""

from typing import Any, List, Optional, Tuple
import logging

import torch
import torch.nn.functional as F

from ..config import Config
from ..logic.annotations import LANDMARK_COUNT
from ..result import BoxCorners, Point3, RawDetection
from ..utils.tensor import ImageTensor, image_size, to_nchw
from .detector import HandDetector

logger = logging.getLogger(__name__)


class HandPipeline:
    """Couples a HandDetector with the skeleton model."""

    def __init__(self, detector: HandDetector, skeleton_model: Optional[Any], device: str = "cpu"):
        """
        Initialize hand pipeline.

        Args:
            detector: Hand region detector (may wrap no model)
            skeleton_model: Landmark model, or None to skip landmark regression
            device: Device holding the skeleton model weights
        """
        self.detector = detector
        self.skeleton_model = skeleton_model
        self.device = device

    @torch.inference_mode()
    def estimate_hands(self, input_tensor: ImageTensor, config: Config) -> List[RawDetection]:
        """
        Run detection and, when available, landmark regression.

        Args:
            input_tensor: Image tensor, ``(1, H, W, 3)`` RGB in [0, 1]
            config: Configuration for this call

        Returns:
            Raw detections; landmarks are None when the skeleton stage did not run
        """
        hand = config.hand
        if not hand.enabled or not self.detector.available:
            return []

        proposals = self.detector.detect(input_tensor, hand)
        if self.skeleton_model is None or not hand.landmarks:
            return [RawDetection(box=p.box, confidence=p.score) for p in proposals]

        image = to_nchw(input_tensor)
        width, height = image_size(input_tensor)

        detections = []
        for proposal in proposals:
            crop = _crop_region(proposal.box, hand.crop_scale, width, height)
            if crop is None:
                continue

            landmarks, score = self._regress(image, crop, hand.skeleton.input_size)
            if score < hand.min_confidence:
                logger.debug(f"Dropping hand with landmark confidence {score:.3f}")
                continue

            detections.append(RawDetection(box=proposal.box, confidence=score, landmarks=landmarks))

        return detections

    def _regress(
        self,
        image: torch.Tensor,
        crop: Tuple[int, int, int, int],
        size: int
    ) -> Tuple[List[Point3], float]:
        """Run the skeleton model on one crop and map its landmarks back to image pixels."""
        x0, y0, x1, y1 = crop
        patch = F.interpolate(image[:, :, y0:y1, x0:x1], size=(size, size), mode='bilinear', align_corners=False)

        raw_landmarks, raw_score = self.skeleton_model(patch.to(self.device))
        coords = torch.as_tensor(raw_landmarks, dtype=torch.float32).cpu().reshape(-1)
        if coords.numel() < LANDMARK_COUNT * 3:
            raise ValueError(
                f"Expected {LANDMARK_COUNT * 3} landmark values from the skeleton model, got {coords.numel()}"
            )
        coords = coords[:LANDMARK_COUNT * 3].reshape(LANDMARK_COUNT, 3)
        score = float(torch.as_tensor(raw_score, dtype=torch.float32).cpu().reshape(-1)[0])

        scale_x = (x1 - x0) / size
        scale_y = (y1 - y0) / size
        landmarks = [
            (x0 + x * scale_x, y0 + y * scale_y, z * scale_x)
            for x, y, z in coords.tolist()
        ]
        return landmarks, score


def _crop_region(
    box: BoxCorners,
    scale: float,
    width: int,
    height: int
) -> Optional[Tuple[int, int, int, int]]:
    """Square crop around the box center, enlarged by ``scale`` and clipped to the image."""
    (bx1, by1), (bx2, by2) = box.top_left, box.bottom_right
    cx, cy = (bx1 + bx2) / 2.0, (by1 + by2) / 2.0
    half = max(bx2 - bx1, by2 - by1) * scale / 2.0

    x0 = max(0, int(cx - half))
    y0 = max(0, int(cy - half))
    x1 = min(width, int(cx + half))
    y1 = min(height, int(cy + half))

    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1
