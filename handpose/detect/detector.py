"""Hand-region detection on top of a loaded detector model."""

from typing import Any, List, NamedTuple, Optional
import logging

import torch
import torch.nn.functional as F
from torchvision.ops import nms

from ..config import HandConfig
from ..result import BoxCorners
from ..utils.tensor import ImageTensor, image_size, to_nchw

logger = logging.getLogger(__name__)


class DetectedBox(NamedTuple):
    """Hand box proposal in pixel space."""
    box: BoxCorners
    score: float


class HandDetector:
    """
    Wrapper around the detector model.

    The model takes a ``(1, 3, S, S)`` image and returns rows of
    ``[x1, y1, x2, y2, score]`` normalized to that input.
    """

    def __init__(self, model: Optional[Any], device: str = "cpu"):
        self.model = model
        self.device = device

    @property
    def available(self) -> bool:
        return self.model is not None

    @torch.inference_mode()
    def detect(self, input_tensor: ImageTensor, config: HandConfig) -> List[DetectedBox]:
        """
        Detect hand regions.

        Args:
            input_tensor: Image tensor, ``(1, H, W, 3)`` RGB in [0, 1]
            config: Hand configuration (thresholds, input size)

        Returns:
            Boxes sorted by descending score, at most ``config.max_detected``
        """
        if self.model is None:
            return []

        width, height = image_size(input_tensor)
        size = config.detector.input_size
        image = F.interpolate(to_nchw(input_tensor), size=(size, size), mode='bilinear', align_corners=False)
        image = image.to(self.device)

        output = self.model(image)
        if isinstance(output, (tuple, list)):
            output = output[0]
        rows = torch.as_tensor(output, dtype=torch.float32).cpu().reshape(-1, 5)

        rows = rows[rows[:, 4] >= config.min_confidence]
        if rows.shape[0] == 0:
            return []

        keep = nms(rows[:, :4], rows[:, 4], config.iou_threshold)[:config.max_detected]

        boxes = []
        for x1, y1, x2, y2, score in rows[keep].tolist():
            boxes.append(DetectedBox(
                box=BoxCorners((x1 * width, y1 * height), (x2 * width, y2 * height)),
                score=score,
            ))

        logger.debug(f"Detected {len(boxes)} hand region(s)")
        return boxes
