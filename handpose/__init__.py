"""
Hand Pose Estimation

Two-stage hand pose estimation: a hand-region detector and a landmark model
are loaded once, coupled into a pipeline, and their raw outputs are turned
into boxes, confidences and per-finger landmark groups.
"""

__version__ = "1.0.0"

from .config import Config, load_config
from .handpose import HandPose, create_handpose
from .result import HandAnnotations, HandResult, RawDetection

__all__ = [
    "Config",
    "load_config",
    "HandPose",
    "create_handpose",
    "HandAnnotations",
    "HandResult",
    "RawDetection",
]
