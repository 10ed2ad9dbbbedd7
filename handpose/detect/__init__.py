"""Hand detection and landmark regression stages."""

from .detector import DetectedBox, HandDetector
from .pipeline import HandPipeline

__all__ = ["DetectedBox", "HandDetector", "HandPipeline"]
