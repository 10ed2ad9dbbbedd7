"""Hand pose estimation entry point: model loading and per-frame prediction."""

from typing import List, Optional, Tuple
import logging

from .config import Config
from .detect.pipeline import HandPipeline
from .logic.assembler import assemble_results
from .models.loader import ModelCache, ModelHandle, ModelLoader, create_model_loader
from .result import HandResult
from .utils.tensor import ImageTensor, image_size

logger = logging.getLogger(__name__)


class HandPose:
    """Loads the hand models once and turns image tensors into hand results."""

    def __init__(self, loader: Optional[ModelLoader] = None):
        """
        Initialize hand pose estimator.

        Args:
            loader: Model loader owning the handle cache (default TorchScript loader if None)
        """
        self.loader = loader or ModelLoader()
        self.pipeline: Optional[HandPipeline] = None

    @property
    def cache(self) -> ModelCache:
        return self.loader.cache

    def load(self, config: Config) -> Tuple[Optional[ModelHandle], Optional[ModelHandle]]:
        """
        Ensure models are loaded and rebuild the pipeline.

        Args:
            config: Configuration for this call

        Returns:
            Tuple of (detector handle, skeleton handle); either may be None
        """
        detector, skeleton, self.pipeline = self.loader.ensure_loaded(config)
        return detector, skeleton

    def predict(self, input_tensor: ImageTensor, config: Config) -> List[HandResult]:
        """
        Estimate hands in one frame.

        Args:
            input_tensor: Image tensor, ``(1, H, W, 3)`` RGB in [0, 1]
            config: Configuration for this call

        Returns:
            Hand results in pipeline order (empty list when nothing was found)
        """
        if self.pipeline is None:
            raise RuntimeError("Hand models not loaded. Call load() first.")

        predictions = self.pipeline.estimate_hands(input_tensor, config)
        width, height = image_size(input_tensor)
        return assemble_results(predictions, width, height)


def create_handpose(config: Optional[Config] = None, cache: Optional[ModelCache] = None) -> HandPose:
    """
    Factory function to create and load a hand pose estimator.

    Args:
        config: Configuration used for the initial load (defaults if None)
        cache: Handle cache to share between estimators

    Returns:
        Loaded HandPose instance
    """
    config = config or Config()
    handpose = HandPose(create_model_loader(config, cache=cache))
    handpose.load(config)
    logger.info(f"Hand pose estimator ready: {handpose.cache.status()}")
    return handpose
