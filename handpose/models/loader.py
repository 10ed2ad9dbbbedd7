"""Cached, concurrent loading of the detector and skeleton models."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Tuple
import logging

import torch

from ..config import Config
from ..detect.detector import HandDetector
from ..detect.pipeline import HandPipeline

logger = logging.getLogger(__name__)

_PASSTHROUGH_PREFIXES = ('.', '/', 'http:', 'https:', 'file:')


@dataclass(frozen=True)
class ModelHandle:
    """A loaded inference model, the locator it was loaded from and the device holding its weights."""
    model: Any
    model_url: Optional[str]
    device: str = "cpu"


class LoadStatus(Enum):
    """Load state of a model slot."""
    NOT_REQUESTED = "not_requested"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class ModelSlot:
    """Tagged presence of one model handle."""
    status: LoadStatus = LoadStatus.NOT_REQUESTED
    handle: Optional[ModelHandle] = None

    @property
    def is_loaded(self) -> bool:
        return self.status is LoadStatus.LOADED


class ModelCache:
    """
    Owner of the detector and skeleton handles.

    Handles live as long as the cache does. ``lock`` guards the
    check-then-load sequence in :class:`ModelLoader`.
    """

    def __init__(self):
        self.lock = Lock()
        self.detector = ModelSlot()
        self.skeleton = ModelSlot()

    def reset(self) -> None:
        """Drop both handles so the next load starts from scratch."""
        with self.lock:
            self.detector = ModelSlot()
            self.skeleton = ModelSlot()

    def status(self) -> Dict[str, str]:
        return {
            'detector': self.detector.status.value,
            'skeleton': self.skeleton.status.value,
        }


def join_model_path(base_path: str, model_path: str) -> str:
    """Join ``model_path`` onto ``base_path`` unless it is already absolute, relative-explicit or a URL."""
    if model_path.startswith(_PASSTHROUGH_PREFIXES):
        return model_path
    separator = '' if not base_path or base_path.endswith('/') else '/'
    return f"{base_path}{separator}{model_path}"


def is_remote_path(path: str) -> bool:
    return path.startswith(('http://', 'https://'))


class TorchModelBackend:
    """Loads TorchScript model archives, downloading remote ones into the torch hub cache."""

    def __init__(self, device: str = "cpu"):
        """
        Initialize the backend.

        Args:
            device: Device to map model weights to ('cpu', 'cuda', or 'auto')
        """
        if device == "auto":
            device = "cuda" if torch.cuda.is_available() else "cpu"
        self.device = device

    def load_model(self, path: str, from_remote_hub: bool = False) -> ModelHandle:
        """
        Load a TorchScript model.

        Args:
            path: Local path or URL of the model archive
            from_remote_hub: Download ``path`` before loading

        Returns:
            Model handle carrying ``path`` as its locator
        """
        local_path = self._download(path) if from_remote_hub else Path(path.replace('file://', '', 1))
        if not local_path.exists():
            raise FileNotFoundError(f"Model file not found: {local_path}")

        model = torch.jit.load(str(local_path), map_location=self.device)
        model.eval()
        return ModelHandle(model=model, model_url=path, device=self.device)

    def _download(self, url: str) -> Path:
        target = Path(torch.hub.get_dir()) / "checkpoints" / Path(url.split('?')[0]).name
        if not target.exists():
            target.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Downloading model: {url}")
            torch.hub.download_url_to_file(url, str(target), progress=False)
        return target


class ModelLoader:
    """Ensures both models are loaded once per cache and builds the hand pipeline."""

    def __init__(self, backend=None, cache: Optional[ModelCache] = None):
        """
        Initialize model loader.

        Args:
            backend: Object exposing ``load_model(path, from_remote_hub=...)``
            cache: Handle cache shared between loader instances
        """
        self.backend = backend or TorchModelBackend()
        self.cache = cache or ModelCache()

    def ensure_loaded(
        self, config: Config
    ) -> Tuple[Optional[ModelHandle], Optional[ModelHandle], HandPipeline]:
        """
        Load whichever requested models are not cached yet and build a pipeline.

        Args:
            config: Configuration for this call

        Returns:
            Tuple of (detector handle, skeleton handle, pipeline)
        """
        hand = config.hand
        requests = {}
        if hand.enabled:
            requests['detector'] = hand.detector.model_path
        if hand.landmarks:
            requests['skeleton'] = hand.skeleton.model_path

        with self.cache.lock:
            pending = {
                name: model_path for name, model_path in requests.items()
                if not getattr(self.cache, name).is_loaded
            }

            if config.debug:
                for name in requests:
                    if name not in pending:
                        logger.info(f"cached model: {getattr(self.cache, name).handle.model_url}")

            if pending:
                self._load_pending(pending, config)

            detector_handle = self.cache.detector.handle
            skeleton_handle = self.cache.skeleton.handle

        pipeline = HandPipeline(
            HandDetector(
                detector_handle.model if detector_handle else None,
                device=detector_handle.device if detector_handle else "cpu",
            ),
            skeleton_handle.model if skeleton_handle else None,
            device=skeleton_handle.device if skeleton_handle else "cpu",
        )
        return detector_handle, skeleton_handle, pipeline

    def _load_pending(self, pending: Dict[str, str], config: Config) -> None:
        """Load the pending slots concurrently and record the outcome of each."""
        with ThreadPoolExecutor(max_workers=len(pending), thread_name_prefix="handpose-load") as pool:
            futures = {
                name: pool.submit(self._load_one, join_model_path(config.model_base_path, model_path))
                for name, model_path in pending.items()
            }
            outcomes = {name: future.result() for name, future in futures.items()}

        for name, (handle, error) in outcomes.items():
            if handle is None or not handle.model_url:
                reason = f" ({error})" if error is not None else ""
                logger.error(f"load model failed: {pending[name]}{reason}")
                setattr(self.cache, name, ModelSlot(status=LoadStatus.FAILED))
                continue

            setattr(self.cache, name, ModelSlot(status=LoadStatus.LOADED, handle=handle))
            if config.debug:
                logger.info(f"load model: {handle.model_url}")

    def _load_one(self, path: str) -> Tuple[Optional[ModelHandle], Optional[Exception]]:
        try:
            return self.backend.load_model(path, from_remote_hub=is_remote_path(path)), None
        except Exception as e:
            return None, e


def create_model_loader(config: Optional[Config] = None, cache: Optional[ModelCache] = None) -> ModelLoader:
    """
    Factory function to create a model loader with the default TorchScript backend.

    Args:
        config: Configuration supplying the runtime device
        cache: Handle cache to use

    Returns:
        ModelLoader instance
    """
    device = config.runtime.device if config else "cpu"
    return ModelLoader(backend=TorchModelBackend(device=device), cache=cache)
