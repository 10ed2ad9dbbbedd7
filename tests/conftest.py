"""Test configuration for pytest."""

from threading import Lock
from typing import Dict, Iterable, Optional

import pytest
import numpy as np
import torch

from handpose.config import Config, DetectorConfig, HandConfig, SkeletonConfig
from handpose.models.loader import ModelHandle


class FakeDetectorModel:
    """Detector stand-in returning fixed ``[x1, y1, x2, y2, score]`` rows."""

    def __init__(self, rows):
        self.rows = torch.tensor(rows, dtype=torch.float32).reshape(-1, 5)
        self.calls = 0

    def __call__(self, image):
        self.calls += 1
        assert image.dim() == 4 and image.shape[1] == 3
        return self.rows.clone()


class FakeSkeletonModel:
    """Skeleton stand-in returning the same point for all 21 landmarks."""

    def __init__(self, point=(16.0, 16.0, 0.0), score: float = 0.8):
        self.point = point
        self.score = score
        self.input_shapes = []

    def __call__(self, patch):
        self.input_shapes.append(tuple(patch.shape))
        landmarks = torch.tensor([list(self.point)] * 21, dtype=torch.float32).reshape(1, 63)
        return landmarks, torch.tensor([[self.score]])


class FakeBackend:
    """Model backend recording every load request."""

    def __init__(
        self,
        models: Optional[Dict[str, object]] = None,
        fail: Iterable[str] = (),
        without_url: Iterable[str] = (),
        barrier=None,
        device: str = "cpu"
    ):
        self.models = models or {}
        self.fail = set(fail)
        self.without_url = set(without_url)
        self.barrier = barrier
        self.device = device
        self.calls = []
        self._lock = Lock()

    def load_model(self, path: str, from_remote_hub: bool = False) -> ModelHandle:
        with self._lock:
            self.calls.append((path, from_remote_hub))
        if self.barrier is not None:
            self.barrier.wait()

        name = path.rsplit('/', 1)[-1]
        if name in self.fail:
            raise FileNotFoundError(f"Model file not found: {path}")

        url = None if name in self.without_url else path
        return ModelHandle(model=self.models.get(name, object()), model_url=url, device=self.device)

    def paths(self):
        return [path for path, _ in self.calls]


def make_config(**hand_overrides) -> Config:
    """Small-input configuration used across the test suite."""
    hand = dict(
        detector=DetectorConfig(model_path="handdetect.pt", input_size=32),
        skeleton=SkeletonConfig(model_path="handskeleton.pt", input_size=32),
        max_detected=2,
    )
    hand.update(hand_overrides)
    return Config(model_base_path="models", hand=HandConfig(**hand))


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def sample_frame():
    """Provide a sample BGR frame for testing."""
    return np.random.randint(0, 255, (100, 200, 3), dtype=np.uint8)


@pytest.fixture
def input_tensor():
    """Provide a (1, H, W, 3) input tensor of a 200x100 image."""
    return torch.rand(1, 100, 200, 3)


@pytest.fixture
def sample_landmarks():
    """Provide 21 distinct landmarks, point i being (i, 10 * i, -i)."""
    return [(float(i), float(10 * i), float(-i)) for i in range(21)]
