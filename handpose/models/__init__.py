"""Model loading and handle caching."""

from .loader import (
    LoadStatus,
    ModelCache,
    ModelHandle,
    ModelLoader,
    ModelSlot,
    TorchModelBackend,
    create_model_loader,
    join_model_path,
)

__all__ = [
    "LoadStatus",
    "ModelCache",
    "ModelHandle",
    "ModelLoader",
    "ModelSlot",
    "TorchModelBackend",
    "create_model_loader",
    "join_model_path",
]
