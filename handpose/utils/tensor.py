"""Helpers for moving between OpenCV frames and model input tensors."""

from typing import Tuple, Union
import cv2
import numpy as np
import torch

ImageTensor = Union[np.ndarray, torch.Tensor]


def image_size(input_tensor: ImageTensor) -> Tuple[int, int]:
    """
    Get ``(width, height)`` of an image tensor.

    Accepts batched ``(1, H, W, C)`` or unbatched ``(H, W, C)`` layouts.
    """
    shape = tuple(input_tensor.shape)
    if len(shape) == 4:
        return int(shape[2]), int(shape[1])
    if len(shape) == 3:
        return int(shape[1]), int(shape[0])
    raise ValueError(f"Expected an image tensor of rank 3 or 4, got shape {shape}")


def to_input_tensor(frame_bgr: np.ndarray) -> torch.Tensor:
    """
    Convert an OpenCV BGR frame into a ``(1, H, W, 3)`` RGB float tensor in [0, 1].

    Args:
        frame_bgr: Input image (BGR format, uint8)

    Returns:
        Batched image tensor
    """
    rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    return torch.from_numpy(np.ascontiguousarray(rgb, dtype=np.float32) / 255.0).unsqueeze(0)


def to_nchw(input_tensor: ImageTensor) -> torch.Tensor:
    """Convert an NHWC (or HWC) image into a float ``(1, C, H, W)`` torch tensor."""
    tensor = torch.as_tensor(input_tensor, dtype=torch.float32)
    if tensor.dim() == 3:
        tensor = tensor.unsqueeze(0)
    return tensor.permute(0, 3, 1, 2).contiguous()
