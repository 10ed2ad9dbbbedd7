"""Frame sources for inference: images, image directories, video files and cameras."""

from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union
import cv2
import numpy as np
import logging

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {'.jpg', '.jpeg', '.png', '.bmp', '.webp'}


class FrameSource:
    """
    Iterates BGR frames from a single input.

    Supports:
    - Image files
    - Directories of images (sorted by name)
    - Video files (MP4, AVI, etc.)
    - USB cameras (integer index)
    """

    def __init__(self, source: Union[str, int, Path], max_frames: Optional[int] = None):
        """
        Initialize frame source.

        Args:
            source: File path, directory, or camera index
            max_frames: Stop after this many frames (None for no limit)
        """
        if isinstance(source, str) and source.isdigit():
            source = int(source)
        self.source = source
        self.max_frames = max_frames
        self.frame_count = 0

        self._images: Optional[List[Path]] = None
        self.cap: Optional[cv2.VideoCapture] = None

        if isinstance(source, int):
            self.kind = "camera"
        else:
            path = Path(source)
            if path.is_dir():
                self.kind = "directory"
                self._images = sorted(p for p in path.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
            elif path.suffix.lower() in IMAGE_SUFFIXES:
                self.kind = "image"
                self._images = [path]
            else:
                self.kind = "video"

        if self.kind in ("camera", "video"):
            self.cap = cv2.VideoCapture(source if isinstance(source, int) else str(source))
            if not self.cap.isOpened():
                raise RuntimeError(f"Failed to open video source: {source}")

        logger.info(f"Frame source opened: {source} ({self.kind})")

    def __iter__(self) -> Iterator[Tuple[int, np.ndarray]]:
        """Yield ``(frame_index, frame_bgr)`` pairs."""
        for frame in self._frames():
            if self.max_frames is not None and self.frame_count >= self.max_frames:
                break
            yield self.frame_count, frame
            self.frame_count += 1

    def _frames(self) -> Iterator[np.ndarray]:
        if self._images is not None:
            for path in self._images:
                frame = cv2.imread(str(path))
                if frame is None:
                    logger.warning(f"Skipping unreadable image: {path}")
                    continue
                yield frame
            return

        while self.cap is not None:
            ret, frame = self.cap.read()
            if not ret or frame is None:
                break
            yield frame

    def release(self) -> None:
        """Release the underlying capture, if any."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def __enter__(self) -> "FrameSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
