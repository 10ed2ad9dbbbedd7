"""Input frame sources and result persistence."""

from .frame_source import FrameSource
from .sink import FrameRecord, ResultSink

__all__ = ["FrameSource", "FrameRecord", "ResultSink"]
