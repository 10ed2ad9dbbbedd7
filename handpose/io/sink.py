"""Persistence of per-frame hand results."""

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import pandas as pd
import jsonlines
from dataclasses import dataclass, field
from threading import Lock
import logging

from ..result import HandResult

logger = logging.getLogger(__name__)

CSV_FIELDS = ['frame', 'timestamp', 'hand_id', 'confidence', 'x', 'y', 'width', 'height', 'has_landmarks']


@dataclass
class FrameRecord:
    """Hand results of a single frame."""
    frame: int
    timestamp: float
    hands: List[HandResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'frame': self.frame,
            'timestamp': self.timestamp,
            'hands': [hand.to_dict() for hand in self.hands],
        }

    def csv_rows(self) -> List[Dict[str, Any]]:
        rows = []
        for hand in self.hands:
            x, y, w, h = hand.box
            rows.append({
                'frame': self.frame,
                'timestamp': self.timestamp,
                'hand_id': hand.id,
                'confidence': hand.confidence,
                'x': x,
                'y': y,
                'width': w,
                'height': h,
                'has_landmarks': hand.landmarks is not None,
            })
        return rows


class ResultSink:
    """Writer for hand results with JSONL and CSV outputs."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        write_jsonl: bool = True,
        write_csv: bool = True,
        session_id: Optional[str] = None
    ):
        """
        Initialize result sink.

        Args:
            output_dir: Directory to save result files
            write_jsonl: Enable JSONL output (one record per frame)
            write_csv: Enable CSV output (one row per hand)
            session_id: Session identifier (auto-generated if None)
        """
        self.output_dir = Path(output_dir)
        self.write_jsonl = write_jsonl
        self.write_csv = write_csv

        self.session_id = session_id or f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.jsonl_path = self.output_dir / f"{self.session_id}_hands.jsonl"
        self.csv_path = self.output_dir / f"{self.session_id}_hands.csv"

        self._lock = Lock()
        self.records: List[FrameRecord] = []

        if self.write_csv and not self.csv_path.exists():
            with open(self.csv_path, 'w', newline='', encoding='utf-8') as f:
                csv.DictWriter(f, fieldnames=CSV_FIELDS).writeheader()

        logger.info(f"Result sink initialized: {self.output_dir}")

    def log_frame(self, frame: int, timestamp: float, hands: List[HandResult]) -> FrameRecord:
        """
        Record the results of one frame to configured outputs.

        Args:
            frame: Frame index
            timestamp: Capture or processing time in seconds
            hands: Hand results for the frame

        Returns:
            The stored frame record
        """
        record = FrameRecord(frame=frame, timestamp=timestamp, hands=list(hands))

        with self._lock:
            self.records.append(record)

            if self.write_jsonl:
                try:
                    with jsonlines.open(self.jsonl_path, mode='a') as writer:
                        writer.write(record.to_dict())
                except OSError as e:
                    logger.error(f"Failed to write JSONL: {e}")

            if self.write_csv and record.hands:
                try:
                    with open(self.csv_path, 'a', newline='', encoding='utf-8') as f:
                        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
                        writer.writerows(record.csv_rows())
                except OSError as e:
                    logger.error(f"Failed to write CSV: {e}")

        logger.debug(f"Logged frame {frame}: {len(record.hands)} hand(s)")
        return record

    def get_statistics(self) -> Dict[str, Any]:
        """Get statistics about recorded frames."""
        with self._lock:
            confidences = [hand.confidence for r in self.records for hand in r.hands]
            return {
                'total_frames': len(self.records),
                'frames_with_hands': sum(1 for r in self.records if r.hands),
                'total_hands': len(confidences),
                'avg_confidence': sum(confidences) / len(confidences) if confidences else 0.0,
                'session_id': self.session_id
            }

    def to_dataframe(self) -> pd.DataFrame:
        """Convert recorded hands to a pandas DataFrame with one row per hand."""
        with self._lock:
            rows = [row for record in self.records for row in record.csv_rows()]
        return pd.DataFrame(rows, columns=CSV_FIELDS)

    def close(self) -> Dict[str, Any]:
        """Write the session summary and return it."""
        stats = self.get_statistics()
        summary_path = self.output_dir / f"{self.session_id}_summary.json"
        with open(summary_path, 'w', encoding='utf-8') as f:
            json.dump(stats, f, indent=2, ensure_ascii=False)

        logger.info(f"Result sink closed. Total frames: {stats['total_frames']}")
        return stats
