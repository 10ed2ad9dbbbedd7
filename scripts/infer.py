"""Inference script for hand pose estimation."""

import argparse
import logging
import sys
import time
from pathlib import Path

import cv2

from handpose import Config, create_handpose, load_config
from handpose.api.server import run_server
from handpose.io.frame_source import FrameSource
from handpose.io.sink import ResultSink
from handpose.utils.tensor import to_input_tensor
from handpose.viz.overlay import create_overlay_renderer


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Hand Pose Estimation - Inference",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--src", "--source",
        type=str,
        help="Image, image directory, video file, or camera index"
    )

    parser.add_argument(
        "--config",
        type=str,
        default="configs/handpose.yaml",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        help="Output directory for results (overrides config)"
    )

    parser.add_argument(
        "--max-frames",
        type=int,
        help="Stop after this many frames"
    )

    parser.add_argument(
        "--display",
        action="store_true",
        help="Show annotated frames"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable model loading diagnostics (overrides config)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides config)"
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the HTTP API instead of processing --src"
    )

    return parser.parse_args()


def build_config(args: argparse.Namespace) -> Config:
    """Load the configuration file and apply command line overrides."""
    config_path = Path(args.config)
    if not config_path.exists():
        logging.getLogger(__name__).error(f"Configuration file not found: {config_path}")
        sys.exit(1)

    config = load_config(config_path)

    logging_overrides = {}
    if args.output_dir:
        logging_overrides["out_dir"] = args.output_dir
    if args.log_level:
        logging_overrides["log_level"] = args.log_level

    updates = {}
    if logging_overrides:
        updates["logging"] = config.logging.model_copy(update=logging_overrides)
    if args.debug:
        updates["debug"] = True

    return config.model_copy(update=updates) if updates else config


def run_inference(args: argparse.Namespace, config: Config) -> None:
    """Run hand pose estimation over every frame of the source."""
    logger = logging.getLogger(__name__)

    handpose = create_handpose(config)
    renderer = create_overlay_renderer() if args.display else None
    sink = ResultSink(
        output_dir=config.logging.out_dir,
        write_jsonl=config.logging.write_jsonl,
        write_csv=config.logging.write_csv
    )

    last_time = time.time()
    try:
        with FrameSource(args.src, max_frames=args.max_frames) as source:
            for index, frame in source:
                hands = handpose.predict(to_input_tensor(frame), config)
                now = time.time()
                sink.log_frame(index, now, hands)

                if renderer is not None:
                    fps = 1.0 / max(now - last_time, 1e-6)
                    cv2.imshow('Hand Pose', renderer.draw_hands(frame, hands, fps=fps))
                    key = cv2.waitKey(1) & 0xFF
                    if key == ord('q') or key == 27:  # 'q' or ESC
                        break
                last_time = now
    finally:
        stats = sink.close()
        if renderer is not None:
            cv2.destroyAllWindows()
        logger.info(f"Processed {stats['total_frames']} frame(s), {stats['total_hands']} hand(s)")


def main() -> None:
    """Main inference function."""
    args = parse_args()
    config = build_config(args)

    setup_logging(config.logging.log_level)
    logger = logging.getLogger(__name__)

    logger.info("Starting Hand Pose Estimation")
    logger.info(f"Config: {args.config}")

    try:
        if args.serve:
            run_server(create_handpose(config), config)
        elif args.src is None:
            logger.error("--src is required unless --serve is given")
            sys.exit(2)
        else:
            logger.info(f"Source: {args.src}")
            run_inference(args, config)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")

    except Exception as e:
        logger.error(f"Error during inference: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
