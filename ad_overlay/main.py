"""Entry point: CLI argument parsing + pipeline + uvicorn startup."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import cv2
import uvicorn

from ad_overlay.config import load_config
from ad_overlay.pipeline import Pipeline
from ad_overlay.processing.compositor import compose
from ad_overlay.recording.decision_logger import DecisionLogger
from ad_overlay.recording.models import Detection
from ad_overlay.web.app import create_app


def setup_logging(log_dir: str, verbose: bool = False) -> None:
    """Configure logging to both console and file."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_path / "ad_overlay.log"),
        ],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Smart Ad Overlay decision service"
    )
    parser.add_argument(
        "-c", "--config",
        default="config/default.yaml",
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "-d", "--detections",
        default=None,
        help="JSON file with a detection list; run one decision and exit",
    )
    parser.add_argument(
        "--frame",
        default=None,
        help="Frame image to composite the decision onto (with --detections)",
    )
    parser.add_argument(
        "-o", "--output",
        default="preview.png",
        help="Where to write the composited preview (default: preview.png)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Web server host (overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Web server port (overrides config)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def run_once(pipeline: Pipeline, detections_path: str,
             frame_path: str | None, output_path: str) -> int:
    """Decide for the detections in a JSON file and print the render command."""
    logger = logging.getLogger(__name__)
    with open(detections_path, "r") as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("detections", [])
    detections = [Detection.from_dict(d) for d in raw]

    if frame_path:
        frame = cv2.imread(frame_path, cv2.IMREAD_COLOR)
        if frame is None:
            logger.error("Could not read frame: %s", frame_path)
            return 1
        h, w = frame.shape[:2]
        pipeline.update_screen(w, h)

    command = pipeline.decide(detections)
    print(json.dumps(command.to_dict(), indent=2))

    if frame_path:
        cv2.imwrite(output_path, compose(frame, command))
        logger.info("Preview written to %s", output_path)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Load configuration
    config = load_config(args.config)

    # Apply CLI overrides
    if args.host:
        config.web.host = args.host
    if args.port:
        config.web.port = args.port

    # Setup logging
    setup_logging(config.recording.log_dir, args.verbose)
    logger = logging.getLogger(__name__)

    if args.detections:
        pipeline = Pipeline(config)
        try:
            return run_once(pipeline, args.detections, args.frame, args.output)
        finally:
            pipeline.close()

    logger.info("Starting Smart Ad Overlay decision service")
    logger.info("Screen: %dx%d", config.screen.width, config.screen.height)
    logger.info("API: http://%s:%d", config.web.host, config.web.port)

    pipeline = Pipeline(config, decision_logger=DecisionLogger(config.recording.db_path))
    app = create_app(pipeline)

    try:
        # Run uvicorn (blocks until shutdown)
        uvicorn.run(
            app,
            host=config.web.host,
            port=config.web.port,
            log_level="info",
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        pipeline.close()
        logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
