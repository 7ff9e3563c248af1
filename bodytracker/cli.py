"""
Command-line interface for the pose tracker.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from bodytracker import __version__
from bodytracker.config.settings import TrackerConfig
from bodytracker.core.types import FusedPose

console = Console()
logger = logging.getLogger("bodytracker")


def describe_pose(pose: FusedPose) -> str:
    """One status line for a published pose."""
    parts = [f"[cyan]{pose.detection_mode.label}[/cyan]", f"joints={len(pose.joints)}"]

    if pose.posture is not None:
        parts.append(f"posture={pose.posture.posture.value} ({pose.posture.confidence:.2f})")
    if pose.face is not None:
        parts.append(f"smile={pose.face.smile_score:.2f}")
    parts.append(f"hands={len(pose.hands)}")

    return "  ".join(parts)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="BodyTracker - stable pose fusion from a camera or video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Track from the default webcam
  bodytracker --camera 0

  # Track a video file with a custom configuration
  bodytracker --video input.mp4 --config tracker.yaml

  # Write the default configuration
  bodytracker --write-config tracker.yaml
        """,
    )

    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")
    parser.add_argument("--camera", "-c", type=int, metavar="INDEX", help="Camera index to use")
    parser.add_argument("--video", type=Path, help="Input video file")
    parser.add_argument("--config", type=Path, help="Configuration file (YAML)")
    parser.add_argument("--write-config", type=Path, metavar="PATH",
                        help="Write the effective configuration to PATH and exit")
    parser.add_argument("--max-frames", type=int, default=0,
                        help="Stop after this many frames (0 = until the source ends)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_config(path: Optional[Path]) -> TrackerConfig:
    config = TrackerConfig.from_yaml(path) if path else TrackerConfig()

    issues = config.validate()
    if issues:
        console.print("[yellow]Configuration warnings:[/yellow]")
        for issue in issues:
            console.print(f"  - {issue}")
    return config


def run(source, config: TrackerConfig, max_frames: int = 0) -> int:
    """Read frames from ``source`` and print each published pose."""
    import cv2

    from bodytracker.core.holistic_estimator import HolisticEstimator
    from bodytracker.core.orchestrator import FrameOrchestrator

    capture = cv2.VideoCapture(source)
    if not capture.isOpened():
        console.print(f"[red]Could not open source:[/red] {source}")
        return 1

    frame_count = 0
    with FrameOrchestrator(HolisticEstimator(config.estimator), config) as tracker:
        tracker.add_listener(lambda pose: console.print(describe_pose(pose)))

        try:
            while True:
                ok, frame = capture.read()
                if not ok:
                    break
                tracker.submit(frame)
                frame_count += 1
                if max_frames and frame_count >= max_frames:
                    break
        except KeyboardInterrupt:
            console.print("\n[yellow]Stopped by user[/yellow]")
        finally:
            capture.release()

        tracker.wait_until_idle(timeout=2.0)
        stats = tracker.stats

    console.print(f"\n[bold green]✓ Done[/bold green]  frames read: {frame_count}")
    console.print(
        f"  accepted={stats.accepted} throttled={stats.throttled} "
        f"busy={stats.dropped_busy} failed={stats.failed} published={stats.published}"
    )
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    if args.version:
        console.print(f"BodyTracker version {__version__}")
        return 0

    setup_logging(args.log_level)
    config = load_config(args.config)

    if args.write_config:
        config.to_yaml(args.write_config)
        console.print(f"[green]✓[/green] Wrote configuration: {args.write_config}")
        return 0

    if args.video is not None:
        source = str(args.video)
    elif args.camera is not None:
        source = args.camera
    else:
        console.print("[red]Error:[/red] use --camera INDEX or --video PATH")
        return 1

    logger.info("Tracking from %s", source)
    return run(source, config, args.max_frames)


if __name__ == "__main__":
    sys.exit(main())
