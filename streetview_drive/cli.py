"""CLI entrypoint for the drive-through video builder."""
from __future__ import annotations

import argparse
import sys

from .assembler import EncoderError
from .config import PipelineConfig, resolve_api_key
from .constants import FFMPEG_BIN, FRAME_RATE, FRAMES_DIR, INTERPOLATION_ITERATIONS, MAX_POINTS, REQUEST_TIMEOUT_S
from .pipeline import run_pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn a GPS track into a Street View drive-through video.")
    parser.add_argument("input_file", help="Track file (.gpx or .csv with latitude/longitude columns).")
    parser.add_argument("output_file", help="Output video file (.mp4).")
    parser.add_argument("--api-key", help="Street View API key (default: GOOGLE_MAPS_API_KEY or API_KEY).")
    parser.add_argument("--frames-dir", default=FRAMES_DIR, help="Working folder for frames (wiped each run).")
    parser.add_argument("--iterations", type=int, default=INTERPOLATION_ITERATIONS, help="Midpoint passes.")
    parser.add_argument("--max-points", type=int, default=MAX_POINTS)
    parser.add_argument("--fps", type=int, default=FRAME_RATE)
    parser.add_argument("--timeout", type=float, default=REQUEST_TIMEOUT_S, help="Per-request timeout in seconds.")
    parser.add_argument("--ffmpeg", default=FFMPEG_BIN, help="ffmpeg executable.")
    parser.add_argument(
        "--legacy-bearing",
        action="store_true",
        help="Reproduce the older heading math (degrees fed to trig, arithmetic averaging).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)
    try:
        config = PipelineConfig(
            api_key=resolve_api_key(args.api_key),
            frames_dir=args.frames_dir,
            iterations=args.iterations,
            max_points=args.max_points,
            fps=args.fps,
            timeout=args.timeout,
            ffmpeg_bin=args.ffmpeg,
            legacy_bearing=args.legacy_bearing,
        )
        run_pipeline(args.input_file, args.output_file, config)
    except (OSError, ValueError, EncoderError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0
