"""End-to-end driver: track file to drive-through video."""
from __future__ import annotations

import os
import sys
from collections.abc import Callable, Sequence
from typing import TypeVar

from .assembler import FfmpegEncoder, FrameEncoder, assemble_video
from .common import ensure_dirs, reset_dir
from .config import PipelineConfig
from .constants import FRAMES_MANIFEST_NAME, ROUTE_GEOJSON_NAME
from .fetcher import PanoramaProvider, fetch_frames
from .geometry import densify
from .io_utils import build_route_geojson, write_frames_csv, write_json
from .models import RunSummary
from .provider import StreetViewClient
from .track import load_track

T = TypeVar("T")

EncoderFactory = Callable[[str, PipelineConfig], FrameEncoder]


def default_encoder(output_path: str, config: PipelineConfig) -> FrameEncoder:
    return FfmpegEncoder(output_path, fps=config.fps, ffmpeg_bin=config.ffmpeg_bin)


def cap_points(points: Sequence[T], max_points: int) -> list[T]:
    """Keep the first ``max_points`` points, warning when the route is truncated."""
    if len(points) > max_points:
        print(
            f"Too many points ({len(points)}); trimming to first {max_points}.",
            file=sys.stderr,
        )
        return list(points[:max_points])
    return list(points)


def run_pipeline(
    input_path: str,
    output_path: str,
    config: PipelineConfig,
    *,
    provider: PanoramaProvider | None = None,
    encoder_factory: EncoderFactory = default_encoder,
) -> RunSummary:
    """Build the video for one track; raises on fatal errors, leaving no output video."""
    raw_points = load_track(input_path)
    print(f"Points in file: {len(raw_points)}")
    if provider is None:
        provider = StreetViewClient(config)

    points = densify(raw_points, config.iterations)
    print(f"Points after densify: {len(points)}")
    points_after_densify = len(points)
    points = cap_points(points, config.max_points)

    frames_dir = os.path.abspath(config.frames_dir)
    output_path = os.path.abspath(output_path)
    if os.path.commonpath([frames_dir, output_path]) == frames_dir:
        raise ValueError("Output file must be outside the frames folder, which is wiped each run.")
    reset_dir(frames_dir)
    session = fetch_frames(points, provider, frames_dir, legacy_bearing=config.legacy_bearing)

    write_frames_csv(os.path.join(frames_dir, FRAMES_MANIFEST_NAME), session.frames)
    geojson_payload = build_route_geojson(session.frames)
    if geojson_payload:
        write_json(os.path.join(frames_dir, ROUTE_GEOJSON_NAME), geojson_payload)

    ensure_dirs(os.path.dirname(output_path))
    assemble_video(frames_dir, output_path, encoder_factory(output_path, config))
    print(f"\nDone. {session.frames_produced} frame(s) from {session.points_processed} point(s) -> {output_path}")
    return {
        "points_in_file": len(raw_points),
        "points_after_densify": points_after_densify,
        "points_processed": session.points_processed,
        "frames_produced": session.frames_produced,
        "duplicates": session.duplicates,
        "failures": session.failures,
        "output_path": output_path,
    }
