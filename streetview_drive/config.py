"""Run configuration for the drive-through pipeline."""
from __future__ import annotations

import os
from dataclasses import dataclass

from .constants import (
    API_KEY_ENV_VARS,
    FFMPEG_BIN,
    FIELD_OF_VIEW,
    FRAME_RATE,
    FRAMES_DIR,
    IMAGE_SIZE,
    IMAGE_SOURCE,
    INTERPOLATION_ITERATIONS,
    MAX_POINTS,
    PITCH,
    REQUEST_TIMEOUT_S,
    SEARCH_RADIUS_M,
    STREETVIEW_BASE_URL,
)


@dataclass(frozen=True)
class PipelineConfig:
    api_key: str = ""
    base_url: str = STREETVIEW_BASE_URL
    image_size: str = IMAGE_SIZE
    fov: int = FIELD_OF_VIEW
    pitch: int = PITCH
    radius: int = SEARCH_RADIUS_M
    source: str = IMAGE_SOURCE
    timeout: float = REQUEST_TIMEOUT_S
    iterations: int = INTERPOLATION_ITERATIONS
    max_points: int = MAX_POINTS
    frames_dir: str = FRAMES_DIR
    fps: int = FRAME_RATE
    ffmpeg_bin: str = FFMPEG_BIN
    legacy_bearing: bool = False

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ValueError("iterations cannot be negative.")
        if self.max_points <= 0:
            raise ValueError("max-points must be greater than zero.")
        if self.fps <= 0:
            raise ValueError("fps must be greater than zero.")
        if self.timeout <= 0:
            raise ValueError("timeout must be greater than zero.")


def resolve_api_key(cli_key: str | None) -> str:
    """Return the API key from the CLI or environment; raise ValueError when missing."""
    if cli_key and cli_key.strip():
        return cli_key.strip()
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    raise ValueError(f"Street View API key missing. Pass --api-key or set {' or '.join(API_KEY_ENV_VARS)}.")
