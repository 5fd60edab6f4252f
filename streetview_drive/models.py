"""Typed structures used across the pipeline."""
from typing import NamedTuple, TypedDict


class TrackPoint(NamedTuple):
    lat: float
    lon: float


class PanoramaQuery(TypedDict):
    lat: float
    lon: float
    heading: float | None
    radius: int
    fov: int
    pitch: int


class PanoramaMetadata(TypedDict, total=False):
    status: str
    pano_id: str


class FrameRecord(TypedDict):
    sequence_index: int
    path: str
    lat: float
    lon: float
    heading: float | None
    pano_id: str


class RunSummary(TypedDict):
    points_in_file: int
    points_after_densify: int
    points_processed: int
    frames_produced: int
    duplicates: int
    failures: int
    output_path: str
