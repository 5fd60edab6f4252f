"""Sequential panorama dedup and frame download."""
from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

import requests

from .common import format_heading
from .exif_utils import tag_frame_gps
from .geometry import request_bearing
from .io_utils import write_frame
from .models import FrameRecord, PanoramaMetadata, PanoramaQuery, TrackPoint


class PanoramaProvider(Protocol):
    def build_query(self, point: TrackPoint, heading: float | None) -> PanoramaQuery: ...

    def fetch_metadata(self, query: PanoramaQuery) -> PanoramaMetadata: ...

    def fetch_image(self, query: PanoramaQuery) -> bytes: ...


@dataclass
class FetchSession:
    """State carried from one point to the next during a single run."""

    last_pano_id: str | None = None
    last_point: TrackPoint | None = None
    next_index: int = 1
    points_processed: int = 0
    duplicates: int = 0
    failures: int = 0
    frames: list[FrameRecord] = field(default_factory=list)

    @property
    def frames_produced(self) -> int:
        return self.next_index - 1


def process_point(
    session: FetchSession,
    points: Sequence[TrackPoint],
    index: int,
    provider: PanoramaProvider,
    frames_dir: str,
    *,
    legacy_bearing: bool = False,
) -> FrameRecord | None:
    """Resolve, dedup and download a single point; return its frame when one was written."""
    point = points[index]
    heading = request_bearing(points, index, legacy=legacy_bearing)
    query = provider.build_query(point, heading)
    session.points_processed += 1
    session.last_point = point
    print(f"[{index}] {point.lat:.6f}, {point.lon:.6f} heading {format_heading(heading)}")

    try:
        metadata = provider.fetch_metadata(query)
    except (requests.RequestException, ValueError) as exc:
        print(f"[{index}] Metadata request failed, skipping: {exc}", file=sys.stderr)
        session.failures += 1
        return None
    status = metadata.get("status")
    pano_id = metadata.get("pano_id")
    if status != "OK" or not pano_id:
        print(f"[{index}] No panorama (status {status}), skipping.", file=sys.stderr)
        session.failures += 1
        return None
    if pano_id == session.last_pano_id:
        print(f"[{index}] Same panorama as previous frame, skipping.")
        session.duplicates += 1
        return None
    session.last_pano_id = pano_id

    try:
        data = provider.fetch_image(query)
    except (requests.RequestException, ValueError) as exc:
        print(f"[{index}] Image request failed, skipping: {exc}", file=sys.stderr)
        session.failures += 1
        return None
    path = write_frame(frames_dir, session.next_index, data)
    tag_frame_gps(path, point.lat, point.lon, heading)
    record: FrameRecord = {
        "sequence_index": session.next_index,
        "path": path,
        "lat": point.lat,
        "lon": point.lon,
        "heading": heading,
        "pano_id": pano_id,
    }
    session.frames.append(record)
    session.next_index += 1
    return record


def fetch_frames(
    points: Sequence[TrackPoint],
    provider: PanoramaProvider,
    frames_dir: str,
    *,
    legacy_bearing: bool = False,
) -> FetchSession:
    """Fold every point through ``process_point`` in route order."""
    session = FetchSession()
    for index in range(len(points)):
        process_point(session, points, index, provider, frames_dir, legacy_bearing=legacy_bearing)
    print(
        f"Processed {session.points_processed} point(s), downloaded {session.frames_produced} frame(s) "
        f"({session.duplicates} duplicate(s), {session.failures} failure(s))."
    )
    return session
