"""Filesystem IO helpers for the frames directory."""
import csv
import json
import os
import re
from typing import Any

from .common import ensure_dirs
from .constants import FRAME_EXT, FRAME_FIELDS, FRAME_INDEX_WIDTH
from .models import FrameRecord

FRAME_NAME_RE = re.compile(r"^(\d+)" + re.escape(FRAME_EXT) + r"$", re.IGNORECASE)


def frame_filename(sequence_index: int) -> str:
    """Return the artifact name for a sequence index, e.g. 000012.jpg."""
    if sequence_index < 1:
        raise ValueError("Sequence index starts at 1.")
    return f"{sequence_index:0{FRAME_INDEX_WIDTH}d}{FRAME_EXT}"


def frame_index_from_name(name: str) -> int | None:
    """Parse the sequence index out of a frame file name, or None if it has none."""
    match = FRAME_NAME_RE.match(os.path.basename(name))
    if not match:
        return None
    return int(match.group(1))


def write_frame(frames_dir: str, sequence_index: int, data: bytes) -> str:
    """Write frame bytes under their sequence name and return the path."""
    path = os.path.join(frames_dir, frame_filename(sequence_index))
    with open(path, "wb") as handle:
        handle.write(data)
    return path


def frame_manifest_rows(records: list[FrameRecord]) -> list[dict[str, Any]]:
    """Flatten frame records into manifest rows."""
    return [
        {
            "frame_index": record["sequence_index"],
            "image_name": os.path.basename(record["path"]),
            "gps_latitude": record["lat"],
            "gps_longitude": record["lon"],
            "heading_deg": "" if record["heading"] is None else round(record["heading"], 2),
            "pano_id": record["pano_id"],
        }
        for record in records
    ]


def write_frames_csv(path: str, records: list[FrameRecord]) -> None:
    """Write the frames manifest CSV to disk."""
    ensure_dirs(os.path.dirname(path))
    with open(path, "w", newline="", encoding="utf-8") as csv_fp:
        writer = csv.DictWriter(csv_fp, fieldnames=FRAME_FIELDS)
        writer.writeheader()
        for row in frame_manifest_rows(records):
            writer.writerow(row)


def build_route_geojson(records: list[FrameRecord]) -> dict[str, Any] | None:
    """Build a GeoJSON LineString through the accepted frame positions."""
    if len(records) < 2:
        return None
    coordinates = [[record["lon"], record["lat"]] for record in records]
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {
                    "frame_count": len(records),
                    "first_frame": records[0]["sequence_index"],
                    "last_frame": records[-1]["sequence_index"],
                },
                "geometry": {
                    "type": "LineString",
                    "coordinates": coordinates,
                },
            }
        ],
    }


def write_json(path: str, payload: dict[str, Any]) -> None:
    """Write JSON payload with UTF-8 encoding and pretty formatting."""
    ensure_dirs(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
