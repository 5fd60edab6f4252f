"""Track loading from GPX and CSV files."""
import csv
import os

import gpxpy
import gpxpy.gpx

from .common import normalize_header_name, parse_float, sniff_csv_dialect
from .constants import TRACK_CSV_FIELD_ALIASES
from .models import TrackPoint


class TrackParseError(ValueError):
    """Raised when a track file cannot be turned into an ordered point list."""


def checked_point(lat: float | None, lon: float | None, where: str) -> TrackPoint:
    """Validate a coordinate pair and return it as a TrackPoint."""
    if lat is None or lon is None:
        raise TrackParseError(f"Missing coordinate at {where}.")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise TrackParseError(f"Coordinate out of range at {where}: {lat}, {lon}.")
    return TrackPoint(lat, lon)


def load_gpx_points(path: str) -> list[TrackPoint]:
    """Read the first track of a GPX file (all segments), or its first route."""
    try:
        with open(path, "r", encoding="utf-8") as handle:
            gpx = gpxpy.parse(handle)
    except gpxpy.gpx.GPXException as exc:
        raise TrackParseError(f"Invalid GPX file {path}: {exc}") from exc
    if gpx.tracks:
        raw = [point for segment in gpx.tracks[0].segments for point in segment.points]
    elif gpx.routes:
        raw = list(gpx.routes[0].points)
    else:
        raise TrackParseError(f"No track or route found in {path}.")
    return [
        checked_point(point.latitude, point.longitude, f"{os.path.basename(path)} point {idx}")
        for idx, point in enumerate(raw, start=1)
    ]


def build_track_csv_column_map(fieldnames: list[str]) -> dict[str, str]:
    """Map canonical coordinate fields to CSV header names."""
    normalized = {normalize_header_name(name): name for name in fieldnames if name}
    mapping: dict[str, str] = {}
    for key, aliases in TRACK_CSV_FIELD_ALIASES.items():
        for alias in aliases:
            alias_key = normalize_header_name(alias)
            if alias_key in normalized:
                mapping[key] = normalized[alias_key]
                break
    return mapping


def load_csv_points(path: str) -> list[TrackPoint]:
    """Read latitude/longitude columns from a CSV file in row order."""
    with open(path, "r", encoding="utf-8-sig", newline="") as handle:
        sample = handle.read(2048)
        handle.seek(0)
        dialect = sniff_csv_dialect(sample)
        reader = csv.DictReader(handle, dialect=dialect)
        if not reader.fieldnames:
            raise TrackParseError("Track CSV is missing headers.")
        column_map = build_track_csv_column_map(list(reader.fieldnames))
        if "latitude" not in column_map or "longitude" not in column_map:
            raise TrackParseError("Track CSV needs latitude and longitude columns.")
        points: list[TrackPoint] = []
        for line_no, row in enumerate(reader, start=2):
            raw_lat = (row.get(column_map["latitude"]) or "").strip()
            raw_lon = (row.get(column_map["longitude"]) or "").strip()
            if not raw_lat and not raw_lon:
                continue
            points.append(checked_point(parse_float(raw_lat), parse_float(raw_lon), f"line {line_no}"))
        return points


def load_track(path: str) -> list[TrackPoint]:
    """Load an ordered point list from a GPX or CSV track file."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Track file not found: {path}")
    ext = os.path.splitext(path)[1].lower()
    if ext in (".csv", ".tsv", ".txt"):
        points = load_csv_points(path)
    else:
        points = load_gpx_points(path)
    if not points:
        raise TrackParseError(f"Track contains no points: {path}")
    return points
