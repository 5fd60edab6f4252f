"""GPS EXIF tagging for downloaded frames."""
import re
import struct
import sys
from typing import Any

import piexif

from .common import prune_none

EXIF_TAGS_BY_NAME = {
    ifd_name: {tag_info["name"]: tag_id for tag_id, tag_info in piexif.TAGS[ifd_name].items()}
    for ifd_name in piexif.TAGS
}
# piexif surfaces truncated or corrupt EXIF blocks as struct and index errors.
EXIF_ERRORS = (piexif.InvalidImageDataError, ValueError, struct.error, IndexError)
EMPTY_EXIF: dict[str, Any] = {"0th": {}, "Exif": {}, "GPS": {}, "1st": {}, "Interop": {}, "thumbnail": None}
SECONDS_DENOMINATOR = 10000
DIRECTION_DENOMINATOR = 100


def exif_tag_value(exif_dict: dict[str, Any], ifd_name: str, tag_name: str) -> Any:
    """Return an EXIF tag value by name."""
    tag_id = EXIF_TAGS_BY_NAME.get(ifd_name, {}).get(tag_name)
    if tag_id is None:
        return None
    return (exif_dict.get(ifd_name) or {}).get(tag_id)


def decode_exif_text(value: Any) -> str | None:
    """Decode EXIF bytes/strings into clean text."""
    if isinstance(value, bytes):
        text = value.decode(errors="ignore")
    elif isinstance(value, str):
        text = value
    else:
        return None
    text = re.sub(r"[\x00-\x1f\x7f]", "", text).strip()
    return text or None


def rational_to_float(value: Any) -> float | None:
    """Convert a rational or numeric EXIF value to float."""
    if isinstance(value, tuple) and len(value) == 2:
        numerator, denominator = value
        if denominator == 0:
            return None
        return numerator / denominator
    if isinstance(value, (int, float)):
        return float(value)
    return None


def degrees_to_rationals(value: float) -> tuple[tuple[int, int], tuple[int, int], tuple[int, int]]:
    """Split unsigned decimal degrees into EXIF (deg, min, sec) rationals."""
    units = round(abs(value) * 3600 * SECONDS_DENOMINATOR)
    degrees, remainder = divmod(units, 3600 * SECONDS_DENOMINATOR)
    minutes, seconds = divmod(remainder, 60 * SECONDS_DENOMINATOR)
    return (degrees, 1), (minutes, 1), (seconds, SECONDS_DENOMINATOR)


def gps_to_degrees(value: Any, ref: Any) -> float | None:
    """Convert EXIF GPS coordinates to signed degrees."""
    if not value or not ref:
        return None
    try:
        degrees = rational_to_float(value[0])
        minutes = rational_to_float(value[1])
        seconds = rational_to_float(value[2])
    except (IndexError, TypeError):
        return None
    if degrees is None or minutes is None or seconds is None:
        return None
    coord = degrees + minutes / 60.0 + seconds / 3600.0
    ref_text = decode_exif_text(ref)
    if ref_text and ref_text.upper() in ("S", "W"):
        coord *= -1.0
    return coord


def build_gps_ifd(lat: float, lon: float, heading: float | None) -> dict[int, Any]:
    """Build a GPS IFD holding position and, when known, the camera direction."""
    gps_ifd: dict[int, Any] = {
        piexif.GPSIFD.GPSVersionID: (2, 3, 0, 0),
        piexif.GPSIFD.GPSLatitudeRef: b"S" if lat < 0 else b"N",
        piexif.GPSIFD.GPSLatitude: degrees_to_rationals(lat),
        piexif.GPSIFD.GPSLongitudeRef: b"W" if lon < 0 else b"E",
        piexif.GPSIFD.GPSLongitude: degrees_to_rationals(lon),
    }
    if heading is not None:
        gps_ifd[piexif.GPSIFD.GPSImgDirectionRef] = b"T"
        direction = round(heading * DIRECTION_DENOMINATOR) % (360 * DIRECTION_DENOMINATOR)
        gps_ifd[piexif.GPSIFD.GPSImgDirection] = (direction, DIRECTION_DENOMINATOR)
    return gps_ifd


def tag_frame_gps(path: str, lat: float, lon: float, heading: float | None) -> bool:
    """Write GPS tags into a JPEG frame in place; return False when the frame is left untagged."""
    try:
        exif_dict = piexif.load(path)
    except EXIF_ERRORS:
        exif_dict = {key: (dict(value) if isinstance(value, dict) else value) for key, value in EMPTY_EXIF.items()}
    exif_dict["GPS"] = build_gps_ifd(lat, lon, heading)
    try:
        piexif.insert(piexif.dump(exif_dict), path)
    except EXIF_ERRORS as exc:
        print(f"Could not geotag {path}: {exc}", file=sys.stderr)
        return False
    return True


def read_frame_gps(path: str) -> dict[str, Any]:
    """Read latitude, longitude and direction tags back from a frame."""
    try:
        exif_dict = piexif.load(path)
    except EXIF_ERRORS + (OSError,):
        return {}
    return prune_none(
        {
            "latitude_deg": gps_to_degrees(
                exif_tag_value(exif_dict, "GPS", "GPSLatitude"),
                exif_tag_value(exif_dict, "GPS", "GPSLatitudeRef"),
            ),
            "longitude_deg": gps_to_degrees(
                exif_tag_value(exif_dict, "GPS", "GPSLongitude"),
                exif_tag_value(exif_dict, "GPS", "GPSLongitudeRef"),
            ),
            "heading_deg": rational_to_float(exif_tag_value(exif_dict, "GPS", "GPSImgDirection")),
        }
    )
