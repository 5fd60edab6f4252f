"""Shared constants for the drive-through video builder."""
import os

STREETVIEW_BASE_URL = "https://maps.googleapis.com/maps/api/streetview"
API_KEY_ENV_VARS = ("GOOGLE_MAPS_API_KEY", "API_KEY")

IMAGE_SIZE = "1920x1080"
FIELD_OF_VIEW = 80
PITCH = 0
SEARCH_RADIUS_M = 10
IMAGE_SOURCE = "outdoor"
REQUEST_TIMEOUT_S = 10.0

# Midpoint passes over the track (1 is good, 2 is smoother but twice the requests).
INTERPOLATION_ITERATIONS = 1
MAX_POINTS = 2500

FRAMES_DIR = os.path.join(os.curdir, "_frames")
FRAME_EXT = ".jpg"
FRAME_INDEX_WIDTH = 6
FRAMES_MANIFEST_NAME = "frames.csv"
ROUTE_GEOJSON_NAME = "route.geojson"

FFMPEG_BIN = "ffmpeg"
FRAME_RATE = 30
VIDEO_CODEC = "libx264"
PIXEL_FORMAT = "yuv420p"

FRAME_FIELDS = [
    "frame_index",
    "image_name",
    "gps_latitude",
    "gps_longitude",
    "heading_deg",
    "pano_id",
]

TRACK_CSV_FIELD_ALIASES = {
    "latitude": ("latitude[deg]", "latitude", "lat", "gps_latitude"),
    "longitude": ("longitude[deg]", "longitude", "lon", "lng", "long", "gps_longitude"),
}
