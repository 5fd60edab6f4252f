"""Street View Static API client."""
from __future__ import annotations

from typing import Any

import requests

from .config import PipelineConfig
from .models import PanoramaMetadata, PanoramaQuery, TrackPoint


class StreetViewClient:
    """
    Client for the Google Street View Static API.
    One metadata lookup and one image download per query, no retries.
    """

    def __init__(self, config: PipelineConfig, session: Any | None = None):
        if not config.api_key:
            raise ValueError("Street View API key missing.")
        self.config = config
        self.session = session or requests.Session()

    def build_query(self, point: TrackPoint, heading: float | None) -> PanoramaQuery:
        return {
            "lat": point.lat,
            "lon": point.lon,
            "heading": heading,
            "radius": self.config.radius,
            "fov": self.config.fov,
            "pitch": self.config.pitch,
        }

    def request_params(self, query: PanoramaQuery) -> dict[str, str]:
        """Build the URL parameters for a query; requests handles the encoding."""
        params = {
            "size": self.config.image_size,
            "location": f"{query['lat']},{query['lon']}",
            "fov": str(query["fov"]),
            "pitch": str(query["pitch"]),
            "source": self.config.source,
            "radius": str(query["radius"]),
            "key": self.config.api_key,
        }
        if query["heading"] is not None:
            params["heading"] = f"{query['heading']:.2f}"
        return params

    def fetch_metadata(self, query: PanoramaQuery) -> PanoramaMetadata:
        """
        Look up the panorama serving a query.

        Raises:
            requests.RequestException: transport error, timeout or HTTP error status.
            ValueError: body is not a JSON object.
        """
        response = self.session.get(
            f"{self.config.base_url}/metadata",
            params=self.request_params(query),
            timeout=self.config.timeout,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected metadata payload: {data!r}")
        metadata: PanoramaMetadata = {"status": str(data.get("status", "UNKNOWN"))}
        if data.get("pano_id"):
            metadata["pano_id"] = str(data["pano_id"])
        return metadata

    def fetch_image(self, query: PanoramaQuery) -> bytes:
        """
        Download the image for a query.

        Raises:
            requests.RequestException: transport error, timeout or HTTP error status.
            ValueError: empty body or a non-image content type.
        """
        response = self.session.get(
            self.config.base_url,
            params=self.request_params(query),
            timeout=self.config.timeout,
        )
        response.raise_for_status()
        content_type = response.headers.get("Content-Type", "")
        if content_type and not content_type.startswith("image/"):
            raise ValueError(f"Expected an image, got {content_type}.")
        if not response.content:
            raise ValueError("Empty image response.")
        return response.content
