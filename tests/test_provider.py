import pytest
import requests

from streetview_drive.config import PipelineConfig
from streetview_drive.models import TrackPoint
from streetview_drive.provider import StreetViewClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", headers=None):
        self.status_code = status_code
        self.payload = payload
        self.content = content
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.payload is None:
            raise requests.JSONDecodeError("Expecting value", "", 0)
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return self.response


@pytest.fixture
def config():
    return PipelineConfig(api_key="secret", timeout=3.5)


def test_missing_api_key_rejected():
    with pytest.raises(ValueError):
        StreetViewClient(PipelineConfig())


def test_request_params(config):
    client = StreetViewClient(config, session=FakeSession(FakeResponse()))
    query = client.build_query(TrackPoint(48.8566, 2.3522), 123.456)
    assert client.request_params(query) == {
        "size": "1920x1080",
        "location": "48.8566,2.3522",
        "fov": "80",
        "pitch": "0",
        "source": "outdoor",
        "radius": "10",
        "key": "secret",
        "heading": "123.46",
    }


def test_unspecified_heading_is_omitted(config):
    client = StreetViewClient(config, session=FakeSession(FakeResponse()))
    params = client.request_params(client.build_query(TrackPoint(1.0, 2.0), None))
    assert "heading" not in params


def test_fetch_metadata(config):
    session = FakeSession(FakeResponse(payload={"status": "OK", "pano_id": "abc", "copyright": "x"}))
    client = StreetViewClient(config, session=session)
    metadata = client.fetch_metadata(client.build_query(TrackPoint(1.0, 2.0), 0.0))
    assert metadata == {"status": "OK", "pano_id": "abc"}
    assert session.calls[0]["url"] == "https://maps.googleapis.com/maps/api/streetview/metadata"
    assert session.calls[0]["timeout"] == 3.5
    assert session.calls[0]["params"]["heading"] == "0.00"


def test_fetch_metadata_zero_results(config):
    client = StreetViewClient(config, session=FakeSession(FakeResponse(payload={"status": "ZERO_RESULTS"})))
    assert client.fetch_metadata(client.build_query(TrackPoint(1.0, 2.0), None)) == {"status": "ZERO_RESULTS"}


def test_fetch_metadata_bad_json(config):
    client = StreetViewClient(config, session=FakeSession(FakeResponse(payload=None)))
    with pytest.raises(ValueError):
        client.fetch_metadata(client.build_query(TrackPoint(1.0, 2.0), None))


def test_fetch_metadata_http_error(config):
    client = StreetViewClient(config, session=FakeSession(FakeResponse(status_code=403, payload={})))
    with pytest.raises(requests.RequestException):
        client.fetch_metadata(client.build_query(TrackPoint(1.0, 2.0), None))


def test_fetch_image(config, jpeg_bytes):
    session = FakeSession(FakeResponse(content=jpeg_bytes, headers={"Content-Type": "image/jpeg"}))
    client = StreetViewClient(config, session=session)
    assert client.fetch_image(client.build_query(TrackPoint(1.0, 2.0), 10.0)) == jpeg_bytes
    assert session.calls[0]["url"] == "https://maps.googleapis.com/maps/api/streetview"


def test_fetch_image_rejects_non_image(config):
    response = FakeResponse(content=b"<html>", headers={"Content-Type": "text/html"})
    client = StreetViewClient(config, session=FakeSession(response))
    with pytest.raises(ValueError):
        client.fetch_image(client.build_query(TrackPoint(1.0, 2.0), 10.0))
