import io
import os

import pytest
import requests
from PIL import Image

from streetview_drive.assembler import EncoderError
from streetview_drive.models import TrackPoint


def make_jpeg(color=(200, 40, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buffer, "JPEG")
    return buffer.getvalue()


class FakeProvider:
    """Scripted provider: one metadata answer per call, in call order."""

    def __init__(self, answers, image=None, image_failures=()):
        self.answers = list(answers)
        self.image = image if image is not None else make_jpeg()
        self.image_failures = set(image_failures)
        self.metadata_queries = []
        self.image_queries = []

    def build_query(self, point, heading):
        return {"lat": point.lat, "lon": point.lon, "heading": heading, "radius": 10, "fov": 80, "pitch": 0}

    def fetch_metadata(self, query):
        call = len(self.metadata_queries)
        self.metadata_queries.append(query)
        answer = self.answers[call] if call < len(self.answers) else f"pano-{call}"
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            return {"status": "ZERO_RESULTS"}
        return {"status": "OK", "pano_id": answer}

    def fetch_image(self, query):
        call = len(self.image_queries)
        self.image_queries.append(query)
        if call in self.image_failures:
            raise requests.ConnectionError("connection reset")
        return self.image


class FakeEncoder:
    """Collects frames in memory and writes a placeholder video on close."""

    def __init__(self, output_path, fail_on_frame=None):
        self.output_path = output_path
        self.fail_on_frame = fail_on_frame
        self.frames = []
        self.opened = False
        self.aborted = False

    def open(self):
        self.opened = True
        with open(self.output_path, "wb") as handle:
            handle.write(b"partial")

    def write_frame(self, data):
        if self.fail_on_frame is not None and len(self.frames) == self.fail_on_frame:
            raise EncoderError("encoder crashed")
        self.frames.append(data)

    def close(self):
        with open(self.output_path, "wb") as handle:
            handle.write(b"video:" + str(len(self.frames)).encode())

    def abort(self):
        self.aborted = True


@pytest.fixture
def jpeg_bytes():
    return make_jpeg()


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def make_encoder():
    return FakeEncoder


@pytest.fixture
def route():
    return [TrackPoint(48.8566 + i * 0.001, 2.3522 + i * 0.0005) for i in range(5)]


@pytest.fixture
def write_csv_track(tmp_path):
    def writer(points, name="track.csv"):
        path = tmp_path / name
        lines = ["lat,lon"] + [f"{p.lat},{p.lon}" for p in points]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(path)

    return writer


@pytest.fixture
def frames_dir(tmp_path):
    path = tmp_path / "_frames"
    os.makedirs(path)
    return str(path)
