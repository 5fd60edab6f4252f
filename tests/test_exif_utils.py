import piexif
import pytest

from streetview_drive.exif_utils import build_gps_ifd, degrees_to_rationals, gps_to_degrees, read_frame_gps, tag_frame_gps


def test_degrees_round_trip_southern_western():
    for value, ref in ((-33.865143, b"S"), (-151.2099, b"W")):
        assert gps_to_degrees(degrees_to_rationals(value), ref) == pytest.approx(value, abs=1e-7)


def test_gps_ifd_refs():
    ifd = build_gps_ifd(-10.0, 20.0, None)
    assert ifd[piexif.GPSIFD.GPSLatitudeRef] == b"S"
    assert ifd[piexif.GPSIFD.GPSLongitudeRef] == b"E"
    assert piexif.GPSIFD.GPSImgDirection not in ifd


def test_tag_and_read_back(tmp_path, jpeg_bytes):
    path = tmp_path / "000001.jpg"
    path.write_bytes(jpeg_bytes)
    assert tag_frame_gps(str(path), 51.5007, -0.1246, 271.5)
    assert read_frame_gps(str(path)) == pytest.approx(
        {"latitude_deg": 51.5007, "longitude_deg": -0.1246, "heading_deg": 271.5}, abs=1e-6
    )


def test_tag_without_heading(tmp_path, jpeg_bytes):
    path = tmp_path / "000002.jpg"
    path.write_bytes(jpeg_bytes)
    tag_frame_gps(str(path), 1.0, 2.0, None)
    assert "heading_deg" not in read_frame_gps(str(path))


def test_read_untagged_or_invalid(tmp_path):
    path = tmp_path / "junk.jpg"
    path.write_bytes(b"not an image")
    assert read_frame_gps(str(path)) == {}


def test_seconds_carry_into_minutes_and_degrees():
    assert degrees_to_rationals(10.99999999) == ((11, 1), (0, 1), (0, 10000))
    degrees, minutes, seconds = degrees_to_rationals(48.0166666666)
    assert minutes[0] < 60 and seconds[0] < 60 * seconds[1]


def test_direction_wraps_below_360():
    ifd = build_gps_ifd(1.0, 2.0, 359.996)
    assert ifd[piexif.GPSIFD.GPSImgDirection] == (0, 100)


def test_corrupt_exif_block_does_not_raise(tmp_path, jpeg_bytes):
    payload = b"Exif\x00\x00MM\x00\x2a\x00\x00"
    path = tmp_path / "000003.jpg"
    path.write_bytes(jpeg_bytes[:2] + b"\xff\xe1" + (len(payload) + 2).to_bytes(2, "big") + payload + jpeg_bytes[2:])
    tag_frame_gps(str(path), 1.0, 2.0, 90.0)
    assert isinstance(read_frame_gps(str(path)), dict)
    assert path.read_bytes()[:2] == b"\xff\xd8"
