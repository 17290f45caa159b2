"""
Test capture timestamp extraction and EXIF date parsing.
"""

import struct
import subprocess
from datetime import datetime

import pytest
from PIL import Image

from sortimages import timestamps
from sortimages.timestamps import parse_exif_datetime, read_capture_time


class TestParseExifDatetime:
    """Test parsing of EXIF date-time strings."""

    @pytest.mark.parametrize("value, expected", [
        ("2023:07:04 10:00:00", datetime(2023, 7, 4, 10, 0, 0)),
        ("2023-07-04T10:00:00", datetime(2023, 7, 4, 10, 0, 0)),
        ("2023:07:04 10:00:00.123", datetime(2023, 7, 4, 10, 0, 0)),
        ("2023:07:04 23:30:00-04:00", datetime(2023, 7, 4, 23, 30, 0)),
        ("2023:07:04 23:30:00Z", datetime(2023, 7, 4, 23, 30, 0)),
        (" 2023:07:04 10:00:00 ", datetime(2023, 7, 4, 10, 0, 0)),
    ])
    def test_valid_values(self, value, expected):
        assert parse_exif_datetime(value) == expected

    @pytest.mark.parametrize("value", [
        "0000:00:00 00:00:00",
        "    :  :     :  :  ",
        "",
        "yesterday",
        "2023:13:01 10:00:00",
        "2023:02:30 10:00:00",
    ])
    def test_invalid_values(self, value):
        assert parse_exif_datetime(value) is None

    def test_offset_does_not_shift_the_date(self):
        """Late-evening shots keep their local calendar date."""
        parsed = parse_exif_datetime("2023:12:31 23:59:59+09:00")
        assert parsed.date() == datetime(2023, 12, 31).date()


class TestReadCaptureTime:
    """Test reading DateTimeOriginal from real files."""

    def test_reads_date_time_original(self, tmp_path, make_photo):
        photo = make_photo(tmp_path / "IMG_0001.JPG", datetime(2023, 7, 4, 10, 0, 0))
        assert read_capture_time(photo) == datetime(2023, 7, 4, 10, 0, 0)

    def test_ignores_modification_date(self, tmp_path, make_photo):
        photo = make_photo(tmp_path / "IMG_0002.JPG", datetime(2021, 5, 6, 7, 8, 9),
                           modified="2024:01:01 00:00:00")
        assert read_capture_time(photo) == datetime(2021, 5, 6, 7, 8, 9)

    def test_raw_named_file(self, tmp_path, make_photo):
        photo = make_photo(tmp_path / "DSC00042.ARW", datetime(2022, 1, 2, 3, 4, 5))
        assert read_capture_time(photo) == datetime(2022, 1, 2, 3, 4, 5)

    def test_jpeg_without_exif(self, tmp_path, make_photo):
        photo = make_photo(tmp_path / "plain.jpg")
        assert read_capture_time(photo) is None

    def test_not_an_image(self, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("not a photo")
        assert read_capture_time(notes) is None

    def test_empty_file(self, tmp_path):
        empty = tmp_path / "empty.jpg"
        empty.write_bytes(b"")
        assert read_capture_time(empty) is None

    def test_missing_file(self, tmp_path):
        assert read_capture_time(tmp_path / "gone.jpg") is None

    def test_file_is_closed_after_read(self, tmp_path, make_photo):
        """The file can be moved away right after its metadata was read."""
        photo = make_photo(tmp_path / "IMG_0003.JPG", datetime(2023, 7, 4, 10, 0, 0))
        read_capture_time(photo)
        photo.rename(tmp_path / "moved.jpg")
        assert (tmp_path / "moved.jpg").exists()


class TestExiftoolFallback:
    """Test the exiftool path used for files exifread cannot decode."""

    def test_last_value_wins(self, tmp_path, monkeypatch):
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"\x00\x00\x00\x18ftypmp42")
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(
                cmd, 0, stdout="2020:01:01 00:00:00\n2023:07:04 10:00:00\n", stderr="")

        monkeypatch.setattr(timestamps, "exiftool_available", True)
        monkeypatch.setattr(timestamps.subprocess, "run", fake_run)

        assert read_capture_time(video) == datetime(2023, 7, 4, 10, 0, 0)
        assert "-DateTimeOriginal" in calls[0]
        assert "-a" in calls[0]

    def test_exiftool_failure_is_not_found(self, tmp_path, monkeypatch):
        video = tmp_path / "clip.mov"
        video.write_bytes(b"garbage")

        def fake_run(cmd, **kwargs):
            raise subprocess.CalledProcessError(1, cmd)

        monkeypatch.setattr(timestamps, "exiftool_available", True)
        monkeypatch.setattr(timestamps.subprocess, "run", fake_run)

        assert read_capture_time(video) is None

    def test_not_used_when_exifread_succeeds(self, tmp_path, make_photo, monkeypatch):
        photo = make_photo(tmp_path / "IMG_0004.JPG", datetime(2023, 7, 4, 10, 0, 0))

        def fake_run(cmd, **kwargs):
            raise AssertionError("exiftool should not be called")

        monkeypatch.setattr(timestamps, "exiftool_available", True)
        monkeypatch.setattr(timestamps.subprocess, "run", fake_run)

        assert read_capture_time(photo) == datetime(2023, 7, 4, 10, 0, 0)


class TestSeveralExifBlocks:
    """Test files embedding more than one EXIF block."""

    @staticmethod
    def exif_segment(photo) -> bytes:
        with Image.open(photo) as image:
            payload = image.info["exif"]
        return b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload

    def test_last_block_wins(self, tmp_path, make_photo):
        preview = make_photo(tmp_path / "preview.jpg", datetime(2001, 1, 1, 0, 0, 0))
        primary = make_photo(tmp_path / "IMG_0001.JPG", datetime(2023, 7, 4, 10, 0, 0))
        data = primary.read_bytes()
        primary.write_bytes(data[:2] + self.exif_segment(preview) + data[2:])

        assert read_capture_time(primary) == datetime(2023, 7, 4, 10, 0, 0)

    def test_block_without_capture_time_is_passed_over(self, tmp_path, make_photo):
        primary = make_photo(tmp_path / "IMG_0002.JPG", datetime(2023, 7, 4, 10, 0, 0))
        data = primary.read_bytes()
        # An EXIF block holding only IFD0 (no DateTimeOriginal) after the primary one
        exif = Image.Exif()
        exif[0x0132] = "2024:01:01 00:00:00"
        payload = exif.tobytes()
        trailing = b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload
        own = self.exif_segment(primary)
        start = data.index(own) + len(own)
        primary.write_bytes(data[:start] + trailing + data[start:])

        assert read_capture_time(primary) == datetime(2023, 7, 4, 10, 0, 0)
