"""Capture timestamp extraction from embedded image metadata."""

import io
import re
import struct
import subprocess
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, List, Optional

import exifread

from .constants import exiftool_available, get_logger


logger = get_logger()

CAPTURE_TAG = "EXIF DateTimeOriginal"

JPEG_SOI = b"\xff\xd8"
JPEG_APP1 = 0xE1
JPEG_SOS = 0xDA
JPEG_EOI = 0xD9
EXIF_HEADER = b"Exif\x00\x00"

# EXIF (2023:07:04 10:00:00) or ISO-like (2023-07-04T10:00:00) date-times,
# with optional sub-seconds and UTC offset
_DATETIME_PATTERN = re.compile(
    r'\s*(\d{4})[-:](\d{2})[-:](\d{2})[T ](\d{2}):(\d{2}):(\d{2})(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?\s*$'
)


def read_capture_time(path: Path) -> Optional[datetime]:
    """Return the original capture time embedded in a file, or None.

    exifread is tried first; exiftool (when installed) covers the containers
    exifread cannot decode, such as video files. Never raises.
    """
    capture_time = _read_with_exifread(path)
    if capture_time is None and exiftool_available:
        capture_time = _read_with_exiftool(path)

    if capture_time is None:
        logger.debug(f"No capture timestamp found for {path}")
    return capture_time


def _read_with_exifread(path: Path) -> Optional[datetime]:
    """Decode DateTimeOriginal with exifread; the last EXIF block wins.

    exifread stops at the first Exif segment of a JPEG, so each segment's
    TIFF payload is decoded on its own and the last value found is kept.
    Other containers (raw files, TIFF, HEIC) are handed to exifread whole.
    """
    try:
        with open(path, 'rb') as f:
            segments = _jpeg_exif_segments(f)
            if segments:
                values = [_capture_tag(io.BytesIO(tiff)) for tiff in segments]
                found = [value for value in values if value is not None]
                value = found[-1] if found else None
            else:
                f.seek(0)
                value = _capture_tag(f)
    except Exception as e:
        logger.debug(f"exifread failed for {path}: {e}")
        return None

    if value is None:
        return None
    return parse_exif_datetime(value)


def _capture_tag(f: BinaryIO) -> Optional[str]:
    tags = exifread.process_file(f, details=False)
    tag = tags.get(CAPTURE_TAG)
    return str(tag) if tag is not None else None


def _jpeg_exif_segments(f: BinaryIO) -> List[bytes]:
    """Return the TIFF payload of every Exif APP1 segment, in file order.

    Returns an empty list for anything that is not a JPEG. Scanning stops at
    the start of the compressed image data.
    """
    if f.read(2) != JPEG_SOI:
        return []

    segments = []
    while True:
        byte = f.read(1)
        if byte != b"\xff":
            break
        marker = f.read(1)
        while marker == b"\xff":  # fill bytes
            marker = f.read(1)
        if not marker or marker[0] in (JPEG_SOS, JPEG_EOI):
            break
        if marker[0] == 0x01 or 0xD0 <= marker[0] <= 0xD7:
            continue

        length_bytes = f.read(2)
        if len(length_bytes) < 2:
            break
        length = struct.unpack(">H", length_bytes)[0]
        if length < 2:
            break
        payload = f.read(length - 2)
        if marker[0] == JPEG_APP1 and payload.startswith(EXIF_HEADER):
            segments.append(payload[len(EXIF_HEADER):])
    return segments


def _read_with_exiftool(path: Path) -> Optional[datetime]:
    try:
        result = subprocess.run([
            "exiftool",
            "-q", "-q",
            "-a",                             # keep duplicate tags from every block
            "-s3",                            # bare values, one per line
            "-d", "%Y:%m:%d %H:%M:%S",
            "-DateTimeOriginal",
            str(path)],
            capture_output=True, text=True, check=True, timeout=60
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
        logger.debug(f"exiftool failed for {path}: {e}")
        return None

    values = [line for line in result.stdout.splitlines() if line.strip()]
    if not values:
        return None
    return parse_exif_datetime(values[-1])


def parse_exif_datetime(value: str) -> Optional[datetime]:
    """Parse an EXIF date-time string into a naive datetime.

    The wall-clock time is kept as recorded by the camera: an offset suffix
    is accepted but ignored. Zeroed or malformed values give None.
    """
    match = _DATETIME_PATTERN.match(value or "")
    if not match:
        return None

    try:
        return datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None
