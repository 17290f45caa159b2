"""
pytest configuration and fixtures for sort-images tests.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

EXIF_IFD_POINTER = 0x8769
TAG_DATETIME = 0x0132
TAG_DATETIME_ORIGINAL = 0x9003


@dataclass
class CliResult:
    """Result from running CLI command."""
    exit_code: int
    output: str
    error: str


@pytest.fixture(autouse=True)
def no_exiftool(monkeypatch):
    """Only exifread decodes metadata in tests, whatever is installed."""
    monkeypatch.setattr("sortimages.timestamps.exiftool_available", False)


@pytest.fixture
def make_photo():
    """Write a small real JPEG, optionally carrying an EXIF capture time.

    The file content is always JPEG, whatever the suffix, which lets raw
    file names (.ARW, .NEF) stand in for real raw files.
    """

    def create(path: Path, taken: Optional[datetime] = None,
               modified: str = "1999:12:31 23:59:59") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        image = Image.new("RGB", (16, 16), color=(180, 90, 30))

        if taken is None:
            image.save(path, format="JPEG")
            return path

        exif = Image.Exif()
        # IFD0 DateTime is the last-modified time and must not be used
        exif[TAG_DATETIME] = modified
        exif[EXIF_IFD_POINTER] = {TAG_DATETIME_ORIGINAL: taken.strftime("%Y:%m:%d %H:%M:%S")}
        image.save(path, format="JPEG", exif=exif)
        return path

    return create


@pytest.fixture
def cli_runner(capsys):
    """Run the sort-images CLI and capture its output."""

    def run_cli(*args) -> CliResult:
        from sortimages.cli import main

        try:
            exit_code = main([str(a) for a in args])
        except SystemExit as e:
            exit_code = e.code if e.code is not None else 0

        captured = capsys.readouterr()
        return CliResult(exit_code=exit_code, output=captured.out, error=captured.err)

    return run_cli


@pytest.fixture
def file_snapshot():
    """Map relative path -> bytes for every file below a directory."""

    def snapshot(root: Path) -> dict:
        return {
            path.relative_to(root).as_posix(): path.read_bytes()
            for path in sorted(root.rglob("*")) if path.is_file()
        }

    return snapshot


@pytest.fixture
def assert_file_structure():
    """Helper to assert expected file structure."""

    def check_structure(base_path: Path, expected_structure: dict):
        """Assert that directory has expected structure.

        Args:
            base_path: Root directory to check
            expected_structure: Dict describing expected structure
                e.g., {
                    "2023-07-04": ["IMG_0001.JPG"],
                    "2023-07-05": {"RAW": ["DSC0001.ARW"]},
                }
        """
        def check_level(path: Path, structure: dict):
            for name, value in structure.items():
                item_path = path / name
                assert item_path.exists(), f"Expected {item_path} to exist"
                assert item_path.is_dir(), f"Expected {item_path} to be a directory"

                if isinstance(value, dict):
                    check_level(item_path, value)
                else:
                    actual_files = sorted(f.name for f in item_path.iterdir() if f.is_file())
                    assert actual_files == sorted(value), \
                        f"Expected files {sorted(value)} in {item_path}, got {actual_files}"

        check_level(base_path, expected_structure)

    return check_structure
