"""
Program-wide constants, shared console/logger and external tool detection.
"""

import logging
import shutil
import subprocess

from rich.console import Console

PROGRAM = "sort-images"

# Camera raw formats (sensor data, not a compressed rendition)
RAW_EXTENSIONS = (
    ".3fr", ".ari", ".arw", ".bay", ".cr2", ".cr3", ".crw", ".dcr", ".dng",
    ".erf", ".fff", ".iiq", ".k25", ".kdc", ".mef", ".mos", ".mrw", ".nef",
    ".nrw", ".orf", ".pef", ".raf", ".raw", ".rw2", ".rwl", ".sr2", ".srf",
    ".srw", ".x3f",
)

# Folders that hold files which belong one level up (flatten layout)
FLATTEN_FOLDERS = ("Video", "Videos")

DEFAULT_RAW_FOLDER = "RAW"

# Reason attached to every failed file in the run report
UNABLE_TO_PROCESS = "unable to process"

_console = None


def get_console() -> Console:
    """Return the console shared by logging, progress and summary output."""
    global _console
    if _console is None:
        _console = Console(soft_wrap=True)
    return _console


def get_logger() -> logging.Logger:
    """Return the program logger."""
    return logging.getLogger(PROGRAM)


def check_tool_availability(cmd: str, version_flag: str = "-ver") -> bool:
    """Check whether an external command is installed and runs."""
    if shutil.which(cmd) is None:
        return False
    try:
        subprocess.run([cmd, version_flag], capture_output=True, check=True, timeout=10)
        return True
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
        return False


exiftool_available = check_tool_availability("exiftool")
