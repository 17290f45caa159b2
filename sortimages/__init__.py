"""
sort-images - Sort photos and videos into YYYY-MM-DD folders.

Reads the original capture date embedded in each file and moves the file
into a folder named after that date, either inside a new destination tree
or in place. Files are never overwritten, truncated or left behind twice.
"""

__version__ = "1.0.0"


# Public API
from .cli import main
from .config import Config
from .core import ImageSorter
from .destinations import DestinationPolicy, Layout, format_date_folder, resolve
from .file_operations import FileOperations
from .models import FileRecord, Outcome, ProcessingOutcome
from .stats import RunReport
from .timestamps import read_capture_time
from .walker import walk

__all__ = [ "main", "Config", "ImageSorter", "DestinationPolicy", "Layout", "format_date_folder",
            "resolve", "FileOperations", "FileRecord", "Outcome", "ProcessingOutcome", "RunReport",
            "read_capture_time", "walk" ]
