"""
Optional YAML configuration for layout policy and worker count.

Nothing is read unless a config file is named explicitly; command-line
flags override whatever the file sets. Example:

    layout: split-raw
    raw_folder: ARW
    raw_extensions: [.arw, .dng]
    flatten_folders: [Video, Videos, Clips]
    workers: 4
"""

from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from .constants import DEFAULT_RAW_FOLDER, FLATTEN_FOLDERS, RAW_EXTENSIONS
from .destinations import DestinationPolicy, Layout
from .exceptions import ArgumentError

KNOWN_KEYS = ("layout", "raw_folder", "raw_extensions", "flatten_folders", "workers")


class Config:
    """User preferences for a run."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else None
        self.data = self._load_config()

    def _load_config(self) -> Dict:
        """Load configuration from YAML file."""
        if self.config_path is None:
            return {}

        if not self.config_path.is_file():
            raise ArgumentError(f"Config file not found: {self.config_path}", self.config_path)

        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ArgumentError(f"Could not load config {self.config_path}: {e}", self.config_path)

        if not isinstance(data, dict):
            raise ArgumentError(f"Config {self.config_path} must be a mapping", self.config_path)

        unknown = sorted(set(data) - set(KNOWN_KEYS))
        if unknown:
            raise ArgumentError(f"Unknown config keys in {self.config_path}: {', '.join(unknown)}",
                                self.config_path)
        return data

    def get_layout(self) -> Layout:
        """Get the layout policy (default: combined)."""
        try:
            return Layout.from_name(str(self.data.get('layout', Layout.COMBINED.value)))
        except ValueError as e:
            raise ArgumentError(str(e), self.config_path)

    def get_raw_folder(self) -> str:
        """Get the name of the raw sub-folder."""
        return str(self.data.get('raw_folder', DEFAULT_RAW_FOLDER))

    def get_raw_extensions(self) -> Tuple[str, ...]:
        """Get the extensions treated as raw, normalized to '.ext' lower case."""
        extensions = self.data.get('raw_extensions')
        if extensions is None:
            return RAW_EXTENSIONS
        return tuple(_normalize_extension(ext) for ext in self._as_list('raw_extensions', extensions))

    def get_flatten_folders(self) -> Tuple[str, ...]:
        """Get the folder names lifted into their parent by the flatten layout."""
        folders = self.data.get('flatten_folders')
        if folders is None:
            return FLATTEN_FOLDERS
        return tuple(str(folder) for folder in self._as_list('flatten_folders', folders))

    def get_workers(self) -> int:
        """Get the number of worker threads (default: 1)."""
        workers = self.data.get('workers', 1)
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            raise ArgumentError(f"workers must be a positive integer, got {workers!r}",
                                self.config_path)
        return workers

    def to_policy(self, layout: Optional[Layout] = None,
                  raw_folder: Optional[str] = None) -> DestinationPolicy:
        """Build the destination policy, letting explicit arguments win."""
        raw_folder = raw_folder or self.get_raw_folder()
        if raw_folder in ("", ".", "..") or "/" in raw_folder or "\\" in raw_folder:
            raise ArgumentError(f"Invalid raw folder name: {raw_folder!r}", self.config_path)

        return DestinationPolicy(
            layout=layout or self.get_layout(),
            raw_folder=raw_folder,
            raw_extensions=self.get_raw_extensions(),
            flatten_folders=self.get_flatten_folders(),
        )

    def _as_list(self, key: str, value) -> list:
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list):
            raise ArgumentError(f"{key} must be a list, got {value!r}", self.config_path)
        return value


def _normalize_extension(ext) -> str:
    ext = str(ext).strip().lower()
    return ext if ext.startswith('.') else f".{ext}"
