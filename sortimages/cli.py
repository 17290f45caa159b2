"""
Command-line interface for sort-images.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .config import Config
from .constants import PROGRAM, get_console
from .core import ImageSorter
from .destinations import Layout
from .exceptions import ArgumentError


def positive_int(value: str) -> int:
    """Parse a strictly positive integer argument."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        usage=f"{PROGRAM} [options] <directory> [<dst_directory>]",
        description="Sort photos and videos into YYYY-MM-DD folders by their capture date",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
With one directory, files are reorganized in place: each file moves into a
date folder beside it and directories left empty are deleted. With two,
every file below the first is moved into date folders under the second.
Existing files are never overwritten.

Examples:
  {PROGRAM} ~/Pictures/Camera
  {PROGRAM} /media/sdcard/DCIM ~/Pictures/Sorted
  {PROGRAM} --layout split-raw --raw-folder ARW ~/Pictures/Camera
        """
    )

    parser.add_argument(
        "paths", nargs="*", metavar="directory",
        help="Directory to reorganize, or source and destination directories"
    )
    parser.add_argument(
        "--layout", "-l", choices=Layout.names(),
        help="Folder layout beneath each date folder (default: combined)"
    )
    parser.add_argument(
        "--raw-folder", metavar="NAME",
        help="Name of the raw sub-folder used by the split-raw and flatten layouts (default: RAW)"
    )
    parser.add_argument(
        "--workers", "-w", type=positive_int, metavar="N",
        help="Process files with N worker threads (default: 1)"
    )
    parser.add_argument(
        "--dry-run", "-n", action="store_true",
        help="Preview moves without changing anything"
    )
    parser.add_argument(
        "--config", "-c", type=Path, metavar="FILE",
        help="Read layout and worker settings from a YAML file"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--version", "-V", action="store_true",
        help=f"Display the version number of {PROGRAM} and exit"
    )

    return parser


def validate_paths(paths: List[str]) -> List[Path]:
    """Check one or two positional directories before anything touches the filesystem."""
    source = Path(paths[0]).expanduser()
    if not source.is_dir():
        raise ArgumentError(f"{paths[0]} is not a valid directory.", source)

    if len(paths) == 1:
        return [source]

    dest = Path(paths[1]).expanduser()
    if dest.exists() and not dest.is_dir():
        raise ArgumentError(f"{paths[1]} is not a valid directory.", dest)
    return [source, dest]


def show_processing_plan(paths: List[Path], sorter: ImageSorter, console: Console) -> None:
    """Display the processing plan before execution."""
    mode = "REORGANIZE IN PLACE" if len(paths) == 1 else "MOVE TO NEW TREE"
    if sorter.dry_run:
        mode += " (DRY RUN)"

    console.print("\n[bold]Processing Plan:[/bold]")
    console.print(f"  Source:          [blue]{paths[0]}[/blue]")
    if len(paths) == 2:
        console.print(f"  Destination:     [blue]{paths[1]}[/blue]")
    console.print(f"  Processing Mode: [cyan]{mode}[/cyan]")
    console.print(f"  Layout:          [cyan]{sorter.policy.layout.value}[/cyan]")
    if sorter.policy.layout is not Layout.COMBINED:
        console.print(f"  Raw Folder:      [cyan]{sorter.policy.raw_folder}[/cyan]")
    if sorter.workers > 1:
        console.print(f"  Workers:         [cyan]{sorter.workers}[/cyan]")
    console.print()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__
        print(__version__)
        return 0

    if len(args.paths) not in (1, 2):
        parser.print_usage()
        return 2

    try:
        paths = validate_paths(args.paths)
        config = Config(config_path=args.config)
        layout = Layout.from_name(args.layout) if args.layout else None
        policy = config.to_policy(layout=layout, raw_folder=args.raw_folder)
        workers = args.workers or config.get_workers()
        if len(paths) == 2 and policy.layout is Layout.FLATTEN:
            raise ArgumentError("The flatten layout only applies to in-place reorganization")
    except ArgumentError as e:
        print(e)
        return 1

    console = get_console()
    sorter = ImageSorter(policy=policy, dry_run=args.dry_run, workers=workers,
                         verbose=args.verbose)
    show_processing_plan(paths, sorter, console)

    try:
        if len(paths) == 1:
            report = sorter.reorganize(paths[0])
        else:
            report = sorter.copy_tree(paths[0], paths[1])
    except KeyboardInterrupt:
        console.print("\n[red]Operation cancelled by user[/red]")
        return 1

    sorter.print_summary(report)
    return 1 if report.has_errors() else 0


if __name__ == "__main__":
    sys.exit(main())
