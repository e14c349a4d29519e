#!/usr/bin/env python3
"""
Lumasort — Pixel Sort Glitch Generator
CLI entry point. Also importable as a library.

Usage:
    python lumasort.py sort photo.png
    python lumasort.py sort a.jpg b.png --norow -p 3 --tmin 10000 --tmax 40000 --tinc 10000
    python lumasort.py sort photo.gif --out sorted/
    python lumasort.py info
    python lumasort.py ui
"""

import sys
import os
import argparse
import logging

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.image_io import load_grid, output_format, write_sweep
from core.safety import preflight, validate_config_limits, validate_grid_size
from core.sweep import SortConfig, process, threshold_sweep

__version__ = "0.1.0"


def _config_from_args(args) -> SortConfig:
    return SortConfig(
        sort_rows=not args.norow,
        sort_cols=not args.nocol,
        passes=args.passes,
        threshold_min=args.tmin,
        threshold_max=args.tmax,
        threshold_increment=args.tinc,
    )


def cmd_sort(args):
    """Pixel-sort each input file at every threshold in the sweep."""
    config = _config_from_args(args)
    # Fail on bad settings before touching any file
    validate_config_limits(config)
    thresholds = threshold_sweep(config)
    if not thresholds:
        print(f"Empty sweep: tmin={config.threshold_min} is not below tmax={config.threshold_max}.")
        return

    for input_path in args.files:
        preflight(input_path)
        grid, fmt = load_grid(input_path)
        validate_grid_size(grid.width, grid.height)
        # No encoder means no output, so fail before sorting
        output_format(fmt)
        print(f"Sorting {input_path} ({grid.width}x{grid.height} {fmt}) "
              f"at {len(thresholds)} thresholds, {config.passes} pass(es)...")
        results = process(grid, config)
        paths = write_sweep(results, input_path, fmt, config.passes, output_dir=args.out)
        for path in paths:
            print(f"  {path}")


def cmd_info(args):
    """Show the default sort settings."""
    defaults = SortConfig()
    print(f"\n  Default settings")
    print(f"  {'—' * 40}")
    print(f"    {'sort rows':20s} = {defaults.sort_rows}   (--norow to disable)")
    print(f"    {'sort columns':20s} = {defaults.sort_cols}   (--nocol to disable)")
    print(f"    {'passes':20s} = {defaults.passes}")
    print(f"    {'threshold min':20s} = {defaults.threshold_min}")
    print(f"    {'threshold max':20s} = {defaults.threshold_max}")
    print(f"    {'threshold increment':20s} = {defaults.threshold_increment}")
    print(f"\n  Thresholds are 16-bit luma (0-65535). One output image per threshold.")
    print(f"  Default sweep: {', '.join(f'{t:g}' for t in threshold_sweep(defaults))}\n")


def cmd_ui(args):
    """Launch the HTTP API."""
    from server import start
    start(port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lumasort",
        description="Lumasort — pixel sort glitch generator",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # sort
    p = sub.add_parser("sort", help="Pixel-sort image files")
    p.add_argument("files", nargs="+", help="Input images (PNG, JPEG, GIF)")
    p.add_argument("--nocol", action="store_true", help="don't sort columns")
    p.add_argument("--norow", action="store_true", help="don't sort rows")
    p.add_argument("-p", "--passes", type=int, default=1, help="the number of passes to make")
    p.add_argument("--tmax", type=float, default=60000, help="max luma threshold")
    p.add_argument("--tmin", type=float, default=0, help="min luma threshold")
    p.add_argument("--tinc", type=float, default=5000, help="threshold increment amount")
    p.add_argument("--out", default=".", help="Output directory (default: current directory)")

    # info
    sub.add_parser("info", help="Show default settings and threshold sweep")

    # ui
    p = sub.add_parser("ui", help="Launch the HTTP API")
    p.add_argument("--port", type=int, default=7860)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "sort": cmd_sort,
        "info": cmd_info,
        "ui": cmd_ui,
    }

    if args.command in commands:
        try:
            commands[args.command](args)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
