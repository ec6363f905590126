#!/usr/bin/env python3
"""
resprite - sprite atlas generator for map styles.
Builds a packed PNG atlas and JSON manifest from a directory of SVG icons.

The following files are created:
  ${output%.*}.png / ${output%.*}.json
      Combined atlas with every ratio, or the 1x atlas with --split-ratios
  ${output%.*}@2x.png / ${output%.*}@2x.json
      Per-ratio atlases (with --split-ratios and --ratios 1,2)
SVG file names are used as icon identifiers.
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

from resprite_core.atlas import AtlasBuilder
from resprite_core.config import AtlasConfig, DEFAULT_MAX_DIMENSION, DEFAULT_PADDING, parse_ratios
from resprite_core.errors import AtlasError
from resprite_core.logger import setup_logging, write_run_log, generate_log_filename


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='resprite',
        description='Build a map sprite atlas from input directories of SVGs.')
    parser.add_argument('svg_dirs', nargs='+', type=Path, metavar='SVG_DIR',
                        help='Input directory or SVG file, can be repeated')
    parser.add_argument('-o', '--output', type=Path, required=True, metavar='PATH',
                        help='Base output file path (with or without an extension)')
    parser.add_argument('--ratios', type=parse_ratios, default=(1,),
                        help='Comma-separated pixel ratios to render (default: 1)')
    parser.add_argument('--with-hires', action='store_true',
                        help='Shorthand for --ratios 1,2')
    parser.add_argument('--split-ratios', action='store_true',
                        help='Write one Mapbox-style atlas per ratio instead of a combined one')
    parser.add_argument('--buffer', default=str(DEFAULT_PADDING), metavar='LENGTH',
                        help='Padding around each icon, e.g. 1, 2px, 0.5mm (default: %(default)s)')
    parser.add_argument('--max-dimension', type=int, default=DEFAULT_MAX_DIMENSION, metavar='PX',
                        help='Maximum canvas width and height, 0 for unbounded (default: %(default)s)')
    parser.add_argument('--css', type=Path, dest='css_override', metavar='PATH',
                        help='Override the XML stylesheet in SVG files')
    parser.add_argument('--metadata', type=Path, metavar='PATH',
                        help='JSON file with per-icon sdf flags and content insets')
    parser.add_argument('-j', '--threads', type=int, default=0, metavar='N',
                        help='Number of parallel threads to use (default: automatic)')
    parser.add_argument('--no-log', action='store_true',
                        help='Do not write the build log next to the output')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose console output')
    return parser


def main(argv=None) -> int:
    """Main entry point for the resprite command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger('resprite')

    if not args.output.name:
        parser.error(f"Invalid output file name: {args.output}")

    ratios = tuple(args.ratios)
    if args.with_hires:
        ratios = tuple(sorted(set(ratios) | {1, 2}))

    try:
        config = AtlasConfig(
            buffer=args.buffer,
            max_dimension=args.max_dimension or None,
            ratios=ratios,
            split_ratios=args.split_ratios,
            threads=args.threads,
            css_override=args.css_override,
        )
    except ValueError as e:
        parser.error(str(e))

    start_time = datetime.now()
    started = time.monotonic()
    builds = []
    error = None
    try:
        builds = AtlasBuilder(config).run(args.svg_dirs, args.output, args.metadata)
    except (AtlasError, OSError, ValueError) as e:
        error = str(e)
        logger.error(f"Atlas build failed: {e}")

    if not args.no_log:
        log_path = args.output.parent / generate_log_filename(args.output)
        names = {p.name for b in builds for p in b.pack_result.placements}
        first = builds[0].pack_result if builds else None
        write_run_log(
            log_path=log_path,
            output_base=args.output,
            timestamp=start_time,
            inputs=args.svg_dirs,
            ratios=config.ratios,
            padding=config.padding,
            max_dimension=config.max_dimension,
            num_icons=len(names),
            num_variants=sum(len(b.pack_result) for b in builds),
            canvas_size=(first.width, first.height) if first else (0, 0),
            fill_ratio=first.fill_ratio if first else 0.0,
            process_time=time.monotonic() - started,
            error=error,
        )
    return 1 if error else 0


if __name__ == "__main__":
    sys.exit(main())
