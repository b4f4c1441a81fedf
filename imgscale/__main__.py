"""
imgscale Command Line Interface

Usage:
    imgscale input_file output_file [options]

The output format follows the output file extension:
    .jpg/.jpeg (JPEG, uses --quality), .png, .bmp, .gif

Invalid option values are replaced by their defaults with a warning.
Values can also come from a JSON preset (--config) or from IMGSCALE_*
environment variables; command line options take precedence over the
environment, which takes precedence over the preset.

Examples:
    imgscale photo.png photo_2x.jpg
    imgscale photo.png small.png -s 0.5
    imgscale scan.jpg scan_big.jpg -s 3 -q 92 -p 0.6 -t 1.2
    imgscale photo.jpg mirrored.png -s 1 -m -f
    imgscale photo.jpg out.jpg --config preset.json
    imgscale --create-config preset.json
"""

import sys
import argparse

from imgscale import __version__
from imgscale.core.base import ProcessingContext
from imgscale.core.config import (
    build_request,
    create_example_config,
    get_env_config,
    load_config,
    DEFAULT_SCALE,
    DEFAULT_QUALITY,
    DEFAULT_SATURATION,
    DEFAULT_SHARPEN,
)
from imgscale.core.errors import ImgScaleError
from imgscale.pipeline import scale_image
from imgscale.utils.files import get_unique_filename, verify_file_exists


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='imgscale',
        description='Image Scaler',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        '-V', '--version',
        action='version',
        version=f'imgscale {__version__}',
    )
    parser.add_argument('input', nargs='?', help='Input image file')
    parser.add_argument('output', nargs='?', help='Output image file')

    # Numeric options are parsed as strings so invalid values can fall
    # back to defaults instead of aborting
    parser.add_argument(
        '-s', '--scale',
        default=None,
        help=f'Scaling factor, between 0 and 10 exclusive (default: {DEFAULT_SCALE})',
    )
    parser.add_argument(
        '-q', '--quality',
        default=None,
        help=f'JPEG quality 1-100 (default: {DEFAULT_QUALITY})',
    )
    parser.add_argument(
        '-t', '--saturation',
        default=None,
        help=f'Saturation multiplier, 0 = greyscale (default: {DEFAULT_SATURATION})',
    )
    parser.add_argument(
        '-p', '--sharpen',
        default=None,
        help=f'Sharpen strength (default: {DEFAULT_SHARPEN}, disabled)',
    )
    parser.add_argument(
        '-b', '--brightness',
        default=None,
        help='Brightness offset -1..1 (default: 0)',
    )
    parser.add_argument(
        '-c', '--contrast',
        default=None,
        help='Contrast offset -1..1 (default: 0)',
    )
    parser.add_argument(
        '-m', '--mirror',
        action='store_true',
        help='Mirror horizontally',
    )
    parser.add_argument(
        '-f', '--flip',
        action='store_true',
        help='Mirror vertically',
    )
    parser.add_argument(
        '-w', '--workers',
        default=None,
        help='Threads used for sharpening (default: 1)',
    )
    parser.add_argument(
        '--config',
        metavar='FILE',
        help='JSON preset supplying default option values',
    )
    parser.add_argument(
        '--create-config',
        metavar='FILE',
        help='Write an example JSON preset and exit',
    )
    parser.add_argument(
        '--overwrite',
        action='store_true',
        help='Overwrite the output file instead of picking a new name',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output',
    )
    return parser


def parse_workers(value) -> tuple[int, str | None]:
    """Worker count, or 1 with a warning message when invalid."""
    if value is None:
        return 1, None
    try:
        workers = int(str(value).strip())
    except ValueError:
        workers = 0
    if workers < 1:
        return 1, f"Workers must be a positive integer, got '{value}'; using 1"
    return workers, None


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.create_config:
        create_example_config(args.create_config)
        return 0

    if args.input is None or args.output is None:
        print("Missing input and/or output file names!")
        parser.print_help()
        return 1

    # Preset < environment < command line
    raw = {}
    if args.config:
        try:
            raw.update(load_config(args.config))
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}")
            return 1
    raw.update(get_env_config())

    cli_values = {
        'scale': args.scale,
        'quality': args.quality,
        'saturation': args.saturation,
        'sharpen': args.sharpen,
        'brightness': args.brightness,
        'contrast': args.contrast,
    }
    raw.update({key: value for key, value in cli_values.items() if value is not None})
    if args.mirror:
        raw['mirror_horizontal'] = True
    if args.flip:
        raw['mirror_vertical'] = True

    request, warnings = build_request(**raw)
    workers, workers_warning = parse_workers(args.workers)
    if workers_warning:
        warnings.append(workers_warning)
    for warning in warnings:
        print(f"Warning: {warning}")

    if args.verbose:
        print(f"input file: {args.input}")
        print(f"output file: {args.output}")
        print(f"quality = {request.quality}")
        print(f"scale = {request.scale}")
        print(f"saturation = {request.saturation}")
        print(f"sharpen strength = {request.sharpen_strength}")
        print(f"brightness = {request.brightness}")
        print(f"contrast = {request.contrast}")
        print(f"mirror = {request.mirror_horizontal}, flip = {request.mirror_vertical}")

    if not verify_file_exists(args.input, verbose=True):
        return 1

    output = args.output
    if not args.overwrite:
        output = get_unique_filename(output, verbose=args.verbose)

    context = ProcessingContext(verbose=args.verbose, workers=workers)
    try:
        scale_image(args.input, output, request, context)
    except (ImgScaleError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
