#!/usr/bin/env python3
"""
brute-fillet command line

Rounds the edges of a mesh file, or of the 20 x 20 x 20 demo cube when no
file is given, and optionally writes the result.

Examples:
    brute-fillet part.stl --radius 1.5 --min-angle 60 --output rounded.stl
    brute-fillet --radius 2 --point 10 10 0 --max-distance 5
"""

import argparse
import logging
import sys
import traceback
from typing import List, Optional

from .csg_kernel import get_kernel
from .edge_selection import AngleEdgeSelection, PointEdgeSelection
from .errors import InvalidParameterError
from .fillet import DEFAULT_SEGMENTS, FilletOptions, SubtractionStrategy, fillet_with_report
from .mesh_analysis import analyze_solid
from .mesh_loader import export_solid, load_mesh_file

logger = logging.getLogger(__name__)

# Demo cube edge length
DEMO_CUBE_SIZE = 20.0

# Default sharpness for angle selection
DEFAULT_MIN_ANGLE = 80.0


def configure_logging(verbose: bool = False):
    """Configure root logging for command line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Silence noisy third-party loggers
    logging.getLogger('trimesh').setLevel(logging.WARNING)


def exception_hook(exc_type, exc_value, exc_tb):
    """Global exception handler to log uncaught exceptions."""
    logger.error("Uncaught exception:", exc_info=(exc_type, exc_value, exc_tb))
    traceback.print_exception(exc_type, exc_value, exc_tb)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='brute-fillet',
        description='Round the edges of a triangulated solid by CSG subtraction.'
    )
    parser.add_argument('input', nargs='?', help='Mesh file (.stl, .obj, .ply, .off); demo cube if omitted')
    parser.add_argument('-r', '--radius', type=float, default=2.0, help='Fillet radius (default: 2)')

    selection = parser.add_mutually_exclusive_group()
    selection.add_argument('--point', type=float, nargs=3, metavar=('X', 'Y', 'Z'),
                           help='Fillet the single edge nearest to this point')
    selection.add_argument('--min-angle', type=float,
                           help=f'Fillet all edges sharper than this (default: {DEFAULT_MIN_ANGLE:g})')

    parser.add_argument('--max-distance', type=float, help='Search radius for --point')
    parser.add_argument('-s', '--segments', type=int, default=DEFAULT_SEGMENTS,
                        help=f'Circular segments for the tube (default: {DEFAULT_SEGMENTS})')
    parser.add_argument('--strategy', choices=[s.value for s in SubtractionStrategy],
                        default=SubtractionStrategy.SEQUENTIAL.value,
                        help='How cutting tools are subtracted')
    parser.add_argument('-o', '--output', help='Write the result to this file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def options_from_args(args: argparse.Namespace) -> FilletOptions:
    """Translate parsed arguments to fillet options."""
    if args.point is not None:
        selection = PointEdgeSelection(point=tuple(args.point), max_distance=args.max_distance)
    else:
        min_angle = DEFAULT_MIN_ANGLE if args.min_angle is None else args.min_angle
        selection = AngleEdgeSelection(min_angle=min_angle)

    return FilletOptions(
        radius=args.radius,
        selection=selection,
        segments=args.segments,
        strategy=SubtractionStrategy(args.strategy),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_distance is not None and args.point is None:
        parser.error("--max-distance requires --point")

    configure_logging(args.verbose)
    sys.excepthook = exception_hook

    kernel = get_kernel()

    if args.input:
        load_result = load_mesh_file(args.input, kernel)
        if not load_result.success:
            logger.error(f"Could not load {args.input}: {load_result.error_message}")
            return 1
        solid = load_result.solid
    else:
        logger.info(f"No input given, using {DEMO_CUBE_SIZE:g} unit demo cube")
        solid = kernel.cube((DEMO_CUBE_SIZE,) * 3, center=True)

    try:
        options = options_from_args(args)
        before = analyze_solid(solid, kernel)
        result = fillet_with_report(solid, options, kernel)
    except InvalidParameterError as e:
        logger.error(f"Invalid parameters: {e}")
        return 1

    after = analyze_solid(result.solid, kernel)

    print("Before:")
    print(before.format())
    print("")
    print("After:")
    print(after.format())
    print("")
    print(f"Tools subtracted: {result.tools_built} "
          f"({result.edges_selected} edges selected, {result.tools_skipped} skipped) "
          f"in {result.elapsed_ms:.0f}ms")

    if args.output:
        export_solid(result.solid, args.output, kernel)

    return 0


if __name__ == "__main__":
    sys.exit(main())
