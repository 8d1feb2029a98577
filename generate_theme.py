#!/usr/bin/env python3
"""Generate an rmpc theme and palette report from album art."""

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path

from color_math import ColorSpace
from pipeline import ClusteringConfig, generate_palette
from sampling import SampleParams, prepare_samples
from theme import render_theme

__version__ = '0.3.0'

DEBUG_ENV_VAR = 'ALBUM_THEME_DEBUG'
TRUTHY = {'1', 'true', 'yes', 'on'}


def debug_from_env(environ=os.environ) -> bool:
    return environ.get(DEBUG_ENV_VAR, '').strip().lower() in TRUTHY


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='generate_theme',
        description='Generate an rmpc theme from album art.'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '--image', '-i',
        required=True,
        help='Path to album art image'
    )
    parser.add_argument(
        '--k', '-k',
        type=int,
        default=12,
        help='Number of color clusters to extract'
    )
    parser.add_argument(
        '--space', '-s',
        default='CIELAB',
        help='Color space for clustering (CIELAB, RGB, HSL, HSV, YUV, CIELUV)'
    )
    parser.add_argument(
        '--output', '-o',
        default=None,
        help='Write JSON report here instead of stdout'
    )
    parser.add_argument(
        '--theme-output',
        default=None,
        help='Write the RON theme file to this path'
    )
    parser.add_argument(
        '--disable-scrollbar',
        action='store_true',
        help='Leave the scrollbar block out of the theme'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help=f'Include pairwise solver diagnostics (also via {DEBUG_ENV_VAR}=1)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log progress to stderr'
    )
    return parser


def build_report(result, total_samples: int, duration_ms: float, color_space: str,
                 scrollbar_enabled: bool, debug: bool) -> dict:
    report = {
        'version': __version__,
        'clusters': [c.to_dict() for c in result.clusters],
        'roleAssignments': [a.to_dict() for a in result.assignments],
        'totalSamples': total_samples,
        'iterations': result.iterations,
        'durationMs': duration_ms,
        'colorSpace': color_space,
        'scrollbarEnabled': scrollbar_enabled,
    }
    if debug:
        report['debug'] = {'pairwise': result.trace.to_dict() if result.trace else None}
    return report


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s:%(name)s:%(message)s',
    )

    # Fail fast on a bad color space before touching the image
    try:
        ColorSpace.from_name(args.space)
    except ValueError as e:
        parser.error(str(e))
    if args.k < 1:
        parser.error('--k must be at least 1')

    debug = args.debug or debug_from_env()
    start = time.perf_counter()

    try:
        sample_result = prepare_samples(SampleParams(path=Path(args.image)))
        result = generate_palette(
            sample_result.samples,
            sample_result.sampled_pixels,
            ClusteringConfig(space=args.space, k=args.k),
            debug=debug,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error analyzing image: {e}", file=sys.stderr)
        return 1

    scrollbar_enabled = not args.disable_scrollbar

    if args.theme_output:
        theme_path = Path(args.theme_output)
        try:
            theme_path.parent.mkdir(parents=True, exist_ok=True)
            theme_path.write_text(render_theme(result.assignments, scrollbar_enabled))
        except OSError as e:
            print(f"Error writing theme: {e}", file=sys.stderr)
            return 1
        print(f"Theme written to: {theme_path}", file=sys.stderr)

    duration_ms = (time.perf_counter() - start) * 1000.0
    report = build_report(
        result,
        total_samples=sample_result.sampled_pixels,
        duration_ms=duration_ms,
        color_space=result.color_space.value,
        scrollbar_enabled=scrollbar_enabled,
        debug=debug,
    )
    output = json.dumps(report, indent=2)

    if args.output:
        try:
            Path(args.output).write_text(output)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(output)

    return 0


if __name__ == '__main__':
    sys.exit(main())
