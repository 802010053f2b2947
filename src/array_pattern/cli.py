"""
Command-line sampling of array patterns.

Loads an array description (JSON), sweeps its gain over a theta/phi grid and
writes the magnitudes as a text grid or HDF5 dataset.
"""
import argparse
import logging
import sys
from typing import List, Optional

import numpy as np

from .ant_io import load_array_json, pattern_format, write_pattern
from .sampler import sample_pattern
from .utilities import magnitude_to_db

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the array-pattern argument parser."""
    parser = argparse.ArgumentParser(
        prog='array-pattern',
        description='Sample the far-field gain of an antenna array over a theta/phi grid',
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {_get_version()}")
    parser.add_argument('array', help='Array description JSON file')
    parser.add_argument('output', help='Output file (.csv/.txt for a text grid, .h5/.hdf5 for HDF5)')
    parser.add_argument('-f', '--frequency', type=float, required=True, help='Frequency in Hz')
    parser.add_argument('--theta-step', type=float, default=1.0, help='Theta step in degrees')
    parser.add_argument('--phi-step', type=float, default=1.0, help='Phi step in degrees')
    parser.add_argument('--channel', type=int, default=None,
                        help='Sample a single channel instead of the whole array')
    parser.add_argument('--workers', type=int, default=None, help='Worker threads for the sweep')
    parser.add_argument('--decimals', type=int, default=2, help='Decimal places in text grids')
    parser.add_argument('--db', action='store_true', help='Write 20*log10(|gain|) instead of |gain|')
    parser.add_argument('--compression', choices=['gzip', 'lzf', 'none'], default='gzip',
                        help='HDF5 compression filter')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')
    return parser


def _get_version() -> str:
    from . import __version__

    return __version__


def run(args: argparse.Namespace) -> None:
    """Sample the described array and write the result."""
    # Reject unsupported outputs before the sweep
    pattern_format(args.output)

    array = load_array_json(args.array)
    pattern = sample_pattern(
        array,
        args.frequency,
        np.radians(args.theta_step),
        np.radians(args.phi_step),
        channel=args.channel,
        max_workers=args.workers,
    )
    if args.db:
        pattern = pattern.copy(data=magnitude_to_db(pattern.values))
        pattern.attrs['units'] = 'dB'

    write_pattern(
        pattern,
        args.output,
        decimals=args.decimals,
        compression=None if args.compression == 'none' else args.compression,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )

    try:
        run(args)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        logger.exception("Sampling failed")
        print(f"\nerror: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
