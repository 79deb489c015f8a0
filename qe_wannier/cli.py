"""
Command-line entry point: write a Wannier90 `.win` file from a JSON
description of the input.

    qe2w90 wse2.json --seedname wse2        # writes wse2.win
    qe2w90 wse2.json --print                # writes to stdout
"""

import argparse
import os
import sys
import warnings
from typing import List, Optional

from .errors import QEWannierError
from .model import Wannier90Input
from .wannier90 import make_input_file, write_input_file


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="qe2w90",
        description="Generate a Wannier90 input file from a JSON input description.",
    )
    p.add_argument("config", help="Path to the JSON description of the Wannier90 input")
    p.add_argument("--seedname", default="wannier90", help="Wannier90 seedname")
    p.add_argument("-o", "--output", default=None,
                   help="Output file (default: <seedname>.win)")
    p.add_argument("--print", dest="to_stdout", action="store_true",
                   help="Write the input file to stdout instead of a file")
    p.add_argument("-q", "--quiet", action="store_true", help="Suppress progress output")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        w90 = Wannier90Input.from_json(args.config)
    except (OSError, ValueError, KeyError, TypeError) as e:
        print(f"Error: could not read {args.config}: {e}", file=sys.stderr)
        return 1

    try:
        if args.to_stdout:
            print(make_input_file(w90))
            return 0

        output = args.output or f"{args.seedname}.win"
        if os.path.exists(output):
            warnings.warn(f"Overwriting existing file {output}")
        write_input_file(w90, output, verbose=not args.quiet)
    except QEWannierError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
