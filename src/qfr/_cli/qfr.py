"""Entry point of the ``qfr`` command line."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from qfr._cli.subcommands import ConvertQFRSubCommand, InfoQFRSubCommand
from qfr._version import __version__
from qfr.utils.exceptions import QFRError, QFRFileError

EXIT_ERROR = 1
EXIT_FILE_ERROR = 3


def main(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv`` and run the selected subcommand.

    Returns:
        the exit status: 0 on success, 1 when the circuit could not be
        processed and 3 when a file could not be accessed.

    """
    parser = argparse.ArgumentParser(
        prog="qfr",
        description="Inspect and convert quantum circuits.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(required=True)
    for subcommand in [ConvertQFRSubCommand, InfoQFRSubCommand]:
        subcommand.add_subcommand(subparsers)

    args = parser.parse_args(argv)
    try:
        args.func(args)
    except QFRFileError as e:
        print(f"[qfr] {e}", file=sys.stderr)
        return EXIT_FILE_ERROR
    except QFRError as e:
        print(f"[qfr] {e}", file=sys.stderr)
        return EXIT_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
