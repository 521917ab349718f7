"""Command line interface.

Usage:
    localeforge update
    localeforge -c locales.toml build
    localeforge update app/index.html app/js/app.js
    localeforge -v export

Explicit files replace the configured sources of the operation for that run
(an update over a subset of the sources never purges).

Exit Codes:
    0   Success (per-file and per-message problems are logged, not fatal)
    1   Fatal error (configuration, missing destination, corrupt store)

Python 3.13+.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from localeforge.config import OPERATIONS, load_config
from localeforge.errors import LocalesError
from localeforge.tasks import LocalesTask

__all__ = ["main"]

logger = logging.getLogger("localeforge")

DEFAULT_CONFIG = "locales.toml"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="localeforge",
        description="Extract, merge, compile, export and import translations.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Operations:
  update   extract messages from HTML and JS sources into the locale stores
  build    compile the locale stores into JavaScript modules
  export   write the locale stores as CSV files
  import   merge translated CSV files back into the locale stores
""",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path(DEFAULT_CONFIG),
        help=f"TOML config file (default: {DEFAULT_CONFIG})",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug output",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only show warnings and errors",
    )
    parser.add_argument("operation", choices=OPERATIONS, help="Operation to run")
    parser.add_argument(
        "files",
        nargs="*",
        help="Files to process instead of the configured sources",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _parse_args(argv)
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        config = load_config(args.config)
        LocalesTask(config).run(args.operation, args.files or None)
    except LocalesError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
