"""Entry point for the VSCode search provider service."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .providers import provider_labels

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vscode-search-provider",
        description="Gnome search providers for recent workspaces in VSCode variants",
        epilog="Set $LOG_LEVEL to control the log level",
    )
    parser.add_argument(
        "--providers",
        action="store_true",
        help="List all providers",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.providers:
        for label in provider_labels():
            print(label)
        return 0

    # Importing the daemon pulls in GLib and pydbus, which --providers never needs
    from .daemon import SearchProviderService, setup_logging

    setup_logging()
    logger.info(f"Started VSCode search provider version: {__version__}")
    logger.info(f"PID: {os.getpid()}")

    return SearchProviderService().run()


if __name__ == "__main__":
    sys.exit(main())
