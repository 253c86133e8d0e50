"""
Main module for the ProxGLRM Tool.

This tool fits Generalized Low Rank Models on partially observed matrices with an
alternating proximal gradient method.

Implemented subcommands:
  1. fit: Fit a GLRM and save its factors and convergence history
  2. post: Post-processing of fit results
"""

import argparse
import datetime
import logging
import traceback
from pathlib import Path
from typing import Any

import pytz

from proxglrm.scripts.fit import fit
from proxglrm.scripts.parsers import parse_fit, parse_post
from proxglrm.scripts.post import post


def setup_logger(args: Any):
    """
    Configures the root logger to write logs to a file with UTC timestamps.

    Args:
        args (Any): Arguments from the argument parser. Expected to have attributes:
            - output_path: The directory path where log files will be stored.
            - log_filename: The name of the log file.
    """
    output_path = Path(args.output_path).absolute()
    output_path.mkdir(parents=True, exist_ok=True)

    log_file = output_path / args.log_filename

    def utc_time(*_) -> Any:
        """Return the current time as a time tuple in the UTC time zone."""
        return datetime.datetime.now(pytz.utc).timetuple()

    file_handler = logging.FileHandler(log_file, mode="w")
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - [%(funcName)s] - %(levelname)s - %(message)s"
    )
    formatter.converter = utc_time
    file_handler.setFormatter(formatter)

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=[file_handler],
    )


def main():
    """
    Main entry point for the ProxGLRM Tool.

    Sets up the command-line argument parser with subcommands and dispatches the
    execution to the corresponding function.
    """
    parser = argparse.ArgumentParser(
        description=(
            "ProxGLRM Tool\n\n"
            "This tool fits Generalized Low Rank Models on partially observed matrices "
            "with an alternating proximal gradient method.\n\n"
            "Implemented subcommands:\n"
            "  1. fit: Fit a GLRM\n"
            "  2. post: Post-processing of fit results"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_fit(subparsers)
    parse_post(subparsers)

    args: Any = parser.parse_args()
    try:
        if args.command == "fit":
            setup_logger(args)
            fit(args)
        elif args.command == "post":
            post(args)
        else:
            raise ValueError(f"No such command: {args.command}")
    except Exception as exception:
        logger = logging.getLogger("proxglrm")
        logger.error("An error occurred during processing: %s", exception)
        logger.error("%s", traceback.format_exc())
        raise


if __name__ == "__main__":
    main()
