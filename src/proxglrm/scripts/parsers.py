"""
Parser Module
=============
"""

import argparse

from proxglrm.scripts.utils import csv_file, output_dir, yaml_file


def parse_fit(subparsers: argparse._SubParsersAction):
    """
    Parses command-line arguments for fitting a GLRM.

    Args:
        subparsers (argparse._SubParsersAction): The subparsers object to which
            the fit command will be added.
    """
    parser = subparsers.add_parser(
        "fit",
        help="Fit a GLRM with the proximal gradient method.",
    )
    parser.add_argument(
        "--data",
        metavar="FILE",
        type=csv_file,
        required=True,
        help="CSV file of (row, column, value) triples of the observed entries.",
    )
    parser.add_argument(
        "--config-path",
        metavar="FILE",
        type=yaml_file,
        required=True,
        help="Path to the YAML configuration file of the model.",
    )
    parser.add_argument(
        "--output-path",
        metavar="FILE",
        type=output_dir,
        required=True,
        help="Directory to save output results.",
    )
    parser.add_argument(
        "--shape",
        type=int,
        nargs=2,
        default=None,
        help=(
            "Shape of the matrix (rows, columns). Default is None, meaning the "
            "smallest shape containing every index (default: %(default)s)."
        ),
    )
    parser.add_argument(
        "--log-filename",
        type=str,
        default="pipeline.log",
        help="Filename for log output (default: %(default)s).",
    )
    parser.add_argument(
        "--results-filename",
        type=str,
        default="results.pickle",
        help="Filename for serialized results (default: %(default)s).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not report progress every 10 iterations (default: %(default)s).",
    )


def parse_post(subparsers: argparse._SubParsersAction):
    """
    Parses command-line arguments for the post-processing of fit results.

    Args:
        subparsers (argparse._SubParsersAction): The subparsers object to which
            the post command will be added.
    """
    parser = subparsers.add_parser(
        "post",
        help="Plot and summarize the convergence of one or more fits.",
    )
    parser.add_argument(
        "--results-paths",
        metavar="FILE",
        type=str,
        nargs="+",
        required=True,
        help="Paths to serialized fit results.",
    )
    parser.add_argument(
        "--run-names",
        type=str,
        nargs="+",
        required=True,
        help="Names of the runs, in the same order as the results paths.",
    )
    parser.add_argument(
        "--output-path",
        metavar="FILE",
        type=output_dir,
        required=True,
        help="Directory to save the figure and the summary table.",
    )
    parser.add_argument(
        "--linear-scale",
        action="store_true",
        help="Plot the objective on a linear axis (default: %(default)s).",
    )
