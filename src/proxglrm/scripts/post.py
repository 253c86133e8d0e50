"""
This script loads the serialized results of several fits, then saves a
convergence figure and a summary table.
"""

import argparse
import logging
from pathlib import Path

from proxglrm.postprocessing.dataframes import generate_table
from proxglrm.postprocessing.figures import plot_convergence
from proxglrm.utils import deserialize


def post(args: argparse.Namespace):
    """
    Processes fit results and generates the convergence figure and summary table.

    Args:
        args (argparse.Namespace): An object containing:
            - results_paths (List[str]): Paths to serialized (X, Y, history) results.
            - run_names (List[str]): Names corresponding to the results paths.
            - output_path (Path): Directory where output files will be saved.
            - linear_scale (bool): Whether to plot the objective on a linear axis.

    Raises:
        ValueError: If the number of names differs from the number of results.
    """
    logger = logging.getLogger("post_processing")
    if len(args.run_names) != len(args.results_paths):
        raise ValueError(
            f"Got {len(args.run_names)} run names for {len(args.results_paths)} results."
        )
    histories = {}
    for name, path_str in zip(args.run_names, args.results_paths):
        logger.debug("Loading results: %s", path_str)
        _, _, history = deserialize(Path(path_str))
        histories[name] = history

    output_path = Path(args.output_path)
    plot_convergence(
        histories,
        output_file=str(output_path / "convergence.png"),
        log_scale=not args.linear_scale,
    )
    table = generate_table(histories)
    table.to_csv(output_path / "summary.csv")
    logger.debug("Summary:\n%s", table)
