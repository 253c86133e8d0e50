"""
Fit script
==========

Loads a partially observed matrix and a model configuration, fits the GLRM with the
proximal gradient method and saves the factors and the convergence history.
"""

import argparse
import logging

from proxglrm.algorithms.proxgrad import fit as fit_glrm
from proxglrm.preprocessing.dataloader import DataLoader
from proxglrm.scripts.utils import build_model, build_params, load_config
from proxglrm.utils import serialize


def fit(args: argparse.Namespace):
    """
    Fits a GLRM.

    Writes to `args.output_path`:
        - `args.results_filename`: pickled (X, Y, history).
        - convergence.csv: the convergence history.

    Args:
        args (argparse.Namespace): Parsed arguments of the fit subcommand.
    """
    logger = logging.getLogger("fit")
    config = load_config(args.config_path)
    dataloader = DataLoader(
        args.data, shape=tuple(args.shape) if args.shape is not None else None
    )
    glrm = build_model(dataloader, config)
    params = build_params(config)
    logger.debug("Fitting with %s", params)

    X, Y, history = fit_glrm(glrm, params, verbose=not args.quiet)
    logger.debug(
        "Fit finished after %d iterations with objective %.6e in %.2f seconds",
        history.iterations,
        history.last_objective,
        history.times[-1],
    )
    logger.debug("Training RMSE: %.6e", glrm.calculate_rmse())

    results_path = args.output_path / args.results_filename
    serialize((X, Y, history), results_path)
    history.to_dataframe().to_csv(args.output_path / "convergence.csv", index=False)
    logger.debug("Results serialized to %s", results_path)
