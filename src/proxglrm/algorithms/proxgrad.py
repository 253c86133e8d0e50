# pylint: disable=C0103,R0914
"""
Proximal Gradient Method
========================

Fits a GLRM by alternating proximal gradient steps on the columns of X and on the
column-chunks of Y.

Each outer iteration:

1. X update: for every example e, a gradient step on X[:, e] followed by the prox
   of rx_e, with a backtracking step size specific to e.
2. Y update: the same for every feature f on Y[:, yidxs[f]] with ry_f.
3. The full objective is recorded and the working factors are copied into the model.

Fitting stops after `max_iter` outer iterations, or once more than 10 iterations
have run and the objective decreased by less than `convergence_tol` times the
number of observed entries.
"""
import logging
import time
from dataclasses import dataclass, fields
from functools import partial
from typing import Any, Dict, Optional, Tuple

import numpy as np

from proxglrm.algorithms.gradients import column_gradient, row_gradient
from proxglrm.algorithms.step_size import StepSizeController
from proxglrm.models.convergence_history import ConvergenceHistory
from proxglrm.models.glrm import GLRM

logger = logging.getLogger(__name__)


@dataclass
class ProxGradParams:
    """
    Configuration of the proximal gradient method.

    Attributes:
        stepsize (float): Initial step size of every row and column.
        max_iter (int): Maximum number of outer iterations.
        inner_iter (int): Number of sweeps over X before moving on to Y
            (and vice versa).
        convergence_tol (float): Stop when the objective decreases by less than
            this, per observed entry, over one outer iteration.
        min_stepsize (float): Floor of the step sizes. Defaults to 0.01 * stepsize.
    """

    stepsize: float = 1.0
    max_iter: int = 100
    inner_iter: int = 1
    convergence_tol: float = 1e-5
    min_stepsize: Optional[float] = None

    def __post_init__(self):
        self.stepsize = float(self.stepsize)
        if self.stepsize <= 0:
            raise ValueError(f"`stepsize` must be positive, got {self.stepsize}.")
        if self.min_stepsize is None:
            self.min_stepsize = 0.01 * self.stepsize
        self.min_stepsize = float(self.min_stepsize)
        if self.min_stepsize <= 0:
            raise ValueError(
                f"`min_stepsize` must be positive, got {self.min_stepsize}."
            )
        if self.max_iter < 0:
            raise ValueError(f"`max_iter` must be nonnegative, got {self.max_iter}.")
        if self.inner_iter < 0:
            raise ValueError(
                f"`inner_iter` must be nonnegative, got {self.inner_iter}."
            )
        self.convergence_tol = float(self.convergence_tol)
        if self.convergence_tol < 0:
            raise ValueError(
                f"`convergence_tol` must be nonnegative, got {self.convergence_tol}."
            )

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ProxGradParams":
        """
        Builds the parameters from a configuration mapping.

        Args:
            config (Dict[str, Any]): Keyword arguments of `ProxGradParams`.

        Returns:
            ProxGradParams: The parameters.

        Raises:
            KeyError: If `config` contains an unknown key.
        """
        known = {field.name for field in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise KeyError(
                f"Unknown proximal gradient parameters: {sorted(unknown)}. "
                f"Expected a subset of {sorted(known)}."
            )
        return cls(**config)


def _check_factors(glrm: GLRM):
    d = glrm.embedding_dim
    if glrm.Y.shape != (glrm.k, d):
        logger.warning(
            "The width of Y should match the embedding dimension of the losses. "
            "Instead, embedding_dim(losses) = %d and Y has shape %s. "
            "Reinitializing Y as randn(%d, %d).",
            d,
            glrm.Y.shape,
            glrm.k,
            d,
        )
        glrm.Y = glrm.rng.standard_normal((glrm.k, d))
    if np.linalg.norm(glrm.Y) == 0:
        logger.debug("Y is identically zero, reinitializing it as 0.1 * randn.")
        glrm.Y = 0.1 * glrm.rng.standard_normal((glrm.k, d))


def fit(
    glrm: GLRM,
    params: Optional[ProxGradParams] = None,
    history: Optional[ConvergenceHistory] = None,
    verbose: bool = True,
) -> Tuple[np.ndarray, np.ndarray, ConvergenceHistory]:
    """
    Fits `glrm` with the proximal gradient method.

    The model's X and Y are overwritten after every outer iteration, while the
    iterations themselves work on copies.

    Args:
        glrm (GLRM): The model, its X and Y are used as the starting point.
        params (ProxGradParams, optional): Configuration. Defaults to ProxGradParams().
        history (ConvergenceHistory, optional): Record to append to. Defaults to a
            new history.
        verbose (bool, optional): Whether to log the objective every 10 iterations.
            Defaults to True.

    Returns:
        Tuple[np.ndarray, np.ndarray, ConvergenceHistory]:
            - X: The fitted example factor, shape (k, m).
            - Y: The fitted feature factor, shape (k, d).
            - history: One record before the first iteration, one per iteration and a
              final record repeating the last objective.
    """
    params = ProxGradParams() if params is None else params
    history = ConvergenceHistory("ProxGradGLRM") if history is None else history
    m, n = glrm.A.shape

    _check_factors(glrm)
    X = glrm.X.copy()
    Y = glrm.Y.copy()
    XY = X.T @ Y

    row_steps = StepSizeController(m, params.stepsize, params.min_stepsize)
    col_steps = StepSizeController(n, params.stepsize, params.min_stepsize)
    tol = params.convergence_tol * glrm.nb_observations

    if verbose:
        logger.info("Fitting GLRM")
    history.update(0, glrm.objective(X, Y, XY))
    logger.debug(
        "Initial objective: %.6e, tolerance: %.6e", history.last_objective, tol
    )
    start_time = time.time()
    for ith_iteration in range(1, params.max_iter + 1):
        # X update, Y is left untouched
        for _ in range(params.inner_iter):
            for e in range(m):
                g = row_gradient(glrm, e, XY, Y)
                X[:, e] = row_steps.step(
                    e,
                    X[:, e],
                    g,
                    len(glrm.observed_features[e]) + 1,
                    partial(glrm.row_objective, e, Y=Y),
                    glrm.rx[e],
                )
            XY = X.T @ Y

        # Y update, X is left untouched
        for _ in range(params.inner_iter):
            for f in range(n):
                span = glrm.yidxs[f]
                G = column_gradient(glrm, f, XY, X)
                Y[:, span] = col_steps.step(
                    f,
                    Y[:, span],
                    G,
                    len(glrm.observed_examples[f]) + 1,
                    partial(glrm.col_objective, f, X=X),
                    glrm.ry[f],
                )
            XY = X.T @ Y

        obj = glrm.objective(X, Y, XY)
        history.update(time.time() - start_time, obj)
        np.copyto(glrm.X, X)
        np.copyto(glrm.Y, Y)
        start_time = time.time()
        logger.debug(
            "[Main Loop] Iteration %d: objective=%.6e, mean row step=%.3e, "
            "mean column step=%.3e",
            ith_iteration,
            obj,
            row_steps.alphas.mean() if m else 0.0,
            col_steps.alphas.mean() if n else 0.0,
        )

        if ith_iteration > 10 and history.objective[-2] - obj < tol:
            logger.debug(
                "[Convergence] Iteration %d: decrease below %.3e", ith_iteration, tol
            )
            break
        if verbose and ith_iteration % 10 == 0:
            logger.info(
                "Iteration %d: objective value = %s",
                ith_iteration,
                history.last_objective,
            )
    history.update(time.time() - start_time, history.last_objective)
    return glrm.X, glrm.Y, history
