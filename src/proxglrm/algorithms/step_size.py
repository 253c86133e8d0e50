"""
Step Size Module
================

Adaptive per-block step sizes with a backtracking line search.

One `StepSizeController` holds the step sizes of all columns of X (or of all
column-chunks of Y). Each step size persists across outer iterations: it grows
after every accepted step and shrinks on every rejected trial.
"""
from typing import Callable

import numpy as np

from proxglrm.regularizers import Regularizer, prox


class StepSizeController:
    """
    Backtracking proximal gradient steps over independent blocks.

    Attributes:
        alphas (np.ndarray): Current step size of each block.
        min_stepsize (float): Floor under which a step size is never kept.
        increase (float): Factor applied to a step size after an accepted step.
        decrease (float): Factor applied to a step size after a rejected trial.
        floor_factor (float): A step size falling below `min_stepsize` is reset to
            `min_stepsize * floor_factor`.
    """

    def __init__(
        self,
        size: int,
        stepsize: float,
        min_stepsize: float,
        increase: float = 1.05,
        decrease: float = 0.7,
        floor_factor: float = 1.1,
    ):
        self.alphas = np.full(size, float(stepsize))
        self.min_stepsize = float(min_stepsize)
        self.increase = increase
        self.decrease = decrease
        self.floor_factor = floor_factor

    def __len__(self) -> int:
        return len(self.alphas)

    def step(
        self,
        index: int,
        point: np.ndarray,
        gradient: np.ndarray,
        lipschitz: float,
        objective: Callable[[np.ndarray], float],
        reg: Regularizer,
    ) -> np.ndarray:
        """
        Takes one proximal gradient step on block `index`.

        Trial points prox(reg, point - t * gradient, t) with t = alphas[index] / lipschitz
        are tried until one strictly decreases `objective`. When the step size falls
        below the floor, it is clamped and the last trial point is returned without
        checking it.

        Args:
            index (int): Block index.
            point (np.ndarray): Current value of the block.
            gradient (np.ndarray): Gradient of the smooth part at `point`.
            lipschitz (float): Scaling of the step size for this block.
            objective (Callable[[np.ndarray], float]): Block objective.
            reg (Regularizer): Regularizer of the block.

        Returns:
            np.ndarray: The new value of the block, `point` itself when the step size
                is already at the floor.
        """
        previous = objective(point)
        while self.alphas[index] > self.min_stepsize:
            stepsize = self.alphas[index] / lipschitz
            candidate = prox(reg, point - stepsize * gradient, stepsize)
            if objective(candidate) < previous:
                self.alphas[index] *= self.increase
                return candidate
            self.alphas[index] *= self.decrease
            if self.alphas[index] < self.min_stepsize:
                self.alphas[index] = self.min_stepsize * self.floor_factor
                return candidate
        return point
