"""
Regularizers Module
===================

Regularizers applied to the columns of X and to the column-chunks of Y.

A regularizer r exposes its value and its proximal operator

    prox_r(x, t) = argmin_z r(z) + ||z - x||^2 / (2 t)

which is the only operation the fitting procedure needs.
"""
import abc

import numpy as np


class Regularizer(metaclass=abc.ABCMeta):
    """
    Base class of all regularizers.

    Attributes:
        scale (float): Multiplicative weight of the penalty.
    """

    def __init__(self, scale: float = 1.0):
        self.scale = float(scale)

    @abc.abstractmethod
    def evaluate(self, x: np.ndarray) -> float:
        """
        Value of the penalty.

        Args:
            x (np.ndarray): A column of X or a column-chunk of Y.

        Returns:
            float: The penalty, `inf` when a constraint is violated.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def prox(self, x: np.ndarray, stepsize: float) -> np.ndarray:
        """
        Proximal operator of the penalty.

        Args:
            x (np.ndarray): The point.
            stepsize (float): The proximal step size t.

        Returns:
            np.ndarray: A new array of the same shape as `x`.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(scale={self.scale})"


class ZeroReg(Regularizer):
    """No penalty."""

    def evaluate(self, x: np.ndarray) -> float:
        return 0.0

    def prox(self, x: np.ndarray, stepsize: float) -> np.ndarray:
        return np.array(x, dtype=float, copy=True)


class QuadReg(Regularizer):
    """Squared Frobenius penalty: scale * ||x||^2."""

    def evaluate(self, x: np.ndarray) -> float:
        return self.scale * float(np.sum(np.square(x)))

    def prox(self, x: np.ndarray, stepsize: float) -> np.ndarray:
        return np.asarray(x, dtype=float) / (1 + 2 * stepsize * self.scale)


class OneReg(Regularizer):
    """L1 penalty: scale * ||x||_1. Its prox is soft thresholding."""

    def evaluate(self, x: np.ndarray) -> float:
        return self.scale * float(np.sum(np.abs(x)))

    def prox(self, x: np.ndarray, stepsize: float) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        return np.sign(x) * np.maximum(np.abs(x) - stepsize * self.scale, 0.0)


class NonNegConstraint(Regularizer):
    """Indicator of the nonnegative orthant. Its prox is the projection."""

    def evaluate(self, x: np.ndarray) -> float:
        return 0.0 if np.all(np.asarray(x) >= 0) else np.inf

    def prox(self, x: np.ndarray, stepsize: float) -> np.ndarray:
        return np.maximum(np.asarray(x, dtype=float), 0.0)


def evaluate(reg: Regularizer, x: np.ndarray) -> float:
    """Value of `reg` at `x`."""
    return reg.evaluate(x)


def prox(reg: Regularizer, x: np.ndarray, stepsize: float) -> np.ndarray:
    """Proximal operator of `reg` at `x` with step size `stepsize`."""
    return reg.prox(x, stepsize)


REGULARIZERS = {
    "zero": ZeroReg,
    "quadratic": QuadReg,
    "l1": OneReg,
    "nonneg": NonNegConstraint,
}
