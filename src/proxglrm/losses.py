# pylint: disable=C0103
"""
Losses Module
=============

Loss functions consumed by the proximal gradient fitting procedure.

Every loss scores a prediction `u` against an observed value `a`. Scalar losses
(embedding dimension 1) take a float prediction; vector-valued losses such as
`MultinomialLoss` take a prediction of length `embedding_dim` and own that many
contiguous columns of Y.

The optimizer only relies on two functions of this module:
    - `grad(loss, u, a)`: derivative of the loss with respect to the prediction.
    - `get_yidxs(losses)`: column span of Y owned by each feature.
"""
import abc
import enum
from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np
from scipy.special import expit, log_softmax, softmax


class GradientKind(enum.Enum):
    """Shape tag of a loss gradient."""

    SCALAR = "scalar"
    VECTOR = "vector"


@dataclass(frozen=True)
class LossGradient:
    """
    Gradient of a loss with respect to its prediction, tagged by shape.

    Attributes:
        kind (GradientKind): Whether `value` is a float or a vector.
        value (Union[float, np.ndarray]): The derivative dL/du.
    """

    kind: GradientKind
    value: Union[float, np.ndarray]


class Loss(metaclass=abc.ABCMeta):
    """
    Base class of all losses.

    Attributes:
        scale (float): Multiplicative weight of the loss.
    """

    embedding_dim: int = 1

    def __init__(self, scale: float = 1.0):
        self.scale = float(scale)

    @abc.abstractmethod
    def evaluate(self, u: Union[float, np.ndarray], a: float) -> float:
        """
        Value of the loss.

        Args:
            u (Union[float, np.ndarray]): The prediction.
            a (float): The observed value.

        Returns:
            float: The loss value.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def grad(self, u: Union[float, np.ndarray], a: float) -> Union[float, np.ndarray]:
        """
        Derivative of the loss with respect to the prediction.

        Args:
            u (Union[float, np.ndarray]): The prediction.
            a (float): The observed value.

        Returns:
            Union[float, np.ndarray]: A float for scalar losses, an array of length
                `embedding_dim` otherwise.
        """
        raise NotImplementedError

    def predict(self, u: Union[float, np.ndarray]) -> float:
        """
        Decodes a prediction back into the data domain.

        Args:
            u (Union[float, np.ndarray]): The prediction.

        Returns:
            float: The most likely data value.
        """
        return float(u)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(scale={self.scale})"


class QuadLoss(Loss):
    """Quadratic loss: 0.5 * scale * (u - a)^2."""

    def evaluate(self, u: float, a: float) -> float:
        return 0.5 * self.scale * (u - a) ** 2

    def grad(self, u: float, a: float) -> float:
        return self.scale * (u - a)


class L1Loss(Loss):
    """Absolute loss: scale * |u - a|."""

    def evaluate(self, u: float, a: float) -> float:
        return self.scale * abs(u - a)

    def grad(self, u: float, a: float) -> float:
        return self.scale * float(np.sign(u - a))


class HuberLoss(Loss):
    """
    Huber loss, quadratic inside `crossover` and linear outside.

    Attributes:
        crossover (float): Residual magnitude at which the loss becomes linear.
    """

    def __init__(self, scale: float = 1.0, crossover: float = 1.0):
        super().__init__(scale)
        self.crossover = float(crossover)

    def evaluate(self, u: float, a: float) -> float:
        residual = abs(u - a)
        if residual > self.crossover:
            return self.scale * (self.crossover * residual - 0.5 * self.crossover**2)
        return 0.5 * self.scale * residual**2

    def grad(self, u: float, a: float) -> float:
        residual = u - a
        if abs(residual) > self.crossover:
            return self.scale * self.crossover * float(np.sign(residual))
        return self.scale * residual


class LogisticLoss(Loss):
    """Logistic loss for labels in {-1, 1}: scale * log(1 + exp(-a * u))."""

    def evaluate(self, u: float, a: float) -> float:
        return self.scale * float(np.logaddexp(0.0, -a * u))

    def grad(self, u: float, a: float) -> float:
        return -self.scale * a * float(expit(-a * u))

    def predict(self, u: float) -> float:
        return 1.0 if u >= 0 else -1.0


class MultinomialLoss(Loss):
    """
    Softmax cross entropy for a categorical feature with levels 1..`levels`.

    The prediction is a vector of `levels` scores, so the feature owns `levels`
    columns of Y.

    Attributes:
        levels (int): Number of categories.
    """

    def __init__(self, levels: int, scale: float = 1.0):
        super().__init__(scale)
        if levels < 2:
            raise ValueError(f"`levels` must be at least 2, got {levels}.")
        self.levels = int(levels)
        self.embedding_dim = self.levels

    def _level_index(self, a: float) -> int:
        return int(round(a)) - 1

    def evaluate(self, u: np.ndarray, a: float) -> float:
        return -self.scale * float(log_softmax(u)[self._level_index(a)])

    def grad(self, u: np.ndarray, a: float) -> np.ndarray:
        gradient = softmax(u)
        gradient[self._level_index(a)] -= 1.0
        return self.scale * gradient

    def predict(self, u: np.ndarray) -> float:
        return float(np.argmax(u) + 1)

    def __repr__(self) -> str:
        return f"MultinomialLoss(levels={self.levels}, scale={self.scale})"


def evaluate(loss: Loss, u: Union[float, np.ndarray], a: float) -> float:
    """Value of `loss` at prediction `u` for observation `a`."""
    return loss.evaluate(u, a)


def grad(loss: Loss, u: Union[float, np.ndarray], a: float) -> LossGradient:
    """
    Tagged derivative of `loss` with respect to the prediction `u`.

    Args:
        loss (Loss): The loss function.
        u (Union[float, np.ndarray]): The prediction, a float or a vector of
            length `loss.embedding_dim`.
        a (float): The observed value.

    Returns:
        LossGradient: The gradient, tagged SCALAR when the embedding dimension is 1
            and VECTOR otherwise.
    """
    if loss.embedding_dim == 1:
        return LossGradient(GradientKind.SCALAR, float(loss.grad(u, a)))
    return LossGradient(GradientKind.VECTOR, np.asarray(loss.grad(u, a), dtype=float))


def embedding_dim(losses: Sequence[Loss]) -> int:
    """Total number of Y columns consumed by `losses`."""
    return sum(loss.embedding_dim for loss in losses)


def get_yidxs(losses: Sequence[Loss]) -> List[slice]:
    """
    Computes the contiguous span of Y columns owned by each loss.

    Args:
        losses (Sequence[Loss]): One loss per feature.

    Returns:
        List[slice]: `yidxs[f]` selects the columns of Y used by feature f.
    """
    yidxs = []
    start = 0
    for loss in losses:
        yidxs.append(slice(start, start + loss.embedding_dim))
        start += loss.embedding_dim
    return yidxs


LOSSES = {
    "quadratic": QuadLoss,
    "l1": L1Loss,
    "huber": HuberLoss,
    "logistic": LogisticLoss,
    "multinomial": MultinomialLoss,
}
