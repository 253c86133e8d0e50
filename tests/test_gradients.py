"""Gradient assembly test module"""
import numpy as np
import pytest

from proxglrm import GLRM, HuberLoss, MultinomialLoss, QuadLoss, ZeroReg
from proxglrm.algorithms.gradients import column_gradient, row_gradient

EPS = 1e-6


@pytest.fixture(name="glrm")
def get_glrm() -> GLRM:
    """A rank 3 GLRM mixing scalar and categorical losses, with missing entries."""
    rng = np.random.default_rng(7)
    matrix = np.column_stack(
        [
            rng.standard_normal(5),
            rng.integers(1, 4, size=5).astype(float),
            rng.standard_normal(5),
        ]
    )
    matrix[1, 0] = np.nan
    matrix[3, 1] = np.nan
    matrix[4, :] = np.nan
    losses = [QuadLoss(), MultinomialLoss(levels=3), HuberLoss(scale=2.0)]
    return GLRM(matrix, losses, ZeroReg(), ZeroReg(), k=3, seed=3)


def numerical_row_gradient(glrm: GLRM, e: int) -> np.ndarray:
    """Central finite differences of the row objective."""
    x = glrm.X[:, e]
    gradient = np.zeros_like(x)
    for i in range(len(x)):
        step = np.zeros_like(x)
        step[i] = EPS
        gradient[i] = (
            glrm.row_objective(e, x + step) - glrm.row_objective(e, x - step)
        ) / (2 * EPS)
    return gradient


def numerical_column_gradient(glrm: GLRM, f: int) -> np.ndarray:
    """Central finite differences of the column objective."""
    y = glrm.Y[:, glrm.yidxs[f]]
    gradient = np.zeros_like(y)
    for index in np.ndindex(*y.shape):
        step = np.zeros_like(y)
        step[index] = EPS
        gradient[index] = (
            glrm.col_objective(f, y + step) - glrm.col_objective(f, y - step)
        ) / (2 * EPS)
    return gradient


@pytest.mark.parametrize("e", [0, 1, 2, 3])
def test_row_gradient(glrm: GLRM, e: int):
    """Row gradients match finite differences of the row objective."""
    XY = glrm.predict_all()
    gradient = row_gradient(glrm, e, XY, glrm.Y)
    assert gradient.shape == (3,)
    assert np.allclose(gradient, numerical_row_gradient(glrm, e), atol=1e-5)


@pytest.mark.parametrize("f", [0, 1, 2])
def test_column_gradient(glrm: GLRM, f: int):
    """Column gradients match finite differences of the column objective."""
    XY = glrm.predict_all()
    gradient = column_gradient(glrm, f, XY, glrm.X)
    assert gradient.shape == (3, glrm.losses[f].embedding_dim)
    assert np.allclose(gradient, numerical_column_gradient(glrm, f), atol=1e-5)


def test_empty_row_has_zero_gradient(glrm: GLRM):
    """An example without observations has a zero gradient."""
    XY = glrm.predict_all()
    assert np.array_equal(row_gradient(glrm, 4, XY, glrm.Y), np.zeros(3))


def test_gradient_ignores_unobserved(glrm: GLRM):
    """Unobserved entries of A never reach the gradients."""
    XY = glrm.predict_all()
    row = row_gradient(glrm, 1, XY, glrm.Y)
    column = column_gradient(glrm, 0, XY, glrm.X)
    glrm.A[1, 0] = 1e6
    assert np.array_equal(row_gradient(glrm, 1, XY, glrm.Y), row)
    assert np.array_equal(column_gradient(glrm, 0, XY, glrm.X), column)


def test_scalar_gradient_closed_form():
    """With quadratic losses the row gradient is Y (Y^T x - a) over observed features."""
    matrix = np.array([[1.0, 2.0, np.nan]])
    glrm = GLRM(matrix, [QuadLoss()] * 3, ZeroReg(), ZeroReg(), k=2,
                X=np.array([[1.0], [0.5]]),
                Y=np.array([[1.0, 0.0, 4.0], [2.0, 1.0, 4.0]]))
    XY = glrm.predict_all()
    residual = XY[0, :2] - matrix[0, :2]
    expected = glrm.Y[:, :2] @ residual
    assert np.allclose(row_gradient(glrm, 0, XY, glrm.Y), expected)
