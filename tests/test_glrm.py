"""GLRM test module"""
import numpy as np
import pytest
import scipy.sparse as sp

from proxglrm import (GLRM, MultinomialLoss, QuadLoss, QuadReg, ZeroReg,
                      embedding_dim)


@pytest.fixture(name="matrix")
def get_matrix() -> np.ndarray:
    """A 4 x 3 matrix with two missing entries."""
    matrix = np.arange(12, dtype=float).reshape(4, 3)
    matrix[0, 2] = np.nan
    matrix[3, 1] = np.nan
    return matrix


@pytest.fixture(name="glrm")
def get_glrm(matrix: np.ndarray) -> GLRM:
    """A rank 2 GLRM with quadratic losses and regularizers."""
    return GLRM(
        matrix,
        [QuadLoss() for _ in range(3)],
        QuadReg(scale=0.1),
        QuadReg(scale=0.2),
        k=2,
        seed=42,
    )


def test_observations_from_nan(glrm: GLRM):
    """NaN entries are unobserved and both indexes agree."""
    assert [obs.tolist() for obs in glrm.observed_features] == [[0, 1], [0, 1, 2], [0, 1, 2], [0, 2]]
    assert [obs.tolist() for obs in glrm.observed_examples] == [[0, 1, 2, 3], [0, 1, 2], [1, 2, 3]]
    assert glrm.nb_observations == 10
    for e, features in enumerate(glrm.observed_features):
        for f in features:
            assert e in glrm.observed_examples[f]


def test_shapes(glrm: GLRM):
    """X is (k, m) and Y is (k, d)."""
    assert glrm.X.shape == (2, 4)
    assert glrm.Y.shape == (2, 3)
    assert len(glrm.rx) == 4
    assert len(glrm.ry) == 3


def test_derived_observation_index(matrix: np.ndarray):
    """A single index is enough, the other one is derived."""
    observed_features = [[0], [1, 2], [], [0, 2]]
    glrm = GLRM(matrix, [QuadLoss()] * 3, ZeroReg(), ZeroReg(), k=1,
                observed_features=observed_features)
    assert [obs.tolist() for obs in glrm.observed_examples] == [[0, 3], [1], [1, 3]]

    glrm = GLRM(matrix, [QuadLoss()] * 3, ZeroReg(), ZeroReg(), k=1,
                observed_examples=[[0, 3], [1], [1, 3]])
    assert [obs.tolist() for obs in glrm.observed_features] == [[0], [1, 2], [], [0, 2]]


def test_inconsistent_observation_index(matrix: np.ndarray):
    """Mismatched indexes are rejected."""
    with pytest.raises(ValueError):
        GLRM(matrix, [QuadLoss()] * 3, ZeroReg(), ZeroReg(), k=1,
             observed_features=[[0], [1], [], []],
             observed_examples=[[0], [], [1]])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"losses": [QuadLoss()] * 2},
        {"rx": [ZeroReg()] * 3},
        {"ry": [ZeroReg()] * 4},
        {"k": 0},
        {"X": np.zeros((2, 2))},
    ],
)
def test_invalid_arguments(matrix: np.ndarray, kwargs: dict):
    """Arguments not matching the shape of A are rejected."""
    arguments = {
        "losses": [QuadLoss()] * 3,
        "rx": ZeroReg(),
        "ry": ZeroReg(),
        "k": 1,
    }
    arguments.update(kwargs)
    with pytest.raises(ValueError):
        GLRM(matrix, **arguments)


def test_sparse_input():
    """Sparse matrices are densified."""
    matrix = sp.csr_matrix(np.eye(3))
    glrm = GLRM(matrix, [QuadLoss()] * 3, ZeroReg(), ZeroReg(), k=1)
    assert isinstance(glrm.A, np.ndarray)
    assert glrm.nb_observations == 9


def test_objective(glrm: GLRM, matrix: np.ndarray):
    """The objective sums observed losses and both regularizations."""
    X, Y = glrm.X, glrm.Y
    prediction = X.T @ Y
    mask = ~np.isnan(matrix)
    expected = 0.5 * np.sum((prediction[mask] - matrix[mask]) ** 2)
    expected += 0.1 * np.sum(X**2) + 0.2 * np.sum(Y**2)
    assert glrm.objective() == pytest.approx(expected)
    assert glrm.objective(X, Y, prediction) == pytest.approx(expected)
    assert glrm.objective(include_regularization=False) == pytest.approx(
        0.5 * np.sum((prediction[mask] - matrix[mask]) ** 2)
    )


def test_objective_ignores_unobserved(glrm: GLRM):
    """Changing an unobserved entry does not change any objective."""
    objective = glrm.objective()
    row_objective = glrm.row_objective(0, glrm.X[:, 0])
    col_objective = glrm.col_objective(2, glrm.Y[:, 2:3])
    glrm.A[0, 2] = 1e6
    assert glrm.objective() == objective
    assert glrm.row_objective(0, glrm.X[:, 0]) == row_objective
    assert glrm.col_objective(2, glrm.Y[:, 2:3]) == col_objective


def test_row_and_column_objectives(glrm: GLRM, matrix: np.ndarray):
    """Row objectives and column objectives each add up to the full objective."""
    loss_part = glrm.objective(include_regularization=False)
    rows = sum(glrm.row_objective(e, glrm.X[:, e]) for e in range(4))
    columns = sum(glrm.col_objective(f, glrm.Y[:, glrm.yidxs[f]]) for f in range(3))
    assert rows == pytest.approx(loss_part + 0.1 * np.sum(glrm.X**2))
    assert columns == pytest.approx(loss_part + 0.2 * np.sum(glrm.Y**2))

    candidate = np.array([1.0, -1.0])
    expected = 0.5 * sum(
        (candidate @ glrm.Y[:, f] - matrix[1, f]) ** 2 for f in range(3)
    ) + 0.1 * 2
    assert glrm.row_objective(1, candidate) == pytest.approx(expected)


def test_multidimensional_losses():
    """Categorical features own several columns of Y."""
    matrix = np.array([[1.0, 2.0, 0.5], [3.0, 1.0, -0.5], [2.0, 3.0, 1.5]])
    losses = [MultinomialLoss(levels=3), MultinomialLoss(levels=3), QuadLoss()]
    glrm = GLRM(matrix, losses, ZeroReg(), ZeroReg(), k=2, seed=0)
    assert glrm.embedding_dim == embedding_dim(losses) == 7
    assert glrm.Y.shape == (2, 7)
    prediction = glrm.predict_all()
    expected = sum(
        losses[f].evaluate(prediction[e, glrm.yidxs[f]], matrix[e, f])
        for f in range(2)
        for e in range(3)
    ) + sum(losses[2].evaluate(prediction[e, 6], matrix[e, 2]) for e in range(3))
    assert glrm.objective() == pytest.approx(expected)
    imputed = glrm.impute()
    assert imputed.shape == (3, 3)
    assert set(np.unique(imputed[:, :2])) <= {1.0, 2.0, 3.0}
    assert np.allclose(imputed[:, 2], prediction[:, 6])


def test_calculate_rmse(glrm: GLRM, matrix: np.ndarray):
    """The RMSE is computed over the observed entries."""
    mask = ~np.isnan(matrix)
    prediction = glrm.predict_all()
    expected = np.sqrt(np.mean((prediction[mask] - matrix[mask]) ** 2))
    assert glrm.calculate_rmse() == pytest.approx(expected)
    sub_mask = np.zeros_like(mask)
    sub_mask[1] = True
    expected = np.sqrt(np.mean((prediction[1] - matrix[1]) ** 2))
    assert glrm.calculate_rmse(sub_mask) == pytest.approx(expected)


def test_init_svd():
    """The SVD initialization recovers a fully observed rank-k matrix."""
    rng = np.random.default_rng(0)
    matrix = rng.standard_normal((6, 2)) @ rng.standard_normal((2, 5))
    glrm = GLRM(matrix, [QuadLoss()] * 5, ZeroReg(), ZeroReg(), k=2)
    glrm.init_svd()
    assert glrm.X.shape == (2, 6)
    assert glrm.Y.shape == (2, 5)
    assert np.allclose(glrm.predict_all(), matrix)
