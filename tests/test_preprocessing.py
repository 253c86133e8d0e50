"""Preprocessing test module"""
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import scipy.sparse as sp

from proxglrm.preprocessing import (DataLoader, convert_dataframe_to_matrix,
                                    observations_from_mask,
                                    observations_from_sparse,
                                    transpose_observations)


@pytest.fixture(name="mask")
def get_mask() -> np.ndarray:
    """A 3 x 4 observation mask."""
    return np.array(
        [
            [True, False, True, False],
            [False, False, False, False],
            [True, True, False, True],
        ]
    )


@pytest.fixture(name="dataframe")
def get_dataframe() -> pd.DataFrame:
    """Observed entries as (row, column, value) triples."""
    return pd.DataFrame(
        {"row": [0, 0, 2, 3], "column": [0, 2, 1, 2], "value": [1.5, -1.0, 0.0, 2.0]}
    )


def test_observations_from_mask(mask: np.ndarray):
    """Each row lists its observed columns and each column its observed rows."""
    observed_features, observed_examples = observations_from_mask(mask)
    assert [obs.tolist() for obs in observed_features] == [[0, 2], [], [0, 1, 3]]
    assert [obs.tolist() for obs in observed_examples] == [[0, 2], [2], [0], [2]]


def test_observations_from_sparse():
    """Stored entries are observed, explicit zeros included."""
    matrix = sp.coo_matrix(([0.0, 2.0, 1.0], ([0, 1, 1], [1, 0, 2])), shape=(3, 3))
    observed_features, observed_examples = observations_from_sparse(matrix.tocsr())
    assert [obs.tolist() for obs in observed_features] == [[1], [0, 2], []]
    assert [obs.tolist() for obs in observed_examples] == [[1], [0], [1]]


def test_transpose_observations(mask: np.ndarray):
    """Transposing twice gives back the original index."""
    observed_features, observed_examples = observations_from_mask(mask)
    transposed = transpose_observations(observed_features, 4)
    assert [obs.tolist() for obs in transposed] == [obs.tolist() for obs in observed_examples]
    back = transpose_observations(transposed, 3)
    assert [obs.tolist() for obs in back] == [obs.tolist() for obs in observed_features]


def test_convert_dataframe_to_matrix(dataframe: pd.DataFrame):
    """Missing triples become NaN."""
    matrix = convert_dataframe_to_matrix(dataframe, shape=(4, 3))
    assert matrix.shape == (4, 3)
    assert matrix[0, 0] == 1.5
    assert matrix[2, 1] == 0.0
    assert np.isnan(matrix[1]).all()
    assert np.sum(~np.isnan(matrix)) == 4


def test_dataloader(dataframe: pd.DataFrame, tmp_path: Path):
    """The loader builds the matrix and its observation index from a CSV file."""
    path = tmp_path / "data.csv"
    dataframe.to_csv(path, index=False)

    dataloader = DataLoader(path)
    assert dataloader.shape == (4, 3)
    assert [obs.tolist() for obs in dataloader.observed_features] == [[0, 2], [], [1], [2]]
    assert [obs.tolist() for obs in dataloader.observed_examples] == [[0], [2], [0, 3]]

    dataloader = DataLoader(path, shape=(5, 4))
    assert dataloader.matrix.shape == (5, 4)


def test_dataloader_invalid(tmp_path: Path):
    """Files without three columns or with negative indices are rejected."""
    path = tmp_path / "two_columns.csv"
    pd.DataFrame({"row": [0], "column": [0]}).to_csv(path, index=False)
    with pytest.raises(ValueError):
        DataLoader(path)

    path = tmp_path / "negative.csv"
    pd.DataFrame({"row": [-1], "column": [0], "value": [1.0]}).to_csv(path, index=False)
    with pytest.raises(ValueError):
        DataLoader(path)
