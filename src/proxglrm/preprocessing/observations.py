"""
Observations module
===================

Builds the observation index of a GLRM: for each example the observed features,
and for each feature the observed examples.
"""
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd
import scipy.sparse as sp

Observations = Tuple[List[np.ndarray], List[np.ndarray]]


def observations_from_mask(mask: np.ndarray) -> Observations:
    """
    Index the True entries of a boolean mask.

    Args:
        mask (np.ndarray): Boolean matrix of shape (m, n).

    Returns:
        Observations:
            - observed_features: m sorted arrays of column indices.
            - observed_examples: n sorted arrays of row indices.
    """
    mask = np.asarray(mask, dtype=bool)
    observed_features = [np.flatnonzero(row) for row in mask]
    observed_examples = [np.flatnonzero(column) for column in mask.T]
    return observed_features, observed_examples


def observations_from_sparse(matrix: sp.spmatrix) -> Observations:
    """
    Index the stored entries of a sparse matrix, explicit zeros included.

    Args:
        matrix (sp.spmatrix): Sparse matrix of shape (m, n).

    Returns:
        Observations: See `observations_from_mask`.
    """
    coo = sp.coo_matrix(matrix)
    mask = np.zeros(coo.shape, dtype=bool)
    mask[coo.row, coo.col] = True
    return observations_from_mask(mask)


def transpose_observations(
    observations: Sequence[Sequence[int]], size: int
) -> List[np.ndarray]:
    """
    Converts a per-row index into a per-column index (or the reverse).

    Args:
        observations (Sequence[Sequence[int]]): For each row, the observed columns.
        size (int): Number of columns.

    Returns:
        List[np.ndarray]: For each column, the sorted observed rows.
    """
    transposed = [[] for _ in range(size)]
    for row, columns in enumerate(observations):
        for column in columns:
            transposed[column].append(row)
    return [np.array(sorted(rows), dtype=int) for rows in transposed]


def convert_dataframe_to_matrix(
    dataframe: pd.DataFrame, shape: Tuple[int, int]
) -> np.ndarray:
    """
    Converts (row, column, value) triples into a dense matrix.

    Args:
        dataframe (pd.DataFrame): Data with three columns, row index, column index
            and value, in that order.
        shape (Tuple[int, int]): Shape of the matrix.

    Returns:
        np.ndarray: Float matrix with NaN at positions absent from the dataframe.
    """
    rows = dataframe.iloc[:, 0].to_numpy(dtype=int)
    columns = dataframe.iloc[:, 1].to_numpy(dtype=int)
    values = dataframe.iloc[:, 2].to_numpy(dtype=float)
    matrix = np.full(shape, np.nan)
    matrix[rows, columns] = values
    return matrix
