"""
Utils module
=============

This module defines the utility functions.
"""

import pickle
from pathlib import Path
from typing import Any, Tuple, Union

import numpy as np
from scipy import linalg
import yaml


def svd(matrix: np.ndarray, rank: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Initialize low-rank factors from a truncated SVD of the matrix.

    The singular values are split evenly between the two factors.

    Args:
        matrix (np.ndarray): Matrix of shape (n_rows, n_cols).
        rank (int): Target rank for the approximation.

    Returns:
        Tuple[np.ndarray, np.ndarray]:
            - left_factor: shape (n_rows, rank)
            - right_factor: shape (rank, n_cols)
    """
    (
        left_singular_vectors,
        singular_values,
        right_singular_vectors_t,
    ) = linalg.svd(matrix, full_matrices=False)

    sqrt_singular_values = np.sqrt(singular_values[:rank])
    left_factor = left_singular_vectors[:, :rank] * sqrt_singular_values[np.newaxis, :]
    right_factor = sqrt_singular_values[:, np.newaxis] * right_singular_vectors_t[:rank, :]

    return left_factor, right_factor


def serialize(object_instance: Any, output_path: Union[str, Path]):
    """
    Save object to a file in binary format using pickle.

    Args:
        object_instance (Any): An object to serialize.
        output_path (Union[str, Path]): The file path where the object should be saved.
    """
    with open(output_path, "wb") as handler:
        pickle.dump(object_instance, handler)


def deserialize(input_path: Union[str, Path]) -> Any:
    """
    Load an object saved with `serialize`.

    Args:
        input_path (Union[str, Path]): The file path of the pickled object.

    Returns:
        Any: The loaded object.
    """
    with open(input_path, "rb") as handler:
        return pickle.load(handler)


def load_yaml(path: Union[str, Path]) -> dict:
    """
    Load a YAML configuration file.

    Args:
        path (Union[str, Path]): Path of the YAML file.

    Returns:
        dict: The parsed configuration.

    Raises:
        TypeError: If the file does not contain a mapping.
    """
    with Path(path).open("r", encoding="utf-8") as stream:
        config = yaml.safe_load(stream)
    if not isinstance(config, dict):
        raise TypeError(
            f"The configuration file {path} must contain a mapping, "
            f"got {type(config).__name__}."
        )
    return config
