"""
DataLoader module
=================

This module contains the `DataLoader` class which reads a partially observed matrix
stored as (row, column, value) triples in a CSV file, and builds the dense matrix
and observation index a GLRM is fitted on.
"""
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from proxglrm.preprocessing.observations import (
    convert_dataframe_to_matrix,
    observations_from_mask,
)


class DataLoader:
    """
    DataLoader Class

    Attributes:
        path (Path): Path to the CSV file.
        shape (Tuple[int, int]): Shape of the matrix.
        matrix (np.ndarray): Dense matrix, NaN where unobserved.
        observed_features (List[np.ndarray]): Observed feature indices per example.
        observed_examples (List[np.ndarray]): Observed example indices per feature.
        logger (logging.Logger): Logger instance for tracking the loading steps.
    """

    def __init__(
        self,
        path: Union[str, Path],
        shape: Optional[Tuple[int, int]] = None,
    ):
        """
        Initialize the DataLoader and load the data.

        Args:
            path (Union[str, Path]): Path to a CSV file whose first three columns are
                the row index, the column index and the value of each observed entry.
            shape (Tuple[int, int], optional): Shape of the matrix. Defaults to the
                smallest shape containing every index of the file.
        """
        self.path = Path(path)
        self.shape = shape
        self.matrix: np.ndarray = None
        self.observed_features: List[np.ndarray] = None
        self.observed_examples: List[np.ndarray] = None
        self.logger = logging.getLogger(self.__class__.__name__)
        self()

    def load_data(self) -> pd.DataFrame:
        """
        Load the observed entries from the CSV file.

        Returns:
            pd.DataFrame: The loaded entries.

        Raises:
            ValueError: If the file has fewer than three columns or negative indices.
        """
        self.logger.debug("Loading data from %s", self.path)
        dataframe = pd.read_csv(self.path)
        if dataframe.shape[1] < 3:
            raise ValueError(
                f"{self.path} must have at least 3 columns (row, column, value), "
                f"found {dataframe.shape[1]}."
            )
        if (dataframe.iloc[:, :2] < 0).to_numpy().any():
            raise ValueError(f"{self.path} contains negative indices.")
        self.logger.debug("Loaded data with %d rows and %d columns", *dataframe.shape)
        return dataframe

    def __call__(self):
        """
        Build the dense matrix and the observation index.
        """
        dataframe = self.load_data()
        if self.shape is None:
            self.shape = (
                int(dataframe.iloc[:, 0].max()) + 1,
                int(dataframe.iloc[:, 1].max()) + 1,
            )
        self.matrix = convert_dataframe_to_matrix(dataframe, shape=self.shape)
        self.observed_features, self.observed_examples = observations_from_mask(
            ~np.isnan(self.matrix)
        )
        self._log_matrix_stats()

    def _log_matrix_stats(self):
        nb_observations = sum(len(obs) for obs in self.observed_features)
        self.logger.debug("Matrix shape: %s", self.shape)
        self.logger.debug("Observed entries: %s", f"{nb_observations:_}")
        self.logger.debug(
            "Density: %s%%",
            f"{nb_observations / (self.shape[0] * self.shape[1]) * 100:.3f}",
        )
