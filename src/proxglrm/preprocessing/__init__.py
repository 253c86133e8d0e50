"""Preprocessing Module"""

from .dataloader import DataLoader
from .observations import (convert_dataframe_to_matrix, observations_from_mask,
                           observations_from_sparse, transpose_observations)

__all__ = [
    "DataLoader",
    "convert_dataframe_to_matrix",
    "observations_from_mask",
    "observations_from_sparse",
    "transpose_observations",
]
