"""Postprocessing Module"""

from .dataframes import generate_table
from .figures import plot_convergence

__all__ = ["generate_table", "plot_convergence"]
