"""
ConvergenceHistory Module
=========================

Append-only record of the objective value along a fit, with the cumulative
wall-clock time at which each value was reached.
"""
from typing import List

import pandas as pd


class ConvergenceHistory:
    """
    Sequence of (cumulative time, objective) samples.

    Attributes:
        name (str): Name of the fitting procedure.
        objective (List[float]): Recorded objective values.
        times (List[float]): Cumulative elapsed seconds at each record.
    """

    def __init__(self, name: str = "ProxGradGLRM"):
        self.name = name
        self.objective: List[float] = []
        self.times: List[float] = []

    def update(self, dt: float, obj: float):
        """
        Appends a sample.

        Args:
            dt (float): Seconds elapsed since the previous record.
            obj (float): Objective value.
        """
        previous = self.times[-1] if self.times else 0.0
        self.times.append(previous + float(dt))
        self.objective.append(float(obj))

    @property
    def last_objective(self) -> float:
        """Most recently recorded objective value."""
        if not self.objective:
            raise ValueError("No objective value has been recorded yet.")
        return self.objective[-1]

    @property
    def iterations(self) -> int:
        """Number of outer iterations of a finished fit."""
        return max(len(self) - 2, 0)

    def __len__(self) -> int:
        return len(self.objective)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Returns:
            pd.DataFrame: One row per record with columns `time` and `objective`.
        """
        return pd.DataFrame({"time": self.times, "objective": self.objective})

    def __repr__(self) -> str:
        return f"ConvergenceHistory(name={self.name!r}, records={len(self)})"
