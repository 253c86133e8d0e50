"""
Dataframes module
=================

Post-processing producing dataframes summarizing fits.
"""

from typing import Dict

import pandas as pd

from proxglrm.models.convergence_history import ConvergenceHistory


def generate_table(histories: Dict[str, ConvergenceHistory]) -> pd.DataFrame:
    """
    Generates a table summarizing each fit.

    Args:
        histories (Dict[str, ConvergenceHistory]): Convergence histories by run name.

    Returns:
        pd.DataFrame: One row per run with the number of iterations, the initial and
            final objective values and the total runtime in seconds.
    """
    rows = {
        name: {
            "Iterations": history.iterations,
            "Initial objective": f"{history.objective[0]:.2e}",
            "Final objective": f"{history.last_objective:.2e}",
            "Runtime (s)": f"{history.times[-1]:.2f}",
        }
        for name, history in histories.items()
    }
    return pd.DataFrame.from_dict(rows, orient="index")
