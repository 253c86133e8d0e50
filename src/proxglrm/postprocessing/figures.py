"""
Figures module
==============

This module provides post-processing functions to generate and save
visualizations of convergence histories.
"""
from typing import Dict, Tuple

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # pylint: disable=C0413
import seaborn as sns  # pylint: disable=C0413

from proxglrm.models.convergence_history import ConvergenceHistory  # pylint: disable=C0413


def plot_convergence(
    histories: Dict[str, ConvergenceHistory],
    output_file: str,
    figsize: Tuple[int, int] = (10, 6),
    log_scale: bool = True,
):
    """
    Plots the objective value against the cumulative time of each run.

    Args:
        histories (Dict[str, ConvergenceHistory]): Convergence histories by run name.
        output_file (str): File path where the figure will be saved.
        figsize (Tuple[int, int], optional): Figure size in inches (width, height).
            Defaults to (10, 6).
        log_scale (bool, optional): Whether to use a logarithmic objective axis.
            Defaults to True.
    """
    # Okabe-Ito color palette
    colors = ["#0072B2", "#E69F00", "#009E73", "#D55E00", "#CC79A7", "#F0E442"]

    if len(histories) > len(colors):
        raise ValueError("Not enough colors.")

    fig, axis = plt.subplots(1, 1, figsize=figsize)
    for color, (name, history) in zip(colors, histories.items()):
        sns.lineplot(
            data=history.to_dataframe(),
            x="time",
            y="objective",
            ax=axis,
            color=color,
            label=name,
            marker="o",
        )
    if log_scale:
        axis.set_yscale("log")
    axis.set_xlabel("Time (s)", fontsize=14)
    axis.set_ylabel("Objective", fontsize=14)
    axis.grid(alpha=0.3)
    axis.set_title("Convergence", fontsize=16, weight="bold")
    axis.legend(fontsize=12)

    fig.savefig(output_file, dpi=300, bbox_inches="tight")
    plt.close(fig)
