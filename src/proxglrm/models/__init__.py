"""Models Module"""

from proxglrm.models.convergence_history import ConvergenceHistory
from proxglrm.models.glrm import GLRM

__all__ = [
    "ConvergenceHistory",
    "GLRM",
]
