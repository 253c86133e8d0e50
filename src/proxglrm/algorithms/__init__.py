"""Algorithms Module"""

from .gradients import column_gradient, row_gradient
from .proxgrad import ProxGradParams, fit
from .step_size import StepSizeController

__all__ = [
    "ProxGradParams",
    "StepSizeController",
    "column_gradient",
    "fit",
    "row_gradient",
]
