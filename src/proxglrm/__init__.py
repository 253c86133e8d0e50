"""ProxGLRM Module"""

# pylint: disable=R0801
from .algorithms import ProxGradParams, StepSizeController, fit
from .losses import (HuberLoss, L1Loss, LogisticLoss, Loss, MultinomialLoss,
                     QuadLoss, embedding_dim, get_yidxs)
from .models import GLRM, ConvergenceHistory
from .preprocessing import (DataLoader, observations_from_mask,
                            observations_from_sparse)
from .regularizers import NonNegConstraint, OneReg, QuadReg, Regularizer, ZeroReg

__all__ = [
    "GLRM",
    "ConvergenceHistory",
    "ProxGradParams",
    "StepSizeController",
    "fit",
    "Loss",
    "QuadLoss",
    "L1Loss",
    "HuberLoss",
    "LogisticLoss",
    "MultinomialLoss",
    "embedding_dim",
    "get_yidxs",
    "Regularizer",
    "ZeroReg",
    "QuadReg",
    "OneReg",
    "NonNegConstraint",
    "DataLoader",
    "observations_from_mask",
    "observations_from_sparse",
]
