# pylint: disable=C0103
"""
Gradients Module
================

Chain-rule gradients of the GLRM loss with respect to one column of X or one
column-chunk of Y, accumulated over the observed entries only.

The loss only provides dL_f/du where u = X[:, e] @ Y[:, yidxs[f]] is the
prediction, so

    grad_{X[:, e]} = sum_{f observed for e} Y[:, yidxs[f]] @ dL_f/du
    grad_{Y[:, yidxs[f]]} = sum_{e observed for f} outer(X[:, e], dL_f/du)

where dL_f/du is a scalar for one dimensional losses and a vector otherwise.
"""
import numpy as np

from proxglrm.losses import GradientKind, grad
from proxglrm.models.glrm import GLRM


def row_gradient(glrm: GLRM, e: int, XY: np.ndarray, Y: np.ndarray) -> np.ndarray:
    """
    Gradient of the loss terms of example `e` with respect to X[:, e].

    Args:
        glrm (GLRM): The model.
        e (int): Example index.
        XY (np.ndarray): Current prediction matrix X^T Y, shape (m, d).
        Y (np.ndarray): Current feature factor, shape (k, d).

    Returns:
        np.ndarray: Gradient of shape (k,). Zero when nothing is observed.
    """
    g = np.zeros(Y.shape[0])
    for f in glrm.observed_features[e]:
        span = glrm.yidxs[f]
        curgrad = grad(glrm.losses[f], _prediction(XY[e, span]), glrm.A[e, f])
        if curgrad.kind is GradientKind.SCALAR:
            g += curgrad.value * Y[:, span.start]
        else:
            g += Y[:, span] @ curgrad.value
    return g


def column_gradient(
    glrm: GLRM, f: int, XY: np.ndarray, X: np.ndarray
) -> np.ndarray:
    """
    Gradient of the loss terms of feature `f` with respect to Y[:, yidxs[f]].

    Args:
        glrm (GLRM): The model.
        f (int): Feature index.
        XY (np.ndarray): Current prediction matrix X^T Y, shape (m, d).
        X (np.ndarray): Current example factor, shape (k, m).

    Returns:
        np.ndarray: Gradient of shape (k, embedding_dim of feature f).
    """
    span = glrm.yidxs[f]
    G = np.zeros((X.shape[0], span.stop - span.start))
    for e in glrm.observed_examples[f]:
        curgrad = grad(glrm.losses[f], _prediction(XY[e, span]), glrm.A[e, f])
        if curgrad.kind is GradientKind.SCALAR:
            G[:, 0] += curgrad.value * X[:, e]
        else:
            G += np.outer(X[:, e], curgrad.value)
    return G


def _prediction(u: np.ndarray):
    return float(u[0]) if u.shape[0] == 1 else u
