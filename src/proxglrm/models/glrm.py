# pylint: disable=C0103,R0902,R0913
"""
GLRM Module
===========

State of a Generalized Low Rank Model.

A GLRM approximates a partially observed matrix A (m examples x n features) by
X^T Y where X is (k x m) and Y is (k x d), d being the total embedding dimension
of the per-feature losses. The model minimizes

    sum_{(e, f) observed} L_f(X[:, e] @ Y[:, yidxs[f]], A[e, f])
        + sum_e rx_e(X[:, e]) + sum_f ry_f(Y[:, yidxs[f]])

Only the entries listed in `observed_features` / `observed_examples` are ever read.
"""
import logging
from typing import List, Optional, Sequence, Union

import numpy as np
import scipy.sparse as sp
from sklearn import metrics

from proxglrm.losses import Loss, embedding_dim, get_yidxs
from proxglrm.preprocessing.observations import (
    observations_from_mask,
    transpose_observations,
)
from proxglrm.regularizers import Regularizer
from proxglrm.utils import svd

RegularizerArg = Union[Regularizer, Sequence[Regularizer]]


class GLRM:
    """
    Generalized Low Rank Model.

    Attributes:
        A (np.ndarray): Data matrix of shape (m, n). Unobserved entries are never read.
        losses (List[Loss]): One loss per feature.
        rx (List[Regularizer]): One regularizer per example (column of X).
        ry (List[Regularizer]): One regularizer per feature (column-chunk of Y).
        k (int): Rank of the model.
        observed_features (List[np.ndarray]): Feature indices observed for each example.
        observed_examples (List[np.ndarray]): Example indices observed for each feature.
        X (np.ndarray): Example factor, shape (k, m).
        Y (np.ndarray): Feature factor, shape (k, d).
        yidxs (List[slice]): Column span of Y owned by each feature.
        logger (logging.Logger): Logger instance.
    """

    def __init__(
        self,
        A: Union[np.ndarray, sp.spmatrix],
        losses: Sequence[Loss],
        rx: RegularizerArg,
        ry: RegularizerArg,
        k: int,
        observed_features: Optional[Sequence[Sequence[int]]] = None,
        observed_examples: Optional[Sequence[Sequence[int]]] = None,
        X: Optional[np.ndarray] = None,
        Y: Optional[np.ndarray] = None,
        seed: Optional[int] = None,
    ):
        """
        Builds the model and its observation index.

        Args:
            A (Union[np.ndarray, sp.spmatrix]): Data matrix of shape (m, n). NaN entries
                are treated as missing when no observation index is given.
            losses (Sequence[Loss]): One loss per column of A.
            rx (RegularizerArg): A regularizer shared by all examples or one per example.
            ry (RegularizerArg): A regularizer shared by all features or one per feature.
            k (int): Rank of the model.
            observed_features (Sequence[Sequence[int]], optional): For each example,
                the observed feature indices.
            observed_examples (Sequence[Sequence[int]], optional): For each feature,
                the observed example indices.
            X (np.ndarray, optional): Initial example factor, shape (k, m).
                Defaults to standard normal entries.
            Y (np.ndarray, optional): Initial feature factor, shape (k, d).
                Defaults to standard normal entries.
            seed (int, optional): Seed of the random initialization.

        Raises:
            ValueError: If the losses, regularizers or observation index do not match
                the shape of A.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        if sp.issparse(A):
            A = A.toarray()
        self.A = np.asarray(A, dtype=float)
        if self.A.ndim != 2:
            raise ValueError(f"`A` must be a 2D matrix, got shape {self.A.shape}.")
        m, n = self.A.shape
        if len(losses) != n:
            raise ValueError(
                f"Expected one loss per column of A ({n}), got {len(losses)} losses."
            )
        if k < 1:
            raise ValueError(f"The rank `k` must be positive, got {k}.")
        self.losses = list(losses)
        self.k = int(k)
        self.rx = self._expand(rx, m, "rx")
        self.ry = self._expand(ry, n, "ry")
        self.yidxs = get_yidxs(self.losses)
        self.rng = np.random.default_rng(seed)

        self.observed_features, self.observed_examples = self._index_observations(
            observed_features, observed_examples
        )

        d = self.embedding_dim
        self.X = (
            self.rng.standard_normal((self.k, m))
            if X is None
            else np.array(X, dtype=float)
        )
        self.Y = (
            self.rng.standard_normal((self.k, d))
            if Y is None
            else np.array(Y, dtype=float)
        )
        if self.X.shape != (self.k, m):
            raise ValueError(
                f"`X` must have shape {(self.k, m)}, got {self.X.shape}."
            )
        self.logger.debug(
            "Initialized GLRM with A of shape %s, rank %d, %d observed entries",
            self.A.shape,
            self.k,
            self.nb_observations,
        )

    @staticmethod
    def _expand(reg: RegularizerArg, size: int, name: str) -> List[Regularizer]:
        if isinstance(reg, Regularizer):
            return [reg] * size
        reg = list(reg)
        if len(reg) != size:
            raise ValueError(
                f"`{name}` must be a single regularizer or a list of {size} "
                f"regularizers, got {len(reg)}."
            )
        return reg

    def _index_observations(self, observed_features, observed_examples):
        m, n = self.A.shape
        if observed_features is None and observed_examples is None:
            return observations_from_mask(~np.isnan(self.A))
        if observed_features is None:
            observed_examples = [np.asarray(obs, dtype=int) for obs in observed_examples]
            return transpose_observations(observed_examples, m), observed_examples
        observed_features = [np.asarray(obs, dtype=int) for obs in observed_features]
        if observed_examples is None:
            return observed_features, transpose_observations(observed_features, n)
        observed_examples = [np.asarray(obs, dtype=int) for obs in observed_examples]
        expected = transpose_observations(observed_features, n)
        if len(observed_examples) != n or any(
            set(obs.tolist()) != set(exp.tolist())
            for obs, exp in zip(observed_examples, expected)
        ):
            raise ValueError(
                "`observed_features` and `observed_examples` describe different "
                "sets of observed entries."
            )
        return observed_features, observed_examples

    @property
    def embedding_dim(self) -> int:
        """Total number of columns of Y."""
        return embedding_dim(self.losses)

    @property
    def nb_observations(self) -> int:
        """Number of observed entries."""
        return sum(len(obs) for obs in self.observed_features)

    def _prediction(self, f: int, u: np.ndarray) -> Union[float, np.ndarray]:
        if self.losses[f].embedding_dim == 1:
            return float(u[0])
        return u

    def objective(
        self,
        X: Optional[np.ndarray] = None,
        Y: Optional[np.ndarray] = None,
        XY: Optional[np.ndarray] = None,
        include_regularization: bool = True,
    ) -> float:
        """
        Full objective: loss over the observed entries plus both regularizations.

        Args:
            X (np.ndarray, optional): Example factor. Defaults to the model's X.
            Y (np.ndarray, optional): Feature factor. Defaults to the model's Y.
            XY (np.ndarray, optional): Precomputed X^T Y, shape (m, d).
            include_regularization (bool, optional): Whether to add the
                regularization terms. Defaults to True.

        Returns:
            float: The objective value.
        """
        X = self.X if X is None else X
        Y = self.Y if Y is None else Y
        if XY is None:
            XY = X.T @ Y
        err = 0.0
        for e, features in enumerate(self.observed_features):
            for f in features:
                u = self._prediction(f, XY[e, self.yidxs[f]])
                err += self.losses[f].evaluate(u, self.A[e, f])
        if include_regularization:
            err += sum(reg.evaluate(X[:, e]) for e, reg in enumerate(self.rx))
            err += sum(
                reg.evaluate(Y[:, self.yidxs[f]]) for f, reg in enumerate(self.ry)
            )
        return err

    def row_objective(
        self, e: int, x: np.ndarray, Y: Optional[np.ndarray] = None
    ) -> float:
        """
        Objective restricted to example `e` with candidate column `x`.

        Args:
            e (int): Example index.
            x (np.ndarray): Candidate value of X[:, e], shape (k,).
            Y (np.ndarray, optional): Feature factor. Defaults to the model's Y.

        Returns:
            float: Losses over the observed features of `e` plus rx_e(x).
        """
        Y = self.Y if Y is None else Y
        err = 0.0
        for f in self.observed_features[e]:
            u = self._prediction(f, x @ Y[:, self.yidxs[f]])
            err += self.losses[f].evaluate(u, self.A[e, f])
        return err + self.rx[e].evaluate(x)

    def col_objective(
        self, f: int, y: np.ndarray, X: Optional[np.ndarray] = None
    ) -> float:
        """
        Objective restricted to feature `f` with candidate column-chunk `y`.

        Args:
            f (int): Feature index.
            y (np.ndarray): Candidate value of Y[:, yidxs[f]], shape (k, embedding_dim).
            X (np.ndarray, optional): Example factor. Defaults to the model's X.

        Returns:
            float: Losses over the observed examples of `f` plus ry_f(y).
        """
        X = self.X if X is None else X
        loss = self.losses[f]
        err = 0.0
        for e in self.observed_examples[f]:
            u = self._prediction(f, X[:, e] @ y)
            err += loss.evaluate(u, self.A[e, f])
        return err + self.ry[f].evaluate(y)

    def predict_all(self) -> np.ndarray:
        """
        Computes the raw reconstruction X^T Y.

        Returns:
            np.ndarray: Matrix of shape (m, d).
        """
        return self.X.T @ self.Y

    def impute(self) -> np.ndarray:
        """
        Decodes the reconstruction into the data domain, one value per feature.

        Returns:
            np.ndarray: Matrix of shape (m, n).
        """
        XY = self.predict_all()
        m, n = self.A.shape
        imputed = np.empty((m, n))
        for f, loss in enumerate(self.losses):
            for e in range(m):
                imputed[e, f] = loss.predict(self._prediction(f, XY[e, self.yidxs[f]]))
        return imputed

    def calculate_rmse(self, mask: Optional[np.ndarray] = None) -> float:
        """
        Root mean square error of X^T Y on observed scalar entries.

        Features with a multi-dimensional embedding are skipped.

        Args:
            mask (np.ndarray, optional): Boolean matrix of shape (m, n) further
                restricting the entries used.

        Returns:
            float: The RMSE.
        """
        XY = self.predict_all()
        actual_values, predictions = [], []
        for f, examples in enumerate(self.observed_examples):
            if self.losses[f].embedding_dim != 1:
                continue
            column = self.yidxs[f].start
            for e in examples:
                if mask is not None and not mask[e, f]:
                    continue
                actual_values.append(self.A[e, f])
                predictions.append(XY[e, column])
        return float(np.sqrt(metrics.mean_squared_error(actual_values, predictions)))

    def init_svd(self):
        """
        Initializes X and Y from a truncated SVD of the zero-filled observed matrix.

        Each feature's column of the right factor is copied over its whole span of Y.
        """
        observed = np.zeros_like(self.A)
        for e, features in enumerate(self.observed_features):
            observed[e, features] = self.A[e, features]
        rank = min(self.k, *observed.shape)
        left_factor, right_factor = svd(observed, rank)
        self.X = np.zeros((self.k, self.A.shape[0]))
        self.X[:rank] = left_factor.T
        self.Y = np.zeros((self.k, self.embedding_dim))
        for f, span in enumerate(self.yidxs):
            self.Y[:rank, span] = right_factor[:, [f]]
        self.logger.debug(
            "Initialized X with shape %s and Y with shape %s using SVD",
            self.X.shape,
            self.Y.shape,
        )
