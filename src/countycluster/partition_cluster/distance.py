"""
Pairwise county dissimilarity.

The metric is pluggable: any metric name scikit-learn's ``pairwise_distances``
understands ("euclidean", "manhattan", "cosine", ...) or a callable taking two
feature vectors and returning a non-negative float.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import pairwise_distances

from ..config import Metric
from ..data_process.features import FeatureMatrix
from ..errors import InvalidDistanceError

logger = logging.getLogger(__name__)

__all__ = ["DistanceMatrix", "pairwise_distance_matrix", "check_distance_matrix"]


@dataclass(frozen=True, eq=False)
class DistanceMatrix:
    """
    Square, symmetric, zero-diagonal county distance matrix.

    Attributes:
        values (np.ndarray): n x n distances, rows/columns in county order
        fips (list[str]): county FIPS codes in matrix order
        area_names (list[str] or None): county names in matrix order
        metric (str): name of the metric used
    """

    values: np.ndarray
    fips: list
    area_names: Optional[list] = None
    metric: str = "euclidean"

    @property
    def n(self) -> int:
        return self.values.shape[0]

    def to_frame(self, labels: str = "area") -> pd.DataFrame:
        """
        Labelled distance table: a leading "County" column followed by one
        column per county. ``labels`` is "area" (county names) or "fips".
        """
        if labels == "area" and self.area_names is not None:
            names = list(self.area_names)
        elif labels in ("area", "fips"):
            names = list(self.fips)
        else:
            raise ValueError(f"labels must be 'area' or 'fips', got {labels!r}")
        out = pd.DataFrame(self.values, columns=names)
        out.insert(0, "County", names)
        return out

    def __repr__(self):
        return f"DistanceMatrix(n={self.n}, metric={self.metric!r})"


def check_distance_matrix(D, atol: float = 1e-9) -> np.ndarray:
    """
    Validate a precomputed distance matrix and return it as a float array.

    Raises:
        InvalidDistanceError: not square, non-finite, negative, asymmetric
            or with a non-zero diagonal
    """
    D = np.asarray(D, dtype=float)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise InvalidDistanceError(f"Distance matrix must be square, got shape {D.shape}")
    if not np.isfinite(D).all():
        raise InvalidDistanceError("Distance matrix contains NaN or infinite values")
    if (D < 0).any():
        raise InvalidDistanceError(f"Distance matrix has negative entries (min {D.min():.3g})")
    if not np.allclose(D, D.T, atol=atol, rtol=0):
        raise InvalidDistanceError("Distance matrix is not symmetric")
    if not np.allclose(np.diag(D), 0.0, atol=atol, rtol=0):
        raise InvalidDistanceError("Distance matrix has a non-zero diagonal")
    return D


def _metric_name(metric: Metric) -> str:
    if isinstance(metric, str):
        return metric
    return getattr(metric, "__name__", type(metric).__name__)


def pairwise_distance_matrix(
    matrix: FeatureMatrix,
    metric: Metric = "euclidean",
    labels: Optional[Sequence[str]] = None,
) -> DistanceMatrix:
    """
    Compute the n x n dissimilarity between the counties (rows) of ``matrix``.

    Each pair is evaluated once; the result is mirrored so D[i, j] == D[j, i]
    exactly and the diagonal is set to zero.

    Args:
        matrix: FeatureMatrix / NormalizedMatrix (counties as rows)
        metric: scikit-learn metric name or callable (u, v) -> float
        labels: County names to carry along (default: ``matrix.area_names``)

    Raises:
        InvalidDistanceError: the metric produced negative or non-finite values
    """
    X = matrix.to_numpy()
    n = X.shape[0]
    if isinstance(metric, str):
        D = pairwise_distances(X, metric=metric)
    elif callable(metric):
        D = np.zeros((n, n), dtype=float)
        for i in range(n):
            for j in range(i + 1, n):
                D[i, j] = float(metric(X[i], X[j]))
    else:
        raise TypeError(f"metric must be a string or callable, got {type(metric).__name__}")

    D = np.asarray(D, dtype=float)
    # keep the upper triangle, mirror it, clear the diagonal
    D = np.triu(D, k=1)
    D = D + D.T
    if not np.isfinite(D).all():
        raise InvalidDistanceError(f"Metric {_metric_name(metric)!r} produced non-finite distances")
    if (D < 0).any():
        raise InvalidDistanceError(
            f"Metric {_metric_name(metric)!r} produced negative distances (min {D.min():.3g})"
        )

    names = list(labels) if labels is not None else list(matrix.area_names)
    logger.debug("Computed %dx%d %s distance matrix", n, n, _metric_name(metric))
    return DistanceMatrix(values=D, fips=matrix.fips, area_names=names, metric=_metric_name(metric))
