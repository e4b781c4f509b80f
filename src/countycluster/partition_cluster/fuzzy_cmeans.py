"""
Fuzzy c-means clustering of counties.

Iteratively minimises  J_m = sum_i sum_j  w_ij^m * ||x_i - c_j||^2
subject to            sum_j w_ij = 1 for every county i,

alternating the center update (weighted centroids under w^m) and the weight
update  w_ij = 1 / sum_k (d_ij / d_ik)^(2 / (m - 1)).
Initial weights are random and drawn from a seedable numpy Generator.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Union

import numpy as np
import pandas as pd

from ..config import FCM_MAX_ITER, FCM_TOL, DEFAULT_FUZZINESS
from ..data_process.features import FeatureMatrix
from ..errors import report_nonconvergence

logger = logging.getLogger(__name__)

__all__ = [
    "FuzzyCMeansResult",
    "fuzzy_cmeans",
    "harden_weights",
    "fuzzy_partition_coefficient",
]

RandomState = Union[None, int, np.random.Generator]


@dataclass(eq=False)
class FuzzyCMeansResult:
    """
    Attributes:
        weights (pd.DataFrame): counties x clusters membership weights, rows sum to 1,
            index = FIPS, columns = cluster labels 1..C
        centers (pd.DataFrame): clusters x features, in the (normalized) input space
        fuzziness (float): exponent m used
        n_iter (int): iterations run
        converged (bool): weight change fell below ``tol`` before the cap
        objective (list[float]): J_m after each iteration
    """

    weights: pd.DataFrame
    centers: pd.DataFrame
    fuzziness: float
    n_iter: int
    converged: bool
    objective: list = field(default_factory=list)

    @property
    def n_clusters(self) -> int:
        return self.weights.shape[1]

    def labels(self) -> pd.Series:
        """Hard 1-based group per county: arg-max weight, lowest cluster wins ties."""
        return pd.Series(
            harden_weights(self.weights.to_numpy()),
            index=self.weights.index,
            name="group",
        )

    def partition_coefficient(self) -> float:
        return fuzzy_partition_coefficient(self.weights.to_numpy())

    def __repr__(self):
        return (
            f"FuzzyCMeansResult(counties={self.weights.shape[0]}, clusters={self.n_clusters}, "
            f"m={self.fuzziness}, n_iter={self.n_iter}, converged={self.converged})"
        )


def harden_weights(weights, atol: float = 0.0) -> np.ndarray:
    """
    Collapse membership weights (n x C) to 1-based labels by arg-max.

    Columns within ``atol`` of the row maximum count as tied; the lowest
    column index wins.
    """
    W = np.asarray(weights, dtype=float)
    if W.ndim != 2 or W.shape[1] == 0:
        raise ValueError(f"weights must be a 2-D (counties x clusters) array, got shape {W.shape}")
    if not np.isfinite(W).all():
        raise ValueError("weights contain NaN or infinite values")
    row_max = W.max(axis=1, keepdims=True)
    is_max = W >= row_max - atol
    return is_max.argmax(axis=1) + 1


def fuzzy_partition_coefficient(weights) -> float:
    """Fuzzy partition coefficient in [1/C, 1]; higher = crisper partition."""
    W = np.asarray(weights, dtype=float)
    return float(np.sum(W ** 2) / W.shape[0])


def _update_centers(X: np.ndarray, W: np.ndarray, m: float) -> np.ndarray:
    Wm = W ** m
    totals = Wm.sum(axis=0)
    # a cluster that lost every member falls back to the origin (the feature means)
    totals[totals == 0] = 1.0
    return (Wm.T @ X) / totals[:, None]


def _center_distances(X: np.ndarray, centers: np.ndarray) -> np.ndarray:
    dist = np.empty((X.shape[0], centers.shape[0]), dtype=float)
    for j, c in enumerate(centers):
        diff = X - c
        dist[:, j] = np.sqrt(np.einsum("ij,ij->i", diff, diff))
    return dist


def _update_weights(dist: np.ndarray, m: float) -> np.ndarray:
    n, c = dist.shape
    W = np.empty((n, c), dtype=float)
    zero = dist == 0
    on_center = zero.any(axis=1)

    # a county sitting on one or more centers belongs to them alone
    if on_center.any():
        Z = zero[on_center].astype(float)
        W[on_center] = Z / Z.sum(axis=1, keepdims=True)

    rest = ~on_center
    if rest.any():
        d = dist[rest]
        # scale by the row minimum so the power stays within float range
        ratio = d / d.min(axis=1, keepdims=True)
        inv = ratio ** (-2.0 / (m - 1.0))
        W[rest] = inv / inv.sum(axis=1, keepdims=True)
    return W


def fuzzy_cmeans(
    matrix: Union[FeatureMatrix, np.ndarray],
    n_clusters: int,
    fuzziness: float = DEFAULT_FUZZINESS,
    *,
    max_iter: int = FCM_MAX_ITER,
    tol: float = FCM_TOL,
    random_state: RandomState = None,
    on_nonconvergence: str = "raise",
) -> FuzzyCMeansResult:
    """
    Run fuzzy c-means on county feature vectors (counties as rows).

    Args:
        matrix: NormalizedMatrix (or plain n x d array)
        n_clusters: Number of clusters C, 2 <= C <= n
        fuzziness: Exponent m > 1; larger values give softer memberships
        max_iter: Iteration cap
        tol: Converged once the largest absolute weight change is below tol
        random_state: Seed or Generator for the initial weights
        on_nonconvergence: "raise" (ConvergenceFailure carrying the result) or "warn"

    Returns:
        FuzzyCMeansResult
    """
    if isinstance(matrix, FeatureMatrix):
        X = matrix.to_numpy()
        index = matrix.data.index
        feature_names = matrix.feature_names
    else:
        X = np.asarray(matrix, dtype=float)
        if X.ndim != 2:
            raise ValueError(f"Expected a 2-D (counties x features) array, got shape {X.shape}")
        index = pd.RangeIndex(X.shape[0])
        feature_names = list(range(X.shape[1]))

    n = X.shape[0]
    if isinstance(n_clusters, bool) or int(n_clusters) != n_clusters or n_clusters < 2:
        raise ValueError(f"n_clusters must be an integer >= 2, got {n_clusters!r}")
    if n_clusters > n:
        raise ValueError(f"n_clusters ({n_clusters}) exceeds the number of counties ({n})")
    if not fuzziness > 1.0:
        raise ValueError(f"fuzziness must be > 1.0, got {fuzziness!r}")
    if max_iter < 1:
        raise ValueError(f"max_iter must be >= 1, got {max_iter!r}")
    if on_nonconvergence not in ("raise", "warn"):
        raise ValueError(f"Unknown non-convergence policy: {on_nonconvergence}")
    if not np.isfinite(X).all():
        raise ValueError("Feature matrix contains NaN or infinite values")

    rng = np.random.default_rng(random_state)
    W = rng.random((n, n_clusters))
    W /= W.sum(axis=1, keepdims=True)

    objective = []
    converged = False
    delta = np.inf
    n_iter = 0
    for n_iter in range(1, max_iter + 1):
        centers = _update_centers(X, W, fuzziness)
        dist = _center_distances(X, centers)
        W_new = _update_weights(dist, fuzziness)
        delta = float(np.max(np.abs(W_new - W)))
        W = W_new
        objective.append(float(np.sum((W ** fuzziness) * dist ** 2)))
        logger.debug("fuzzy c-means iter %d: max weight change %.3g", n_iter, delta)
        if delta < tol:
            converged = True
            break

    labels = list(range(1, n_clusters + 1))
    result = FuzzyCMeansResult(
        weights=pd.DataFrame(W, index=index, columns=labels),
        centers=pd.DataFrame(centers, index=labels, columns=feature_names),
        fuzziness=float(fuzziness),
        n_iter=n_iter,
        converged=converged,
        objective=objective,
    )
    if not converged:
        return report_nonconvergence(
            "fuzzy_cmeans", n_iter, result, on_nonconvergence,
            detail=f"last weight change {delta:.3g} >= tol {tol:g}",
        )
    logger.info("fuzzy c-means converged in %d iterations (C=%d, m=%g)", n_iter, n_clusters, fuzziness)
    return result
