"""
K-medoids clustering on a precomputed county distance matrix.

Alternates two steps until the medoid set stops changing:
  - assign every county to its nearest medoid (equidistant medoids: the one with
    the lowest county index wins; a medoid always belongs to its own cluster)
  - replace each medoid by the member with the smallest total distance to the
    rest of its cluster (the current medoid is kept when it ties for the minimum,
    otherwise the lowest county index wins)

Initial medoids come from the greedy BUILD step (deterministic), seeded
k-medoids++ sampling, uniform random sampling, or an explicit index list.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config import KMEDOIDS_MAX_ITER
from ..errors import report_nonconvergence
from .distance import DistanceMatrix, check_distance_matrix

logger = logging.getLogger(__name__)

__all__ = [
    "KMedoidsResult",
    "kmedoids",
    "assign_to_medoids",
    "update_medoids",
    "initial_medoids",
]

RandomState = Union[None, int, np.random.Generator]
INIT_METHODS = ("build", "k-medoids++", "random")


@dataclass(eq=False)
class KMedoidsResult:
    """
    Attributes:
        labels (pd.Series): 1-based group per county, index = FIPS
        medoids (np.ndarray): county index of each cluster's medoid; cluster j+1 <-> medoids[j]
        medoid_fips (list[str]): FIPS of each medoid
        cost (float): total distance of every county to its medoid
        n_iter (int): iterations run
        converged (bool): medoids were stable before the iteration cap
    """

    labels: pd.Series
    medoids: np.ndarray
    medoid_fips: list
    cost: float
    n_iter: int
    converged: bool

    @property
    def n_clusters(self) -> int:
        return len(self.medoids)

    def __repr__(self):
        return (
            f"KMedoidsResult(counties={len(self.labels)}, k={self.n_clusters}, "
            f"cost={self.cost:.4g}, n_iter={self.n_iter}, converged={self.converged})"
        )


def assign_to_medoids(D: np.ndarray, medoids: Sequence[int]) -> np.ndarray:
    """
    Nearest-medoid assignment. Returns 0-based cluster slots (position in ``medoids``).
    """
    medoids = np.asarray(medoids, dtype=int)
    order = np.argsort(medoids, kind="stable")
    # argmin over medoids sorted by county index -> lowest index wins ties
    nearest = np.argmin(D[:, medoids[order]], axis=1)
    slots = order[nearest]
    slots[medoids] = np.arange(len(medoids))
    return slots


def update_medoids(D: np.ndarray, slots: np.ndarray, medoids: Sequence[int]) -> np.ndarray:
    """Per cluster, the member minimizing total distance to the other members."""
    new = np.array(medoids, dtype=int)
    for j, current in enumerate(medoids):
        members = np.flatnonzero(slots == j)
        costs = D[np.ix_(members, members)].sum(axis=1)
        best = costs.min()
        current_pos = np.flatnonzero(members == current)
        if current_pos.size and costs[current_pos[0]] <= best:
            continue
        new[j] = members[int(np.argmin(costs))]
    return new


def _build_init(D: np.ndarray, k: int) -> np.ndarray:
    medoids = [int(np.argmin(D.sum(axis=1)))]
    nearest = D[:, medoids[0]].copy()
    for _ in range(1, k):
        gains = np.maximum(nearest[:, None] - D, 0.0).sum(axis=0)
        gains[medoids] = -1.0
        c = int(np.argmax(gains))
        medoids.append(c)
        nearest = np.minimum(nearest, D[:, c])
    return np.array(medoids, dtype=int)


def _kmpp_init(D: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    n = D.shape[0]
    medoids = [int(rng.integers(n))]
    nearest = D[:, medoids[0]].copy()
    for _ in range(1, k):
        p = nearest.copy()
        p[medoids] = 0.0
        total = p.sum()
        if total > 0:
            c = int(rng.choice(n, p=p / total))
        else:
            # every remaining county coincides with a medoid
            c = int(np.setdiff1d(np.arange(n), medoids)[0])
        medoids.append(c)
        nearest = np.minimum(nearest, D[:, c])
    return np.array(medoids, dtype=int)


def initial_medoids(
    D: np.ndarray,
    k: int,
    init: Union[str, Sequence[int]] = "build",
    random_state: RandomState = None,
) -> np.ndarray:
    """Pick the k starting medoids (county indices)."""
    n = D.shape[0]
    if isinstance(init, str):
        if init == "build":
            return _build_init(D, k)
        rng = np.random.default_rng(random_state)
        if init == "k-medoids++":
            return _kmpp_init(D, k, rng)
        if init == "random":
            return rng.choice(n, size=k, replace=False).astype(int)
        raise ValueError(f"Unknown init: {init!r}. Expected one of {INIT_METHODS} or a list of indices")

    medoids = np.asarray(list(init), dtype=int)
    if medoids.shape != (k,):
        raise ValueError(f"Expected {k} initial medoids, got {medoids.size}")
    if len(np.unique(medoids)) != k:
        raise ValueError(f"Initial medoids must be distinct: {medoids.tolist()}")
    if medoids.min() < 0 or medoids.max() >= n:
        raise ValueError(f"Initial medoids out of range [0, {n}): {medoids.tolist()}")
    return medoids


def kmedoids(
    distances: Union[DistanceMatrix, np.ndarray],
    n_clusters: int,
    *,
    max_iter: int = KMEDOIDS_MAX_ITER,
    init: Union[str, Sequence[int]] = "build",
    random_state: RandomState = None,
    fips: Optional[Sequence[str]] = None,
    on_nonconvergence: str = "raise",
) -> KMedoidsResult:
    """
    Partition counties around k medoids using only the distance matrix.

    Args:
        distances: DistanceMatrix or a square, symmetric, zero-diagonal array
        n_clusters: Number of clusters k, 2 <= k <= n
        max_iter: Iteration cap
        init: "build" (deterministic), "k-medoids++" or "random" (seeded by
            ``random_state``), or an explicit list of k county indices
        random_state: Seed or Generator for the stochastic inits
        fips: County identifiers (default: taken from the DistanceMatrix, else 0..n-1)
        on_nonconvergence: "raise" (ConvergenceFailure carrying the result) or "warn"

    Returns:
        KMedoidsResult with 1-based labels
    """
    if isinstance(distances, DistanceMatrix):
        D = check_distance_matrix(distances.values)
        ids = list(fips) if fips is not None else list(distances.fips)
    else:
        D = check_distance_matrix(distances)
        ids = list(fips) if fips is not None else list(range(D.shape[0]))

    n = D.shape[0]
    if len(ids) != n:
        raise ValueError(f"Got {len(ids)} identifiers for a {n}x{n} distance matrix")
    if isinstance(n_clusters, bool) or int(n_clusters) != n_clusters or n_clusters < 2:
        raise ValueError(f"n_clusters must be an integer >= 2, got {n_clusters!r}")
    if n_clusters > n:
        raise ValueError(f"n_clusters ({n_clusters}) exceeds the number of counties ({n})")
    if max_iter < 1:
        raise ValueError(f"max_iter must be >= 1, got {max_iter!r}")
    if on_nonconvergence not in ("raise", "warn"):
        raise ValueError(f"Unknown non-convergence policy: {on_nonconvergence}")

    medoids = initial_medoids(D, int(n_clusters), init=init, random_state=random_state)
    converged = False
    n_iter = 0
    for n_iter in range(1, max_iter + 1):
        slots = assign_to_medoids(D, medoids)
        new = update_medoids(D, slots, medoids)
        if np.array_equal(new, medoids):
            converged = True
            break
        logger.debug("k-medoids iter %d: %d medoid(s) moved", n_iter, int((new != medoids).sum()))
        medoids = new

    slots = assign_to_medoids(D, medoids)
    cost = float(D[np.arange(n), medoids[slots]].sum())
    result = KMedoidsResult(
        labels=pd.Series(slots + 1, index=pd.Index(ids, name="fips"), name="group"),
        medoids=medoids,
        medoid_fips=[ids[i] for i in medoids],
        cost=cost,
        n_iter=n_iter,
        converged=converged,
    )
    if not converged:
        return report_nonconvergence("kmedoids", n_iter, result, on_nonconvergence,
                                     detail=f"cost {cost:.4g}")
    logger.info("k-medoids converged in %d iterations (k=%d, cost=%.4g)", n_iter, n_clusters, cost)
    return result
