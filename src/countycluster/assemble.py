"""
Join county FIPS codes with a clusterer's output into the FIPS -> group mapping
a choropleth renderer looks counties up by.
"""
from __future__ import annotations
import re
from collections.abc import Mapping
from typing import Iterator, Sequence, Union

import numpy as np
import pandas as pd

from .config import FIPS_COL, GROUP_COL
from .errors import AssemblyMismatchError
from .partition_cluster.fuzzy_cmeans import FuzzyCMeansResult, harden_weights
from .partition_cluster.kmedoids import KMedoidsResult

__all__ = ["ClusterAssignment", "assemble_groups"]

_FIPS_RE = re.compile(r"[0-9]{5}")


class ClusterAssignment(Mapping):
    """Read-only, input-ordered mapping of 5-character county FIPS -> 1-based group."""

    def __init__(self, groups: dict[str, int], n_clusters: int):
        self._groups = dict(groups)
        self.n_clusters = n_clusters

    def __getitem__(self, fips: str) -> int:
        return self._groups[fips]

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def group_sizes(self) -> pd.Series:
        """Counties per group, for every group 1..K (zero for empty groups)."""
        counts = pd.Series(list(self._groups.values()), dtype=int).value_counts()
        return counts.reindex(range(1, self.n_clusters + 1), fill_value=0).rename("counties")

    def to_frame(self) -> pd.DataFrame:
        """Two-column table (fips, group) in county order."""
        return pd.DataFrame({FIPS_COL: list(self._groups), GROUP_COL: list(self._groups.values())})

    def __repr__(self):
        return f"ClusterAssignment(counties={len(self)}, groups={self.n_clusters})"


def _labels_from(result) -> tuple[np.ndarray, int]:
    if isinstance(result, FuzzyCMeansResult):
        return result.labels().to_numpy(), result.n_clusters
    if isinstance(result, KMedoidsResult):
        return result.labels.to_numpy(), result.n_clusters
    if isinstance(result, pd.DataFrame):
        # fuzzy weights, counties x clusters
        return harden_weights(result.to_numpy()), result.shape[1]
    arr = np.asarray(result)
    if arr.ndim == 2:
        return harden_weights(arr), arr.shape[1]
    if arr.ndim == 1:
        labels = arr.astype(int)
        if not np.array_equal(labels, arr):
            raise AssemblyMismatchError("Group labels must be integers")
        return labels, int(labels.max()) if labels.size else 0
    raise AssemblyMismatchError(f"Cannot read group labels from an array of shape {arr.shape}")


def _result_ids(result):
    if isinstance(result, FuzzyCMeansResult):
        index = result.weights.index
    elif isinstance(result, KMedoidsResult):
        index = result.labels.index
    elif isinstance(result, pd.DataFrame):
        index = result.index
    else:
        return None
    ids = list(index)
    # only FIPS-keyed results can be checked
    return ids if all(isinstance(i, str) for i in ids) else None


def assemble_groups(
    fips: Sequence[str],
    result: Union[FuzzyCMeansResult, KMedoidsResult, pd.DataFrame, np.ndarray, Sequence[int]],
) -> ClusterAssignment:
    """
    Map each county FIPS (in input order) to its group.

    Args:
        fips: 5-character county FIPS codes, in the row order that was clustered
        result: FuzzyCMeansResult / fuzzy weights (hardened by arg-max),
            KMedoidsResult, or a sequence of 1-based labels

    Raises:
        AssemblyMismatchError: identifier count differs from the clustered rows,
            duplicate or malformed FIPS codes, or labels outside 1..K
    """
    fips = [str(f) for f in fips]
    labels, n_clusters = _labels_from(result)

    if len(fips) != len(labels):
        raise AssemblyMismatchError(
            f"{len(fips)} county identifiers but {len(labels)} clustered rows"
        )
    bad = [f for f in fips if not _FIPS_RE.fullmatch(f)]
    if bad:
        raise AssemblyMismatchError(f"Malformed county FIPS codes (first 10): {bad[:10]}")
    if len(set(fips)) != len(fips):
        dups = pd.Index(fips)[pd.Index(fips).duplicated()].unique()
        raise AssemblyMismatchError(f"Duplicate county FIPS codes (first 10): {dups[:10].tolist()}")
    if len(labels) and (labels.min() < 1 or labels.max() > n_clusters):
        raise AssemblyMismatchError(f"Group labels outside 1..{n_clusters}")

    ids = _result_ids(result)
    if ids is not None and ids != fips:
        raise AssemblyMismatchError("County order of the clustering result differs from the identifiers")

    return ClusterAssignment({f: int(g) for f, g in zip(fips, labels)}, n_clusters=n_clusters)
