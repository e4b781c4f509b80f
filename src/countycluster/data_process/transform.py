from __future__ import annotations
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..errors import DegenerateFeatureError
from .features import FeatureMatrix

logger = logging.getLogger(__name__)

__all__ = ["NormalizedMatrix", "zscore_features"]


@dataclass(frozen=True, eq=False)
class NormalizedMatrix(FeatureMatrix):
    """
    Z-scored FeatureMatrix.

    ``means`` and ``stds`` hold the per-feature statistics that were removed
    (sample standard deviation, ddof=1). A degenerate feature kept under the
    "zero" policy is recorded with std 0 and is all-zero in ``data``.
    """

    means: pd.Series = None
    stds: pd.Series = None

    @property
    def degenerate_features(self) -> list[str]:
        return list(self.stds.index[self.stds == 0])

    def inverse_transform(self, values) -> pd.DataFrame:
        """Map points in z-score space (e.g. cluster centers) back to original units."""
        Z = np.atleast_2d(np.asarray(values, dtype=float))
        X = Z * self.stds.to_numpy() + self.means.to_numpy()
        index = values.index if isinstance(values, pd.DataFrame) else None
        return pd.DataFrame(X, index=index, columns=self.data.columns)


def zscore_features(features: FeatureMatrix, degenerate: str = "raise") -> NormalizedMatrix:
    """
    Z-score by feature across the state's counties: (x - mean) / std, with the
    sample standard deviation (ddof=1).

    Args:
        features: FeatureMatrix of one state
        degenerate: Zero-variance policy. "raise" raises DegenerateFeatureError
            naming the features; "zero" centers them and leaves them at 0.
            With fewer than two counties every feature is degenerate.

    Returns:
        NormalizedMatrix with the same index/columns
    """
    if degenerate not in ("raise", "zero"):
        raise ValueError(f"Unknown degenerate policy: {degenerate}")

    X = features.to_numpy()
    n = X.shape[0]
    mu = X.mean(axis=0, keepdims=True)
    if n > 1:
        sd = X.std(axis=0, ddof=1, keepdims=True)
    else:
        sd = np.zeros_like(mu)
    # relative tolerance: identical values can leave rounding noise in std
    scale = np.maximum(np.abs(mu), 1.0)
    is_degenerate = (sd <= np.finfo(float).eps * scale * 16).ravel()

    if is_degenerate.any():
        names = [c for c, bad in zip(features.feature_names, is_degenerate) if bad]
        if degenerate == "raise":
            raise DegenerateFeatureError(names, n_counties=n)
        logger.warning("Zero-variance feature(s) %s kept as all-zero columns", names)
        sd = np.where(is_degenerate, 0.0, sd)

    safe_sd = np.where(sd == 0, 1.0, sd)
    Z = (X - mu) / safe_sd
    Z[:, is_degenerate] = 0.0

    cols = features.data.columns
    return NormalizedMatrix(
        data=pd.DataFrame(Z, index=features.data.index, columns=cols),
        area_names=features.area_names,
        means=pd.Series(mu.ravel(), index=cols, name="mean"),
        stds=pd.Series(sd.ravel(), index=cols, name="std"),
    )
