"""
Typed failures raised by the county clustering pipeline.

Every error derives from CountyClusterError so callers can catch the whole
family at once; each subclass also derives from the builtin exception a
caller would expect for that kind of failure (ValueError, KeyError, ...).
"""
from __future__ import annotations
import logging
import warnings
from typing import Any, Iterable, Optional

from sklearn.exceptions import ConvergenceWarning

logger = logging.getLogger(__name__)


class CountyClusterError(Exception):
    """Base class for all pipeline failures."""

    stage: str = "pipeline"


class ConfigurationError(CountyClusterError, ValueError):
    stage = "configuration"


class NoMatchingStateError(CountyClusterError, KeyError):
    """The requested state abbreviation is not in the crosswalk."""

    stage = "feature_extraction"

    def __init__(self, state: str, known: Optional[Iterable[str]] = None):
        self.state = state
        self.known = sorted(known) if known is not None else []
        hint = f" Known codes: {', '.join(self.known[:10])}..." if self.known else ""
        super().__init__(f"State code {state!r} not found in the state crosswalk.{hint}")

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class EmptyDatasetError(CountyClusterError, ValueError):
    """Filtering left no county rows to cluster."""

    stage = "feature_extraction"


class InvalidRecordError(CountyClusterError, ValueError):
    """QCEW rows are missing required columns or carry impossible values."""

    stage = "feature_extraction"


class DegenerateFeatureError(CountyClusterError, ValueError):
    """One or more features have zero variance across the state's counties."""

    stage = "normalization"

    def __init__(self, features: Iterable[str], n_counties: int):
        self.features = list(features)
        self.n_counties = n_counties
        super().__init__(
            f"Zero-variance feature(s) across {n_counties} counties: {self.features}. "
            "Z-scores are undefined; pass degenerate='zero' to keep them as all-zero columns."
        )


class InvalidDistanceError(CountyClusterError, ValueError):
    stage = "distance"


class ConvergenceFailure(CountyClusterError, RuntimeError):
    """
    An iterative clusterer hit its iteration cap.

    The best-effort result reached at the cap is available as ``result``
    (its ``converged`` flag is False).
    """

    def __init__(self, stage: str, n_iter: int, result: Any = None, detail: str = ""):
        self.stage = stage
        self.n_iter = n_iter
        self.result = result
        msg = f"{stage} did not converge within {n_iter} iterations"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class AssemblyMismatchError(CountyClusterError, RuntimeError):
    """County identifiers and clustered rows disagree; an internal invariant is broken."""

    stage = "assembly"


def report_nonconvergence(stage: str, n_iter: int, result: Any, policy: str, detail: str = ""):
    """
    Apply the non-convergence policy: "raise" raises ConvergenceFailure carrying
    the best-effort ``result``; "warn" emits a ConvergenceWarning and returns
    ``result`` unchanged (its ``converged`` flag stays False).
    """
    if policy == "raise":
        raise ConvergenceFailure(stage, n_iter, result=result, detail=detail)
    if policy != "warn":
        raise ValueError(f"Unknown non-convergence policy: {policy}")
    msg = f"{stage} did not converge within {n_iter} iterations"
    if detail:
        msg = f"{msg} ({detail})"
    logger.warning(msg)
    warnings.warn(msg, ConvergenceWarning, stacklevel=3)
    return result
