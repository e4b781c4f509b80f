import numpy as np
import pandas as pd
import pytest
from hypothesis import given, settings, strategies as st

from countycluster.data_process.features import CountyRecord, build_feature_matrix
from countycluster.data_process.transform import zscore_features
from countycluster.errors import DegenerateFeatureError


def _matrix(rows):
    return build_feature_matrix(
        CountyRecord("53", f"{i * 2 + 1:03d}", f"County {i}", *row) for i, row in enumerate(rows)
    )


def test_zscore_features_basic():
    fm = _matrix([(10, 100, 500), (12, 110, 520), (500, 5000, 900)])
    Z = zscore_features(fm)
    assert Z.data.shape == fm.data.shape
    assert list(Z.data.index) == fm.fips
    # columnwise z-score with the sample std: mean ~0, std ~1
    assert np.allclose(Z.data.mean(0).to_numpy(), 0, atol=1e-12)
    assert np.allclose(Z.data.std(0, ddof=1).to_numpy(), 1, atol=1e-12)
    assert Z.degenerate_features == []


def test_inverse_transform_recovers_original_units():
    fm = _matrix([(10, 100, 500), (12, 110, 520), (500, 5000, 900)])
    Z = zscore_features(fm)
    back = Z.inverse_transform(Z.data)
    np.testing.assert_allclose(back.to_numpy(), fm.to_numpy())


def test_degenerate_feature_raises_by_default():
    # every county pays the same weekly wage
    fm = _matrix([(10, 100, 500), (12, 110, 500), (500, 5000, 500)])
    with pytest.raises(DegenerateFeatureError) as exc:
        zscore_features(fm)
    assert exc.value.features == ["weekly_wage"]
    assert exc.value.n_counties == 3
    assert "weekly_wage" in str(exc.value)


def test_degenerate_feature_zero_policy():
    fm = _matrix([(10, 100, 500), (12, 110, 500), (500, 5000, 500)])
    Z = zscore_features(fm, degenerate="zero")
    assert (Z.data["weekly_wage"] == 0).all()
    assert np.isfinite(Z.data.to_numpy()).all()
    assert Z.degenerate_features == ["weekly_wage"]
    assert np.isclose(Z.data["employment"].std(ddof=1), 1.0)


def test_single_county_is_degenerate():
    fm = _matrix([(10, 100, 500)])
    with pytest.raises(DegenerateFeatureError) as exc:
        zscore_features(fm)
    assert exc.value.features == ["establishments", "employment", "weekly_wage"]
    assert (zscore_features(fm, degenerate="zero").data.to_numpy() == 0).all()


def test_unknown_policy():
    fm = _matrix([(10, 100, 500), (12, 110, 520)])
    with pytest.raises(ValueError):
        zscore_features(fm, degenerate="ignore")


_value = st.floats(min_value=0, max_value=1e6, allow_nan=False, allow_infinity=False)


@given(st.lists(st.tuples(_value, _value, _value), min_size=2, max_size=40))
@settings(max_examples=50, deadline=None)
def test_zscore_moments_property(rows):
    fm = _matrix(rows)
    X = fm.to_numpy()
    spread = X.max(axis=0) - X.min(axis=0)
    try:
        Z = zscore_features(fm)
    except DegenerateFeatureError as exc:
        assert len(exc.features) > 0
        return
    # well-conditioned columns only; near-constant columns lose precision
    ok = spread > 1e-3 * np.maximum(np.abs(X).max(axis=0), 1.0)
    Zv = Z.data.to_numpy()[:, ok]
    assert np.allclose(Zv.mean(axis=0), 0, atol=1e-6)
    assert np.allclose(Zv.std(axis=0, ddof=1), 1, atol=1e-6)
