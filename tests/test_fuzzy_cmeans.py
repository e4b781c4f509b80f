import warnings

import numpy as np
import pandas as pd
import pytest
from hypothesis import given, settings, strategies as st
from hypothesis.extra.numpy import arrays
from sklearn.exceptions import ConvergenceWarning

from countycluster.data_process.features import CountyRecord, build_feature_matrix
from countycluster.data_process.transform import zscore_features
from countycluster.errors import ConvergenceFailure
from countycluster.partition_cluster.fuzzy_cmeans import (
    fuzzy_cmeans, harden_weights, fuzzy_partition_coefficient, _update_weights,
)


@pytest.fixture
def three_counties():
    records = [
        CountyRecord("53", "001", "Adams", 10, 100, 500),
        CountyRecord("53", "003", "Asotin", 12, 110, 520),
        CountyRecord("53", "033", "King", 500, 5000, 900),
    ]
    return zscore_features(build_feature_matrix(records))


def test_outlier_gets_its_own_cluster(three_counties):
    res = fuzzy_cmeans(three_counties, 2, 2.0, random_state=0)
    W = res.weights
    assert res.converged
    assert list(W.columns) == [1, 2]
    assert list(W.index) == ["53001", "53003", "53033"]

    labels = res.labels()
    king = labels["53033"]
    assert W.loc["53033", king] > 0.9
    # the two small counties share the other cluster with near-equal, high weight
    assert labels["53001"] == labels["53003"] != king
    shared = labels["53001"]
    assert W.loc["53001", shared] > 0.9 and W.loc["53003", shared] > 0.9
    assert abs(W.loc["53001", shared] - W.loc["53003", shared]) < 0.01


def test_weights_sum_to_one_and_centers_shape(three_counties):
    res = fuzzy_cmeans(three_counties, 3, 1.5, random_state=1)
    np.testing.assert_allclose(res.weights.sum(axis=1).to_numpy(), 1.0)
    assert ((res.weights >= 0) & (res.weights <= 1)).all().all()
    assert res.centers.shape == (3, 3)
    assert list(res.centers.columns) == three_counties.feature_names
    assert len(res.objective) == res.n_iter


def test_same_seed_same_result(three_counties):
    a = fuzzy_cmeans(three_counties, 2, 2.0, random_state=42)
    b = fuzzy_cmeans(three_counties, 2, 2.0, random_state=42)
    assert np.array_equal(a.weights.to_numpy(), b.weights.to_numpy())
    assert a.labels().equals(b.labels())
    assert a.n_iter == b.n_iter


def test_accepts_generator_and_plain_arrays():
    rng = np.random.default_rng(7)
    X = np.vstack([rng.normal(0, 0.1, (10, 2)), rng.normal(5, 0.1, (10, 2))])
    res = fuzzy_cmeans(X, 2, random_state=np.random.default_rng(3))
    labels = res.labels().to_numpy()
    assert len(set(labels[:10])) == 1 and len(set(labels[10:])) == 1
    assert labels[0] != labels[10]
    assert res.partition_coefficient() > 0.9


def test_harden_weights_argmax_lowest_index_wins_ties():
    W = np.array([
        [0.5, 0.5],
        [0.2, 0.8],
        [0.7, 0.3],
    ])
    assert harden_weights(W).tolist() == [1, 2, 1]
    W3 = np.full((2, 3), 1 / 3)
    assert harden_weights(W3).tolist() == [1, 1]
    # near ties within atol also go to the lowest column
    assert harden_weights(np.array([[0.4999999, 0.5000001]]), atol=1e-6).tolist() == [1]
    assert harden_weights(np.array([[0.4999999, 0.5000001]])).tolist() == [2]


def test_harden_weights_rejects_bad_shapes():
    with pytest.raises(ValueError):
        harden_weights(np.array([0.5, 0.5]))
    with pytest.raises(ValueError):
        harden_weights(np.array([[np.nan, 1.0]]))


def test_partition_coefficient_bounds():
    assert fuzzy_partition_coefficient(np.full((4, 2), 0.5)) == pytest.approx(0.5)
    assert fuzzy_partition_coefficient(np.eye(3)) == pytest.approx(1.0)


def test_county_on_a_center_takes_full_weight():
    dist = np.array([
        [0.0, 2.0, 3.0],
        [0.0, 0.0, 1.0],
        [1.0, 1.0, 2.0],
    ])
    W = _update_weights(dist, 2.0)
    np.testing.assert_allclose(W[0], [1.0, 0.0, 0.0])
    np.testing.assert_allclose(W[1], [0.5, 0.5, 0.0])
    # 1 / sum_k (d_ij / d_ik)^2
    np.testing.assert_allclose(W[2], [4 / 9, 4 / 9, 1 / 9])


def test_iteration_cap_raises_with_best_effort_result(three_counties):
    with pytest.raises(ConvergenceFailure) as exc:
        fuzzy_cmeans(three_counties, 2, max_iter=1, tol=1e-15, random_state=0)
    err = exc.value
    assert err.stage == "fuzzy_cmeans"
    assert err.n_iter == 1
    assert err.result is not None and err.result.converged is False
    assert "1 iterations" in str(err)


def test_iteration_cap_warn_policy(three_counties):
    with pytest.warns(ConvergenceWarning):
        res = fuzzy_cmeans(three_counties, 2, max_iter=1, tol=1e-15, random_state=0,
                           on_nonconvergence="warn")
    assert res.converged is False
    assert res.n_iter == 1
    np.testing.assert_allclose(res.weights.sum(axis=1).to_numpy(), 1.0)


@pytest.mark.parametrize("kwargs", [
    {"n_clusters": 1},
    {"n_clusters": 4},
    {"n_clusters": 2, "fuzziness": 1.0},
    {"n_clusters": 2, "max_iter": 0},
    {"n_clusters": 2, "on_nonconvergence": "ignore"},
])
def test_invalid_arguments(three_counties, kwargs):
    with pytest.raises(ValueError):
        fuzzy_cmeans(three_counties, **kwargs)


@given(
    arrays(np.float64, st.tuples(st.integers(3, 30), st.just(3)),
           elements=st.floats(-5, 5, allow_nan=False, allow_infinity=False)),
    st.integers(2, 3),
    st.floats(1.1, 5.0),
    st.integers(0, 2**32 - 1),
)
@settings(max_examples=40, deadline=None)
def test_weights_property(X, c, m, seed):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        res = fuzzy_cmeans(X, c, m, random_state=seed, on_nonconvergence="warn")
    W = res.weights.to_numpy()
    assert np.isfinite(W).all()
    np.testing.assert_allclose(W.sum(axis=1), 1.0, atol=1e-9)
    labels = res.labels().to_numpy()
    assert np.array_equal(labels, W.argmax(axis=1) + 1)
