import numpy as np
import pandas as pd
import pytest

from countycluster.assemble import ClusterAssignment, assemble_groups
from countycluster.errors import AssemblyMismatchError
from countycluster.partition_cluster.kmedoids import kmedoids

FIPS = ["53001", "53003", "53033"]


def test_labels_map_in_input_order():
    groups = assemble_groups(FIPS, [1, 1, 2])
    assert isinstance(groups, ClusterAssignment)
    assert dict(groups) == {"53001": 1, "53003": 1, "53033": 2}
    assert list(groups) == FIPS
    assert groups.n_clusters == 2


def test_to_frame_and_group_sizes():
    groups = assemble_groups(FIPS, np.array([2, 2, 2]))
    frame = groups.to_frame()
    assert list(frame.columns) == ["fips", "group"]
    assert frame["fips"].tolist() == FIPS
    assert frame["group"].tolist() == [2, 2, 2]
    # empty groups are reported with zero counties
    assert groups.group_sizes().to_dict() == {1: 0, 2: 3}


def test_fuzzy_weights_are_hardened():
    weights = pd.DataFrame(
        [[0.7, 0.2, 0.1], [0.4, 0.4, 0.2], [0.1, 0.3, 0.6]],
        index=FIPS, columns=[1, 2, 3],
    )
    groups = assemble_groups(FIPS, weights)
    # tie on the second county goes to the lower group
    assert [groups[f] for f in FIPS] == [1, 1, 3]
    assert groups.n_clusters == 3


def test_kmedoids_result_is_accepted():
    D = np.array([[0.0, 1.0, 9.0], [1.0, 0.0, 8.0], [9.0, 8.0, 0.0]])
    res = kmedoids(D, 2, fips=FIPS)
    groups = assemble_groups(FIPS, res)
    assert groups["53001"] == groups["53003"] != groups["53033"]


def test_count_mismatch():
    with pytest.raises(AssemblyMismatchError, match="3 county identifiers but 2"):
        assemble_groups(FIPS, [1, 2])


@pytest.mark.parametrize("fips", [
    ["53001", "53003", "5333"],
    ["53001", "53003", "WA033"],
    ["53001", "53003", "53033\n"],
    ["53001", "53003", "\uff15\uff13033"],
    ["53001", "53001", "53033"],
])
def test_malformed_or_duplicate_fips(fips):
    with pytest.raises(AssemblyMismatchError):
        assemble_groups(fips, [1, 1, 2])


def test_labels_outside_range():
    with pytest.raises(AssemblyMismatchError):
        assemble_groups(FIPS, [0, 1, 2])
    with pytest.raises(AssemblyMismatchError):
        assemble_groups(FIPS, [1.5, 1, 2])


def test_reordered_result_is_rejected():
    weights = pd.DataFrame([[1.0, 0.0], [0.0, 1.0], [1.0, 0.0]], index=FIPS[::-1])
    with pytest.raises(AssemblyMismatchError, match="order"):
        assemble_groups(FIPS, weights)


def test_assignment_is_read_only():
    groups = assemble_groups(FIPS, [1, 2, 2])
    with pytest.raises(TypeError):
        groups["53001"] = 2
