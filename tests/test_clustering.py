from __future__ import annotations

import numpy as np
import pytest

from tilequant.clustering import cluster, kmeans_plus_plus
from tilequant.colour_convert import planar_distance_batch


def _two_groups() -> np.ndarray:
    dark = [[0.1 + 0.001 * i, 0.0, 0.0] for i in range(5)]
    light = [[0.9 - 0.001 * i, 0.02, 0.01] for i in range(5)]
    return np.array(dark + light, dtype=np.float64)


def test_separates_obvious_groups(rng):
    feats = _two_groups()
    result = cluster(feats, 2, 100, planar_distance_batch, rng=rng)
    labels = result.assignments.tolist()
    assert len(set(labels[:5])) == 1
    assert len(set(labels[5:])) == 1
    assert labels[0] != labels[5]
    assert all(0 <= v < 2 for v in labels)


def test_distortion_is_sum_of_member_distances(rng):
    feats = _two_groups()
    result = cluster(feats, 2, 100, rng=rng)
    expected = 0.0
    for j in range(2):
        members = feats[result.assignments == j]
        expected += float(planar_distance_batch(members, result.centroids[j]).sum())
    assert result.distortion == pytest.approx(expected)


def test_identical_points_tie_to_lowest_cluster(rng):
    feats = np.tile(np.array([[0.3, 0.01, -0.02]]), (6, 1))
    result = cluster(feats, 3, 50, rng=rng)
    assert result.assignments.tolist() == [0] * 6
    assert result.distortion == 0.0


def test_iteration_cap_is_respected(rng):
    feats = rng.normal(size=(40, 6)) * 0.2
    result = cluster(feats, 5, 1, rng=rng)
    assert result.iterations == 1
    assert result.assignments.shape == (40,)


def test_converges_before_cap(rng):
    result = cluster(_two_groups(), 2, 10_000, rng=rng)
    assert result.iterations < 10_000


def test_k_larger_than_points_is_rejected(rng):
    with pytest.raises(ValueError):
        cluster(np.zeros((3, 3)), 4, 10, rng=rng)
    with pytest.raises(ValueError):
        cluster(np.zeros((3, 3)), 0, 10, rng=rng)


def test_kmeans_plus_plus_picks_distinct_points(rng):
    feats = _two_groups()
    centroids = kmeans_plus_plus(feats, 2, planar_distance_batch, rng)
    assert centroids.shape == (2, 3)
    # D^2 sampling makes a second seed inside the first group vanishingly unlikely
    assert {c[0] < 0.5 for c in centroids} == {True, False}


def test_same_seed_same_result():
    feats = np.random.default_rng(7).normal(size=(30, 9)) * 0.1
    a = cluster(feats, 4, 200, rng=np.random.default_rng(99))
    b = cluster(feats, 4, 200, rng=np.random.default_rng(99))
    np.testing.assert_array_equal(a.assignments, b.assignments)
    assert a.distortion == b.distortion
