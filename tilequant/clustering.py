# tilequant/clustering.py
from __future__ import annotations

"""
k-means over planar colour feature vectors.

cluster(features, k, max_iters, distance_fn) -> ClusterResult

- Seeding: k-means++ (first centre uniform, then D^2 sampling).
- Iterations: Lloyd. Assignment uses a strict '<', so the lowest-indexed
  centroid wins ties. Centroids are the arithmetic mean of their members; a
  centroid that loses all members stays where it was.
- Stops on the first iteration whose assignments match the previous one, or
  after max_iters.

The distance function takes (points [M, D], centroid [D]) and returns [M].
Any function with that contract can be swapped in without touching callers.
The default planar distance is bound to the feature rows once per call
(PlanarDistance), so point chroma is not recomputed for every centroid.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from numpy.typing import NDArray

from .colour_convert import PlanarDistance, planar_distance_batch
from .core_types import DistanceFn, Features


@dataclass(frozen=True, eq=False)
class ClusterResult:
    assignments: NDArray[np.int64]  # (M,) values in [0, k)
    distortion: float
    iterations: int
    centroids: Features  # (k, D)


def _nearest_centroids(
    features: np.ndarray, centroids: np.ndarray, distance_fn: DistanceFn
) -> tuple[NDArray[np.int64], NDArray[np.float64]]:
    """Nearest centroid per point with strict '<' tie-break, plus that distance."""
    m = features.shape[0]
    best = np.full((m,), np.inf, dtype=np.float64)
    labels = np.zeros((m,), dtype=np.int64)
    for j in range(centroids.shape[0]):
        d = np.asarray(distance_fn(features, centroids[j]), dtype=np.float64)
        closer = d < best
        best[closer] = d[closer]
        labels[closer] = j
    return labels, best


def kmeans_plus_plus(
    features: np.ndarray,
    k: int,
    distance_fn: DistanceFn,
    rng: np.random.Generator,
) -> Features:
    """Pick k well-spread starting centroids out of the feature rows."""
    m = features.shape[0]
    chosen: List[int] = [int(rng.integers(m))]
    min_dist = np.asarray(distance_fn(features, features[chosen[0]]), dtype=np.float64)

    while len(chosen) < k:
        weights = min_dist * min_dist
        total = float(weights.sum())
        if total > 0.0 and np.isfinite(total):
            nxt = int(rng.choice(m, p=weights / total))
        else:
            # every point coincides with a centre already; take the next unused row
            taken = set(chosen)
            nxt = next(i for i in range(m) if i not in taken)
        chosen.append(nxt)
        d = np.asarray(distance_fn(features, features[nxt]), dtype=np.float64)
        np.minimum(min_dist, d, out=min_dist)

    return features[chosen].astype(np.float64, copy=True)


def cluster(
    features: np.ndarray,
    k: int,
    max_iters: int,
    distance_fn: DistanceFn = planar_distance_batch,
    *,
    rng: Optional[np.random.Generator] = None,
) -> ClusterResult:
    """
    Lloyd's k-means seeded by k-means++.

    Args:
      features: float [M, D] planar rows
      k: cluster count, 1 <= k <= M (callers must guard)
      max_iters: iteration cap (>= 1)
      distance_fn: batched distance, see module docstring
      rng: numpy Generator; a fresh default_rng(0) when omitted
    Returns:
      ClusterResult with assignments [M], total distortion and iterations run.
    """
    feats = np.asarray(features, dtype=np.float64)
    if feats.ndim != 2:
        raise ValueError("features must be a 2-D array")
    m = feats.shape[0]
    if k < 1 or k > m:
        raise ValueError(f"cluster count {k} must be in 1..{m}")
    if rng is None:
        rng = np.random.default_rng(0)
    if distance_fn is planar_distance_batch:
        distance_fn = PlanarDistance(feats)

    centroids = kmeans_plus_plus(feats, k, distance_fn, rng)
    labels, best = _nearest_centroids(feats, centroids, distance_fn)
    iterations = 1

    while iterations < max(1, int(max_iters)):
        for j in range(k):
            members = labels == j
            if np.any(members):
                centroids[j] = feats[members].mean(axis=0)
        new_labels, new_best = _nearest_centroids(feats, centroids, distance_fn)
        iterations += 1
        converged = np.array_equal(new_labels, labels)
        labels, best = new_labels, new_best
        if converged:
            break

    return ClusterResult(
        assignments=labels,
        distortion=float(best.sum()),
        iterations=iterations,
        centroids=centroids,
    )


__all__ = ["ClusterResult", "kmeans_plus_plus", "cluster"]
