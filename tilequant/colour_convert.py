# tilequant/colour_convert.py
from __future__ import annotations

"""
Colour conversions and the perceptual distance (OKLab).

Exports:
  rgb_to_linear(srgb)
  linear_to_rgb(linear)
  rgb_to_oklab(rgb)
  oklab_to_rgb(lab)
  hue_of(lab), chroma_of(lab)
  delta_e_pair(lab1, lab2)
  delta_e_vec(lab1, lab2)
  planar_distance_reference(a, b)
  planar_distance_batch(points, centroid)
  PlanarDistance(points)

Every similarity decision in the pipeline goes through the same OKLab
difference:

  dL = L1 - L2, dC = C1 - C2, dH = sqrt(|da^2 + db^2 - dC^2|)
  dE = sqrt(dL^2 + dC^2 + dH^2)

delta_e_pair is the scalar reference; the vector forms must agree with it.
"""

import math
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .core_types import Lab, U8Image


# sRGB transfer curve


def rgb_to_linear(srgb: np.ndarray) -> np.ndarray:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    """
    srgb_f = np.asarray(srgb, dtype=np.float64)
    return np.where(
        srgb_f <= 0.04045, srgb_f / 12.92, ((srgb_f + 0.055) / 1.055) ** 2.4
    )


def linear_to_rgb(linear: np.ndarray) -> np.ndarray:
    """Linear RGB (0..1) back to sRGB (0..1). Input is clamped first."""
    lin = np.clip(np.asarray(linear, dtype=np.float64), 0.0, 1.0)
    return np.where(
        lin <= 0.0031308, 12.92 * lin, 1.055 * np.power(lin, 1.0 / 2.4) - 0.055
    )


# sRGB <-> OKLab


def rgb_to_oklab(rgb: np.ndarray) -> Lab:
    """
    8-bit sRGB to OKLab.
    Accepts uint8 or integer-valued arrays [...,3] in 0..255. Preserves shape.
    """
    rgb_f = np.asarray(rgb, dtype=np.float64) / 255.0

    r_lin = rgb_to_linear(rgb_f[..., 0])
    g_lin = rgb_to_linear(rgb_f[..., 1])
    b_lin = rgb_to_linear(rgb_f[..., 2])

    # Linear RGB -> LMS
    l_ = 0.4122214708 * r_lin + 0.5363325363 * g_lin + 0.0514459929 * b_lin
    m_ = 0.2119034982 * r_lin + 0.6806995451 * g_lin + 0.1073969566 * b_lin
    s_ = 0.0883024619 * r_lin + 0.2817188376 * g_lin + 0.6299787005 * b_lin

    l_c, m_c, s_c = np.cbrt(l_), np.cbrt(m_), np.cbrt(s_)

    out = np.empty(rgb_f.shape, dtype=np.float64)
    out[..., 0] = 0.2104542553 * l_c + 0.7936177850 * m_c - 0.0040720468 * s_c
    out[..., 1] = 1.9779984951 * l_c - 2.4285922050 * m_c + 0.4505937099 * s_c
    out[..., 2] = 0.0259040371 * l_c + 0.7827717662 * m_c - 0.8086757660 * s_c
    return out


def oklab_to_rgb(lab: np.ndarray) -> U8Image:
    """
    OKLab to 8-bit sRGB, clamped to gamut and rounded. Preserves shape.
    """
    lab_f = np.asarray(lab, dtype=np.float64)
    L, a, b = lab_f[..., 0], lab_f[..., 1], lab_f[..., 2]

    l_c = L + 0.3963377774 * a + 0.2158037573 * b
    m_c = L - 0.1055613458 * a - 0.0638541728 * b
    s_c = L - 0.0894841775 * a - 1.2914855480 * b
    l_, m_, s_ = l_c**3, m_c**3, s_c**3

    r_lin = 4.0767416621 * l_ - 3.3077115913 * m_ + 0.2309699292 * s_
    g_lin = -1.2684380046 * l_ + 2.6097574011 * m_ - 0.3413193965 * s_
    b_lin = -0.0041960863 * l_ - 0.7034186147 * m_ + 1.7076147010 * s_

    out = np.empty(lab_f.shape, dtype=np.float64)
    out[..., 0] = linear_to_rgb(r_lin)
    out[..., 1] = linear_to_rgb(g_lin)
    out[..., 2] = linear_to_rgb(b_lin)
    return np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)


# Hue / chroma


def hue_of(lab: np.ndarray) -> np.ndarray:
    """Hue angle atan2(b, a) in radians, shape [...]."""
    lab_f = np.asarray(lab, dtype=np.float64)
    return np.arctan2(lab_f[..., 2], lab_f[..., 1])


def chroma_of(lab: np.ndarray) -> np.ndarray:
    """Chroma sqrt(a^2 + b^2), shape [...]."""
    lab_f = np.asarray(lab, dtype=np.float64)
    return np.hypot(lab_f[..., 1], lab_f[..., 2])


# Distance


def delta_e_pair(
    lab1: Sequence[float] | NDArray[np.floating],
    lab2: Sequence[float] | NDArray[np.floating],
) -> float:
    """
    OKLab difference between two colours.
    Scalar reference implementation.
    """
    L1, a1, b1 = float(lab1[0]), float(lab1[1]), float(lab1[2])
    L2, a2, b2 = float(lab2[0]), float(lab2[1]), float(lab2[2])

    dL = L1 - L2
    C1 = math.sqrt(a1 * a1 + b1 * b1)
    C2 = math.sqrt(a2 * a2 + b2 * b2)
    dC = C1 - C2
    da = a1 - a2
    db = b1 - b2
    dH = math.sqrt(abs(da * da + db * db - dC * dC))
    return math.sqrt(dL * dL + dC * dC + dH * dH)


def _delta_e_planes(
    L1: np.ndarray,
    a1: np.ndarray,
    b1: np.ndarray,
    L2: np.ndarray,
    a2: np.ndarray,
    b2: np.ndarray,
    chroma1: Optional[np.ndarray] = None,
) -> np.ndarray:
    if chroma1 is None:
        chroma1 = np.sqrt(a1 * a1 + b1 * b1)
    dL = L1 - L2
    dC = chroma1 - np.sqrt(a2 * a2 + b2 * b2)
    da = a1 - a2
    db = b1 - b2
    dH2 = np.abs(da * da + db * db - dC * dC)
    return np.sqrt(dL * dL + dC * dC + dH2)


def delta_e_vec(lab1: np.ndarray, lab2: np.ndarray) -> NDArray[np.float64]:
    """
    Broadcasting OKLab difference over the last axis (size 3).

    Args:
      lab1: [..., 3]
      lab2: [..., 3], broadcastable against lab1
    Returns:
      float64 array with the broadcast shape minus the last axis
    """
    x = np.asarray(lab1, dtype=np.float64)
    y = np.asarray(lab2, dtype=np.float64)
    return _delta_e_planes(
        x[..., 0], x[..., 1], x[..., 2], y[..., 0], y[..., 1], y[..., 2]
    )


# Planar feature vectors
#
# A feature vector of dimension D = 3 * n stores n colours as three contiguous
# planes: [L_0..L_n-1, a_0..a_n-1, b_0..b_n-1]. The distance between two such
# vectors is the sum of the per-colour dE.


def planar_distance_reference(a: Sequence[float], b: Sequence[float]) -> float:
    """Scalar loop over the planes. Slow; used to check the batched form."""
    if len(a) != len(b) or len(a) % 3 != 0:
        raise ValueError("planar vectors must share a length divisible by 3")
    n = len(a) // 3
    total = 0.0
    for i in range(n):
        total += delta_e_pair(
            (a[i], a[n + i], a[2 * n + i]), (b[i], b[n + i], b[2 * n + i])
        )
    return total


def planar_distance_batch(points: np.ndarray, centroid: np.ndarray) -> np.ndarray:
    """
    Distance from one planar centroid to many planar points.

    Args:
      points: [M, D]
      centroid: [D]
    Returns:
      float64 [M]
    """
    pts = np.asarray(points, dtype=np.float64)
    ctr = np.asarray(centroid, dtype=np.float64)
    n = pts.shape[-1] // 3
    return _delta_e_planes(
        pts[..., :n],
        pts[..., n : 2 * n],
        pts[..., 2 * n :],
        ctr[:n],
        ctr[n : 2 * n],
        ctr[2 * n :],
    ).sum(axis=-1)


class PlanarDistance:
    """
    planar_distance_batch bound to one point set.

    The planes of the points and their chroma are split out once, so each
    call only does the work that depends on the centroid. Called with any
    other point array it falls back to planar_distance_batch.
    """

    def __init__(self, points: np.ndarray) -> None:
        pts = np.asarray(points, dtype=np.float64)
        n = pts.shape[-1] // 3
        self.points = pts
        self._n = n
        self._L = pts[..., :n]
        self._a = pts[..., n : 2 * n]
        self._b = pts[..., 2 * n :]
        self._chroma = np.sqrt(self._a * self._a + self._b * self._b)

    def __call__(self, points: np.ndarray, centroid: np.ndarray) -> np.ndarray:
        if points is not self.points:
            return planar_distance_batch(points, centroid)
        ctr = np.asarray(centroid, dtype=np.float64)
        n = self._n
        return _delta_e_planes(
            self._L,
            self._a,
            self._b,
            ctr[:n],
            ctr[n : 2 * n],
            ctr[2 * n :],
            chroma1=self._chroma,
        ).sum(axis=-1)


__all__ = [
    "rgb_to_linear",
    "linear_to_rgb",
    "rgb_to_oklab",
    "oklab_to_rgb",
    "hue_of",
    "chroma_of",
    "delta_e_pair",
    "delta_e_vec",
    "planar_distance_reference",
    "planar_distance_batch",
    "PlanarDistance",
]
