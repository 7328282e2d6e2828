# tilequant/analysis.py
from __future__ import annotations

"""
Reconstruction quality metrics.

Exports:
  delta_e_statistics(original_rgb, reconstructed_rgb) -> DeltaEStats
  psnr_from_mse(mse) -> float
  channel_psnr(original_rgb, reconstructed_rgb) -> PSNRStats
  quality_report(original_rgb, reconstructed_rgb) -> QualityReport
  format_quality_report(report) -> list[str]

dE values are OKLab differences multiplied by DELTA_E_DISPLAY_FACTOR.
Percentiles use the sorted-index convention: median at n // 2, pXX at
int(n * 0.XX). PSNR is inf when the MSE is exactly zero.
"""

import math
from dataclasses import dataclass
from typing import List

import numpy as np

from .colour_convert import delta_e_vec, rgb_to_oklab
from .constants import DELTA_E_DISPLAY_FACTOR, MAX_PIXEL_VALUE
from .core_types import U8Image


@dataclass(frozen=True)
class DeltaEStats:
    min: float
    mean: float
    median: float
    p75: float
    p90: float
    p95: float
    p99: float
    max: float


@dataclass(frozen=True)
class PSNRStats:
    red: float
    green: float
    blue: float
    average: float


@dataclass(frozen=True)
class QualityReport:
    delta_e: DeltaEStats
    psnr: PSNRStats
    pixel_count: int


def _percentile_at(values: np.ndarray, quantile: float) -> float:
    idx = int(values.size * quantile)
    return float(values[idx]) if idx < values.size else 0.0


def delta_e_statistics(original_rgb: U8Image, reconstructed_rgb: U8Image) -> DeltaEStats:
    src = rgb_to_oklab(np.asarray(original_rgb).reshape(-1, 3))
    out = rgb_to_oklab(np.asarray(reconstructed_rgb).reshape(-1, 3))
    values = np.sort(delta_e_vec(src, out) * DELTA_E_DISPLAY_FACTOR)
    if values.size == 0:
        return DeltaEStats(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    return DeltaEStats(
        min=float(values[0]),
        mean=float(values.mean()),
        median=float(values[values.size // 2]),
        p75=_percentile_at(values, 0.75),
        p90=_percentile_at(values, 0.90),
        p95=_percentile_at(values, 0.95),
        p99=_percentile_at(values, 0.99),
        max=float(values[-1]),
    )


def psnr_from_mse(mse: float) -> float:
    """20*log10(MAX) - 10*log10(MSE); inf for MSE == 0."""
    if mse <= 0.0:
        return math.inf
    return 20.0 * math.log10(MAX_PIXEL_VALUE) - 10.0 * math.log10(mse)


def channel_psnr(original_rgb: U8Image, reconstructed_rgb: U8Image) -> PSNRStats:
    src = np.asarray(original_rgb, dtype=np.float64).reshape(-1, 3)
    out = np.asarray(reconstructed_rgb, dtype=np.float64).reshape(-1, 3)
    if src.shape != out.shape:
        raise ValueError(f"image shapes differ: {src.shape} vs {out.shape}")
    if src.shape[0] == 0:
        return PSNRStats(math.inf, math.inf, math.inf, math.inf)
    mse = ((src - out) ** 2).mean(axis=0)
    mse_avg = float(mse.mean())
    return PSNRStats(
        red=psnr_from_mse(float(mse[0])),
        green=psnr_from_mse(float(mse[1])),
        blue=psnr_from_mse(float(mse[2])),
        average=psnr_from_mse(mse_avg),
    )


def quality_report(original_rgb: U8Image, reconstructed_rgb: U8Image) -> QualityReport:
    """Both images must have the same shape; ValueError otherwise."""
    src_shape = np.shape(original_rgb)
    out_shape = np.shape(reconstructed_rgb)
    if src_shape != out_shape:
        raise ValueError(f"image shapes differ: {src_shape} vs {out_shape}")
    return QualityReport(
        delta_e=delta_e_statistics(original_rgb, reconstructed_rgb),
        psnr=channel_psnr(original_rgb, reconstructed_rgb),
        pixel_count=int(np.asarray(original_rgb).reshape(-1, 3).shape[0]),
    )


def format_quality_report(report: QualityReport) -> List[str]:
    """Lines for the end-of-run summary."""
    de = report.delta_e
    ps = report.psnr
    return [
        f"Image Quality {DELTA_E_DISPLAY_FACTOR:g}x Delta E Comparison (lower is better):",
        f"  Min:    {de.min:6.3f}",
        f"  Mean:   {de.mean:6.3f}",
        f"  Median: {de.median:6.3f}",
        f"  p75:    {de.p75:6.3f}",
        f"  p90:    {de.p90:6.3f}",
        f"  p95:    {de.p95:6.3f}",
        f"  p99:    {de.p99:6.3f}",
        f"  Max:    {de.max:6.3f}",
        "PSNR Quality Metrics (higher is better, 30.0-50.0 is good):",
        f"  Red channel:   {ps.red:6.3f} dB",
        f"  Green channel: {ps.green:6.3f} dB",
        f"  Blue channel:  {ps.blue:6.3f} dB",
        f"  Average PSNR:  {ps.average:6.3f} dB",
    ]


__all__ = [
    "DeltaEStats",
    "PSNRStats",
    "QualityReport",
    "delta_e_statistics",
    "psnr_from_mse",
    "channel_psnr",
    "quality_report",
    "format_quality_report",
]
