"""
Variable-window smoothing.

Each point is the kernel-weighted mean of its neighborhood, using the
window size the profile assigns to that point. Near the ends the truncated
kernel is renormalized, so edge points are averages of the samples that
exist rather than being pulled toward zero.
"""

from typing import Union

import numpy as np

from gpxtrend.core.base import KernelShape
from gpxtrend.core.window import build_kernel


def smooth_fixed(values: np.ndarray, size: int, shape: Union[str, KernelShape] = KernelShape.GAUSSIAN) -> np.ndarray:
    """Smooth with one window size everywhere."""
    values = np.asarray(values, dtype=np.float64).ravel()
    if size <= 1 or len(values) < 2:
        return values.copy()

    kernel = build_kernel(size, shape)
    weighted = np.convolve(values, kernel, mode='same')
    weight_sum = np.convolve(np.ones_like(values), kernel, mode='same')
    return weighted / weight_sum


def smooth(
    values,
    profile,
    shape: Union[str, KernelShape] = KernelShape.GAUSSIAN,
) -> np.ndarray:
    """
    Smooth values with a per-point window profile.

    Args:
        values: Channel values
        profile: Odd window size per point (same length as values)
        shape: Kernel shape

    Returns:
        Smoothed copy of values
    """
    values = np.asarray(values, dtype=np.float64).ravel()
    profile = np.asarray(profile, dtype=np.int64).ravel()
    if len(profile) != len(values):
        raise ValueError(
            f"Window profile length {len(profile)} != series length {len(values)}"
        )

    smoothed = values.copy()
    # One convolution per distinct window size
    for size in np.unique(profile):
        if size <= 1:
            continue
        mask = profile == size
        smoothed[mask] = smooth_fixed(values, int(size), shape)[mask]
    return smoothed
