"""
Adaptive Window Computer.

Sizes the smoothing window point by point from local roughness relative to
the global dispersion:

    roughness_i = rolling std of first differences around i
    ratio_i     = clip(roughness_i / std_dev, 0, 1)
    window_i    = WindowRequirements.compute_window(ratio_i)

First differences make a clean ramp read as perfectly smooth (constant
slope, zero roughness), so genuine trends keep the smallest window while
noisy stretches get wider ones. Zero dispersion short-circuits to the
identity window (size 1) everywhere.
"""

from typing import Optional, Union

import numpy as np
from scipy.signal import windows as _windows

from gpxtrend.core._stats import rolling_std
from gpxtrend.core.base import KernelShape, WindowRequirements, parse_kernel_shape


def gaussian_sigma(size: int) -> float:
    """Relative spread of the Gaussian kernel for a given window size."""
    return 0.4 + 0.1 * (size / 25.0)


def gaussian_kernel(size: int) -> np.ndarray:
    """
    Normalized Gaussian window.

    Args:
        size: Odd window length (1 gives the identity kernel)

    Returns:
        Weights summing to 1.0
    """
    if size < 1 or size % 2 == 0:
        raise ValueError(f"Kernel size must be odd and >= 1, got {size}")
    if size == 1:
        return np.ones(1)

    half_width = (size - 1) / 2.0
    weights = _windows.gaussian(size, std=gaussian_sigma(size) * half_width, sym=True)
    return weights / weights.sum()


def build_kernel(size: int, shape: Union[str, KernelShape] = KernelShape.GAUSSIAN) -> np.ndarray:
    shape = parse_kernel_shape(shape)
    if shape is KernelShape.GAUSSIAN:
        return gaussian_kernel(size)
    raise ValueError(f"Unsupported kernel shape: {shape!r}")


def local_roughness(values: np.ndarray, lag: int) -> np.ndarray:
    """
    Per-point roughness: rolling std of first differences.

    A point takes the larger roughness of its two adjacent steps.
    """
    values = np.asarray(values, dtype=np.float64).ravel()
    n = len(values)
    if n < 3:
        return np.zeros(n)

    step_roughness = rolling_std(np.diff(values), lag)
    return np.concatenate([
        step_roughness[:1],
        np.maximum(step_roughness[:-1], step_roughness[1:]),
        step_roughness[-1:],
    ])


def compute_window_profile(
    values,
    std_dev: float,
    shape: Union[str, KernelShape] = KernelShape.GAUSSIAN,
    requirements: Optional[WindowRequirements] = None,
) -> np.ndarray:
    """
    Per-point smoothing window sizes.

    Args:
        values: Channel values in time order
        std_dev: Global population std of values
        shape: Kernel shape selector (Gaussian only)
        requirements: Window limits; defaults to WindowRequirements()

    Returns:
        int array, one odd window size per point
    """
    parse_kernel_shape(shape)
    requirements = requirements or WindowRequirements()

    values = np.asarray(values, dtype=np.float64).ravel()
    n = len(values)

    if n < 3 or not std_dev > 0:
        return np.ones(n, dtype=np.int64)

    ratio = np.clip(local_roughness(values, requirements.variance_lag) / std_dev, 0.0, 1.0)
    sizes = np.fromiter(
        (requirements.compute_window(r) for r in ratio),
        dtype=np.int64,
        count=n,
    )

    # Never wider than the series itself
    longest = n if n % 2 == 1 else n - 1
    return np.minimum(sizes, longest)
