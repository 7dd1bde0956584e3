"""Dispersion estimates used by window sizing and thresholds."""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def population_std(y) -> float:
    """Population standard deviation (denominator N). Empty input gives 0.0."""
    y = np.asarray(y, dtype=np.float64).ravel()
    y = y[np.isfinite(y)]
    if len(y) == 0:
        return 0.0
    return float(np.std(y, ddof=0))


def rolling_std(y, lag: int) -> np.ndarray:
    """
    Centered rolling population std.

    Each point gets the std of the `lag` samples centered on it. Points
    closer than lag // 2 to either end reuse the nearest full window, so
    the output always has the input's length.
    """
    y = np.asarray(y, dtype=np.float64).ravel()
    n = len(y)
    if n == 0:
        return np.zeros(0)
    lag = max(1, min(int(lag), n))
    if lag == 1:
        return np.zeros(n)

    windows = sliding_window_view(y, lag)
    stds = windows.std(axis=1, ddof=0)

    lead = (lag - 1) // 2
    trail = n - len(stds) - lead
    return np.concatenate([
        np.full(lead, stds[0]),
        stds,
        np.full(trail, stds[-1]),
    ])
