"""
Extrema Detector.

Runs a RISING / FALLING / FLAT state machine over the smoothed signal:

    step i is RISING  if s[i+1] - s[i] >  tolerance
              FALLING if s[i+1] - s[i] < -tolerance
              FLAT    otherwise

Maximal runs of one state become raw segments; a state change closes the
current segment and opens the next at the transition index. Given the
window profile, each transition is then moved onto the raw extremum
within half a window, undoing the lag the smoothing introduces. Extrema sit
where the trend direction flips. When a flat plateau separates the two
directions, the extremum is the plateau's earliest index.

The tolerance (max_value_accuracy) absorbs sensor plateaus of equal or
near-equal readings.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Optional

import numpy as np

from gpxtrend.core.entities import Segment


class Direction(IntEnum):
    FALLING = -1
    FLAT = 0
    RISING = 1


class ExtremaType(Enum):
    MIN = "min"
    MAX = "max"


@dataclass(frozen=True)
class Extremum:
    index: int
    type: ExtremaType


@dataclass(frozen=True)
class StateRun:
    """Run of equal step direction covering samples start_index..end_index."""
    state: Direction
    start_index: int
    end_index: int


def step_directions(smoothed, tolerance: float = 0.0) -> np.ndarray:
    """
    Direction of every step between consecutive samples.

    Returns:
        int8 array of length n - 1 with values in {-1, 0, 1}
    """
    smoothed = np.asarray(smoothed, dtype=np.float64).ravel()
    if len(smoothed) < 2:
        return np.zeros(0, dtype=np.int8)

    diffs = np.diff(smoothed)
    directions = np.zeros(len(diffs), dtype=np.int8)
    directions[diffs > tolerance] = Direction.RISING
    directions[diffs < -tolerance] = Direction.FALLING
    return directions


def state_runs(directions) -> List[StateRun]:
    """Collapse step directions into maximal runs, in sample index space."""
    directions = np.asarray(directions).ravel()
    if len(directions) == 0:
        return []

    # Step indices where the direction changes
    changes = np.flatnonzero(np.diff(directions)) + 1
    starts = np.concatenate([[0], changes])
    ends = np.concatenate([changes, [len(directions)]])

    return [
        StateRun(Direction(int(directions[s])), int(s), int(e))
        for s, e in zip(starts, ends)
    ]


def find_extrema(smoothed, tolerance: float = 0.0) -> List[Extremum]:
    """
    Local maxima / minima of the smoothed signal.

    A plateau between a rise and a fall (or a fall and a rise) resolves to
    its earliest index.
    """
    extrema = []
    previous: Optional[StateRun] = None

    for run in state_runs(step_directions(smoothed, tolerance)):
        if run.state is Direction.FLAT:
            continue
        if previous is not None and run.state != previous.state:
            kind = ExtremaType.MAX if previous.state is Direction.RISING else ExtremaType.MIN
            extrema.append(Extremum(previous.end_index, kind))
        previous = run

    return extrema


def refine_bounds(runs: List[StateRun], values, profile, tolerance: float = 0.0) -> List[int]:
    """
    Snap run transitions onto the raw extremum next to them.

    Smoothing with a wide window spreads a sharp step over the window, so
    the state machine starts a rise too early and ends it too late. Each
    interior transition moves to the raw extremum within half the local
    window:

        end of a rise (fall)        earliest sample within tolerance of the max (min)
        start after a flat run      latest sample within tolerance of the min
                                    for a rise, of the max for a fall

    Bounds stay strictly increasing.

    Returns:
        len(runs) + 1 sample indices, first 0 and last n - 1
    """
    values = np.asarray(values, dtype=np.float64).ravel()
    profile = np.asarray(profile, dtype=np.int64).ravel()
    n = len(values)
    reach = int(profile.max()) // 2 if len(profile) else 0

    bounds = [runs[0].start_index]
    for before, after in zip(runs, runs[1:]):
        b = before.end_index
        half = int(profile[max(0, b - reach):min(n, b + reach + 1)].max()) // 2
        lo = max(bounds[-1] + 1, b - half)
        hi = min(after.end_index - 1, b + half)

        # lo <= b <= hi, so the window is never empty
        window = values[lo:hi + 1]
        if before.state is Direction.RISING or (
            before.state is Direction.FLAT and after.state is Direction.FALLING
        ):
            candidates = np.flatnonzero(window >= window.max() - tolerance)
        else:
            candidates = np.flatnonzero(window <= window.min() + tolerance)

        earliest = before.state is not Direction.FLAT
        bounds.append(lo + int(candidates[0] if earliest else candidates[-1]))

    bounds.append(runs[-1].end_index)
    return bounds


def detect_segments(
    timestamps,
    values,
    smoothed,
    tolerance: float = 0.0,
    profile=None,
) -> List[Segment]:
    """
    Raw segments from the state machine.

    The first segment starts at the first sample and the last one ends at
    the last sample. Segment values are the unsmoothed values at the bound
    indices, so the deltas of consecutive segments telescope.

    Args:
        timestamps: Strictly ascending int timestamps (ms)
        values: Raw channel values
        smoothed: Smoothed channel values
        tolerance: Plateau tolerance
        profile: Window size per point; when given, transitions are
            snapped onto raw extrema (see refine_bounds)

    Returns:
        Contiguous list of Segment, in time order
    """
    timestamps = np.asarray(timestamps, dtype=np.int64).ravel()
    values = np.asarray(values, dtype=np.float64).ravel()
    n = len(values)

    if n == 0:
        return []
    if n == 1:
        return [Segment(int(timestamps[0]), int(timestamps[0]),
                        float(values[0]), float(values[0]), 0, 0)]

    runs = state_runs(step_directions(smoothed, tolerance))
    if profile is None:
        bounds = [runs[0].start_index] + [run.end_index for run in runs]
    else:
        bounds = refine_bounds(runs, values, profile, tolerance)

    return [
        Segment(
            start_time=int(timestamps[start]),
            end_time=int(timestamps[end]),
            start_value=float(values[start]),
            end_value=float(values[end]),
            start_index=start,
            end_index=end,
        )
        for start, end in zip(bounds, bounds[1:])
    ]
