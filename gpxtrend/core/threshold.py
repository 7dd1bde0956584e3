"""
Segment Threshold Filter.

Three passes over the raw detector output, each returning a new list:

1. merge_insignificant: segments whose net change is below
   min_significant_delta are folded into the following segment when
   that does not erase a real direction change:
     - consecutive insignificant segments coalesce into one run,
     - an insignificant wiggle between two significant segments of the
       same trend is absorbed into the trend,
     - adjacent significant segments of the same trend join.

2. drop_insignificant: an insignificant run bounded by a direction
   change or by the series ends is removed, leaving a hole.

3. fill_gaps: inserts filler segments into every hole between adjacent
   segments and between the series bounds and the first/last segment.
   Afterwards the list partitions [series_start, series_end] exactly,
   and every non-filler segment is significant.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from gpxtrend.core.entities import Segment, SegmentThresholds
from gpxtrend.core.trend import TrendType, classify_delta

logger = logging.getLogger(__name__)

# Safety cap on merge sweeps; each productive sweep removes a segment
MAX_MERGE_SWEEPS = 64


def compute_thresholds(std_dev: float, threshold_multiplier: float = 0.2) -> SegmentThresholds:
    """min_significant_delta = std_dev * k."""
    return SegmentThresholds(min_significant_delta=float(std_dev) * float(threshold_multiplier))


def join_segments(first: Segment, second: Segment) -> Segment:
    """Extend `second` back to the start of `first`."""
    return Segment(
        start_time=first.start_time,
        end_time=second.end_time,
        start_value=first.start_value,
        end_value=second.end_value,
        start_index=first.start_index,
        end_index=second.end_index,
    )


def _trend(segment: Segment, thresholds: SegmentThresholds) -> TrendType:
    return classify_delta(segment.delta, thresholds.min_significant_delta)


def _reduce_top(stack: List[Segment], thresholds: SegmentThresholds) -> None:
    """Apply merges at the top of the stack until none fits."""
    while len(stack) >= 2:
        before, last = stack[-2], stack[-1]
        before_trend = _trend(before, thresholds)
        last_trend = _trend(last, thresholds)

        if before_trend is TrendType.CONSTANT and last_trend is TrendType.CONSTANT:
            stack[-2:] = [join_segments(before, last)]
            continue

        if before_trend is not TrendType.CONSTANT and before_trend is last_trend:
            stack[-2:] = [join_segments(before, last)]
            continue

        if (
            len(stack) >= 3
            and before_trend is TrendType.CONSTANT
            and last_trend is not TrendType.CONSTANT
            and _trend(stack[-3], thresholds) is last_trend
        ):
            # Wiggle inside a trend
            stack[-2:] = [join_segments(before, last)]
            continue

        break


def merge_insignificant(
    segments: Sequence[Segment],
    thresholds: SegmentThresholds,
) -> List[Segment]:
    """
    Fold statistically insignificant segments into their neighbors.

    Args:
        segments: Contiguous segments in time order
        thresholds: Significance threshold

    Returns:
        New list; the input is left untouched
    """
    merged = list(segments)

    for _ in range(MAX_MERGE_SWEEPS):
        if len(merged) <= 1:
            break

        stack: List[Segment] = []
        for segment in merged:
            stack.append(segment)
            _reduce_top(stack, thresholds)

        if len(stack) == len(merged):
            break
        merged = stack

    logger.debug("merge_insignificant: %d -> %d segments", len(segments), len(merged))
    return merged


def drop_insignificant(
    segments: Sequence[Segment],
    thresholds: SegmentThresholds,
) -> List[Segment]:
    """Keep only significant segments; fill_gaps covers the holes."""
    kept = [s for s in segments if thresholds.is_significant(s)]
    logger.debug("drop_insignificant: dropped %d of %d segments",
                 len(segments) - len(kept), len(segments))
    return kept


def _value_at(time: int, timestamps: np.ndarray, values: np.ndarray) -> float:
    return float(np.interp(time, timestamps, values))


def _index_at(time: int, timestamps: np.ndarray) -> int:
    return int(np.searchsorted(timestamps, time, side='left'))


def _filler(
    start_time: int,
    end_time: int,
    timestamps: np.ndarray,
    values: np.ndarray,
    start_value: Optional[float] = None,
    end_value: Optional[float] = None,
) -> Segment:
    return Segment(
        start_time=int(start_time),
        end_time=int(end_time),
        start_value=_value_at(start_time, timestamps, values) if start_value is None else start_value,
        end_value=_value_at(end_time, timestamps, values) if end_value is None else end_value,
        start_index=_index_at(start_time, timestamps),
        end_index=_index_at(end_time, timestamps),
        filler=True,
    )


def coverage_gaps(
    segments: Sequence[Segment],
    series_start: int,
    series_end: int,
) -> List[Tuple[int, int]]:
    """
    Holes in the coverage of [series_start, series_end].

    Raises:
        ValueError: If segments overlap or leave the series range
    """
    gaps = []
    cursor = series_start
    for segment in segments:
        if segment.start_time < cursor:
            raise ValueError(
                f"Segment [{segment.start_time}, {segment.end_time}] overlaps "
                f"coverage ending at {cursor}"
            )
        if segment.start_time > cursor:
            gaps.append((cursor, segment.start_time))
        cursor = segment.end_time

    if cursor > series_end:
        raise ValueError(f"Segments end at {cursor}, after the series end {series_end}")
    if cursor < series_end:
        gaps.append((cursor, series_end))
    return gaps


def fill_gaps(
    segments: Sequence[Segment],
    timestamps,
    values,
) -> List[Segment]:
    """
    Insert filler segments so the result tiles the whole series.

    Fillers between two segments take their values from the neighbors'
    facing bounds; fillers touching the series ends look the value up in
    the series.

    Args:
        segments: Non-overlapping segments in time order
        timestamps: Strictly ascending series timestamps
        values: Series values

    Returns:
        Gapless list covering [timestamps[0], timestamps[-1]]
    """
    timestamps = np.asarray(timestamps, dtype=np.int64).ravel()
    values = np.asarray(values, dtype=np.float64).ravel()

    if len(timestamps) == 0:
        return []

    series_start, series_end = int(timestamps[0]), int(timestamps[-1])

    if not segments:
        return [_filler(series_start, series_end, timestamps, values)]

    gaps = coverage_gaps(segments, series_start, series_end)
    if not gaps:
        return list(segments)

    filled: List[Segment] = []
    pending = list(segments)

    if pending[0].start_time > series_start:
        filled.append(_filler(series_start, pending[0].start_time, timestamps, values,
                              end_value=pending[0].start_value))

    for i, segment in enumerate(pending):
        if i > 0:
            previous = pending[i - 1]
            if previous.end_time != segment.start_time:
                filled.append(_filler(previous.end_time, segment.start_time, timestamps, values,
                                      start_value=previous.end_value,
                                      end_value=segment.start_value))
        filled.append(segment)

    last = pending[-1]
    if last.end_time < series_end:
        filled.append(_filler(last.end_time, series_end, timestamps, values,
                              start_value=last.end_value))

    logger.debug("fill_gaps: inserted %d filler segments", len(filled) - len(pending))
    return filled
