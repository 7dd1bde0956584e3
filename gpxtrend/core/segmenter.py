"""
gpxtrend Segmentation Engine

Cuts one measurement channel of a track into a gapless, ordered list of
trend boundaries (UP / DOWN / CONSTANT).

Pipeline, once per call, no state kept between calls:
1. Extract (timestamp, value, accuracy) samples of the primary channel
2. Leave out samples beyond the accuracy cutoff
3. Population std dev -> significance threshold (std_dev * k)
4. Zero dispersion short cut: one CONSTANT filler over the whole range
5. Adaptive per-point window profile
6. Variable-window Gaussian smoothing
7. RISING / FALLING / FLAT state machine -> raw segments, bounds snapped
   onto raw extrema
8. Merge insignificant segments, then drop the ones left over
9. Fill gaps so segments tile [first timestamp, last timestamp]
10. Classify and assemble boundaries

Pure function of its inputs; safe to run concurrently for different
channels.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from gpxtrend.core._stats import population_std
from gpxtrend.core.base import SegmentationConfig
from gpxtrend.core.boundary import assemble
from gpxtrend.core.entities import (
    DataEntity,
    PrimitiveSample,
    Segment,
    SegmentThresholds,
    TrendBoundaryDataEntity,
)
from gpxtrend.core.extract import accurate_mask, as_arrays, extract_primitives
from gpxtrend.core.extrema import detect_segments
from gpxtrend.core.smoothing import smooth
from gpxtrend.core.threshold import (
    compute_thresholds,
    drop_insignificant,
    fill_gaps,
    merge_insignificant,
)
from gpxtrend.core.window import compute_window_profile
from gpxtrend.validation import check_ascending

logger = logging.getLogger(__name__)


def compute_segments(
    samples: Sequence[PrimitiveSample],
    config: Optional[SegmentationConfig] = None,
) -> Tuple[List[Segment], SegmentThresholds]:
    """
    Segment a primitive series.

    Samples beyond config.max_sample_accuracy take no part in the
    statistics or the smoothing, but the result still covers every
    sample's timestamp; spans they fall in end up in significant
    segments or in fillers.

    Args:
        samples: Strictly ascending (timestamp, value, accuracy) samples
        config: Tuning surface; defaults to SegmentationConfig()

    Returns:
        (gapless segments in time order, thresholds used); indices point
        into `samples`

    Raises:
        ValidationError: If timestamps are not strictly ascending
    """
    config = config or SegmentationConfig()
    all_timestamps, all_values = as_arrays(samples)

    if len(all_values) == 0:
        return [], SegmentThresholds(0.0)

    check_ascending(all_timestamps)

    positions = np.flatnonzero(accurate_mask(samples, config.max_sample_accuracy))
    timestamps, values = all_timestamps[positions], all_values[positions]
    n = len(values)

    std_dev = population_std(values)
    thresholds = compute_thresholds(std_dev, config.threshold_multiplier)

    logger.debug(
        "compute_segments: n=%d accurate=%d std_dev=%.6f min_significant_delta=%.6f",
        len(all_values), n, std_dev, thresholds.min_significant_delta,
    )

    if n <= 1 or not std_dev > 0:
        return fill_gaps([], all_timestamps, all_values), thresholds

    profile = compute_window_profile(values, std_dev, config.kernel_shape, config.window)
    smoothed = smooth(values, profile, config.kernel_shape)

    raw = detect_segments(timestamps, values, smoothed, config.max_value_accuracy, profile)
    merged = merge_insignificant(raw, thresholds)
    significant = [
        replace(s, start_index=int(positions[s.start_index]), end_index=int(positions[s.end_index]))
        for s in drop_insignificant(merged, thresholds)
    ]
    segments = fill_gaps(significant, all_timestamps, all_values)

    logger.debug(
        "compute_segments: windows %d..%d, raw=%d merged=%d significant=%d final=%d",
        int(profile.min()), int(profile.max()), len(raw), len(merged),
        len(significant), len(segments),
    )

    return segments, thresholds


def compute(
    entities: Sequence[DataEntity],
    primary_index: int = 0,
    config: Optional[SegmentationConfig] = None,
) -> List[TrendBoundaryDataEntity]:
    """
    Segment one channel of a track into trend boundaries.

    Args:
        entities: Track points ordered by timestamp
        primary_index: Zero-based measure index driving the segmentation
        config: Tuning surface; defaults to SegmentationConfig()

    Returns:
        Boundaries with ids 0..n-1, covering [first, last] timestamp

    Raises:
        IndexError: If primary_index is out of range
        ValidationError: If timestamps are not strictly ascending
    """
    samples = extract_primitives(entities, primary_index)
    segments, thresholds = compute_segments(samples, config)
    return assemble(entities, segments, thresholds)
