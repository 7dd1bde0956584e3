"""
Trend Boundary Assembler.

Turns the final segment list into TrendBoundaryDataEntity records: entity
slice, trend statistics and a sequential id per segment.
"""

import logging
from typing import Dict, List, Sequence

import numpy as np

from gpxtrend.core.entities import (
    DataEntity,
    Segment,
    SegmentThresholds,
    TrendBoundaryDataEntity,
    TrendStatistics,
)
from gpxtrend.core.trend import TrendType, classify

logger = logging.getLogger(__name__)


def slice_entities(
    entities: Sequence[DataEntity],
    timestamps: np.ndarray,
    segment: Segment,
) -> tuple:
    """Entities with timestamp in [segment.start_time, segment.end_time]."""
    lo = int(np.searchsorted(timestamps, segment.start_time, side='left'))
    hi = int(np.searchsorted(timestamps, segment.end_time, side='right'))
    return tuple(entities[lo:hi])


def assemble(
    entities: Sequence[DataEntity],
    segments: Sequence[Segment],
    thresholds: SegmentThresholds,
) -> List[TrendBoundaryDataEntity]:
    """
    Package segments into trend boundaries.

    Args:
        entities: Source track points, time ordered
        segments: Final gapless segments, time ordered
        thresholds: Significance threshold used for classification

    Returns:
        One boundary per segment, ids 0..n-1 in segment order
    """
    timestamps = np.fromiter(
        (e.timestamp_millis for e in entities), dtype=np.int64, count=len(entities)
    )

    boundaries = []
    running_sum = 0.0
    type_count: Dict[TrendType, int] = {t: 0 for t in TrendType}
    type_abs_sum: Dict[TrendType, float] = {t: 0.0 for t in TrendType}

    for boundary_id, segment in enumerate(segments):
        trend_type = classify(segment, thresholds)
        delta_val = segment.delta

        running_sum += delta_val
        type_count[trend_type] += 1
        type_abs_sum[trend_type] += abs(delta_val)

        statistics = TrendStatistics(
            trend_type=trend_type,
            delta_val=delta_val,
            sum_cumulative_delta_val_included=running_sum,
            n=type_count[trend_type],
            sum_type_abs_delta_val=type_abs_sum[trend_type],
        )

        boundary = TrendBoundaryDataEntity(
            id=boundary_id,
            trend_statistics=statistics,
            begin_timestamp=segment.start_time,
            end_timestamp=segment.end_time,
            entities=slice_entities(entities, timestamps, segment),
            filler=segment.filler,
        )
        boundaries.append(boundary)

        logger.debug(
            "%s boundary %d [%d, %d] delta=%.4f entities=%d",
            trend_type.name, boundary_id, segment.start_time, segment.end_time,
            delta_val, len(boundary.entities),
        )

    return boundaries
