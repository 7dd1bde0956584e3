"""
Cumulative Statistics Mapper.

Per track point running sums of the signed value change, in two flavors:

    FROM_SEGMENT_START  resets to 0 at the first point of every boundary
    ALL_TIME            continues across boundaries from the first point

Marker tooltips read both ("+35 m this climb, +410 m so far"). Points
shared by two adjacent boundaries appear once per boundary.
"""

from enum import Enum
from typing import Sequence

import numpy as np
import polars as pl

from gpxtrend.core.entities import TrendBoundaryDataEntity


class CumulativeType(str, Enum):
    FROM_SEGMENT_START = "from_segment_start"
    ALL_TIME = "all_time"


CUMULATIVE_SCHEMA = {
    'boundary_id': pl.Int32,
    'trend_type': pl.Utf8,
    'timestamp_millis': pl.Int64,
    'value': pl.Float64,
    CumulativeType.FROM_SEGMENT_START.value: pl.Float64,
    CumulativeType.ALL_TIME.value: pl.Float64,
    'unit': pl.Utf8,
    'accuracy': pl.Float64,
}


def compute_cumulative(
    boundaries: Sequence[TrendBoundaryDataEntity],
    primary_index: int = 0,
) -> pl.DataFrame:
    """
    Build the cumulative statistics table.

    Args:
        boundaries: Output of segmenter.compute, in id order
        primary_index: Channel the boundaries were computed on

    Returns:
        DataFrame with CUMULATIVE_SCHEMA columns, one row per (boundary, point)
    """
    frames = []
    carried = 0.0

    for boundary in boundaries:
        points = boundary.entities
        if not points:
            continue

        measures = [p.measures[primary_index] for p in points]
        values = np.array([m.value for m in measures], dtype=np.float64)
        from_start = np.concatenate([[0.0], np.cumsum(np.diff(values))])
        all_time = carried + from_start
        carried = float(all_time[-1])

        frames.append(pl.DataFrame({
            'boundary_id': [boundary.id] * len(points),
            'trend_type': [boundary.trend_type.label] * len(points),
            'timestamp_millis': [p.timestamp_millis for p in points],
            'value': values,
            CumulativeType.FROM_SEGMENT_START.value: from_start,
            CumulativeType.ALL_TIME.value: all_time,
            'unit': [m.unit for m in measures],
            'accuracy': [float(m.accuracy) for m in measures],
        }, schema=CUMULATIVE_SCHEMA))

    if not frames:
        return pl.DataFrame(schema=CUMULATIVE_SCHEMA)
    return pl.concat(frames)
