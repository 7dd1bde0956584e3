"""
Segmentation records.

Everything here is immutable. The engine reads DataEntity sequences and is
the only producer of Segment and TrendBoundaryDataEntity values.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from gpxtrend.core.trend import TrendType


@dataclass(frozen=True)
class DataMeasure:
    """One named, unit-tagged measurement of a track point."""
    value: float
    accuracy: float = 0.0
    name: str = ""
    unit: str = ""


@dataclass(frozen=True)
class DataEntity:
    """A track point: timestamp plus parallel measurement channels."""
    timestamp_millis: int
    measures: Tuple[DataMeasure, ...]
    id: int = 0

    def value(self, primary_index: int) -> float:
        return self.measures[primary_index].value


@dataclass(frozen=True)
class PrimitiveSample:
    timestamp_millis: int
    value: float
    accuracy: float = 0.0


@dataclass(frozen=True)
class Segment:
    """
    Contiguous time span of the series between two boundary samples.

    start_index/end_index point into the sample sequence the segment was
    cut from. Gap fillers carry filler=True.
    """
    start_time: int
    end_time: int
    start_value: float
    end_value: float
    start_index: int = -1
    end_index: int = -1
    filler: bool = False

    def __post_init__(self):
        if self.end_time < self.start_time:
            raise ValueError(
                f"Segment ends before it starts: {self.start_time} > {self.end_time}"
            )

    @property
    def delta(self) -> float:
        return self.end_value - self.start_value

    @property
    def duration_millis(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class SegmentThresholds:
    min_significant_delta: float

    def is_significant(self, segment: Segment) -> bool:
        delta = segment.delta
        return delta != 0 and abs(delta) >= self.min_significant_delta


@dataclass(frozen=True)
class TrendStatistics:
    """
    Per-boundary statistics.

    sum_cumulative_delta_val_included: running signed delta over all
        boundaries up to and including this one.
    n: how many boundaries of this trend type were seen so far.
    sum_type_abs_delta_val: running absolute delta over boundaries of this
        trend type (total ascent for UP, total descent for DOWN).
    """
    trend_type: TrendType
    delta_val: float
    sum_cumulative_delta_val_included: float
    n: int = 1
    sum_type_abs_delta_val: float = 0.0


@dataclass(frozen=True)
class TrendBoundaryDataEntity:
    """filler=True: span between significant segments, always CONSTANT."""
    id: int
    trend_statistics: TrendStatistics
    begin_timestamp: int
    end_timestamp: int
    entities: Tuple[DataEntity, ...] = field(default_factory=tuple)
    filler: bool = False

    @property
    def trend_type(self) -> TrendType:
        return self.trend_statistics.trend_type

    def first_entity(self) -> Optional[DataEntity]:
        return self.entities[0] if self.entities else None

    def last_entity(self) -> Optional[DataEntity]:
        return self.entities[-1] if self.entities else None
