"""
gpxtrend core
=============

Segmentation engine. Entities in, boundaries out, no file I/O.

Structure:
    entities.py     - DataEntity, Segment, TrendBoundaryDataEntity records
    trend.py        - TrendType and delta classification
    base.py         - SegmentationConfig / WindowRequirements (+ segmentation.yaml)
    extract.py      - Primary channel -> (timestamp, value, accuracy) samples,
                      sample accuracy cutoff
    window.py       - Kernels and the adaptive window profile
    smoothing.py    - Variable-window smoothing
    extrema.py      - RISING / FALLING / FLAT state machine, raw segments
                      with bounds snapped onto raw extrema
    threshold.py    - Significance threshold, merging, dropping, gap filling
    boundary.py     - Segment -> TrendBoundaryDataEntity assembly
    segmenter.py    - The pipeline (compute, compute_segments)
    cumulative.py   - Per-point running sums as a DataFrame
    fingerprint.py  - Content digest for cache staleness checks
    parallel.py     - Several channels through joblib

Window Configuration:
    segmentation.yaml next to base.py holds the defaults:
    - threshold_multiplier: k in t = std_dev * k
    - max_value_accuracy: plateau tolerance of the state machine
    - max_sample_accuracy: samples with a worse sensor accuracy are left out
    - window.min_window / max_window: odd kernel size bounds
    - window.variance_lag: rolling std lag for local roughness
    - window.scaling: ratio -> size mapping (linear, sqrt, log)
"""

from gpxtrend.core.base import (
    KernelShape,
    SegmentationConfig,
    WindowRequirements,
    load_config,
)
from gpxtrend.core.entities import (
    DataEntity,
    DataMeasure,
    PrimitiveSample,
    Segment,
    SegmentThresholds,
    TrendBoundaryDataEntity,
    TrendStatistics,
)
from gpxtrend.core.trend import TrendType, classify, classify_delta

from gpxtrend.core.segmenter import compute, compute_segments
from gpxtrend.core.cumulative import CumulativeType, compute_cumulative
from gpxtrend.core.fingerprint import compute_fingerprint
from gpxtrend.core.parallel import compute_channels

__all__ = [
    'KernelShape',
    'SegmentationConfig',
    'WindowRequirements',
    'load_config',
    'DataEntity',
    'DataMeasure',
    'PrimitiveSample',
    'Segment',
    'SegmentThresholds',
    'TrendBoundaryDataEntity',
    'TrendStatistics',
    'TrendType',
    'classify',
    'classify_delta',
    'compute',
    'compute_segments',
    'CumulativeType',
    'compute_cumulative',
    'compute_fingerprint',
    'compute_channels',
]
