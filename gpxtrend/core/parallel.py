"""
Parallel channel runner.

Segments several channels of the same track. Channels are independent, so
they run through joblib; a bad channel index is logged and dropped without
affecting the others.
"""

import logging
from typing import Dict, List, Optional, Sequence

from joblib import Parallel, delayed

from gpxtrend.core.base import SegmentationConfig
from gpxtrend.core.entities import DataEntity, TrendBoundaryDataEntity
from gpxtrend.core.segmenter import compute

logger = logging.getLogger(__name__)


def _process_channel(
    entities: Sequence[DataEntity],
    primary_index: int,
    config: Optional[SegmentationConfig],
) -> Optional[List[TrendBoundaryDataEntity]]:
    """Process one channel - designed for parallel execution."""
    try:
        return compute(entities, primary_index, config)
    except IndexError as e:
        logger.warning("Channel %d skipped: %s", primary_index, e)
        return None


def compute_channels(
    entities: Sequence[DataEntity],
    primary_indices: Sequence[int],
    config: Optional[SegmentationConfig] = None,
    n_jobs: int = 1,
) -> Dict[int, List[TrendBoundaryDataEntity]]:
    """
    Segment each requested channel.

    Args:
        entities: Track points ordered by timestamp
        primary_indices: Channel indices to segment
        config: Shared tuning surface
        n_jobs: joblib worker count (1 = run inline, -1 = all cores)

    Returns:
        {primary_index: boundaries}; channels with an out-of-range index are omitted
    """
    indices = list(dict.fromkeys(primary_indices))

    if n_jobs == 1 or len(indices) <= 1:
        results = [_process_channel(entities, i, config) for i in indices]
    else:
        results = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(_process_channel)(entities, i, config) for i in indices
        )

    return {i: r for i, r in zip(indices, results) if r is not None}
