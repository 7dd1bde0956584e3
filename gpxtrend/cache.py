"""
Trend boundary cache.

Caller-owned memo of segmentation results, keyed by channel index and
validated by a content fingerprint. A track edit that changes the
fingerprint makes the cached entry stale; stale entries are never served.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from gpxtrend.core.base import SegmentationConfig
from gpxtrend.core.entities import DataEntity, TrendBoundaryDataEntity
from gpxtrend.core.fingerprint import DEFAULT_SAMPLE_COUNT, compute_fingerprint
from gpxtrend.core.segmenter import compute

logger = logging.getLogger(__name__)


class TrendBoundaryCache:
    """Per-channel (fingerprint, boundaries) store, safe across threads."""

    def __init__(self, config: Optional[SegmentationConfig] = None,
                 sample_count: int = DEFAULT_SAMPLE_COUNT):
        self.config = config
        self.sample_count = sample_count
        self._entries: Dict[int, Tuple[str, List[TrendBoundaryDataEntity]]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _fingerprint(self, entities: Sequence[DataEntity], primary_index: int) -> str:
        return compute_fingerprint(entities, primary_index, self.sample_count)

    def get(
        self,
        entities: Sequence[DataEntity],
        primary_index: int = 0,
    ) -> Optional[List[TrendBoundaryDataEntity]]:
        """Cached boundaries for this channel, or None if absent or stale."""
        fingerprint = self._fingerprint(entities, primary_index)
        with self._lock:
            entry = self._entries.get(primary_index)
        if entry is None or entry[0] != fingerprint:
            return None
        return list(entry[1])

    def get_or_compute(
        self,
        entities: Sequence[DataEntity],
        primary_index: int = 0,
    ) -> List[TrendBoundaryDataEntity]:
        fingerprint = self._fingerprint(entities, primary_index)
        with self._lock:
            entry = self._entries.get(primary_index)
        if entry is not None and entry[0] == fingerprint:
            return list(entry[1])

        logger.debug("cache miss: channel %d (%s)", primary_index, fingerprint)
        boundaries = compute(entities, primary_index, self.config)
        with self._lock:
            self._entries[primary_index] = (fingerprint, boundaries)
        return list(boundaries)

    def clear(self, primary_index: Optional[int] = None) -> None:
        """Drop one channel, or everything when no index is given."""
        with self._lock:
            if primary_index is None:
                self._entries.clear()
            else:
                self._entries.pop(primary_index, None)
