"""
Content fingerprint of a track channel.

Cheap staleness check for cached segmentation results: digests the point
count, the channel index, the first/last timestamps and an evenly spaced
sample of (timestamp, value, accuracy) triples. Not a full content hash;
edits between sampled points can go unnoticed.
"""

import hashlib
import struct
from typing import Sequence

import numpy as np

from gpxtrend.core.entities import DataEntity

DEFAULT_SAMPLE_COUNT = 16


def sample_positions(n: int, sample_count: int = DEFAULT_SAMPLE_COUNT) -> np.ndarray:
    """Evenly spaced positions in [0, n - 1], always including both ends."""
    if n == 0:
        return np.zeros(0, dtype=np.int64)
    count = max(2, min(n, sample_count))
    return np.unique(np.linspace(0, n - 1, count).round().astype(np.int64))


def compute_fingerprint(
    entities: Sequence[DataEntity],
    primary_index: int = 0,
    sample_count: int = DEFAULT_SAMPLE_COUNT,
) -> str:
    """
    Fingerprint one channel of a track.

    Returns:
        Hex digest (32 chars)
    """
    digest = hashlib.blake2b(digest_size=16)
    n = len(entities)
    digest.update(struct.pack('<qq', n, primary_index))

    if n:
        digest.update(struct.pack(
            '<qq', int(entities[0].timestamp_millis), int(entities[-1].timestamp_millis)
        ))

    for pos in sample_positions(n, sample_count):
        entity = entities[int(pos)]
        measures = entity.measures
        if 0 <= primary_index < len(measures):
            value, accuracy = measures[primary_index].value, measures[primary_index].accuracy
        else:
            value, accuracy = float('nan'), float('nan')
        digest.update(struct.pack('<qdd', int(entity.timestamp_millis), float(value), float(accuracy)))

    return digest.hexdigest()
