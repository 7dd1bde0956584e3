"""
Primitive Series Extractor.

Projects track entities onto one measurement channel, and drops samples
whose sensor accuracy is too poor to take part in smoothing.
"""

from typing import List, Optional, Sequence

import numpy as np

from gpxtrend.core.entities import DataEntity, PrimitiveSample


def extract_primitives(
    entities: Sequence[DataEntity],
    primary_index: int,
) -> List[PrimitiveSample]:
    """
    Build the (timestamp, value, accuracy) sequence of one channel.

    Args:
        entities: Track points, ordered by timestamp
        primary_index: Zero-based measure index

    Returns:
        One PrimitiveSample per entity, same order

    Raises:
        IndexError: If primary_index is outside any entity's measures
    """
    samples = []
    for position, entity in enumerate(entities):
        n_measures = len(entity.measures)
        if primary_index < 0 or primary_index >= n_measures:
            raise IndexError(
                f"Primary measure index {primary_index} out of range for entity "
                f"at position {position} with {n_measures} measures"
            )
        measure = entity.measures[primary_index]
        samples.append(PrimitiveSample(
            timestamp_millis=int(entity.timestamp_millis),
            value=float(measure.value),
            accuracy=float(measure.accuracy),
        ))
    return samples


def accurate_mask(samples: Sequence[PrimitiveSample], max_sample_accuracy: Optional[float]) -> np.ndarray:
    """
    True for samples accurate enough to segment.

    Accuracy is an error radius: larger is worse. 0 means the sensor did
    not report one and the sample is kept. None disables the cutoff.
    """
    accuracy = np.fromiter((s.accuracy for s in samples), dtype=np.float64, count=len(samples))
    if max_sample_accuracy is None:
        return np.ones(len(samples), dtype=bool)
    return (accuracy <= 0) | (accuracy <= max_sample_accuracy)


def as_arrays(samples: Sequence[PrimitiveSample]):
    """Split samples into (timestamps int64, values float64) arrays."""
    timestamps = np.fromiter((s.timestamp_millis for s in samples), dtype=np.int64, count=len(samples))
    values = np.fromiter((s.value for s in samples), dtype=np.float64, count=len(samples))
    return timestamps, values
