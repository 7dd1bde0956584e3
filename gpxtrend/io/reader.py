"""
Reader: all track reads go through here.

No other module should call pl.read_parquet / pl.read_csv directly.
"""

import polars as pl
from pathlib import Path
from typing import Optional, Sequence, Tuple

from gpxtrend.core.entities import DataEntity, DataMeasure
from gpxtrend.io.manifest import DEFAULT_TIMESTAMP_COLUMN, ChannelSpec


def load_track(track_path: str, timestamp_column: str = DEFAULT_TIMESTAMP_COLUMN) -> pl.DataFrame:
    """Load a track from parquet or csv, sorted by timestamp."""
    p = Path(track_path)
    if not p.exists():
        raise FileNotFoundError(f"Track file not found: {track_path}")

    if p.suffix == '.csv':
        df = pl.read_csv(str(p))
    else:
        df = pl.read_parquet(str(p))

    if timestamp_column in df.columns:
        df = df.sort(timestamp_column)
    return df


def accuracy_column_for(df: pl.DataFrame, channel: ChannelSpec) -> Optional[str]:
    """Explicit accuracy column, else '<column>_accuracy' when present."""
    if channel.accuracy_column:
        return channel.accuracy_column
    implicit = f"{channel.source_column}_accuracy"
    return implicit if implicit in df.columns else None


def frame_to_entities(
    df: pl.DataFrame,
    channels: Sequence[ChannelSpec],
    timestamp_column: str = DEFAULT_TIMESTAMP_COLUMN,
) -> Tuple[DataEntity, ...]:
    """
    Turn a track frame into DataEntity records.

    Measure order follows `channels`, so the position of a channel in the
    list is its primary index.
    """
    timestamps = df[timestamp_column].cast(pl.Int64).to_list()
    value_cols = [df[c.source_column].cast(pl.Float64).to_list() for c in channels]

    accuracy_cols = []
    for c in channels:
        acc = accuracy_column_for(df, c)
        if acc is None:
            accuracy_cols.append([0.0] * df.height)
        else:
            accuracy_cols.append(df[acc].cast(pl.Float64).fill_null(0.0).to_list())

    entities = []
    for row, ts in enumerate(timestamps):
        measures = tuple(
            DataMeasure(
                value=value_cols[j][row],
                accuracy=accuracy_cols[j][row],
                name=c.name,
                unit=c.unit,
            )
            for j, c in enumerate(channels)
        )
        entities.append(DataEntity(timestamp_millis=int(ts), measures=measures, id=row))

    return tuple(entities)
