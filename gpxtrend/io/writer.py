"""
Writer: all parquet writes go through here.

No other module should call df.write_parquet directly.
"""

import polars as pl
from pathlib import Path
from typing import Optional, Sequence

from gpxtrend.core.entities import TrendBoundaryDataEntity

BOUNDARY_SCHEMA = {
    'channel': pl.Utf8,
    'boundary_id': pl.Int32,
    'trend_type': pl.Utf8,
    'begin_timestamp': pl.Int64,
    'end_timestamp': pl.Int64,
    'delta_val': pl.Float64,
    'sum_cumulative_delta_val_included': pl.Float64,
    'n': pl.Int32,
    'sum_type_abs_delta_val': pl.Float64,
    'n_entities': pl.Int32,
    'filler': pl.Boolean,
}

OUTPUT_FILENAMES = {
    'trend_boundaries': 'trend_boundaries.parquet',
    'cumulative': 'cumulative.parquet',
}


def boundaries_to_frame(channel: str, boundaries: Sequence[TrendBoundaryDataEntity]) -> pl.DataFrame:
    """One row per boundary."""
    rows = [
        {
            'channel': channel,
            'boundary_id': b.id,
            'trend_type': b.trend_type.label,
            'begin_timestamp': b.begin_timestamp,
            'end_timestamp': b.end_timestamp,
            'delta_val': b.trend_statistics.delta_val,
            'sum_cumulative_delta_val_included': b.trend_statistics.sum_cumulative_delta_val_included,
            'n': b.trend_statistics.n,
            'sum_type_abs_delta_val': b.trend_statistics.sum_type_abs_delta_val,
            'n_entities': len(b.entities),
            'filler': b.filler,
        }
        for b in boundaries
    ]
    if not rows:
        return pl.DataFrame(schema=BOUNDARY_SCHEMA)
    return pl.DataFrame(rows, schema=BOUNDARY_SCHEMA)


def _safe_write(df: pl.DataFrame, path: Path, verbose: bool = True) -> bool:
    """
    Guard against writing invalid parquet files.

    Returns True if a file was written, False if skipped.
    """
    if df is None:
        return False

    if len(df.columns) == 0:
        if verbose:
            print(f"  !! Skipped {path} (empty schema, 0 columns)")
        return False

    if df.height == 0:
        # Schema-only parquet: columns defined, 0 rows
        df.head(0).write_parquet(str(path))
        return True

    df.write_parquet(str(path))
    return True


def write_output(
    df: pl.DataFrame,
    output_dir: str,
    name: str,
    verbose: bool = True,
) -> Optional[Path]:
    """
    Write an output table by name.

    Args:
        df: DataFrame to write (None or empty-schema -> skip)
        output_dir: Output directory
        name: 'trend_boundaries' or 'cumulative'
        verbose: Print path on write

    Returns:
        Path to written file, or None if skipped
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / OUTPUT_FILENAMES.get(name, f"{name}.parquet")

    if not _safe_write(df, path, verbose=verbose):
        return None

    if verbose:
        print(f"  -> {path} ({len(df)} rows)")

    return path
