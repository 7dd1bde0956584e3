"""
gpxtrend Sequencer
==================

Reads a track, segments the requested channels and writes the results.
Pure orchestration, no computation here.

Output: 2 parquet files in the manifest's output directory
    trend_boundaries.parquet   one row per (channel, boundary)
    cumulative.parquet         one row per (channel, boundary, track point)

Usage:
    python -m gpxtrend data/ride
    python -m gpxtrend data/ride --channels elevation,speed
    python -m gpxtrend data/ride --jobs 4
"""

import argparse
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl

from gpxtrend.core.base import load_config
from gpxtrend.core.cumulative import compute_cumulative
from gpxtrend.core.parallel import compute_channels
from gpxtrend.io.manifest import (
    get_channels,
    get_output_dir,
    get_segment_channels,
    get_segmentation_overrides,
    get_timestamp_column,
    get_track_path,
    load_manifest,
)
from gpxtrend.io.reader import frame_to_entities, load_track
from gpxtrend.io.writer import boundaries_to_frame, write_output
from gpxtrend.validation import validate_entities, validate_track_frame


def run(
    track_path: str,
    manifest_path: str,
    output_dir: str,
    channels: Optional[List[str]] = None,
    n_jobs: Optional[int] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Segment a track.

    Args:
        track_path: Track file (parquet or csv)
        manifest_path: manifest.yaml describing channels and settings
        output_dir: Where output parquet files go
        channels: Channel names to segment (default: manifest `segment:` list)
        n_jobs: joblib workers (default: manifest `n_jobs`, else 1)
        verbose: Print progress

    Returns:
        {'boundaries': {channel: n_boundaries}, 'failed': {channel: reason}, 'paths': [...]}
    """
    manifest = load_manifest(manifest_path)
    specs = get_channels(manifest)
    timestamp_column = get_timestamp_column(manifest)
    config = load_config(overrides=get_segmentation_overrides(manifest))
    wanted = channels or get_segment_channels(manifest)
    n_jobs = n_jobs if n_jobs is not None else int(manifest.get('n_jobs', 1))

    if verbose:
        print("=" * 70)
        print("GPXTREND SEGMENTATION")
        print("=" * 70)
        print(f"Track:    {track_path}")
        print(f"Manifest: {manifest_path}")
        print(f"Output:   {output_dir}")
        print(f"Channels: {', '.join(wanted)}")
        print(f"k:        {config.threshold_multiplier}")
        print(f"Workers:  {n_jobs} ({'parallel' if n_jobs != 1 else 'sequential'})")
        print()

    df = load_track(track_path, timestamp_column)
    frame_report = validate_track_frame(df, [s.source_column for s in specs], timestamp_column)
    if verbose and frame_report.warnings:
        for w in frame_report.warnings:
            print(f"  Warning: {w}")
    frame_report.raise_if_invalid()

    entities = frame_to_entities(df, specs, timestamp_column)
    index_by_name = {s.name: i for i, s in enumerate(specs)}

    failed: Dict[str, str] = {}
    indices = []
    for name in wanted:
        index = index_by_name.get(name)
        if index is None:
            failed[name] = "not declared in manifest"
            continue
        report = validate_entities(entities, index)
        if not report.valid:
            failed[name] = "; ".join(report.errors)
            continue
        indices.append(index)

    start = time.time()
    results = compute_channels(entities, indices, config, n_jobs=n_jobs)
    elapsed = time.time() - start

    boundary_frames = []
    cumulative_frames = []
    counts: Dict[str, int] = {}

    for index in indices:
        name = specs[index].name
        if index not in results:
            failed[name] = "segmentation failed"
            continue
        boundaries = results[index]
        counts[name] = len(boundaries)
        boundary_frames.append(boundaries_to_frame(name, boundaries))
        cumulative_frames.append(
            compute_cumulative(boundaries, index)
            .with_columns(pl.lit(name).alias('channel'))
            .select(['channel', pl.exclude('channel')])
        )
        if verbose:
            print(f"--- {name} ---")
            print(f"  {len(boundaries)} boundaries")

    if verbose and failed:
        print(f"\n  WARNING: {len(failed)} channel(s) failed:")
        for name, reason in failed.items():
            print(f"    {name}: {reason}")
        print()

    paths = []
    if boundary_frames:
        for name, frames in (('trend_boundaries', boundary_frames), ('cumulative', cumulative_frames)):
            path = write_output(pl.concat(frames), output_dir, name, verbose=verbose)
            if path is not None:
                paths.append(str(path))

    if verbose:
        print()
        print(f"  Segmented {len(counts)} channel(s) in {elapsed:.2f}s")
        print("=" * 70)
        print("SEGMENTATION COMPLETE")
        print("=" * 70)

    return {'boundaries': counts, 'failed': failed, 'paths': paths}


def main():
    """CLI entry point. Resolves data_path into explicit paths and calls run()."""
    parser = argparse.ArgumentParser(
        description="gpxtrend: adaptive trend segmentation of track channels",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage:
  python -m gpxtrend ~/tracks/ride
  python -m gpxtrend ~/tracks/ride --channels elevation,speed
  python -m gpxtrend ~/tracks/ride --jobs 4 -v
"""
    )
    parser.add_argument('data_path', help='Path to data directory (must contain manifest.yaml)')
    parser.add_argument('--channels', help='Comma-separated channel names to segment')
    parser.add_argument('--jobs', type=int, help='Parallel workers (-1 = all cores)')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress output')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    data_path = Path(args.data_path)
    manifest_path = data_path / 'manifest.yaml'

    if not manifest_path.exists():
        raise FileNotFoundError(f"No manifest.yaml in {data_path}")

    manifest = load_manifest(str(manifest_path))

    run(
        track_path=get_track_path(manifest),
        manifest_path=str(manifest_path),
        output_dir=get_output_dir(manifest),
        channels=args.channels.split(',') if args.channels else None,
        n_jobs=args.jobs,
        verbose=not args.quiet,
    )


if __name__ == '__main__':
    main()
