"""
Manifest: parse manifest.yaml into run settings.

Layout:

    paths:
      track: track.parquet          # parquet or csv
      output_dir: output
    timestamp_column: timestamp_millis
    channels:
      - name: elevation
        unit: m
        column: elevation           # defaults to name
        accuracy_column: elevation_accuracy   # optional
    segment: [elevation]            # channels to segment; defaults to all
    n_jobs: 1
    segmentation:                   # overrides of core/segmentation.yaml
      threshold_multiplier: 0.2
"""

import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_TIMESTAMP_COLUMN = 'timestamp_millis'


@dataclass(frozen=True)
class ChannelSpec:
    """One measurement channel: display name, unit and source columns."""
    name: str
    unit: str = ""
    column: str = ""
    accuracy_column: Optional[str] = None

    @property
    def source_column(self) -> str:
        return self.column or self.name


def load_manifest(data_path: str) -> Dict[str, Any]:
    """
    Load manifest.yaml from a data directory.

    Tries:
        1. data_path/manifest.yaml
        2. data_path itself (if it's a .yaml file)
    """
    p = Path(data_path)

    if p.is_file() and p.suffix in ('.yaml', '.yml'):
        manifest_path = p
    else:
        manifest_path = p / 'manifest.yaml'

    if not manifest_path.exists():
        raise FileNotFoundError(f"No manifest.yaml in {data_path}")

    with open(manifest_path) as f:
        manifest = yaml.safe_load(f) or {}

    # Relative paths resolve against the manifest's directory
    manifest['_manifest_path'] = str(manifest_path)
    manifest['_data_dir'] = str(manifest_path.parent)

    return manifest


def get_track_path(manifest: Dict[str, Any]) -> str:
    """Absolute path to the track file."""
    rel = manifest.get('paths', {}).get('track', 'track.parquet')
    data_dir = Path(manifest.get('_data_dir', '.'))
    return str(data_dir / rel)


def get_output_dir(manifest: Dict[str, Any]) -> str:
    """Absolute path to the output directory (created if missing)."""
    out_rel = manifest.get('paths', {}).get('output_dir', 'output')
    data_dir = Path(manifest.get('_data_dir', '.'))
    out_path = data_dir / out_rel
    out_path.mkdir(parents=True, exist_ok=True)
    return str(out_path)


def get_timestamp_column(manifest: Dict[str, Any]) -> str:
    return manifest.get('timestamp_column', DEFAULT_TIMESTAMP_COLUMN)


def get_channels(manifest: Dict[str, Any]) -> List[ChannelSpec]:
    """Channel specs in manifest order; the order defines measure indices."""
    channels = []
    for entry in manifest.get('channels') or []:
        if isinstance(entry, str):
            channels.append(ChannelSpec(name=entry))
            continue
        if 'name' not in entry:
            raise ValueError(f"Channel entry without a name: {entry}")
        channels.append(ChannelSpec(
            name=str(entry['name']),
            unit=str(entry.get('unit', '')),
            column=str(entry.get('column', '')),
            accuracy_column=entry.get('accuracy_column'),
        ))
    return channels


def get_segment_channels(manifest: Dict[str, Any]) -> List[str]:
    """Names of the channels to segment; all channels when unspecified."""
    names = manifest.get('segment')
    if names is None:
        return [c.name for c in get_channels(manifest)]
    if isinstance(names, str):
        return [names]
    return [str(n) for n in names]


def get_segmentation_overrides(manifest: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return manifest.get('segmentation')
