"""
gpxtrend: adaptive trend segmentation for sampled tracks.

Public API:
    from gpxtrend import compute, run
    boundaries = compute(entities, primary_index=0)
    run(track_path, manifest_path, output_dir)

Layers:
    gpxtrend.core        Engine: entities in, trend boundaries out (no file I/O)
    gpxtrend.io          Track / output I/O (manifest, reader, writer)
    gpxtrend.validation  Input validation (ascending timestamps, channel ranges)
    gpxtrend.cache       Fingerprint-checked result cache
    gpxtrend.run         Sequencer and CLI (python -m gpxtrend)
"""

from gpxtrend.core.segmenter import compute
from gpxtrend.run import run

__all__ = ["compute", "run"]
