"""
Segmentation configuration.

The engine owns its tuning surface: kernel shape, threshold multiplier,
plateau tolerance and smoothing window requirements. Defaults live in
segmentation.yaml next to this file; manifests may override any of them
under a `segmentation:` key.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union
import math
import yaml


DEFAULT_CONFIG_PATH = Path(__file__).parent / "segmentation.yaml"

SCALINGS = ("linear", "sqrt", "log")


class KernelShape(str, Enum):
    """Smoothing kernel shapes. Only Gaussian is supported."""
    GAUSSIAN = "gaussian"


def parse_kernel_shape(shape: Union[str, KernelShape]) -> KernelShape:
    if isinstance(shape, KernelShape):
        return shape
    try:
        return KernelShape(str(shape).lower())
    except ValueError:
        raise ValueError(
            f"Unsupported kernel shape {shape!r}; supported: "
            f"{[s.value for s in KernelShape]}"
        ) from None


def _nearest_odd(x: float) -> int:
    return 2 * int(math.floor((x - 1) / 2 + 0.5)) + 1


@dataclass(frozen=True)
class WindowRequirements:
    """Smoothing window sizing limits."""
    min_window: int = 3
    max_window: int = 15
    variance_lag: int = 9
    scaling: str = "linear"  # linear, sqrt, log

    def __post_init__(self):
        if self.min_window < 3 or self.min_window % 2 == 0:
            raise ValueError(f"min_window must be odd and >= 3, got {self.min_window}")
        if self.max_window < self.min_window or self.max_window % 2 == 0:
            raise ValueError(
                f"max_window must be odd and >= min_window ({self.min_window}), "
                f"got {self.max_window}"
            )
        if self.variance_lag < 2:
            raise ValueError(f"variance_lag must be >= 2, got {self.variance_lag}")
        if self.scaling not in SCALINGS:
            raise ValueError(f"scaling must be one of {SCALINGS}, got {self.scaling!r}")

    def compute_window(self, ratio: float) -> int:
        """
        Window size for a local-to-global variability ratio.

        Args:
            ratio: Local variability relative to global dispersion, clipped to [0, 1]

        Returns:
            Odd window size in [min_window, max_window]
        """
        ratio = min(1.0, max(0.0, float(ratio)))

        if self.scaling == "sqrt":
            factor = math.sqrt(ratio)
        elif self.scaling == "log":
            factor = math.log2(1 + ratio)
        else:
            factor = ratio

        size = _nearest_odd(self.min_window + (self.max_window - self.min_window) * factor)
        return max(self.min_window, min(self.max_window, size))


@dataclass(frozen=True)
class SegmentationConfig:
    """
    Full tuning surface of one segmentation run.

    threshold_multiplier: k in min_significant_delta = std_dev * k
    max_value_accuracy: Plateau tolerance for the extrema detector
    max_sample_accuracy: Samples with a worse (larger) sensor accuracy are
        left out of smoothing; None keeps every sample
    """
    kernel_shape: KernelShape = KernelShape.GAUSSIAN
    threshold_multiplier: float = 0.2
    max_value_accuracy: float = 0.0
    max_sample_accuracy: Optional[float] = 50.0
    window: WindowRequirements = field(default_factory=WindowRequirements)

    def __post_init__(self):
        object.__setattr__(self, 'kernel_shape', parse_kernel_shape(self.kernel_shape))
        if not self.threshold_multiplier > 0:
            raise ValueError(
                f"threshold_multiplier must be > 0, got {self.threshold_multiplier}"
            )
        if self.max_value_accuracy < 0:
            raise ValueError(
                f"max_value_accuracy must be >= 0, got {self.max_value_accuracy}"
            )
        if self.max_sample_accuracy is not None and not self.max_sample_accuracy > 0:
            raise ValueError(
                f"max_sample_accuracy must be > 0 or None, got {self.max_sample_accuracy}"
            )

    def replace(self, **changes) -> "SegmentationConfig":
        raw = self.to_dict()
        window_changes = changes.pop('window', None) or {}
        raw.update(changes)
        raw['window'].update(window_changes)
        return config_from_dict(raw)

    def to_dict(self) -> Dict[str, Any]:
        raw = asdict(self)
        raw['kernel_shape'] = self.kernel_shape.value
        return raw


def _optional_float(value) -> Optional[float]:
    return None if value is None else float(value)


def config_from_dict(raw: Optional[Dict[str, Any]]) -> SegmentationConfig:
    """Build a config from a plain mapping; missing keys keep their defaults."""
    raw = dict(raw or {})
    window_raw = raw.pop('window', None) or {}

    unknown = set(raw) - {
        'kernel_shape', 'threshold_multiplier', 'max_value_accuracy', 'max_sample_accuracy',
    }
    if unknown:
        raise ValueError(f"Unknown segmentation settings: {sorted(unknown)}")

    window = WindowRequirements(
        min_window=int(window_raw.get('min_window', WindowRequirements.min_window)),
        max_window=int(window_raw.get('max_window', WindowRequirements.max_window)),
        variance_lag=int(window_raw.get('variance_lag', WindowRequirements.variance_lag)),
        scaling=window_raw.get('scaling', WindowRequirements.scaling),
    )

    return SegmentationConfig(
        kernel_shape=raw.get('kernel_shape', KernelShape.GAUSSIAN),
        threshold_multiplier=float(raw.get('threshold_multiplier', 0.2)),
        max_value_accuracy=float(raw.get('max_value_accuracy', 0.0)),
        max_sample_accuracy=_optional_float(raw.get('max_sample_accuracy', 50.0)),
        window=window,
    )


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SegmentationConfig:
    """
    Load segmentation config from YAML.

    Args:
        config_path: YAML file; defaults to the packaged segmentation.yaml
        overrides: Mapping merged over the file contents (e.g. a manifest's
                   `segmentation:` block)
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Segmentation config not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    raw = raw.get('segmentation', raw)
    if overrides:
        overrides = dict(overrides)
        window_overrides = overrides.pop('window', None) or {}
        raw = {**raw, **overrides}
        raw['window'] = {**(raw.get('window') or {}), **window_overrides}

    return config_from_dict(raw)
