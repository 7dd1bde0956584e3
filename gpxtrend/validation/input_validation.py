"""
Input Data Validation

Validates track points (and track frames read from disk) before
segmentation.

PRINCIPLE: "Segments are cut on time; time must move forward"

Usage:
    from gpxtrend.validation import validate_entities, validate_track_frame

    report = validate_entities(entities, primary_index=0)
    report.raise_if_invalid()
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import polars as pl


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, errors: List[str], warnings: List[str] = None):
        self.errors = errors
        self.warnings = warnings or []

        message = "Input validation failed:\n" + "\n".join(
            f"  ERROR: {e}" for e in errors
        )
        if warnings:
            message += "\n" + "\n".join(f"  WARNING: {w}" for w in warnings)

        super().__init__(message)


@dataclass
class InputValidationReport:
    """Report from input validation."""

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    total_entities: int = 0
    n_measures: int = 0
    primary_index: Optional[int] = None
    constant_channel: bool = False

    def error(self, message: str):
        self.valid = False
        self.errors.append(message)

    def warn(self, message: str):
        self.warnings.append(message)

    def raise_if_invalid(self):
        if not self.valid:
            raise ValidationError(self.errors, self.warnings)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            "=" * 60,
            "INPUT VALIDATION REPORT",
            "=" * 60,
            "",
            f"Track points: {self.total_entities:,}",
            f"Measures per point: {self.n_measures}",
        ]
        if self.primary_index is not None:
            lines.append(f"Primary measure index: {self.primary_index}")
        if self.constant_channel:
            lines.append("Primary channel is CONSTANT")
        lines.append("")

        if self.errors:
            lines.append("ERRORS:")
            for e in self.errors:
                lines.append(f"  - {e}")
            lines.append("")

        if self.warnings:
            lines.append("WARNINGS:")
            for w in self.warnings:
                lines.append(f"  - {w}")
            lines.append("")

        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Status: {status}")
        lines.append("=" * 60)

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to serializable dict."""
        return {
            'valid': self.valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'total_entities': self.total_entities,
            'n_measures': self.n_measures,
            'primary_index': self.primary_index,
            'constant_channel': self.constant_channel,
        }


def non_ascending_positions(timestamps) -> List[int]:
    """Positions i where timestamps[i] <= timestamps[i - 1]."""
    timestamps = np.asarray(timestamps, dtype=np.int64).ravel()
    if len(timestamps) < 2:
        return []
    return (np.flatnonzero(np.diff(timestamps) <= 0) + 1).tolist()


def check_ascending(timestamps) -> None:
    """
    Raise ValidationError unless timestamps are strictly ascending.
    """
    bad = non_ascending_positions(timestamps)
    if bad:
        shown = ", ".join(str(i) for i in bad[:10])
        more = f" (+{len(bad) - 10} more)" if len(bad) > 10 else ""
        raise ValidationError([
            f"Timestamps must be strictly ascending; violated at positions {shown}{more}"
        ])


def validate_entities(entities: Sequence, primary_index: Optional[int] = None) -> InputValidationReport:
    """
    Validate a track point sequence.

    Checks:
        - timestamps strictly ascending (error)
        - every point carries the same number of measures (warning)
        - primary_index within range (error)
        - non-finite primary values (error)
        - constant primary channel (flag only)

    Returns:
        InputValidationReport
    """
    report = InputValidationReport(total_entities=len(entities), primary_index=primary_index)
    if not entities:
        report.warn("Track is empty")
        return report

    timestamps = [e.timestamp_millis for e in entities]
    bad = non_ascending_positions(timestamps)
    if bad:
        report.error(
            f"Timestamps not strictly ascending at {len(bad)} position(s), first at {bad[0]}"
        )

    measure_counts = {len(e.measures) for e in entities}
    report.n_measures = min(measure_counts)
    if len(measure_counts) > 1:
        report.warn(f"Measure counts differ across points: {sorted(measure_counts)}")

    if primary_index is not None:
        if primary_index < 0 or primary_index >= report.n_measures:
            report.error(
                f"Primary index {primary_index} out of range for {report.n_measures} measures"
            )
        else:
            values = np.array([e.measures[primary_index].value for e in entities], dtype=np.float64)
            n_bad = int((~np.isfinite(values)).sum())
            if n_bad:
                report.error(f"{n_bad} non-finite value(s) in primary channel")
            elif np.ptp(values) == 0:
                report.constant_channel = True

    return report


def validate_track_frame(
    df: pl.DataFrame,
    channel_columns: Sequence[str],
    timestamp_column: str = 'timestamp_millis',
) -> InputValidationReport:
    """
    Validate a track DataFrame before it is turned into entities.

    Checks required columns exist, have no nulls, and that timestamps are
    strictly ascending.
    """
    report = InputValidationReport(total_entities=df.height, n_measures=len(channel_columns))

    required = [timestamp_column, *channel_columns]
    missing = [c for c in required if c not in df.columns]
    if missing:
        report.error(f"Missing columns: {missing}")
        return report

    for col in required:
        n_null = df[col].null_count()
        if n_null:
            report.error(f"Column '{col}' has {n_null} null value(s)")

    if report.valid:
        bad = non_ascending_positions(df[timestamp_column].to_numpy())
        if bad:
            report.error(
                f"'{timestamp_column}' not strictly ascending at {len(bad)} position(s), "
                f"first at {bad[0]}"
            )

    if df.height == 0:
        report.warn("Track frame has no rows")

    return report
