"""
gpxtrend Validation Module

Validates track input before segmentation.

Exports:
    - validate_entities: Check a DataEntity sequence
    - validate_track_frame: Check a track DataFrame read from disk
    - check_ascending: Fail fast on non-ascending timestamps
    - ValidationError: Raised when input validation fails
    - InputValidationReport: Collected errors, warnings and counts
"""

from .input_validation import (
    validate_entities,
    validate_track_frame,
    check_ascending,
    non_ascending_positions,
    ValidationError,
    InputValidationReport,
)

__all__ = [
    'validate_entities',
    'validate_track_frame',
    'check_ascending',
    'non_ascending_positions',
    'ValidationError',
    'InputValidationReport',
]
