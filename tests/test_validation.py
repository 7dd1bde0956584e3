"""
Tests for input validation.
"""

import numpy as np
import polars as pl
import pytest

from gpxtrend.core.entities import DataEntity, DataMeasure
from gpxtrend.validation import (
    ValidationError,
    check_ascending,
    non_ascending_positions,
    validate_entities,
    validate_track_frame,
)

from track_factory import build_track


class TestAscending:

    def test_positions(self):
        assert non_ascending_positions([0, 10, 10, 5, 20]) == [2, 3]
        assert non_ascending_positions([0]) == []

    def test_check_raises(self):
        with pytest.raises(ValidationError) as info:
            check_ascending([0, 2, 1])
        assert "position" in info.value.errors[0]

    def test_check_passes(self):
        check_ascending([0, 1, 2])


class TestValidateEntities:

    def test_valid(self):
        report = validate_entities(build_track(np.arange(10.0), np.arange(10.0)), 1)
        assert report.valid
        assert report.total_entities == 10
        assert report.n_measures == 2
        report.raise_if_invalid()

    def test_non_ascending(self):
        entities = (DataEntity(5, (DataMeasure(1.0),)), DataEntity(1, (DataMeasure(2.0),)))
        report = validate_entities(entities, 0)
        assert not report.valid
        with pytest.raises(ValidationError):
            report.raise_if_invalid()

    def test_index_out_of_range(self):
        report = validate_entities(build_track(np.arange(5.0)), 3)
        assert not report.valid
        assert "out of range" in report.errors[0]

    def test_non_finite(self):
        report = validate_entities(build_track([1.0, np.nan, 2.0]), 0)
        assert not report.valid

    def test_constant_flag(self):
        report = validate_entities(build_track(np.full(10, 2.0)), 0)
        assert report.valid
        assert report.constant_channel
        assert "CONSTANT" in report.summary()

    def test_empty_warns(self):
        report = validate_entities((), 0)
        assert report.valid
        assert report.warnings

    def test_to_dict(self):
        d = validate_entities(build_track(np.arange(3.0)), 0).to_dict()
        assert d['valid'] is True
        assert d['primary_index'] == 0


class TestValidateTrackFrame:

    def test_valid(self):
        df = pl.DataFrame({'timestamp_millis': [0, 1000, 2000], 'elevation': [1.0, 2.0, 3.0]})
        assert validate_track_frame(df, ['elevation']).valid

    def test_missing_column(self):
        df = pl.DataFrame({'timestamp_millis': [0, 1000]})
        report = validate_track_frame(df, ['elevation'])
        assert not report.valid
        assert "elevation" in report.errors[0]

    def test_nulls(self):
        df = pl.DataFrame({'timestamp_millis': [0, 1000], 'elevation': [1.0, None]})
        assert not validate_track_frame(df, ['elevation']).valid

    def test_duplicate_timestamps(self):
        df = pl.DataFrame({'timestamp_millis': [0, 0], 'elevation': [1.0, 2.0]})
        assert not validate_track_frame(df, ['elevation']).valid
