"""
Tests for significance thresholds, merging and gap filling.
"""

import numpy as np
import pytest

from gpxtrend.core.entities import Segment, SegmentThresholds
from gpxtrend.core.threshold import (
    compute_thresholds,
    coverage_gaps,
    drop_insignificant,
    fill_gaps,
    join_segments,
    merge_insignificant,
)
from gpxtrend.core.trend import TrendType, classify


def _chain(*values, step=10):
    """Contiguous segments through the given values."""
    return [
        Segment(i * step, (i + 1) * step, a, b, i, i + 1)
        for i, (a, b) in enumerate(zip(values, values[1:]))
    ]


class TestThresholds:

    def test_std_times_k(self):
        assert compute_thresholds(10.0, 0.2).min_significant_delta == pytest.approx(2.0)

    def test_zero_dispersion(self):
        assert compute_thresholds(0.0).min_significant_delta == 0.0

    def test_is_significant(self):
        t = SegmentThresholds(1.0)
        assert t.is_significant(Segment(0, 1, 0.0, 1.0))
        assert not t.is_significant(Segment(0, 1, 0.0, 0.5))
        assert not SegmentThresholds(0.0).is_significant(Segment(0, 1, 2.0, 2.0))


class TestJoin:

    def test_spans_both(self):
        joined = join_segments(Segment(0, 10, 1.0, 2.0, 0, 1), Segment(10, 30, 2.0, 5.0, 1, 3))
        assert (joined.start_time, joined.end_time) == (0, 30)
        assert (joined.start_value, joined.end_value) == (1.0, 5.0)
        assert (joined.start_index, joined.end_index) == (0, 3)


class TestMergeInsignificant:

    def test_wiggle_inside_trend_absorbed(self):
        segments = _chain(0.0, 5.0, 4.8, 10.0)
        merged = merge_insignificant(segments, SegmentThresholds(1.0))
        assert len(merged) == 1
        assert merged[0].delta == pytest.approx(10.0)

    def test_adjacent_constants_coalesce(self):
        segments = _chain(0.0, 0.2, 0.1, 0.3)
        merged = merge_insignificant(segments, SegmentThresholds(1.0))
        assert len(merged) == 1
        assert classify(merged[0], SegmentThresholds(1.0)) is TrendType.CONSTANT

    def test_direction_change_survives(self):
        segments = _chain(0.0, 10.0, 0.0)
        merged = merge_insignificant(segments, SegmentThresholds(1.0))
        assert len(merged) == 2

    def test_flat_between_opposite_trends_survives(self):
        segments = _chain(0.0, 10.0, 10.2, 0.0)
        merged = merge_insignificant(segments, SegmentThresholds(1.0))
        trends = [classify(s, SegmentThresholds(1.0)) for s in merged]
        assert trends == [TrendType.UP, TrendType.CONSTANT, TrendType.DOWN]

    def test_same_trend_runs_join(self):
        segments = _chain(0.0, 5.0, 10.0, 15.0)
        merged = merge_insignificant(segments, SegmentThresholds(1.0))
        assert len(merged) == 1

    def test_input_untouched(self):
        segments = _chain(0.0, 0.1, 0.2)
        before = list(segments)
        merge_insignificant(segments, SegmentThresholds(1.0))
        assert segments == before

    def test_merged_stays_contiguous(self):
        rng = np.random.default_rng(11)
        values = np.concatenate([[0.0], rng.normal(size=40).cumsum()])
        merged = merge_insignificant(_chain(*values), SegmentThresholds(0.8))
        assert merged[0].start_time == 0
        assert merged[-1].end_time == 400
        for a, b in zip(merged, merged[1:]):
            assert a.end_time == b.start_time


class TestDropInsignificant:

    def test_only_significant_kept(self):
        segments = _chain(0.0, 0.5, 10.0, 10.1)
        kept = drop_insignificant(segments, SegmentThresholds(1.0))
        assert kept == [segments[1]]

    def test_zero_delta_dropped_at_zero_threshold(self):
        segments = _chain(1.0, 1.0, 2.0)
        assert drop_insignificant(segments, SegmentThresholds(0.0)) == [segments[1]]

    def test_flat_between_opposite_trends_becomes_filler(self):
        t = SegmentThresholds(1.0)
        ts = np.array([0, 10, 20, 30])
        y = np.array([0.0, 10.0, 10.2, 0.0])

        merged = merge_insignificant(_chain(*y), t)
        filled = fill_gaps(drop_insignificant(merged, t), ts, y)

        assert [classify(s, t) for s in filled] == [TrendType.UP, TrendType.CONSTANT, TrendType.DOWN]
        assert [s.filler for s in filled] == [False, True, False]
        assert (filled[1].start_value, filled[1].end_value) == (10.0, 10.2)
        for s in filled:
            assert s.filler or t.is_significant(s)
        assert sum(s.delta for s in filled) == pytest.approx(0.0)


class TestCoverageGaps:

    def test_finds_all_gaps(self):
        segments = [Segment(5, 10, 0, 0), Segment(20, 25, 0, 0)]
        assert coverage_gaps(segments, 0, 30) == [(0, 5), (10, 20), (25, 30)]

    def test_overlap_rejected(self):
        with pytest.raises(ValueError):
            coverage_gaps([Segment(0, 10, 0, 0), Segment(5, 20, 0, 0)], 0, 20)

    def test_overrun_rejected(self):
        with pytest.raises(ValueError):
            coverage_gaps([Segment(0, 40, 0, 0)], 0, 30)


class TestFillGaps:

    def test_middle_gap(self):
        ts = np.arange(0, 31)
        y = np.arange(0, 31, dtype=float)
        raw = [Segment(0, 10, 0.0, 10.0, 0, 10), Segment(20, 30, 20.0, 30.0, 20, 30)]

        filled = fill_gaps(raw, ts, y)

        assert len(filled) == 3
        filler = filled[1]
        assert filler.filler
        assert (filler.start_time, filler.end_time) == (10, 20)
        assert (filler.start_value, filler.end_value) == (10.0, 20.0)
        assert classify(filler, SegmentThresholds(1.0)) is TrendType.CONSTANT

    def test_leading_and_trailing(self):
        ts = np.arange(0, 31)
        y = np.arange(0, 31, dtype=float) * 2
        filled = fill_gaps([Segment(10, 20, 20.0, 40.0, 10, 20)], ts, y)

        assert [(s.start_time, s.end_time) for s in filled] == [(0, 10), (10, 20), (20, 30)]
        assert filled[0].start_value == 0.0
        assert filled[-1].end_value == 60.0
        assert filled[0].filler and filled[-1].filler

    def test_no_segments(self):
        filled = fill_gaps([], np.array([0, 10, 20]), np.array([1.0, 2.0, 3.0]))
        assert len(filled) == 1
        assert (filled[0].start_time, filled[0].end_time) == (0, 20)

    def test_already_gapless(self):
        raw = _chain(0.0, 1.0, 2.0)
        assert fill_gaps(raw, np.array([0, 10, 20]), np.array([0.0, 1.0, 2.0])) == raw
