"""
Tests for trend classification and the TrendType metadata.
"""

import pytest

from gpxtrend.core.entities import Segment, SegmentThresholds
from gpxtrend.core.trend import TrendType, classify, classify_delta


class TestClassifyDelta:

    def test_rise_at_threshold_is_up(self):
        assert classify_delta(5.0, 5.0) is TrendType.UP

    def test_fall_at_threshold_is_down(self):
        assert classify_delta(-5.0, 5.0) is TrendType.DOWN

    def test_below_threshold_is_constant(self):
        assert classify_delta(4.99, 5.0) is TrendType.CONSTANT
        assert classify_delta(-4.99, 5.0) is TrendType.CONSTANT

    def test_zero_delta_with_zero_threshold(self):
        """No change is never a trend, even when every change is significant."""
        assert classify_delta(0.0, 0.0) is TrendType.CONSTANT
        assert classify_delta(0.1, 0.0) is TrendType.UP


class TestClassifySegment:

    def test_filler_is_constant(self):
        seg = Segment(0, 10, 0.0, 100.0, filler=True)
        assert classify(seg, SegmentThresholds(1.0)) is TrendType.CONSTANT

    def test_uses_segment_delta(self):
        thresholds = SegmentThresholds(2.0)
        assert classify(Segment(0, 10, 1.0, 4.0), thresholds) is TrendType.UP
        assert classify(Segment(0, 10, 4.0, 1.0), thresholds) is TrendType.DOWN
        assert classify(Segment(0, 10, 4.0, 5.0), thresholds) is TrendType.CONSTANT


class TestTrendTypeMetadata:

    def test_labels_round_trip(self):
        for t in TrendType:
            assert TrendType.from_label(t.label) is t
        assert TrendType.from_label("UP") is TrendType.UP

    def test_unknown_label(self):
        with pytest.raises(ValueError):
            TrendType.from_label("sideways")

    def test_display_metadata(self):
        assert TrendType.UP.threshold == 20.0
        assert TrendType.CONSTANT.threshold == 5.0
        assert TrendType.CONSTANT.fill_alpha < TrendType.UP.fill_alpha == 255
        assert TrendType.UP.fill_color >> 24 == 0xFF
