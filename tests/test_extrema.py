"""
Tests for the RISING / FALLING / FLAT state machine.
"""

import numpy as np

from gpxtrend.core.extrema import (
    Direction,
    Extremum,
    ExtremaType,
    StateRun,
    detect_segments,
    find_extrema,
    refine_bounds,
    state_runs,
    step_directions,
)


class TestStepDirections:

    def test_basic(self):
        out = step_directions([0.0, 1.0, 1.0, 0.0])
        np.testing.assert_array_equal(out, [1, 0, -1])

    def test_tolerance_is_strict(self):
        out = step_directions([0.0, 0.5, 1.5, 1.0], tolerance=0.5)
        np.testing.assert_array_equal(out, [0, 1, 0])

    def test_short_input(self):
        assert len(step_directions([1.0])) == 0


class TestStateRuns:

    def test_runs_in_sample_space(self):
        runs = state_runs([1, 1, 0, -1, -1])
        assert runs == [
            StateRun(Direction.RISING, 0, 2),
            StateRun(Direction.FLAT, 2, 3),
            StateRun(Direction.FALLING, 3, 5),
        ]

    def test_empty(self):
        assert state_runs([]) == []


class TestFindExtrema:

    def test_peak_and_valley(self):
        y = [0.0, 1.0, 2.0, 1.0, 0.0, 1.0]
        assert find_extrema(y) == [
            Extremum(2, ExtremaType.MAX),
            Extremum(4, ExtremaType.MIN),
        ]

    def test_plateau_resolves_to_earliest_index(self):
        y = [0.0, 1.0, 2.0, 2.0, 2.0, 1.0]
        assert find_extrema(y) == [Extremum(2, ExtremaType.MAX)]

    def test_monotonic_has_none(self):
        assert find_extrema(np.arange(10.0)) == []


class TestDetectSegments:

    def test_one_segment_per_run(self):
        ts = np.arange(6) * 1000
        y = np.array([0.0, 1.0, 2.0, 2.0, 1.0, 0.0])
        segments = detect_segments(ts, y, y)

        assert [(s.start_index, s.end_index) for s in segments] == [(0, 2), (2, 3), (3, 5)]
        assert segments[0].start_time == 0
        assert segments[-1].end_time == 5000
        for a, b in zip(segments, segments[1:]):
            assert a.end_time == b.start_time

    def test_values_are_raw(self):
        ts = np.arange(5) * 1000
        raw = np.array([0.0, 3.0, 1.0, 4.0, 10.0])
        smoothed = np.arange(5.0)
        segments = detect_segments(ts, raw, smoothed)

        assert len(segments) == 1
        assert segments[0].start_value == 0.0
        assert segments[0].end_value == 10.0

    def test_single_sample(self):
        segments = detect_segments([500], [7.0], [7.0])
        assert len(segments) == 1
        assert segments[0].start_time == segments[0].end_time == 500
        assert segments[0].delta == 0.0

    def test_empty(self):
        assert detect_segments([], [], []) == []


class TestRefineBounds:

    def setup_method(self):
        # Raw step at index 5; the smoothed copy spreads it over 2..7
        self.values = np.array([0.0] * 5 + [10.0] * 5)
        self.smoothed = np.array([0.0, 0.0, 0.0, 1.0, 3.0, 7.0, 9.0, 10.0, 10.0, 10.0])
        self.profile = np.full(10, 7)

    def test_step_snaps_to_raw_jump(self):
        runs = state_runs(step_directions(self.smoothed))
        assert [(r.start_index, r.end_index) for r in runs] == [(0, 2), (2, 7), (7, 9)]
        assert refine_bounds(runs, self.values, self.profile) == [0, 4, 5, 9]

    def test_detect_segments_with_profile(self):
        ts = np.arange(10) * 1000
        unrefined = detect_segments(ts, self.values, self.smoothed)
        refined = detect_segments(ts, self.values, self.smoothed, profile=self.profile)

        assert [(s.start_index, s.end_index) for s in unrefined] == [(0, 2), (2, 7), (7, 9)]
        assert [(s.start_index, s.end_index) for s in refined] == [(0, 4), (4, 5), (5, 9)]
        assert (refined[1].start_time, refined[1].end_time) == (4000, 5000)
        assert refined[1].delta == 10.0
        assert sum(s.delta for s in refined) == 10.0

    def test_lagging_peak_moves_back(self):
        values = np.array([0.0, 1.0, 2.0, 5.0, 2.0, 1.0, 0.0])
        smoothed = np.array([0.0, 1.0, 2.0, 3.0, 4.0, 3.0, 2.0])
        runs = state_runs(step_directions(smoothed))

        assert refine_bounds(runs, values, np.full(7, 3)) == [0, 3, 6]

    def test_bounds_strictly_increasing(self):
        rng = np.random.default_rng(4)
        values = rng.normal(size=80).cumsum()
        smoothed = np.convolve(values, np.ones(3) / 3, mode='same')
        runs = state_runs(step_directions(smoothed))

        bounds = refine_bounds(runs, values, np.full(80, 15))
        assert bounds[0] == 0 and bounds[-1] == 79
        assert len(bounds) == len(runs) + 1
        assert all(a < b for a, b in zip(bounds, bounds[1:]))
