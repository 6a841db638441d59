"""
Progress Tests - actual/planned progress and deviation classification.
"""

from datetime import date

import pytest

from projects.progress import (
    ProgressStatus,
    actual_progress,
    classify_deviation,
    compute_progress,
    planned_progress,
    status_position_progress,
)


START = date(2024, 1, 1)
END = date(2024, 1, 11)


class TestActualProgress:

    def test_no_tickets_is_zero(self):
        assert actual_progress(0, 0) == 0

    def test_share_of_completed(self):
        assert actual_progress(3, 4) == 75.0

    def test_rounded_to_one_decimal(self):
        assert actual_progress(1, 3) == 33.3


class TestPlannedProgress:

    def test_before_start_is_zero(self):
        assert planned_progress(START, END, date(2023, 12, 20)) == 0

    def test_on_start_day_is_zero(self):
        assert planned_progress(START, END, START) == 0

    def test_midway(self):
        assert planned_progress(START, END, date(2024, 1, 6)) == 50.0

    def test_on_and_after_end_is_full(self):
        assert planned_progress(START, END, END) == 100
        assert planned_progress(START, END, date(2024, 3, 1)) == 100


class TestClassifyDeviation:

    @pytest.mark.parametrize('deviation,expected', [
        (12.5, ProgressStatus.ON_TRACK),
        (0, ProgressStatus.ON_TRACK),
        (-0.1, ProgressStatus.RISK),
        (-10, ProgressStatus.RISK),
        (-10.1, ProgressStatus.DELAY),
        (-75, ProgressStatus.DELAY),
    ])
    def test_thresholds(self, deviation, expected):
        assert classify_deviation(deviation) == expected


class TestComputeProgress:

    def test_behind_plan_is_delayed(self):
        progress = compute_progress(
            total=10, completed=3, start=START, end=END, today=date(2024, 1, 6)
        )
        assert progress.actual == 30.0
        assert progress.planned == 50.0
        assert progress.deviation == -20.0
        assert progress.status == ProgressStatus.DELAY

    def test_slightly_behind_plan_is_at_risk(self):
        progress = compute_progress(
            total=20, completed=9, start=START, end=END, today=date(2024, 1, 6)
        )
        assert progress.deviation == -5.0
        assert progress.status == ProgressStatus.RISK

    def test_without_timeline_plan_matches_actual(self):
        progress = compute_progress(total=4, completed=1, start=None, end=END, today=START)
        assert progress.planned == progress.actual == 25.0
        assert progress.deviation == 0
        assert progress.status == ProgressStatus.ON_TRACK

    def test_as_dict(self):
        progress = compute_progress(total=0, completed=0, start=START, end=END, today=START)
        assert progress.as_dict() == {
            'actual': 0,
            'planned': 0,
            'deviation': 0,
            'status': ProgressStatus.ON_TRACK,
        }


class TestStatusPositionProgress:

    def test_first_and_last_of_four(self):
        assert status_position_progress(0, 4) == 25
        assert status_position_progress(3, 4) == 100

    def test_rounds_to_whole_percent(self):
        assert status_position_progress(1, 3) == 67

    def test_unknown_position_or_empty_workflow(self):
        assert status_position_progress(None, 4) == 0
        assert status_position_progress(0, 0) == 0
        assert status_position_progress(-1, 4) == 0
