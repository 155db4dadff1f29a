"""Tests for retention aggregation and study streaks."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from lesson_srs.analytics import (
    aggregate_scores,
    calculate_average_score,
    calculate_retention_rate,
    calculate_study_streak,
)

TODAY = date(2025, 3, 10)


def days_ago(n, hour=12):
    day = TODAY - timedelta(days=n)
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


class TestRetention:

    def test_empty_history_defaults(self):
        summary = aggregate_scores([])
        assert summary.average_score == 0
        assert summary.retention_rate == 100

    def test_average_and_weighted_retention(self):
        summary = aggregate_scores([80, 90, 100])
        assert summary.average_score == 90
        # (80*1 + 90*2 + 100*3) / 6 = 93.33
        assert summary.retention_rate == 93

    def test_most_recent_score_weighs_most(self):
        recent_drop = calculate_retention_rate([100, 100, 40])
        early_drop = calculate_retention_rate([40, 100, 100])
        assert recent_drop == 70
        assert early_drop == 90
        assert calculate_average_score([100, 100, 40]) == calculate_average_score([40, 100, 100])

    def test_only_last_ten_scores_count(self):
        scores = [0, 0] + [100] * 10
        assert calculate_average_score(scores) == 100
        assert calculate_retention_rate(scores) == 100

    def test_custom_window(self):
        assert calculate_average_score([10, 50, 70], window=2) == 60

    def test_average_rounds_half_up(self):
        assert calculate_average_score([85, 86]) == 86

    def test_results_stay_in_range(self):
        for scores in ([0], [100], [0, 100, 0, 100], list(range(0, 101, 10))):
            summary = aggregate_scores(scores)
            assert 0 <= summary.average_score <= 100
            assert 0 <= summary.retention_rate <= 100


class TestStudyStreak:

    def test_no_activity(self):
        streak = calculate_study_streak([], TODAY)
        assert (streak.current, streak.longest) == (0, 0)

    def test_three_consecutive_days_ending_today(self):
        streak = calculate_study_streak([days_ago(0), days_ago(1), days_ago(2)], TODAY)
        assert streak.current == 3
        assert streak.longest == 3

    def test_run_ending_two_days_ago_is_broken(self):
        streak = calculate_study_streak([days_ago(2), days_ago(3), days_ago(4)], TODAY)
        assert streak.current == 0
        assert streak.longest >= 3

    def test_yesterday_keeps_streak_alive(self):
        streak = calculate_study_streak([days_ago(1)], TODAY)
        assert streak.current == 1

    def test_same_day_duplicates_collapse(self):
        timestamps = [days_ago(0, 8), days_ago(0, 20), days_ago(1, 9), days_ago(1, 10)]
        streak = calculate_study_streak(timestamps, TODAY)
        assert streak.current == 2
        assert streak.longest == 2

    def test_longest_run_found_in_history(self):
        timestamps = [days_ago(n) for n in (0, 1, 5, 6, 7, 8)]
        streak = calculate_study_streak(timestamps, TODAY)
        assert streak.current == 2
        assert streak.longest == 4

    def test_order_of_input_does_not_matter(self):
        timestamps = [days_ago(n) for n in (3, 0, 2, 1)]
        assert calculate_study_streak(timestamps, TODAY).current == 4

    def test_naive_timestamps_are_utc(self):
        streak = calculate_study_streak([datetime(2025, 3, 10, 23, 30)], TODAY)
        assert streak.current == 1

    def test_plain_dates_accepted(self):
        streak = calculate_study_streak([TODAY, TODAY - timedelta(days=1)], TODAY)
        assert streak.current == 2

    def test_day_boundaries_follow_timezone(self):
        timestamps = [
            datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc),
            datetime(2025, 3, 11, 2, 0, tzinfo=timezone.utc),  # 22:00 on the 10th in New York
        ]
        today = date(2025, 3, 11)
        assert calculate_study_streak(timestamps, today).current == 2
        assert calculate_study_streak(timestamps, today, ZoneInfo("America/New_York")).current == 1
