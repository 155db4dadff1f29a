"""
Retention and streak statistics over attempt history.

Score sequences are ordered oldest first: index 0 is the oldest attempt and
the last element is the most recent one.
"""
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from lesson_srs.clock import to_local_date
from lesson_srs.schemas import RetentionSummary, StudyStreak
from lesson_srs.sm2 import round_half_up

DEFAULT_WINDOW = 10


def _window(scores: Sequence, window: int) -> List:
    scores = list(scores)
    return scores[-window:] if window else scores


def calculate_average_score(scores: Sequence, window: int = DEFAULT_WINDOW) -> int:
    """Arithmetic mean of the last `window` scores; 0 with no history"""
    recent = _window(scores, window)
    if not recent:
        return 0
    return round_half_up(Decimal(str(sum(recent))) / len(recent))


def calculate_retention_rate(scores: Sequence, window: int = DEFAULT_WINDOW) -> int:
    """
    Recency-weighted mean of the last `window` scores.

    Weights run 1..n from oldest to newest, so recent performance dominates.
    No history yields 100: there is no evidence of forgetting yet.
    """
    recent = _window(scores, window)
    if not recent:
        return 100

    weighted_sum = Decimal(0)
    total_weight = 0
    for position, score in enumerate(recent, start=1):
        weighted_sum += Decimal(str(score)) * position
        total_weight += position

    return round_half_up(weighted_sum / total_weight)


def aggregate_scores(scores: Sequence, window: int = DEFAULT_WINDOW) -> RetentionSummary:
    """Average score and retention rate for an oldest-first score history"""
    return RetentionSummary(
        average_score=calculate_average_score(scores, window),
        retention_rate=calculate_retention_rate(scores, window),
    )


def calculate_study_streak(
    timestamps: Iterable,
    today: date,
    tz: Optional[ZoneInfo] = None,
) -> StudyStreak:
    """
    Current and longest runs of consecutive study days.

    Args:
        timestamps: Activity instants (datetimes) or calendar days, any order
        today: Reference day for deciding whether the current run is alive
        tz: Calendar used to cut instants into days (UTC when omitted)

    The current run counts only if the latest active day is today or
    yesterday. The longest run spans the whole history.
    """
    tz = tz or ZoneInfo("UTC")
    days = sorted({to_local_date(ts, tz) for ts in timestamps}, reverse=True)
    if not days:
        return StudyStreak(current=0, longest=0)

    runs = []
    run = 1
    for newer, older in zip(days, days[1:]):
        if (newer - older).days == 1:
            run += 1
        else:
            runs.append(run)
            run = 1
    runs.append(run)

    # runs[0] is the run ending on the most recent active day
    current = runs[0] if (today - days[0]).days <= 1 else 0
    return StudyStreak(current=current, longest=max(runs))
