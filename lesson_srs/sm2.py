from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from loguru import logger

from lesson_srs.exceptions import InvalidReviewInput
from lesson_srs.schemas import ReviewSchedule, ReviewStatus

MIN_EASE_FACTOR = 130
MAX_EASE_FACTOR = 300
DEFAULT_EASE_FACTOR = 250
MIN_INTERVAL = 1
MAX_INTERVAL = 180  # 6 months


def round_half_up(value) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, 6.5 -> 7)"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class SM2Algorithm:
    """
    SM-2 spaced repetition algorithm adapted to 0-100 quiz scores.
    Based on SuperMemo 2 algorithm by Piotr Wozniak.

    Ease factors are integers scaled by 100 (250 == EF 2.5).
    """

    @staticmethod
    def score_to_quality(score) -> int:
        """Convert a percentage score (0-100) to an SM-2 quality rating (0-5)"""
        if score >= 95:
            return 5  # Perfect
        if score >= 85:
            return 4  # Good
        if score >= 70:
            return 3  # Pass
        if score >= 60:
            return 2  # Hard
        if score >= 50:
            return 1  # Very hard
        return 0

    @staticmethod
    def update_ease(ease_factor: int, quality: int) -> int:
        """
        Apply the SM-2 easiness update.

        EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), computed on the
        decimal EF, scaled back by 100, rounded and clamped to [130, 300].
        """
        ef = ease_factor / 100
        new_ef = ef + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
        scaled = round_half_up(new_ef * 100)
        return max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, scaled))

    @staticmethod
    def classify_status(score, review_count: int) -> ReviewStatus:
        """
        Mastery status for an attempt.

        review_count is the count before this attempt is applied.
        """
        if review_count == 0:
            return ReviewStatus.NEW
        if score >= 95 and review_count >= 4:
            return ReviewStatus.MASTERED
        if score >= 85 and review_count >= 2:
            return ReviewStatus.REVIEWING
        return ReviewStatus.LEARNING

    @staticmethod
    def validate_inputs(score, current_interval: int, review_count: int, ease_factor: int):
        """Reject out-of-domain scheduler inputs instead of clamping them"""
        if score is None or not 0 <= score <= 100:
            raise InvalidReviewInput(f"score must be within 0-100, got {score!r}")
        if current_interval is None or current_interval < MIN_INTERVAL:
            raise InvalidReviewInput(f"current_interval must be >= 1, got {current_interval!r}")
        if review_count is None or review_count < 0:
            raise InvalidReviewInput(f"review_count must be >= 0, got {review_count!r}")
        if ease_factor is None or not MIN_EASE_FACTOR <= ease_factor <= MAX_EASE_FACTOR:
            raise InvalidReviewInput(
                f"ease_factor must be within {MIN_EASE_FACTOR}-{MAX_EASE_FACTOR}, got {ease_factor!r}"
            )

    @staticmethod
    def calculate_next_review(
        score,
        current_interval: int,
        review_count: int,
        ease_factor: int,
        today: date,
    ) -> ReviewSchedule:
        """
        Calculate the next review schedule from a quiz score.

        Args:
            score: Quiz score 0-100
            current_interval: Current interval in days (>= 1)
            review_count: Reviews applied so far, before this one
            ease_factor: Current ease factor x100 (130-300)
            today: Calendar day the attempt counts for

        Returns:
            ReviewSchedule with next date, interval, new ease factor and status
        """
        SM2Algorithm.validate_inputs(score, current_interval, review_count, ease_factor)

        quality = SM2Algorithm.score_to_quality(score)
        new_ease = SM2Algorithm.update_ease(ease_factor, quality)

        if quality < 3:
            # Failed recall - restart with short interval
            interval = 1
        elif review_count == 0:
            interval = 1
        elif review_count == 1:
            interval = 3
        else:
            interval = round_half_up(Decimal(current_interval * new_ease) / 100)

        interval = max(MIN_INTERVAL, min(interval, MAX_INTERVAL))

        schedule = ReviewSchedule(
            next_review_date=today + timedelta(days=interval),
            interval=interval,
            ease_factor=new_ease,
            status=SM2Algorithm.classify_status(score, review_count),
        )
        logger.debug(
            "score={} quality={} ease {}->{} interval {}->{} status={}",
            score, quality, ease_factor, new_ease, current_interval, interval, schedule.status.value,
        )
        return schedule

    @staticmethod
    def is_due_for_review(next_review_date: date, today: date) -> bool:
        """Check if a lesson is due (or overdue) for review"""
        return today >= next_review_date

    @staticmethod
    def get_days_overdue(next_review_date: date, today: date) -> int:
        """Calculate how many days overdue a review is"""
        if today < next_review_date:
            return 0
        return (today - next_review_date).days


def motivation_message(status, review_count: int, score) -> str:
    """Short encouragement line shown next to a review"""
    status = ReviewStatus(status)
    if status == ReviewStatus.MASTERED:
        return "Mastered! You've got this down!"
    if status == ReviewStatus.REVIEWING and score >= 90:
        return "Excellent! Almost mastered!"
    if status == ReviewStatus.REVIEWING:
        return "Keep it up! You're making progress!"
    if review_count == 0:
        return "New material - let's learn this!"
    if score >= 70:
        return "Good job! Keep reviewing!"
    return "Don't give up! Practice makes perfect!"
