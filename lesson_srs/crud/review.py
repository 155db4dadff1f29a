import threading
from contextlib import contextmanager
from datetime import timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from lesson_srs.analytics import aggregate_scores, calculate_study_streak
from lesson_srs.clock import Clock, SystemClock
from lesson_srs.config import get_settings
from lesson_srs.crud.quiz_attempt import get_attempt_timestamps, get_recent_scores
from lesson_srs.exceptions import ConcurrentUpdateError, InvalidReviewInput, NotFoundError
from lesson_srs.models import Course, Lesson, QuizAttempt, ReviewRecord, User
from lesson_srs.schemas import (
    AttemptSubmission,
    ReviewFilter,
    ReviewListItem,
    ReviewRecordSchema,
    ReviewStats,
    ReviewStatus,
    StatusCounts,
)
from lesson_srs.sm2 import DEFAULT_EASE_FACTOR, SM2Algorithm, round_half_up


class KeyedLocks:
    """One lock per key, dropped again once nobody holds or waits on it"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Tuple, list] = {}  # key -> [lock, users]

    @contextmanager
    def hold(self, key: Tuple):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)


review_locks = KeyedLocks()


def get_review(db: Session, user_id: int, lesson_id: int) -> Optional[ReviewRecord]:
    """Get the review record for a (user, lesson) pair"""
    return db.query(ReviewRecord).filter(
        ReviewRecord.user_id == user_id,
        ReviewRecord.lesson_id == lesson_id
    ).first()


def _load_for_update(db: Session, user_id: int, lesson_id: int) -> Optional[ReviewRecord]:
    stmt = (
        select(ReviewRecord)
        .where(ReviewRecord.user_id == user_id, ReviewRecord.lesson_id == lesson_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalars().first()


def _check_references(db: Session, submission: AttemptSubmission):
    if db.get(User, submission.user_id) is None:
        raise NotFoundError(f"User {submission.user_id} not found")
    if db.get(Lesson, submission.lesson_id) is None:
        raise NotFoundError(f"Lesson {submission.lesson_id} not found")


def _check_attempt(db: Session, submission: AttemptSubmission):
    attempt = db.get(QuizAttempt, submission.attempt_id)
    if attempt is None:
        raise NotFoundError(f"Quiz attempt {submission.attempt_id} not found")
    if attempt.user_id != submission.user_id or attempt.lesson_id != submission.lesson_id:
        raise InvalidReviewInput(
            f"Quiz attempt {attempt.id} belongs to user {attempt.user_id}, lesson {attempt.lesson_id}"
        )


def _is_duplicate_review(exc: IntegrityError) -> bool:
    """True when the insert lost to another writer on the (user, lesson) key"""
    message = str(exc.orig)
    return "uq_quiz_review_user_lesson" in message or (
        "UNIQUE constraint failed" in message and "quiz_reviews.user_id" in message
    )


def record_attempt(
    db: Session,
    submission: AttemptSubmission,
    clock: Optional[Clock] = None,
    window: Optional[int] = None
) -> ReviewRecord:
    """
    Apply a graded attempt to the (user, lesson) review record.

    Creates the record with seed values on the first attempt, then
    reschedules it, bumps review_count by one and recomputes average score
    and retention rate over the last `window` attempts (this one included).
    A new record therefore starts with retention_rate equal to its first
    score rather than 100. Replaying the attempt_id the record was last
    updated with returns the record unchanged.
    The whole read-modify-write commits atomically or not at all.

    Raises:
        InvalidReviewInput: score or stored state outside the engine's domain
        NotFoundError: user, lesson or referenced attempt does not exist
        ConcurrentUpdateError: another writer updated the record first
    """
    clock = clock or SystemClock()
    window = window or get_settings().retention_window
    today = clock.today()
    now = clock.now().astimezone(timezone.utc)
    key = (submission.user_id, submission.lesson_id)

    with review_locks.hold(key):
        try:
            review = _load_for_update(db, *key)
            if review is None:
                _check_references(db, submission)
                current_interval, review_count, ease_factor = 1, 0, DEFAULT_EASE_FACTOR
            elif submission.attempt_id is not None and review.last_attempt_id == submission.attempt_id:
                logger.debug(
                    "Attempt {} already applied to user {} lesson {}",
                    submission.attempt_id, submission.user_id, submission.lesson_id
                )
                db.commit()
                return review
            else:
                current_interval = review.current_interval
                review_count = review.review_count
                ease_factor = review.ease_factor

            if submission.attempt_id is not None:
                _check_attempt(db, submission)

            schedule = SM2Algorithm.calculate_next_review(
                submission.score,
                current_interval,
                review_count,
                ease_factor,
                today
            )

            history = get_recent_scores(
                db,
                submission.user_id,
                submission.lesson_id,
                limit=window - 1,
                exclude_attempt_id=submission.attempt_id
            )
            summary = aggregate_scores(history + [submission.score], window)

            if review is None:
                review = ReviewRecord(
                    user_id=submission.user_id,
                    lesson_id=submission.lesson_id,
                    created_at=now
                )
                db.add(review)

            review.last_attempt_id = submission.attempt_id
            review.next_review_date = schedule.next_review_date
            review.review_count = review_count + 1
            review.current_interval = schedule.interval
            review.ease_factor = schedule.ease_factor
            review.last_score = submission.score
            review.average_score = summary.average_score
            review.retention_rate = summary.retention_rate
            review.status = schedule.status.value
            review.updated_at = now

            db.commit()
        except (StaleDataError, IntegrityError) as exc:
            db.rollback()
            if isinstance(exc, IntegrityError) and not _is_duplicate_review(exc):
                raise
            logger.warning(
                "Lost concurrent update for user {} lesson {}: {}",
                submission.user_id, submission.lesson_id, exc.__class__.__name__
            )
            raise ConcurrentUpdateError(submission.user_id, submission.lesson_id) from exc
        except Exception:
            db.rollback()
            raise

    logger.info(
        "Review for user {} lesson {}: score={} count={} interval={}d next={} status={}",
        review.user_id, review.lesson_id, review.last_score, review.review_count,
        review.current_interval, review.next_review_date, review.status
    )
    return review


def _apply_filter(query, review_filter: ReviewFilter, today, upcoming_days: int):
    if review_filter == ReviewFilter.DUE:
        return query.where(ReviewRecord.next_review_date == today)
    if review_filter == ReviewFilter.OVERDUE:
        return query.where(ReviewRecord.next_review_date < today)
    if review_filter == ReviewFilter.UPCOMING:
        return query.where(
            ReviewRecord.next_review_date > today,
            ReviewRecord.next_review_date <= today + timedelta(days=upcoming_days)
        )
    return query


def list_reviews(
    db: Session,
    user_id: int,
    review_filter=ReviewFilter.ALL,
    clock: Optional[Clock] = None
) -> List[ReviewListItem]:
    """
    Review records for a user within a date window, joined with lesson and course.

    due: next review is today; overdue: before today; upcoming: within the
    next `upcoming_window_days` days after today; all: every record.
    Ordered by next review date, earliest first.
    """
    try:
        review_filter = ReviewFilter(review_filter)
    except ValueError as exc:
        raise InvalidReviewInput(f"Unknown review filter {review_filter!r}") from exc

    clock = clock or SystemClock()
    today = clock.today()

    stmt = (
        select(ReviewRecord, Lesson, Course)
        .join(Lesson, ReviewRecord.lesson_id == Lesson.id)
        .join(Course, Lesson.course_id == Course.id)
        .where(ReviewRecord.user_id == user_id)
    )
    stmt = _apply_filter(stmt, review_filter, today, get_settings().upcoming_window_days)
    stmt = stmt.order_by(ReviewRecord.next_review_date, ReviewRecord.id)

    return [
        ReviewListItem(
            **ReviewRecordSchema.model_validate(review).model_dump(),
            lesson_title=lesson.title,
            course_id=course.id,
            course_title=course.title
        )
        for review, lesson, course in db.execute(stmt).all()
    ]


def get_review_stats(db: Session, user_id: int, clock: Optional[Clock] = None) -> ReviewStats:
    """Dashboard summary: status counts, date windows, averages and study streak"""
    settings = get_settings()
    clock = clock or SystemClock()
    today = clock.today()
    week_end = today + timedelta(days=settings.upcoming_window_days)

    reviews = db.query(ReviewRecord).filter(ReviewRecord.user_id == user_id).all()

    counts = {status.value: 0 for status in ReviewStatus}
    for review in reviews:
        counts[review.status] += 1

    if reviews:
        avg_retention = round_half_up(Decimal(sum(r.retention_rate for r in reviews)) / len(reviews))
        avg_score = round_half_up(Decimal(sum(r.average_score for r in reviews)) / len(reviews))
    else:
        avg_retention, avg_score = 100, 0

    timestamps = get_attempt_timestamps(db, user_id, limit=settings.streak_history_limit)

    return ReviewStats(
        total=len(reviews),
        status_counts=StatusCounts(**counts),
        due_today=sum(1 for r in reviews if r.next_review_date == today),
        overdue=sum(1 for r in reviews if r.next_review_date < today),
        upcoming=sum(1 for r in reviews if today < r.next_review_date <= week_end),
        avg_retention=avg_retention,
        avg_score=avg_score,
        streak=calculate_study_streak(timestamps, today, clock.tz)
    )
