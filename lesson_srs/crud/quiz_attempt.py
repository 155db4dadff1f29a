from sqlalchemy.orm import Session
from datetime import datetime, timezone
from lesson_srs.exceptions import NotFoundError
from lesson_srs.models import Lesson, QuizAttempt, User
from lesson_srs.schemas import QuizAttemptCreate
from typing import List, Optional

def record_quiz_attempt(db: Session, attempt: QuizAttemptCreate, now: Optional[datetime] = None) -> QuizAttempt:
    """
    Store a graded quiz attempt.

    Timestamps are normalized to UTC before storage; naive values are taken as UTC.
    """
    if db.get(User, attempt.user_id) is None:
        raise NotFoundError(f"User {attempt.user_id} not found")
    if db.get(Lesson, attempt.lesson_id) is None:
        raise NotFoundError(f"Lesson {attempt.lesson_id} not found")

    attempted_at = attempt.attempted_at or now or datetime.now(timezone.utc)
    if attempted_at.tzinfo is None:
        attempted_at = attempted_at.replace(tzinfo=timezone.utc)

    db_attempt = QuizAttempt(
        **attempt.model_dump(exclude={"attempted_at"}),
        attempted_at=attempted_at.astimezone(timezone.utc),
    )
    db.add(db_attempt)
    db.commit()
    db.refresh(db_attempt)
    return db_attempt

def get_recent_scores(
    db: Session,
    user_id: int,
    lesson_id: int,
    limit: int = 10,
    exclude_attempt_id: Optional[int] = None
) -> List[int]:
    """
    Most recent `limit` scores for a (user, lesson), returned oldest first.

    exclude_attempt_id leaves out the attempt currently being applied.
    """
    if limit <= 0:
        return []
    query = db.query(QuizAttempt.score).filter(
        QuizAttempt.user_id == user_id,
        QuizAttempt.lesson_id == lesson_id
    )
    if exclude_attempt_id is not None:
        query = query.filter(QuizAttempt.id != exclude_attempt_id)
    rows = query.order_by(QuizAttempt.attempted_at.desc(), QuizAttempt.id.desc()).limit(limit).all()
    return [score for (score,) in reversed(rows)]

def get_attempt_timestamps(db: Session, user_id: int, limit: int = 100) -> List[datetime]:
    """Timestamps of a user's most recent attempts, newest first"""
    rows = db.query(QuizAttempt.attempted_at).filter(
        QuizAttempt.user_id == user_id
    ).order_by(QuizAttempt.attempted_at.desc()).limit(limit).all()
    return [attempted_at for (attempted_at,) in rows]
