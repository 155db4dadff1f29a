from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from lesson_srs.database import Base
from lesson_srs.models.user import utcnow
from lesson_srs.schemas import ReviewSchedule, ReviewStatus
from lesson_srs.sm2 import DEFAULT_EASE_FACTOR


class ReviewRecord(Base):
    """SM-2 scheduling state per (user, lesson)"""
    __tablename__ = "quiz_reviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    last_attempt_id = Column(Integer, ForeignKey("quiz_attempts.id", ondelete="SET NULL"))

    # SM-2 fields
    next_review_date = Column(Date, nullable=False, index=True)
    review_count = Column(Integer, nullable=False, default=0)
    current_interval = Column(Integer, nullable=False, default=1)  # days
    ease_factor = Column(Integer, nullable=False, default=DEFAULT_EASE_FACTOR)  # EF x100

    # Rolling performance over the recent attempt window
    last_score = Column(Integer)
    average_score = Column(Integer, nullable=False, default=0)
    retention_rate = Column(Integer, nullable=False, default=100)
    status = Column(String, nullable=False, default=ReviewStatus.NEW.value)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="reviews")
    lesson = relationship("Lesson", back_populates="reviews")
    last_attempt = relationship("QuizAttempt")

    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_quiz_review_user_lesson"),
        CheckConstraint("current_interval BETWEEN 1 AND 180", name="ck_quiz_review_interval"),
        CheckConstraint("ease_factor BETWEEN 130 AND 300", name="ck_quiz_review_ease"),
        CheckConstraint("review_count >= 0", name="ck_quiz_review_count"),
    )
    __mapper_args__ = {"version_id_col": version}

    def to_schedule(self) -> ReviewSchedule:
        """Current schedule view of this record"""
        return ReviewSchedule(
            next_review_date=self.next_review_date,
            interval=self.current_interval,
            ease_factor=self.ease_factor,
            status=ReviewStatus(self.status),
        )
