from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from lesson_srs.database import Base
from lesson_srs.models.user import utcnow


class Course(Base):
    """Course grouping lessons"""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    topic = Column(String, nullable=False)
    level = Column(String, nullable=False, default="beginner")  # beginner, intermediate, advanced
    created_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="courses")
    lessons = relationship(
        "Lesson", back_populates="course", cascade="all, delete-orphan",
        passive_deletes=True, order_by="Lesson.order",
    )


class Lesson(Base):
    """Single lesson; the unit a learner is quizzed and reviewed on"""
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    course = relationship("Course", back_populates="lessons")
    quiz_attempts = relationship("QuizAttempt", back_populates="lesson", cascade="all, delete-orphan", passive_deletes=True)
    reviews = relationship("ReviewRecord", back_populates="lesson", cascade="all, delete-orphan", passive_deletes=True)
