from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from lesson_srs.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    """Learner account (owned by the host application)"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    courses = relationship("Course", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    quiz_attempts = relationship("QuizAttempt", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    reviews = relationship("ReviewRecord", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
