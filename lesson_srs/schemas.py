from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewStatus(str, Enum):
    """Mastery state of a review record"""
    NEW = "new"
    LEARNING = "learning"
    REVIEWING = "reviewing"
    MASTERED = "mastered"


class ReviewFilter(str, Enum):
    """Date windows for listing reviews"""
    DUE = "due"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    ALL = "all"


class AttemptSubmission(BaseModel):
    """Graded quiz attempt reported by the quiz submission handler"""
    user_id: int
    lesson_id: int
    score: int = Field(ge=0, le=100)
    attempt_id: Optional[int] = None


class ReviewSchedule(BaseModel):
    """Outcome of one scheduling calculation"""
    next_review_date: date
    interval: int = Field(ge=1, le=180)
    ease_factor: int = Field(ge=130, le=300)
    status: ReviewStatus


class RetentionSummary(BaseModel):
    average_score: int = Field(ge=0, le=100)
    retention_rate: int = Field(ge=0, le=100)


class StudyStreak(BaseModel):
    current: int = Field(default=0, ge=0)
    longest: int = Field(default=0, ge=0)


class ReviewRecordSchema(BaseModel):
    """Schema for review record response"""
    id: int
    user_id: int
    lesson_id: int
    last_attempt_id: Optional[int] = None
    next_review_date: date
    review_count: int
    current_interval: int
    last_score: Optional[int] = None
    average_score: int
    retention_rate: int
    status: ReviewStatus
    ease_factor: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewListItem(ReviewRecordSchema):
    """Review record joined with its lesson and course for display"""
    lesson_title: str
    course_id: int
    course_title: str


class StatusCounts(BaseModel):
    new: int = 0
    learning: int = 0
    reviewing: int = 0
    mastered: int = 0


class ReviewStats(BaseModel):
    """Dashboard summary for one user"""
    total: int
    status_counts: StatusCounts
    due_today: int
    overdue: int
    upcoming: int
    avg_retention: int
    avg_score: int
    streak: StudyStreak


class UserCreate(BaseModel):
    """Schema for creating a learner"""
    name: str
    email: str


class CourseCreate(BaseModel):
    """Schema for creating a course"""
    user_id: int
    title: str
    topic: str
    level: str = "beginner"


class LessonCreate(BaseModel):
    """Schema for creating a lesson"""
    course_id: int
    title: str
    order: int = 0


class QuizAttemptCreate(BaseModel):
    """Schema for storing a graded quiz attempt"""
    user_id: int
    lesson_id: int
    score: int = Field(ge=0, le=100)
    correct_count: int = Field(default=0, ge=0)
    total_count: int = Field(default=0, ge=0)
    attempted_at: Optional[datetime] = None
