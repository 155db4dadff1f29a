from lesson_srs.crud.user import create_user, get_user, delete_user
from lesson_srs.crud.course import create_course, create_lesson, get_lesson, delete_lesson
from lesson_srs.crud.quiz_attempt import (
    record_quiz_attempt,
    get_recent_scores,
    get_attempt_timestamps
)
from lesson_srs.crud.review import (
    get_review,
    record_attempt,
    list_reviews,
    get_review_stats
)

__all__ = [
    "create_user",
    "get_user",
    "delete_user",
    "create_course",
    "create_lesson",
    "get_lesson",
    "delete_lesson",
    "record_quiz_attempt",
    "get_recent_scores",
    "get_attempt_timestamps",
    "get_review",
    "record_attempt",
    "list_reviews",
    "get_review_stats",
]
