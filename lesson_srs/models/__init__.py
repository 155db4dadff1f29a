from lesson_srs.models.user import User
from lesson_srs.models.course import Course, Lesson
from lesson_srs.models.quiz_attempt import QuizAttempt
from lesson_srs.models.review import ReviewRecord

__all__ = [
    "User",
    "Course",
    "Lesson",
    "QuizAttempt",
    "ReviewRecord",
]
