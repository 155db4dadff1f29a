from sqlalchemy.orm import Session
from lesson_srs.exceptions import NotFoundError
from lesson_srs.models import Course, Lesson, User
from lesson_srs.schemas import CourseCreate, LessonCreate
from typing import Optional

def create_course(db: Session, course: CourseCreate) -> Course:
    """Create a course owned by a user"""
    if db.get(User, course.user_id) is None:
        raise NotFoundError(f"User {course.user_id} not found")
    db_course = Course(**course.model_dump())
    db.add(db_course)
    db.commit()
    db.refresh(db_course)
    return db_course

def create_lesson(db: Session, lesson: LessonCreate) -> Lesson:
    """Add a lesson to a course"""
    if db.get(Course, lesson.course_id) is None:
        raise NotFoundError(f"Course {lesson.course_id} not found")
    db_lesson = Lesson(**lesson.model_dump())
    db.add(db_lesson)
    db.commit()
    db.refresh(db_lesson)
    return db_lesson

def get_lesson(db: Session, lesson_id: int) -> Optional[Lesson]:
    """Get lesson by ID"""
    return db.get(Lesson, lesson_id)

def delete_lesson(db: Session, lesson_id: int) -> bool:
    """Delete a lesson; its attempts and review records cascade"""
    db_lesson = get_lesson(db, lesson_id)
    if not db_lesson:
        return False
    db.delete(db_lesson)
    db.commit()
    return True
