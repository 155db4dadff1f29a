from sqlalchemy.orm import Session
from lesson_srs.models import User
from lesson_srs.schemas import UserCreate
from typing import Optional

def create_user(db: Session, user: UserCreate) -> User:
    """Create a new learner"""
    db_user = User(**user.model_dump())
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def get_user(db: Session, user_id: int) -> Optional[User]:
    """Get user by ID"""
    return db.get(User, user_id)

def delete_user(db: Session, user_id: int) -> bool:
    """Delete a learner; courses, attempts and review records cascade"""
    db_user = get_user(db, user_id)
    if not db_user:
        return False
    db.delete(db_user)
    db.commit()
    return True
