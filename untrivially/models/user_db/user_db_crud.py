from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from untrivially.core.log import get_logger
from untrivially.models.user_db.user_db import User

log = get_logger(__name__)


def create_user(db: Session, email: str, name: str, avatar_url: Optional[str] = None) -> User:
    db_user = User(email=email, name=name, avatar_url=avatar_url)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    log.info("user created", extra={"user_id": str(db_user.id)})
    return db_user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: UUID) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_or_create_user(db: Session, email: str, name: str, avatar_url: Optional[str] = None) -> User:
    """Users are keyed by email; the first OAuth login creates the record."""
    user = get_user_by_email(db, email)
    if user:
        return user
    return create_user(db, email, name, avatar_url)
