from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from untrivially.core.database import Base


class Question(Base):
    __tablename__ = "questions"

    # "{quiz.sub_id}-{short_id}"
    id = Column(String(64), primary_key=True, index=True)
    title = Column(String, nullable=False)
    image_url = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    quiz_id = Column(UUID(as_uuid=True), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    quiz = relationship("Quiz", back_populates="questions")
    answers = relationship(
        "Answer",
        back_populates="question",
        order_by="Answer.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
