from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Integer, Boolean, DateTime, Text
from sqlalchemy.orm import relationship
from untrivially.core.database import Base


class Answer(Base):
    __tablename__ = "answers"

    # "{question.id}-{short_id}"
    id = Column(String(64), primary_key=True, index=True)
    text = Column(String, nullable=False)
    image_url = Column(Text, nullable=True)
    is_correct = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)
    question_id = Column(String(64), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    question = relationship("Question", back_populates="answers")
