from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from untrivially.core.log import get_logger
from untrivially.models.quiz_db.quiz_answer_db import Answer
from untrivially.models.quiz_db.quiz_crud import verify_ownership
from untrivially.models.quiz_db.quiz_db import Quiz
from untrivially.models.quiz_db.quiz_question_db import Question
from untrivially.schemas.quiz.quiz_base import AnswerCreate, AnswerUpdate, QuestionCreate, QuestionUpdate
from untrivially.services.answer_rules import (
    MIN_ANSWERS_ERROR,
    can_delete_answer,
    enforce_single_correct,
    first_correct_id,
)
from untrivially.services.short_id import generate_short_id

log = get_logger(__name__)


@dataclass
class DeleteResult:
    count: int
    error: Optional[str] = None


def _find_question(quiz: Quiz, question_id: str) -> Optional[Question]:
    return next((q for q in quiz.questions if q.id == question_id), None)


def _find_answer(question: Question, answer_id: str) -> Optional[Answer]:
    return next((a for a in question.answers if a.id == answer_id), None)


def _next_position(items) -> int:
    return max((item.position for item in items), default=-1) + 1


def unset_correct_answers(db: Session, question_id: str, except_id: Optional[str] = None) -> int:
    query = db.query(Answer).filter(Answer.question_id == question_id, Answer.is_correct.is_(True))
    if except_id is not None:
        query = query.filter(Answer.id != except_id)
    return query.update({Answer.is_correct: False}, synchronize_session="fetch")


# Questions

def create_question(db: Session, user_id: UUID, quiz_id: UUID, payload: QuestionCreate) -> Optional[Question]:
    quiz = verify_ownership(db, user_id, quiz_id)
    if quiz is None:
        return None

    question = Question(
        id=f"{quiz.sub_id}-{generate_short_id()}",
        title=payload.title,
        image_url=payload.image_url,
        position=_next_position(quiz.questions),
    )
    for position, answer_in in enumerate(payload.answers):
        question.answers.append(
            Answer(
                id=f"{question.id}-{generate_short_id()}",
                text=answer_in.text,
                image_url=answer_in.image_url,
                is_correct=answer_in.is_correct,
                position=position,
            )
        )

    # several answers may claim to be correct; the first one wins
    target_id = first_correct_id(question.answers)
    updates = enforce_single_correct(question.answers, target_id)
    for answer in question.answers:
        if answer.id in updates:
            answer.is_correct = updates[answer.id]

    quiz.questions.append(question)
    db.commit()
    db.refresh(question)
    return question


def update_question(
    db: Session, user_id: UUID, quiz_id: UUID, question_id: str, updates: QuestionUpdate
) -> Optional[Question]:
    quiz = verify_ownership(db, user_id, quiz_id)
    if quiz is None:
        return None

    question = _find_question(quiz, question_id)
    if question is None:
        return None

    for field, value in updates.model_dump(exclude_unset=True).items():
        if field == "title" and value is None:
            continue
        setattr(question, field, value)

    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, user_id: UUID, quiz_id: UUID, question_id: str) -> Optional[DeleteResult]:
    quiz = verify_ownership(db, user_id, quiz_id)
    if quiz is None:
        return None

    count = (
        db.query(Question)
        .filter(Question.id == question_id, Question.quiz_id == quiz.id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return DeleteResult(count=count)


# Answers

def create_answer(
    db: Session, user_id: UUID, quiz_id: UUID, question_id: str, payload: AnswerCreate
) -> Optional[Answer]:
    quiz = verify_ownership(db, user_id, quiz_id)
    if quiz is None:
        return None

    question = _find_question(quiz, question_id)
    if question is None:
        return None

    if payload.is_correct:
        unset_correct_answers(db, question.id)

    answer = Answer(
        id=f"{question.id}-{generate_short_id()}",
        text=payload.text,
        image_url=payload.image_url,
        is_correct=payload.is_correct,
        position=_next_position(question.answers),
    )
    question.answers.append(answer)
    db.commit()
    db.refresh(answer)
    return answer


def update_answer(
    db: Session, user_id: UUID, quiz_id: UUID, question_id: str, answer_id: str, updates: AnswerUpdate
) -> Optional[Answer]:
    quiz = verify_ownership(db, user_id, quiz_id)
    if quiz is None:
        return None

    question = _find_question(quiz, question_id)
    if question is None:
        return None

    answer = _find_answer(question, answer_id)
    if answer is None:
        return None

    values = updates.model_dump(exclude_unset=True)
    if values.get("is_correct"):
        unset_correct_answers(db, question.id, except_id=answer.id)

    for field, value in values.items():
        if field in ("text", "is_correct") and value is None:
            continue
        setattr(answer, field, value)

    db.commit()
    db.refresh(answer)
    return answer


def delete_answer(
    db: Session, user_id: UUID, quiz_id: UUID, question_id: str, answer_id: str
) -> Optional[DeleteResult]:
    quiz = verify_ownership(db, user_id, quiz_id)
    if quiz is None:
        return None

    question = _find_question(quiz, question_id)
    if question is None:
        return None

    if not can_delete_answer(len(question.answers)):
        log.info("answer delete rejected", extra={"question_id": question.id})
        return DeleteResult(count=0, error=MIN_ANSWERS_ERROR)

    count = (
        db.query(Answer)
        .filter(Answer.id == answer_id, Answer.question_id == question.id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return DeleteResult(count=count)
