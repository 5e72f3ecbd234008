from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from untrivially.core.log import get_logger
from untrivially.models.quiz_db.quiz_answer_db import Answer
from untrivially.models.quiz_db.quiz_db import Quiz
from untrivially.models.quiz_db.quiz_question_db import Question
from untrivially.schemas.quiz.quiz_base import QuizCreate, QuizUpdate
from untrivially.services.short_id import generate_short_id

log = get_logger(__name__)


def _with_tree(query):
    return query.options(selectinload(Quiz.questions).selectinload(Question.answers))


def get_all_quizzes(db: Session, user_id: UUID) -> List[Quiz]:
    return _with_tree(db.query(Quiz)).filter(Quiz.user_id == user_id).order_by(Quiz.created_at).all()


def get_quiz_by_id(db: Session, quiz_id: UUID) -> Optional[Quiz]:
    return _with_tree(db.query(Quiz)).filter(Quiz.id == quiz_id).first()


def verify_ownership(db: Session, user_id: UUID, quiz_id: UUID) -> Optional[Quiz]:
    """
    Loads a quiz with its questions and answers and checks it belongs to `user_id`.

    Returns None both when the quiz does not exist and when someone else owns
    it, so callers cannot tell the two apart. The returned quiz is the
    verified scope for any question/answer mutation in the same request.
    """
    quiz = get_quiz_by_id(db, quiz_id)
    if quiz is None or quiz.user_id != user_id:
        return None
    return quiz


def build_quiz(payload: QuizCreate, user_id: UUID) -> Quiz:
    """
    Turns authoring input into an unsaved quiz tree with hierarchical ids.

    `correct_option_index` only picks which generated answer gets
    `is_correct`; it is not stored. An index outside the options leaves the
    question without a correct answer (the request schema rejects it before
    it gets here).
    """
    sub_id = generate_short_id()
    quiz = Quiz(sub_id=sub_id, title=payload.title, user_id=user_id)

    for question_position, question_in in enumerate(payload.questions):
        question_id = f"{sub_id}-{generate_short_id()}"
        answer_ids = [f"{question_id}-{generate_short_id()}" for _ in question_in.options]
        correct_option_id = (
            answer_ids[question_in.correct_option_index]
            if 0 <= question_in.correct_option_index < len(answer_ids)
            else None
        )

        question = Question(
            id=question_id,
            title=question_in.title,
            image_url=question_in.image_url,
            position=question_position,
        )
        for answer_position, (answer_id, option) in enumerate(zip(answer_ids, question_in.options)):
            question.answers.append(
                Answer(
                    id=answer_id,
                    text=option.text,
                    image_url=option.image_url,
                    is_correct=answer_id == correct_option_id,
                    position=answer_position,
                )
            )
        quiz.questions.append(question)

    return quiz


def create_quiz(db: Session, payload: QuizCreate, user_id: UUID) -> Quiz:
    quiz = build_quiz(payload, user_id)
    # the whole tree is flushed in one unit of work, committed once
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    log.info("quiz created", extra={"quiz_id": str(quiz.id), "questions": len(quiz.questions)})
    return quiz


def update_quiz(db: Session, quiz_id: UUID, updates: QuizUpdate, user_id: UUID) -> int:
    values = updates.model_dump(exclude_unset=True)
    # title is the only quiz-level field; an explicit null would violate NOT NULL
    values = {key: value for key, value in values.items() if value is not None}
    query = db.query(Quiz).filter(Quiz.id == quiz_id, Quiz.user_id == user_id)
    if not values:
        return query.count()

    count = query.update(values, synchronize_session=False)
    db.commit()
    return count


def delete_quiz(db: Session, quiz_id: UUID, user_id: UUID) -> int:
    # questions and answers go with it through ON DELETE CASCADE
    count = (
        db.query(Quiz)
        .filter(Quiz.id == quiz_id, Quiz.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return count
