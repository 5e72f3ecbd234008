from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from uuid import UUID
from untrivially.core.database import get_db
from untrivially.core.security import get_current_user
from untrivially.models.quiz_db.question_crud import (
    create_answer,
    create_question,
    delete_answer,
    delete_question,
    update_answer,
    update_question,
)
from untrivially.models.quiz_db.quiz_crud import create_quiz, delete_quiz, get_all_quizzes, get_quiz_by_id, update_quiz
from untrivially.models.user_db.user_db import User
from untrivially.schemas.quiz.quiz_base import (
    AnswerCreate,
    AnswerResponse,
    AnswerUpdate,
    QuestionCreate,
    QuestionResponse,
    QuestionUpdate,
    QuizCreate,
    QuizListResponse,
    QuizOut,
    QuizResponse,
    QuizUpdate,
)

quiz_router = APIRouter(prefix="/quizzes", tags=["Quiz"])

QUIZ_NOT_FOUND = "Quiz not found"
QUESTION_NOT_FOUND = "Quiz or Question not found or not owned by user"
ANSWER_NOT_FOUND = "Quiz, Question or Answer not found or not owned by user"


@quiz_router.get("", response_model=QuizListResponse)
def list_quizzes(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"quizzes": get_all_quizzes(db, current_user.id)}


@quiz_router.get("/{quiz_id}", response_model=QuizResponse)
def get_quiz(quiz_id: UUID, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    quiz = get_quiz_by_id(db, quiz_id)
    if not quiz:
        raise HTTPException(status_code=404, detail=QUIZ_NOT_FOUND)
    return {"quiz": quiz}


@quiz_router.post("", response_model=QuizOut, status_code=status.HTTP_201_CREATED)
def create_quiz_route(
    quiz_in: QuizCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return create_quiz(db, quiz_in, current_user.id)


@quiz_router.put("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_quiz_route(
    quiz_id: UUID,
    quiz_in: QuizUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if update_quiz(db, quiz_id, quiz_in, current_user.id) == 0:
        raise HTTPException(status_code=404, detail=QUIZ_NOT_FOUND)
    return None


@quiz_router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz_route(quiz_id: UUID, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if delete_quiz(db, quiz_id, current_user.id) == 0:
        raise HTTPException(status_code=404, detail=QUIZ_NOT_FOUND)
    return None


# --- Questions ---

@quiz_router.post(
    "/{quiz_id}/questions", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED
)
def create_question_route(
    quiz_id: UUID,
    question_in: QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    question = create_question(db, current_user.id, quiz_id, question_in)
    if not question:
        raise HTTPException(status_code=404, detail="Quiz not found or not owned by user")
    return {"question": question}


@quiz_router.patch("/{quiz_id}/questions/{question_id}", response_model=QuestionResponse)
def update_question_route(
    quiz_id: UUID,
    question_id: str,
    question_in: QuestionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    question = update_question(db, current_user.id, quiz_id, question_id, question_in)
    if not question:
        raise HTTPException(status_code=404, detail=QUESTION_NOT_FOUND)
    return {"question": question}


@quiz_router.delete("/{quiz_id}/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question_route(
    quiz_id: UUID,
    question_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = delete_question(db, current_user.id, quiz_id, question_id)
    if result is None or result.count == 0:
        raise HTTPException(status_code=404, detail=QUESTION_NOT_FOUND)
    return None


# --- Answers ---

@quiz_router.post(
    "/{quiz_id}/questions/{question_id}/answers",
    response_model=AnswerResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_answer_route(
    quiz_id: UUID,
    question_id: str,
    answer_in: AnswerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    answer = create_answer(db, current_user.id, quiz_id, question_id, answer_in)
    if not answer:
        raise HTTPException(status_code=404, detail=QUESTION_NOT_FOUND)
    return {"answer": answer}


@quiz_router.patch("/{quiz_id}/questions/{question_id}/answers/{answer_id}", response_model=AnswerResponse)
def update_answer_route(
    quiz_id: UUID,
    question_id: str,
    answer_id: str,
    answer_in: AnswerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    answer = update_answer(db, current_user.id, quiz_id, question_id, answer_id, answer_in)
    if not answer:
        raise HTTPException(status_code=404, detail=ANSWER_NOT_FOUND)
    return {"answer": answer}


@quiz_router.delete(
    "/{quiz_id}/questions/{question_id}/answers/{answer_id}", status_code=status.HTTP_204_NO_CONTENT
)
def delete_answer_route(
    quiz_id: UUID,
    question_id: str,
    answer_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = delete_answer(db, current_user.id, quiz_id, question_id, answer_id)
    if result is None:
        raise HTTPException(status_code=404, detail=ANSWER_NOT_FOUND)
    if result.error:
        raise HTTPException(status_code=400, detail=result.error)
    if result.count == 0:
        raise HTTPException(status_code=404, detail="Answer not found or not owned by user")
    return None
