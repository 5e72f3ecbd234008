from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional


# Responses

class AnswerOut(BaseModel):
    id: str
    text: str
    image_url: Optional[str] = None
    is_correct: bool
    question_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuestionOut(BaseModel):
    id: str
    title: str
    image_url: Optional[str] = None
    quiz_id: UUID
    created_at: datetime
    updated_at: datetime
    answers: List[AnswerOut]

    model_config = ConfigDict(from_attributes=True)


class QuizOut(BaseModel):
    id: UUID
    sub_id: str
    title: str
    user_id: UUID
    created_at: datetime
    updated_at: datetime
    questions: List[QuestionOut]

    model_config = ConfigDict(from_attributes=True)


class QuizListResponse(BaseModel):
    quizzes: List[QuizOut]


class QuizResponse(BaseModel):
    quiz: QuizOut


class QuestionResponse(BaseModel):
    question: QuestionOut


class AnswerResponse(BaseModel):
    answer: AnswerOut


# Quiz authoring

class QuizOptionCreate(BaseModel):
    text: str
    image_url: Optional[str] = None


class QuizQuestionCreate(BaseModel):
    title: str
    image_url: Optional[str] = None
    options: List[QuizOptionCreate] = Field(min_length=2)
    correct_option_index: int = Field(ge=0)

    @model_validator(mode="after")
    def check_correct_option_index(self):
        if self.correct_option_index >= len(self.options):
            raise ValueError("Correct option index must be within the bounds of the options array")
        return self


class QuizCreate(BaseModel):
    title: str
    questions: List[QuizQuestionCreate]


class QuizUpdate(BaseModel):
    # questions and answers are edited through their own endpoints
    title: Optional[str] = None


# Question management

class QuestionAnswerCreate(BaseModel):
    text: str
    image_url: Optional[str] = None
    is_correct: bool


class QuestionCreate(BaseModel):
    title: str
    image_url: Optional[str] = None
    answers: List[QuestionAnswerCreate] = Field(min_length=2)


class QuestionUpdate(BaseModel):
    title: Optional[str] = None
    image_url: Optional[str] = None


# Answer management

class AnswerCreate(BaseModel):
    text: str
    image_url: Optional[str] = None
    is_correct: bool


class AnswerUpdate(BaseModel):
    text: Optional[str] = None
    image_url: Optional[str] = None
    is_correct: Optional[bool] = None
