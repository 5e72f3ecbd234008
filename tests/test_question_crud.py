import uuid

import pytest

from untrivially.models.quiz_db.question_crud import (
    DeleteResult,
    create_answer,
    create_question,
    delete_answer,
    delete_question,
    unset_correct_answers,
    update_answer,
    update_question,
)
from untrivially.models.quiz_db.quiz_answer_db import Answer
from untrivially.models.quiz_db.quiz_crud import create_quiz
from untrivially.models.quiz_db.quiz_question_db import Question
from untrivially.schemas.quiz.quiz_base import (
    AnswerCreate,
    AnswerUpdate,
    QuestionCreate,
    QuestionUpdate,
    QuizCreate,
)


@pytest.fixture
def quiz(db, user):
    return create_quiz(
        db,
        QuizCreate(
            title="Capitals",
            questions=[
                {
                    "title": "Capital of France?",
                    "options": [{"text": "Paris"}, {"text": "London"}],
                    "correct_option_index": 0,
                },
                {
                    "title": "Capital of Japan?",
                    "options": [{"text": "Osaka"}, {"text": "Kyoto"}, {"text": "Tokyo"}],
                    "correct_option_index": 2,
                },
            ],
        ),
        user.id,
    )


@pytest.fixture
def france(quiz):
    return quiz.questions[0]


@pytest.fixture
def japan(quiz):
    return quiz.questions[1]


def stored_answers(db, question_id):
    db.expire_all()
    return db.query(Answer).filter(Answer.question_id == question_id).order_by(Answer.position).all()


def correct_texts(db, question_id):
    return [a.text for a in stored_answers(db, question_id) if a.is_correct]


def snapshot(db):
    db.expire_all()
    questions = sorted((q.id, q.title, q.image_url) for q in db.query(Question).all())
    answers = sorted((a.id, a.text, a.is_correct) for a in db.query(Answer).all())
    return questions, answers


class TestCreateQuestion:
    def test_ids_derive_from_quiz(self, db, user, quiz):
        payload = QuestionCreate(
            title="Capital of Italy?",
            answers=[{"text": "Rome", "is_correct": True}, {"text": "Milan", "is_correct": False}],
        )

        question = create_question(db, user.id, quiz.id, payload)

        assert question.id.startswith(f"{quiz.sub_id}-")
        assert question.quiz_id == quiz.id
        assert all(a.id.startswith(f"{question.id}-") for a in question.answers)
        assert [a.text for a in question.answers] == ["Rome", "Milan"]

    def test_only_first_claimed_correct_survives(self, db, user, quiz):
        payload = QuestionCreate(
            title="Pick one",
            answers=[
                {"text": "a", "is_correct": False},
                {"text": "b", "is_correct": True},
                {"text": "c", "is_correct": True},
            ],
        )

        question = create_question(db, user.id, quiz.id, payload)

        assert correct_texts(db, question.id) == ["b"]

    def test_appended_after_existing_questions(self, db, user, quiz):
        payload = QuestionCreate(
            title="Last",
            answers=[{"text": "x", "is_correct": True}, {"text": "y", "is_correct": False}],
        )

        question = create_question(db, user.id, quiz.id, payload)

        assert question.position == 2

    def test_non_owner_gets_none(self, db, other_user, quiz):
        before = snapshot(db)
        payload = QuestionCreate(
            title="Sneaky",
            answers=[{"text": "x", "is_correct": True}, {"text": "y", "is_correct": False}],
        )

        assert create_question(db, other_user.id, quiz.id, payload) is None
        assert snapshot(db) == before

    def test_missing_quiz_gets_none(self, db, user):
        payload = QuestionCreate(
            title="Orphan",
            answers=[{"text": "x", "is_correct": True}, {"text": "y", "is_correct": False}],
        )
        assert create_question(db, user.id, uuid.uuid4(), payload) is None


class TestUpdateQuestion:
    def test_updates_only_given_fields(self, db, user, quiz, france):
        question = update_question(
            db, user.id, quiz.id, france.id, QuestionUpdate(image_url="https://img.example.org/paris.png")
        )

        assert question.title == "Capital of France?"
        assert question.image_url == "https://img.example.org/paris.png"

    def test_explicit_null_clears_image(self, db, user, quiz, france):
        update_question(db, user.id, quiz.id, france.id, QuestionUpdate(image_url="https://img.example.org/p.png"))

        question = update_question(db, user.id, quiz.id, france.id, QuestionUpdate(image_url=None))

        assert question.image_url is None
        assert question.title == "Capital of France?"

    def test_non_owner_cannot_update(self, db, other_user, quiz, france):
        before = snapshot(db)

        assert update_question(db, other_user.id, quiz.id, france.id, QuestionUpdate(title="Hacked")) is None
        assert snapshot(db) == before

    def test_question_from_another_quiz(self, db, user, quiz):
        other_quiz = create_quiz(
            db,
            QuizCreate(
                title="Other",
                questions=[{"title": "Q", "options": [{"text": "a"}, {"text": "b"}], "correct_option_index": 0}],
            ),
            user.id,
        )

        result = update_question(db, user.id, quiz.id, other_quiz.questions[0].id, QuestionUpdate(title="x"))

        assert result is None


class TestDeleteQuestion:
    def test_owner_deletes_question_and_answers(self, db, user, quiz, japan):
        result = delete_question(db, user.id, quiz.id, japan.id)

        assert result == DeleteResult(count=1)
        assert stored_answers(db, japan.id) == []
        assert db.query(Question).count() == 1

    def test_unknown_question_counts_zero(self, db, user, quiz):
        assert delete_question(db, user.id, quiz.id, "NOPE-NOPE") == DeleteResult(count=0)

    def test_non_owner_gets_none(self, db, other_user, quiz, japan):
        before = snapshot(db)

        assert delete_question(db, other_user.id, quiz.id, japan.id) is None
        assert snapshot(db) == before


class TestCreateAnswer:
    def test_new_correct_answer_takes_over(self, db, user, quiz, france):
        answer = create_answer(db, user.id, quiz.id, france.id, AnswerCreate(text="Lyon", is_correct=True))

        assert answer.is_correct is True
        assert answer.id.startswith(f"{france.id}-")
        assert correct_texts(db, france.id) == ["Lyon"]

    def test_new_wrong_answer_keeps_existing_correct(self, db, user, quiz, france):
        create_answer(db, user.id, quiz.id, france.id, AnswerCreate(text="Berlin", is_correct=False))

        assert [a.text for a in stored_answers(db, france.id)] == ["Paris", "London", "Berlin"]
        assert correct_texts(db, france.id) == ["Paris"]

    def test_unknown_question(self, db, user, quiz):
        assert create_answer(db, user.id, quiz.id, "NOPE", AnswerCreate(text="x", is_correct=False)) is None

    def test_non_owner_gets_none(self, db, other_user, quiz, france):
        before = snapshot(db)

        assert create_answer(db, other_user.id, quiz.id, france.id, AnswerCreate(text="x", is_correct=True)) is None
        assert snapshot(db) == before


class TestUpdateAnswer:
    def test_marking_correct_unsets_others(self, db, user, quiz, japan):
        osaka = japan.answers[0]

        answer = update_answer(db, user.id, quiz.id, japan.id, osaka.id, AnswerUpdate(is_correct=True))

        assert answer.is_correct is True
        assert correct_texts(db, japan.id) == ["Osaka"]

    def test_text_only_update_leaves_flags(self, db, user, quiz, japan):
        kyoto = japan.answers[1]

        answer = update_answer(db, user.id, quiz.id, japan.id, kyoto.id, AnswerUpdate(text="Kyōto"))

        assert answer.text == "Kyōto"
        assert correct_texts(db, japan.id) == ["Tokyo"]

    def test_unmarking_correct_answer(self, db, user, quiz, japan):
        tokyo = japan.answers[2]

        update_answer(db, user.id, quiz.id, japan.id, tokyo.id, AnswerUpdate(is_correct=False))

        assert correct_texts(db, japan.id) == []

    def test_answer_from_another_question(self, db, user, quiz, france, japan):
        paris = france.answers[0]

        assert update_answer(db, user.id, quiz.id, japan.id, paris.id, AnswerUpdate(text="x")) is None

    def test_non_owner_gets_none(self, db, other_user, quiz, japan):
        before = snapshot(db)

        result = update_answer(db, other_user.id, quiz.id, japan.id, japan.answers[0].id, AnswerUpdate(is_correct=True))

        assert result is None
        assert snapshot(db) == before


class TestDeleteAnswer:
    def test_refuses_to_go_below_two_answers(self, db, user, quiz, france):
        result = delete_answer(db, user.id, quiz.id, france.id, france.answers[1].id)

        assert result == DeleteResult(count=0, error="A question must have at least two answers.")
        assert len(stored_answers(db, france.id)) == 2

    def test_deletes_when_more_than_two(self, db, user, quiz, japan):
        result = delete_answer(db, user.id, quiz.id, japan.id, japan.answers[0].id)

        assert result == DeleteResult(count=1)
        assert [a.text for a in stored_answers(db, japan.id)] == ["Kyoto", "Tokyo"]

    def test_unknown_answer_counts_zero(self, db, user, quiz, japan):
        assert delete_answer(db, user.id, quiz.id, japan.id, "NOPE") == DeleteResult(count=0)

    def test_non_owner_gets_none(self, db, other_user, quiz, japan):
        before = snapshot(db)

        assert delete_answer(db, other_user.id, quiz.id, japan.id, japan.answers[0].id) is None
        assert snapshot(db) == before


def test_unset_correct_answers_respects_exception(db, user, quiz, japan):
    tokyo = japan.answers[2]

    assert unset_correct_answers(db, japan.id, except_id=tokyo.id) == 0
    assert unset_correct_answers(db, japan.id) == 1
    db.commit()
    assert correct_texts(db, japan.id) == []
