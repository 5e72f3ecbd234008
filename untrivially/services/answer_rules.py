from typing import Dict, Iterable, Optional

MIN_ANSWERS = 2
MIN_ANSWERS_ERROR = "A question must have at least two answers."


def enforce_single_correct(answers: Iterable, target_id: Optional[str]) -> Dict[str, bool]:
    """
    Computes the `is_correct` changes that leave `target_id` as the only
    correct answer.

    Parameters:
        answers: objects exposing `id` and `is_correct`.
        target_id: the answer that must end up correct. When None, every
            correct flag is cleared.

    Returns:
        Dict[str, bool]: answer id -> new flag, only for answers whose flag changes.
    """
    updates = {}
    for answer in answers:
        should_be_correct = answer.id == target_id
        if bool(answer.is_correct) != should_be_correct:
            updates[answer.id] = should_be_correct
    return updates


def first_correct_id(answers: Iterable) -> Optional[str]:
    for answer in answers:
        if answer.is_correct:
            return answer.id
    return None


def can_delete_answer(answer_count: int) -> bool:
    return answer_count > MIN_ANSWERS
