"""
Custom question answer keys.

An answer is stored under `str(question["id"])` when the question has an id,
otherwise under the literal question text. Editing the text of a question
without an id therefore orphans answers already stored under the old text.
"""
from typing import Any, Optional


def question_key(question: dict) -> str:
    """Key under which a question's answer is stored."""
    qid = question.get("id")
    if qid is not None and str(qid) != "":
        return str(qid)
    return question.get("question", "")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def find_unanswered_required(custom_questions: Optional[list], answers: dict) -> Optional[dict]:
    """First required question without a non-empty answer, or None."""
    for question in custom_questions or []:
        if not question.get("required"):
            continue
        if is_blank(answers.get(question_key(question))):
            return question
    return None
