# assessments/services/grading.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction
from django.db.models import Prefetch
from django.utils import timezone

from assessments.models import ExamSession, ExamSessionAnswer
from cores.exceptions import DataIntegrityError
from exams.models import QuestionOption

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ["is_correct", "correct_option_id", "question_snapshot_html", "options_snapshot"]


@dataclass
class GradeTally:
    correct: int = 0
    wrong: int = 0
    unanswered: int = 0

    def add(self, is_correct: Optional[bool]) -> None:
        if is_correct is None:
            self.unanswered += 1
        elif is_correct:
            self.correct += 1
        else:
            self.wrong += 1


def classify(selected_option_id: Optional[int], correct_option_id: int) -> Optional[bool]:
    """None for an unanswered question, otherwise whether the pick was right."""
    if selected_option_id is None:
        return None
    return selected_option_id == correct_option_id


def snapshot_options(options: Iterable[QuestionOption]) -> List[Dict[str, Any]]:
    return [
        {"id": o.id, "content_html": o.content_html, "is_correct": o.is_correct}
        for o in options
    ]


class GradingEngine:
    """
    Grades a running session in one pass and finalizes it.

    Contract:
    - Only called at submission time, inside the caller's transaction.
    - Every answer row gets an immutable copy of its question and options
      as they are right now, so later edits to the bank never change a result.
    - A question with no correct option aborts the whole grading; nothing is
      written for any answer and the session stays IN_PROGRESS.
    """

    @staticmethod
    @transaction.atomic
    def grade(session: ExamSession) -> GradeTally:
        answers = list(
            ExamSessionAnswer.objects
            .filter(session=session)
            .select_related("question")
            .prefetch_related(Prefetch("question__options", queryset=QuestionOption.objects.order_by("order_no", "id")))
            .order_by("id")
        )

        tally = GradeTally()
        for answer in answers:
            question = answer.question
            options = list(question.options.all())

            correct_option = question.correct_option()
            if correct_option is None:
                logger.warning(
                    f"Grading aborted for session {session.id}: question {question.id} has no correct option"
                )
                raise DataIntegrityError(f"Question {question.id} has no correct option defined")

            is_correct = classify(answer.selected_option_id, correct_option.id)
            tally.add(is_correct)

            answer.is_correct = is_correct
            answer.correct_option_id = correct_option.id
            answer.question_snapshot_html = question.content_html
            answer.options_snapshot = snapshot_options(options)

        # Writes only start once every question has been checked
        if answers:
            ExamSessionAnswer.objects.bulk_update(answers, SNAPSHOT_FIELDS)

        session.status = ExamSession.Status.SUBMITTED
        session.submitted_at = timezone.now()
        session.total_correct = tally.correct
        session.total_wrong = tally.wrong
        session.total_unanswered = tally.unanswered
        session.save(update_fields=[
            "status", "submitted_at", "total_correct", "total_wrong", "total_unanswered", "updated_at",
        ])

        return tally
