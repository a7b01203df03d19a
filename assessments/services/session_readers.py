# assessments/services/session_readers.py
from __future__ import annotations

from typing import Any, Dict

from django.db.models import Prefetch
from rest_framework.exceptions import NotFound

from assessments.models import ExamSession
from assessments.permissions import ExamAccessPolicy
from cores.exceptions import InvalidState
from exams.models import ExamQuestion, Question, QuestionOption


def _load_owned_session(user_id, exam_id, session_id) -> ExamSession:
    session = (
        ExamSession.objects
        .filter(pk=session_id, deleted_at__isnull=True)
        .prefetch_related("answers")
        .first()
    )
    # Wrong owner or wrong exam looks the same as no session at all
    if session is None or session.user_id != user_id or session.exam_id != exam_id:
        raise NotFound("Session not found")
    return session


def get_exam_session_detail(*, user_id, exam_id, session_id) -> Dict[str, Any]:
    """Session with the exam's current live questions and the user's picks."""
    session = _load_owned_session(user_id, exam_id, session_id)

    ExamAccessPolicy.ensure_can_take_exam(user_id, exam_id)

    exam_questions = (
        ExamQuestion.objects
        .filter(
            exam_id=session.exam_id,
            question__status=Question.Status.ACTIVE,
            question__deleted_at__isnull=True,
        )
        .select_related("question")
        .prefetch_related(Prefetch("question__options", queryset=QuestionOption.objects.order_by("order_no", "id")))
        .order_by("order_no", "id")
    )

    answers_by_question = {a.question_id: a for a in session.answers.all()}

    questions = []
    for eq in exam_questions:
        answer = answers_by_question.get(eq.question_id)
        questions.append({
            "question_id": eq.question_id,
            "order": eq.order_no,
            "section_type": eq.section_type,
            "content_html": eq.question.content_html,
            # No correctness flags while the exam is being taken
            "options": [
                {"id": o.id, "content_html": o.content_html}
                for o in eq.question.options.all()
            ],
            "selected_option_id": answer.selected_option_id if answer else None,
            "answered_at": answer.answered_at if answer else None,
        })

    return {
        "session_id": session.id,
        "exam_id": session.exam_id,
        "status": session.status,
        "start_time": session.start_time,
        "time_limit": session.time_limit,
        "created_at": session.created_at,
        "submitted_at": session.submitted_at,
        "questions": questions,
    }


def get_exam_session_result(*, user_id, exam_id, session_id) -> Dict[str, Any]:
    """Graded view built from the snapshots taken at submission."""
    session = _load_owned_session(user_id, exam_id, session_id)

    if session.status != ExamSession.Status.SUBMITTED:
        raise InvalidState("Session must be submitted to view results")

    order_by_question = dict(
        ExamQuestion.objects.filter(exam_id=session.exam_id).values_list("question_id", "order_no")
    )
    # Questions unlinked since grading keep their place at the end
    unlinked = max(order_by_question.values(), default=0) + 1
    answers = sorted(
        session.answers.all(),
        key=lambda a: (order_by_question.get(a.question_id, unlinked), a.id),
    )

    questions = [
        {
            "question_id": a.question_id,
            "order": order_by_question.get(a.question_id),
            "content_html": a.question_snapshot_html,
            "selected_option_id": a.selected_option_id,
            "correct_option_id": a.correct_option_id,
            "is_correct": a.is_correct,
            "options": a.options_snapshot or [],
        }
        for a in answers
    ]

    return {
        "session_id": session.id,
        "exam_id": session.exam_id,
        "status": session.status,
        "start_time": session.start_time,
        "time_limit": session.time_limit,
        "submitted_at": session.submitted_at,
        "total_correct": session.total_correct,
        "total_wrong": session.total_wrong,
        "total_unanswered": session.total_unanswered,
        "questions": questions,
    }
