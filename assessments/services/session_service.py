# assessments/services/session_service.py
from __future__ import annotations

import logging
from typing import Optional, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from assessments.models import ExamSession, ExamSessionAnswer
from assessments.permissions import ExamAccessPolicy
from assessments.services.grading import GradingEngine
from cores.exceptions import InvalidState
from cores.models import AuditLog
from exams.models import Exam, ExamQuestion

logger = logging.getLogger(__name__)


def _in_progress_session(user_id, exam_id) -> Optional[ExamSession]:
    return (
        ExamSession.objects
        .filter(
            user_id=user_id,
            exam_id=exam_id,
            status=ExamSession.Status.IN_PROGRESS,
            deleted_at__isnull=True,
        )
        .first()
    )


class ExamSessionService:
    """
    Owns the session lifecycle: (none) -> IN_PROGRESS -> SUBMITTED.

    There is no way back from SUBMITTED and no way to drop a session.
    """

    @staticmethod
    def start_session(*, user_id, exam_id) -> Tuple[ExamSession, bool]:
        """
        Returns ``(session, created)``. An IN_PROGRESS session for the same
        user and exam is handed back untouched: no new answers, no timer reset.
        """
        exam = Exam.objects.filter(id=exam_id, deleted_at__isnull=True).first()
        if exam is None:
            raise NotFound(f"Exam with ID {exam_id} not found")

        if not exam.is_published:
            raise InvalidState("Exam is not published")

        ExamAccessPolicy.ensure_can_take_exam(user_id, exam.id)

        existing = _in_progress_session(user_id, exam.id)
        if existing is not None:
            logger.info(f"Resuming session {existing.id} for user {user_id} on exam {exam.id}")
            return existing, False

        question_ids = list(
            ExamQuestion.objects.filter(exam=exam).order_by("order_no", "id").values_list("question_id", flat=True)
        )

        try:
            # Session row and its answer rows become visible together or not at all
            with transaction.atomic():
                session = ExamSession.objects.create(
                    user_id=user_id,
                    exam=exam,
                    status=ExamSession.Status.IN_PROGRESS,
                    start_time=timezone.now(),
                    time_limit=exam.time_limit or settings.EXAM_DEFAULT_TIME_LIMIT,
                )
                ExamSessionAnswer.objects.bulk_create([
                    ExamSessionAnswer(session=session, question_id=qid, selected_option=None)
                    for qid in question_ids
                ])
        except IntegrityError:
            # A concurrent start won the unique (user, exam, IN_PROGRESS) slot
            existing = _in_progress_session(user_id, exam.id)
            if existing is None:
                raise
            logger.info(f"Concurrent start for user {user_id} on exam {exam.id}; using session {existing.id}")
            return existing, False

        logger.info(
            f"Started session {session.id} for user {user_id} on exam {exam.id} "
            f"with {len(question_ids)} questions"
        )
        return session, True

    @staticmethod
    def submit_exam(*, user_id, exam_id) -> ExamSession:
        # Only the caller's own sessions are visible here, so someone else's
        # session reads exactly like a missing one.
        session = (
            ExamSession.objects
            .filter(user_id=user_id, exam_id=exam_id, deleted_at__isnull=True)
            .order_by("-created_at", "-id")
            .first()
        )
        if session is None:
            raise NotFound("No active exam session found")

        ExamAccessPolicy.ensure_can_take_exam(user_id, exam_id)

        with transaction.atomic():
            # Row lock so two concurrent submits cannot both grade
            session = ExamSession.objects.select_for_update().get(pk=session.pk)
            if not session.is_in_progress:
                raise InvalidState(f"Cannot submit session with status: {session.status}")

            tally = GradingEngine.grade(session)

            # Graded together with its audit row or not at all
            AuditLog.record(
                session.user, AuditLog.Action.SUBMIT, session,
                details=(
                    f"Submitted exam {exam_id}: {tally.correct} correct, "
                    f"{tally.wrong} wrong, {tally.unanswered} unanswered"
                ),
            )

        logger.info(
            f"Session {session.id} submitted: correct={tally.correct} "
            f"wrong={tally.wrong} unanswered={tally.unanswered}"
        )
        return session
