# assessments/services/answer_service.py
import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from assessments.models import ExamSession, ExamSessionAnswer
from assessments.permissions import ExamAccessPolicy
from cores.exceptions import InvalidState
from exams.models import ExamQuestion, QuestionOption

logger = logging.getLogger(__name__)


class AnswerService:

    @staticmethod
    @transaction.atomic
    def save_answer(*, user_id, session_id, question_id, selected_option_id) -> ExamSessionAnswer:
        """
        Upserts the (session, question) answer. ``selected_option_id=None``
        clears it. Repeating a call is harmless and the last write wins.
        """
        # Locked so a concurrent submit cannot grade between our checks and the write
        session = (
            ExamSession.objects
            .select_for_update()
            .filter(pk=session_id, deleted_at__isnull=True)
            .first()
        )
        # Someone else's session is reported exactly like a missing one
        if session is None or session.user_id != user_id:
            raise NotFound("Session not found")

        ExamAccessPolicy.ensure_can_take_exam(user_id, session.exam_id)

        if not session.is_in_progress:
            raise InvalidState(f"Cannot save answer for session with status: {session.status}")

        if not ExamQuestion.objects.filter(exam_id=session.exam_id, question_id=question_id).exists():
            raise NotFound("Question not found in this exam")

        if selected_option_id is not None and not QuestionOption.objects.filter(
            pk=selected_option_id, question_id=question_id
        ).exists():
            raise NotFound("Option not found for this question")

        answer, _ = ExamSessionAnswer.objects.update_or_create(
            session=session,
            question_id=question_id,
            defaults={
                "selected_option_id": selected_option_id,
                "answered_at": timezone.now(),
            },
        )
        logger.debug(f"Session {session.id}: question {question_id} -> option {selected_option_id}")
        return answer
