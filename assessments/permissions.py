# assessments/permissions.py
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from rest_framework.exceptions import NotFound, PermissionDenied

from exams.models import ExamAccess

User = get_user_model()


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str = ""

    def enforce(self):
        if not self.allowed:
            raise PermissionDenied(self.reason)


ALLOWED = AccessDecision(allowed=True)
ROLE_NOT_ALLOWED = AccessDecision(allowed=False, reason="You are not allowed to take exams")
ACCESS_NOT_APPROVED = AccessDecision(allowed=False, reason="Exam access not approved")


class ExamAccessPolicy:
    """
    Decides whether a user may take an exam.

    Both conditions are read fresh from the database on every call, so a
    role change or a revoked grant takes effect on the very next start,
    save or submit, even for a session that is already running.
    """

    @staticmethod
    def evaluate(user_id, exam_id) -> AccessDecision:
        role = User.objects.filter(id=user_id).values_list('role', flat=True).first()
        if role is None:
            raise NotFound("User not found")

        # Editors and admins author exams; they never sit them
        if role != User.Role.USER:
            return ROLE_NOT_ALLOWED

        approved = ExamAccess.objects.filter(
            user_id=user_id,
            exam_id=exam_id,
            status=ExamAccess.Status.APPROVED,
            deleted_at__isnull=True,
        ).exists()
        if not approved:
            return ACCESS_NOT_APPROVED

        return ALLOWED

    @classmethod
    def ensure_can_take_exam(cls, user_id, exam_id) -> None:
        cls.evaluate(user_id, exam_id).enforce()
