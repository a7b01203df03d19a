# assessments/models.py
from django.db import models
from django.conf import settings
from exams.models import Exam, Question, QuestionOption


class ExamSession(models.Model):
    """Tracks a user's single attempt at an exam."""

    class Status(models.TextChoices):
        IN_PROGRESS = "IN_PROGRESS", "In progress"
        SUBMITTED = "SUBMITTED", "Submitted"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='exam_sessions', on_delete=models.CASCADE)
    exam = models.ForeignKey(Exam, related_name='sessions', on_delete=models.CASCADE)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.IN_PROGRESS)

    start_time = models.DateTimeField()
    time_limit = models.PositiveIntegerField(help_text="Seconds, copied from the exam at start")
    submitted_at = models.DateTimeField(null=True, blank=True)

    # Filled in once, by grading
    total_correct = models.PositiveIntegerField(null=True, blank=True)
    total_wrong = models.PositiveIntegerField(null=True, blank=True)
    total_unanswered = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            # At most one running attempt per (user, exam)
            models.UniqueConstraint(
                fields=['user', 'exam'],
                condition=models.Q(status="IN_PROGRESS"),
                name='uniq_in_progress_session',
            ),
        ]

    def __str__(self):
        return f"{self.user} - {self.exam.title} ({self.status})"

    @property
    def is_in_progress(self):
        return self.status == self.Status.IN_PROGRESS


class ExamSessionAnswer(models.Model):
    session = models.ForeignKey(ExamSession, related_name='answers', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, related_name='session_answers', on_delete=models.PROTECT)

    selected_option = models.ForeignKey(
        QuestionOption, null=True, blank=True, related_name='+', on_delete=models.SET_NULL
    )
    answered_at = models.DateTimeField(null=True, blank=True)

    # Grading snapshot, written once at submission
    is_correct = models.BooleanField(null=True, blank=True)
    correct_option_id = models.BigIntegerField(null=True, blank=True)
    question_snapshot_html = models.TextField(null=True, blank=True)
    # [{"id": ..., "content_html": ..., "is_correct": ...}, ...]
    options_snapshot = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['session', 'question'], name='uniq_session_question'),
        ]

    def __str__(self):
        return f"Session {self.session_id} / question {self.question_id}"
