# exams/models.py
from django.conf import settings
from django.db import models


class Exam(models.Model):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PUBLISHED = "PUBLISHED", "Published"

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    # Seconds; sessions fall back to EXAM_DEFAULT_TIME_LIMIT when empty
    time_limit = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='created_exams'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return self.title

    @property
    def is_published(self):
        return self.status == self.Status.PUBLISHED


class Question(models.Model):
    class SectionType(models.TextChoices):
        SCRIPT_VOCABULARY = "SCRIPT_VOCABULARY", "Script / Vocabulary"
        GRAMMAR = "GRAMMAR", "Grammar"
        READING = "READING", "Reading"
        LISTENING = "LISTENING", "Listening"
        CONVERSATION_EXPRESSION = "CONVERSATION_EXPRESSION", "Conversation / Expression"

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"

    content_html = models.TextField()
    section_type = models.CharField(max_length=40, choices=SectionType.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='created_questions'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.content_html[:50]}..."

    def correct_option(self):
        """First option flagged correct, or None. Uses prefetched options when present."""
        return next((o for o in self.options.all() if o.is_correct), None)


class QuestionOption(models.Model):
    question = models.ForeignKey(Question, related_name='options', on_delete=models.CASCADE)
    content_html = models.TextField()
    is_correct = models.BooleanField(default=False)
    order_no = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order_no', 'id']

    def __str__(self):
        return f"Option {self.order_no} of question {self.question_id}"


class ExamQuestion(models.Model):
    """Places a bank question into an exam at a given position."""
    exam = models.ForeignKey(Exam, related_name='exam_questions', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, related_name='exam_links', on_delete=models.PROTECT)
    order_no = models.PositiveIntegerField()
    section_type = models.CharField(max_length=40, choices=Question.SectionType.choices)

    class Meta:
        ordering = ['order_no', 'id']
        constraints = [
            models.UniqueConstraint(fields=['exam', 'question'], name='uniq_exam_question'),
        ]

    def __str__(self):
        return f"{self.exam} #{self.order_no}"


class ExamAccess(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='exam_accesses', on_delete=models.CASCADE)
    exam = models.ForeignKey(Exam, related_name='access_list', on_delete=models.CASCADE)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'exam'], name='uniq_exam_access'),
        ]

    def __str__(self):
        return f"{self.user} -> {self.exam}: {self.status}"
