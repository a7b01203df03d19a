import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Max
from django.utils import timezone
from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from cores.exceptions import InvalidState
from cores.models import AuditLog
from users.permissions import IsAdminRole, IsEditorOrAdmin
from .models import Exam, ExamAccess, ExamQuestion, Question
from .serializers import (
    ApproveAccessSerializer,
    AssignQuestionsSerializer,
    ExamAccessSerializer,
    ExamListSerializer,
    ExamQuestionSerializer,
    ExamSerializer,
    QuestionSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class ExamViewSet(mixins.CreateModelMixin,
                  mixins.ListModelMixin,
                  mixins.RetrieveModelMixin,
                  viewsets.GenericViewSet):
    queryset = Exam.objects.filter(deleted_at__isnull=True).order_by('-created_at')

    # Enable search on title
    filter_backends = [filters.SearchFilter]
    search_fields = ['title']

    def get_serializer_class(self):
        if self.action == 'list':
            # Authors get full info, takers get a simple list
            if self._is_author():
                return ExamSerializer
            return ExamListSerializer
        return ExamSerializer

    def get_authenticators(self):
        # Called before self.action is resolved. A stale token must not
        # block reading a public exam.
        action_map = getattr(self, 'action_map', None) or {}
        request = getattr(self, 'request', None)
        if request is not None and action_map.get(request.method.lower()) == 'retrieve':
            return []
        return super().get_authenticators()

    def get_permissions(self):
        if self.action == 'retrieve':
            return [permissions.AllowAny()]
        if self.action == 'list':
            return [permissions.IsAuthenticated()]
        if self.action in ['create', 'assign_questions']:
            return [IsEditorOrAdmin()]
        return [IsAdminRole()]

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'retrieve':
            return queryset.filter(status=Exam.Status.PUBLISHED)
        if self.action == 'list' and not self._is_author():
            # Published exams the caller has an approved grant for
            return queryset.filter(
                status=Exam.Status.PUBLISHED,
                access_list__user=self.request.user,
                access_list__status=ExamAccess.Status.APPROVED,
                access_list__deleted_at__isnull=True,
            ).distinct()
        return queryset

    def _is_author(self):
        user = self.request.user
        return user.is_authenticated and (user.is_superuser or user.role in (User.Role.EDITOR, User.Role.ADMIN))

    def perform_create(self, serializer):
        exam = serializer.save(created_by=self.request.user, status=Exam.Status.DRAFT)
        AuditLog.record(self.request.user, AuditLog.Action.CREATE, exam, details=f"Created exam: {exam.title}")

    @action(detail=True, methods=['post'], url_path='publish')
    def publish(self, request, pk=None):
        exam = self.get_object()
        exam.status = Exam.Status.PUBLISHED
        exam.save(update_fields=['status', 'updated_at'])

        AuditLog.record(request.user, AuditLog.Action.PUBLISH, exam, details=f"Published exam: {exam.title}")
        logger.info(f"Exam {exam.id} published by user {request.user.id}")
        return Response(ExamSerializer(exam).data)

    @action(detail=True, methods=['post'], url_path='access/approve')
    def approve_access(self, request, pk=None):
        """
        Grants (or re-grants) a user APPROVED access to this exam.
        Payload: { "user_id": 7 }
        """
        exam = self.get_object()
        serializer = ApproveAccessSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = User.objects.filter(id=serializer.validated_data['user_id']).first()
        if user is None:
            raise NotFound("User not found")

        access, _ = ExamAccess.objects.update_or_create(
            user=user,
            exam=exam,
            defaults={'status': ExamAccess.Status.APPROVED, 'deleted_at': None},
        )

        AuditLog.record(request.user, AuditLog.Action.ACCESS, access, details=f"Approved {user.email} for exam {exam.id}")
        return Response(ExamAccessSerializer(access).data)

    @action(detail=True, methods=['post'], url_path='questions')
    def assign_questions(self, request, pk=None):
        """
        Appends bank questions to a draft exam, in the given order.
        Payload: { "question_ids": [1, 2, 3] }
        """
        exam = self.get_object()
        if exam.is_published:
            raise InvalidState("Published exams cannot be modified")

        serializer = AssignQuestionsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        question_ids = list(dict.fromkeys(serializer.validated_data['question_ids']))

        questions = Question.objects.in_bulk(question_ids)
        missing = [qid for qid in question_ids if qid not in questions or questions[qid].deleted_at]
        if missing:
            raise NotFound(f"Questions not found: {missing}")

        with transaction.atomic():
            linked = set(ExamQuestion.objects.filter(exam=exam).values_list('question_id', flat=True))
            next_order = (ExamQuestion.objects.filter(exam=exam).aggregate(Max('order_no'))['order_no__max'] or 0) + 1

            created = []
            for qid in question_ids:
                if qid in linked:
                    continue
                created.append(ExamQuestion.objects.create(
                    exam=exam,
                    question=questions[qid],
                    order_no=next_order,
                    section_type=questions[qid].section_type,
                ))
                next_order += 1

        return Response(
            {"linked": len(created), "questions": ExamQuestionSerializer(created, many=True).data},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class QuestionViewSet(viewsets.ModelViewSet):
    """Question bank for authors. Deleting only hides a question."""
    queryset = Question.objects.filter(deleted_at__isnull=True).prefetch_related('options').order_by('-id')
    serializer_class = QuestionSerializer
    permission_classes = [IsEditorOrAdmin]

    # Enable Search and Filtering for the Question Bank
    filter_backends = [filters.SearchFilter]
    search_fields = ['content_html']

    def get_queryset(self):
        queryset = super().get_queryset()
        # Filter by Exam if provided ?exam_id=1
        exam_id = self.request.query_params.get('exam_id')
        if exam_id and exam_id.isdigit():
            queryset = queryset.filter(exam_links__exam_id=exam_id)
        section = self.request.query_params.get('section_type')
        if section:
            queryset = queryset.filter(section_type=section)
        return queryset

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def perform_destroy(self, instance):
        instance.deleted_at = timezone.now()
        instance.status = Question.Status.INACTIVE
        instance.save(update_fields=['deleted_at', 'status', 'updated_at'])
