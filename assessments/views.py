from rest_framework import permissions, status, views
from rest_framework.response import Response

from .serializers import ExamSessionAnswerSerializer, ExamSessionSerializer, SaveAnswerSerializer
from .services import (
    AnswerService,
    ExamSessionService,
    get_exam_session_detail,
    get_exam_session_result,
)


class StartExamSessionView(views.APIView):
    """
    Starts an exam, or resumes the running attempt.
    201 with a fresh session, 200 when an IN_PROGRESS one already existed.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, exam_id):
        session, created = ExamSessionService.start_session(user_id=request.user.id, exam_id=exam_id)
        data = ExamSessionSerializer(session).data
        return Response(data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class SaveAnswerView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, session_id):
        serializer = SaveAnswerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        answer = AnswerService.save_answer(
            user_id=request.user.id,
            session_id=session_id,
            question_id=serializer.validated_data['question_id'],
            selected_option_id=serializer.validated_data['selected_option_id'],
        )
        return Response(ExamSessionAnswerSerializer(answer).data)


class SubmitExamView(views.APIView):
    """Grades the caller's latest session for this exam and closes it."""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, exam_id):
        session = ExamSessionService.submit_exam(user_id=request.user.id, exam_id=exam_id)
        return Response(ExamSessionSerializer(session).data)


class ExamSessionDetailView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, exam_id, session_id):
        return Response(get_exam_session_detail(
            user_id=request.user.id, exam_id=exam_id, session_id=session_id,
        ))


class ExamSessionResultView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, exam_id, session_id):
        return Response(get_exam_session_result(
            user_id=request.user.id, exam_id=exam_id, session_id=session_id,
        ))
