from django.urls import path
from .views import (
    StartExamSessionView,
    SaveAnswerView,
    SubmitExamView,
    ExamSessionDetailView,
    ExamSessionResultView,
)

urlpatterns = [
    # --- Exam taking flow ---
    path('exams/<int:exam_id>/sessions/', StartExamSessionView.as_view(), name='start-session'),
    path('exams/sessions/<int:session_id>/answers/', SaveAnswerView.as_view(), name='save-answer'),
    path('exams/<int:exam_id>/submit/', SubmitExamView.as_view(), name='submit-exam'),

    # --- Read back ---
    path('exams/<int:exam_id>/sessions/<int:session_id>/', ExamSessionDetailView.as_view(), name='session-detail'),
    path('exams/<int:exam_id>/sessions/<int:session_id>/result/', ExamSessionResultView.as_view(), name='session-result'),
]
