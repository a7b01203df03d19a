# exams/urls.py
from rest_framework.routers import SimpleRouter

from .views import ExamViewSet, QuestionViewSet

# Session endpoints under exams/ live in assessments.urls
router = SimpleRouter()
router.register(r'exams', ExamViewSet, basename='exam')
router.register(r'questions', QuestionViewSet, basename='question')

urlpatterns = router.urls
