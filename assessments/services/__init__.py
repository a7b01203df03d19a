from .answer_service import AnswerService
from .grading import GradeTally, GradingEngine
from .session_readers import get_exam_session_detail, get_exam_session_result
from .session_service import ExamSessionService

__all__ = [
    "AnswerService",
    "ExamSessionService",
    "GradeTally",
    "GradingEngine",
    "get_exam_session_detail",
    "get_exam_session_result",
]
